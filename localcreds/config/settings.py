"""
Library settings and configuration.
"""

import logging
import sys
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models.core import CipherMode


class Settings(BaseSettings):
    """
    Library settings with environment variable support.

    Only the process environment is read; no ``.env`` file is loaded, so the
    host application decides where configuration comes from.
    """

    model_config = SettingsConfigDict(
        env_prefix="LOCALCREDS_",
        extra="ignore",
        populate_by_name=True,
    )

    # Storage
    app_data_dir_override: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "app_data_dir_override",
            "APP_DATA_DIR_OVERRIDE",
            "LOCALCREDS_APP_DATA_DIR",
        ),
        description="Replaces platform detection for the credential base directory",
    )
    restrict_file_permissions: bool = Field(
        default=True, description="chmod stored credential files to 0600 on POSIX"
    )

    # Encryption
    cipher_mode: CipherMode = Field(
        default=CipherMode.CBC, description="Cipher used when a key is configured"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level for localcreds.*")


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure logging with development-friendly structured output.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to the ``log_level`` setting.
    """
    log_level = getattr(logging, (level or get_settings().log_level).upper())

    from ..utils.logging.structured import create_development_formatter

    formatter = create_development_formatter()

    app_logger = logging.getLogger("localcreds")
    app_logger.setLevel(log_level)

    for handler in app_logger.handlers[:]:
        app_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    # Host applications keep control of the root logger
    app_logger.propagate = False


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the environment is read again."""
    global _settings
    _settings = None
