"""
Resolution of the per-namespace credential directory.
"""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Mapping, Optional

from ..exceptions import UnsupportedPlatformError

if TYPE_CHECKING:
    from ..config.settings import Settings

WINDOWS_PLATFORMS = frozenset({"win32", "cygwin"})
HOME_RELATIVE_PLATFORMS = WINDOWS_PLATFORMS | {"darwin"}
LINUX_STATE_DIR = Path("/var")


@dataclass(frozen=True)
class PlatformInfo:
    """
    Snapshot of the host facts that decide where credentials live.

    Attributes:
        system: ``sys.platform`` style identifier (win32, darwin, linux, ...)
        home: The user's home directory, or None when the location does not
            depend on it
        environ: Environment variables consulted on Windows (APPDATA)
        override: Base directory that replaces platform detection entirely
    """

    system: str
    home: Optional[Path] = None
    environ: Mapping[str, str] = field(default_factory=dict)
    override: Optional[str] = None

    @classmethod
    def from_host(cls, settings: Optional["Settings"] = None) -> "PlatformInfo":
        """Read the platform, environment and override from the host once."""
        if settings is None:
            from ..config.settings import get_settings

            settings = get_settings()

        override = settings.app_data_dir_override or None
        system = sys.platform

        # Containers often run without HOME or a passwd entry
        home = None
        if override is None and system in HOME_RELATIVE_PLATFORMS:
            home = Path.home()

        return cls(
            system=system,
            home=home,
            environ=dict(os.environ),
            override=override,
        )


def _home(platform: PlatformInfo) -> Path:
    return platform.home if platform.home is not None else Path.home()


def platform_app_data_dir(platform: PlatformInfo) -> Path:
    """
    Get the platform's application data root, ignoring any override.

    Raises:
        UnsupportedPlatformError: If the platform has no known location
    """
    system = platform.system
    if system in WINDOWS_PLATFORMS:
        appdata = platform.environ.get("APPDATA")
        return Path(appdata) if appdata else _home(platform) / "AppData" / "Local"
    if system == "darwin":
        return _home(platform) / "Library" / "Application Support"
    if system.startswith("linux"):
        return LINUX_STATE_DIR
    raise UnsupportedPlatformError(system)


def resolve_base_dir(namespace: str, platform: Optional[PlatformInfo] = None) -> Path:
    """
    Derive the directory that holds a namespace's credential files.

    Args:
        namespace: Directory-name segment isolating one application's files
        platform: Host facts; read from the running host when omitted

    Returns:
        ``<override>/<namespace>`` when an override is set, otherwise
        ``<platform app data dir>/<namespace>``. The directory is not created.

    Raises:
        UnsupportedPlatformError: If no override is set and the host OS is unknown
    """
    if platform is None:
        platform = PlatformInfo.from_host()

    if platform.override:
        return Path(platform.override) / namespace

    return platform_app_data_dir(platform) / namespace
