"""
Filesystem-backed credential storage.

Each credential is one file directly under ``<base dir>/<namespace>``. With
an encryption key the file holds an ``iv:ciphertext`` envelope, otherwise the
canonical JSON of the record. The format is decided by configuration only;
stored content is never sniffed.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

import aiofiles
import aiofiles.os

from ..config.settings import Settings, get_settings
from ..models.core import CipherMode, Credential, parse_credential, serialize_credential
from ..utils.logging import log_event, logging_context, track
from .base import CredentialStorage, validate_storage_key
from .crypto import (
    EncryptionKey,
    decrypt_credential,
    encrypt_credential,
    validate_encryption_key,
)
from .paths import PlatformInfo, resolve_base_dir

CREDENTIAL_FILE_MODE = 0o600


class FileSystemStorageStrategy(CredentialStorage):
    """
    Stores credentials as files in a per-namespace application data directory.

    The directory is resolved and created once, at construction. Nothing is
    cached in memory and writers are not coordinated: concurrent stores to
    the same key race at the filesystem and the last write wins.
    """

    def __init__(
        self,
        namespace: str,
        encryption_key: Optional[EncryptionKey] = None,
        *,
        cipher_mode: Optional[Union[CipherMode, str]] = None,
        platform: Optional[PlatformInfo] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the storage strategy.

        Args:
            namespace: Directory name isolating this application's credentials
            encryption_key: 32-byte key; None or empty stores plaintext
            cipher_mode: Cipher for encrypted files (defaults to settings)
            platform: Host facts used for path resolution (defaults to the host)
            settings: Library settings (defaults to the global settings)

        Raises:
            InvalidKeyLengthError: If the key is not 32 bytes. Raised before
                any filesystem access.
            UnsupportedPlatformError: If the host OS is unknown and no
                override directory is configured
        """
        self._encryption_key: Optional[bytes] = (
            validate_encryption_key(encryption_key) if encryption_key else None
        )

        self.settings = settings or get_settings()
        self.namespace = namespace
        self.cipher_mode = CipherMode(cipher_mode or self.settings.cipher_mode)

        if platform is None:
            platform = PlatformInfo.from_host(self.settings)
        self.base_dir: Path = resolve_base_dir(namespace, platform)

        self._ensure_base_dir()

    @property
    def encrypted(self) -> bool:
        """Whether credentials are encrypted at rest."""
        return self._encryption_key is not None

    def __repr__(self) -> str:
        return (
            f"FileSystemStorageStrategy(namespace={self.namespace!r}, "
            f"base_dir={str(self.base_dir)!r}, encrypted={self.encrypted})"
        )

    def _ensure_base_dir(self) -> None:
        existed_before = self.base_dir.is_dir()
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            log_event(
                "credential_directory_creation_failed",
                {
                    "namespace": self.namespace,
                    "base_dir": str(self.base_dir),
                    "error": str(e),
                },
                level=logging.ERROR,
            )
            raise

        log_event(
            "credential_storage_initialized",
            {
                "namespace": self.namespace,
                "base_dir": str(self.base_dir),
                "directory_created": not existed_before,
                "encrypted": self.encrypted,
                "cipher_mode": self.cipher_mode.value if self.encrypted else None,
            },
        )

    def _credential_path(self, key: str) -> Path:
        return self.base_dir / validate_storage_key(key)

    @track(
        operation="credential_get",
        include_args=["key"],
        frequency="medium_frequency",
    )
    async def get_credential(self, key: str) -> Optional[Credential]:
        """
        Retrieve a credential from storage.

        Args:
            key: File name of the credential inside the namespace directory

        Returns:
            The credential, or None if no file exists for ``key``

        Raises:
            InvalidEnvelopeError: Encrypted mode, file is not an envelope
            DecryptionError: Encrypted mode, wrong key or tampered content
            MalformedCredentialError: Plaintext mode, file is not a record
        """
        credential_path = self._credential_path(key)

        with logging_context(namespace=self.namespace, storage_key=key):
            if not await aiofiles.os.path.exists(credential_path):
                log_event("credential_not_found", level=logging.DEBUG)
                return None

            async with aiofiles.open(credential_path, "r", encoding="utf-8") as f:
                content = await f.read()

            if self._encryption_key is not None:
                return decrypt_credential(
                    content, self._encryption_key, self.cipher_mode
                )
            return parse_credential(content)

    @track(
        operation="credential_store",
        include_args=["key"],
        frequency="low_frequency",
    )
    async def store_credential(self, key: str, credential: Credential) -> None:
        """
        Store a credential, overwriting any existing file for ``key``.

        Args:
            key: File name of the credential inside the namespace directory
            credential: The credential to store
        """
        credential_path = self._credential_path(key)

        with logging_context(namespace=self.namespace, storage_key=key):
            if self._encryption_key is not None:
                content = encrypt_credential(
                    credential, self._encryption_key, self.cipher_mode
                )
            else:
                content = serialize_credential(credential)

            async with aiofiles.open(credential_path, "w", encoding="utf-8") as f:
                # Restrict before the secret is written
                if self.settings.restrict_file_permissions and os.name == "posix":
                    os.chmod(credential_path, CREDENTIAL_FILE_MODE)
                await f.write(content)

            log_event("credential_stored", {"encrypted": self.encrypted})

    @track(
        operation="credential_remove",
        include_args=["key"],
        frequency="low_frequency",
    )
    async def remove_credential(self, key: str) -> None:
        """
        Remove a credential from storage. Missing files are ignored.

        Args:
            key: File name of the credential inside the namespace directory
        """
        credential_path = self._credential_path(key)

        with logging_context(namespace=self.namespace, storage_key=key):
            if not await aiofiles.os.path.exists(credential_path):
                log_event("credential_not_found", level=logging.DEBUG)
                return

            await aiofiles.os.remove(credential_path)
            log_event("credential_removed")
