"""
Base class for credential storage backends.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..exceptions import InvalidStorageKeyError
from ..models.core import Credential

_FORBIDDEN_KEY_NAMES = {".", ".."}
_FORBIDDEN_KEY_CHARS = ("/", "\\", "\x00")


def validate_storage_key(key: str) -> str:
    """
    Check that a storage key names a single file.

    Raises:
        InvalidStorageKeyError: If the key is empty, a relative directory
            reference, or contains a path separator or NUL
    """
    if not key:
        raise InvalidStorageKeyError(key, "key must not be empty")
    if key in _FORBIDDEN_KEY_NAMES:
        raise InvalidStorageKeyError(key, "key must name a file")
    if any(char in key for char in _FORBIDDEN_KEY_CHARS):
        raise InvalidStorageKeyError(key, "key must not contain path separators")
    return key


class CredentialStorage(ABC):
    """
    Capability shared by every credential backend.

    Each credential is addressed by an opaque storage key. A missing key is
    not an error: ``get_credential`` returns None and ``remove_credential``
    does nothing.
    """

    @abstractmethod
    async def get_credential(self, key: str) -> Optional[Credential]:
        """Retrieve a credential, or None if nothing is stored under ``key``."""
        pass

    @abstractmethod
    async def store_credential(self, key: str, credential: Credential) -> None:
        """Store a credential under ``key``, replacing any previous value."""
        pass

    @abstractmethod
    async def remove_credential(self, key: str) -> None:
        """Remove the credential stored under ``key`` if there is one."""
        pass
