"""
In-process credential storage.
"""

from typing import Dict, Optional, Union

from ..models.core import CipherMode, Credential, parse_credential, serialize_credential
from .base import CredentialStorage, validate_storage_key
from .crypto import (
    EncryptionKey,
    decrypt_credential,
    encrypt_credential,
    validate_encryption_key,
)


class MemoryStorageStrategy(CredentialStorage):
    """
    Keeps serialized credentials in a dict instead of files.

    Stored values go through the same serializer and codec as the filesystem
    backend, so callers get fresh copies and identical error behavior. Useful
    as a drop-in backend for tests.
    """

    def __init__(
        self,
        encryption_key: Optional[EncryptionKey] = None,
        *,
        cipher_mode: Union[CipherMode, str] = CipherMode.CBC,
    ):
        self._encryption_key: Optional[bytes] = (
            validate_encryption_key(encryption_key) if encryption_key else None
        )
        self.cipher_mode = CipherMode(cipher_mode)
        self._entries: Dict[str, str] = {}

    @property
    def encrypted(self) -> bool:
        return self._encryption_key is not None

    def raw_content(self, key: str) -> Optional[str]:
        """Return the stored text for ``key`` exactly as persisted."""
        return self._entries.get(validate_storage_key(key))

    async def get_credential(self, key: str) -> Optional[Credential]:
        content = self._entries.get(validate_storage_key(key))
        if content is None:
            return None
        if self._encryption_key is not None:
            return decrypt_credential(content, self._encryption_key, self.cipher_mode)
        return parse_credential(content)

    async def store_credential(self, key: str, credential: Credential) -> None:
        validate_storage_key(key)
        if self._encryption_key is not None:
            content = encrypt_credential(
                credential, self._encryption_key, self.cipher_mode
            )
        else:
            content = serialize_credential(credential)
        self._entries[key] = content

    async def remove_credential(self, key: str) -> None:
        self._entries.pop(validate_storage_key(key), None)
