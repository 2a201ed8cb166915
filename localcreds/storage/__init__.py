"""
Storage layer for localcreds.
"""

from .base import CredentialStorage, validate_storage_key
from .crypto import decrypt_credential, encrypt_credential, validate_encryption_key
from .filesystem_storage import FileSystemStorageStrategy
from .memory_storage import MemoryStorageStrategy
from .paths import PlatformInfo, resolve_base_dir

__all__ = [
    "CredentialStorage",
    "FileSystemStorageStrategy",
    "MemoryStorageStrategy",
    "PlatformInfo",
    "decrypt_credential",
    "encrypt_credential",
    "resolve_base_dir",
    "validate_encryption_key",
    "validate_storage_key",
]
