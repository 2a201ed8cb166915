"""
localcreds - local credential persistence with optional encryption at rest.

Stores identity token records as files under a per-namespace application
data directory, encrypting them with AES-256 when a key is configured.
"""

__version__ = "0.1.0"

from .exceptions import (
    CredentialStoreError,
    DecryptionError,
    InvalidEnvelopeError,
    InvalidKeyLengthError,
    InvalidStorageKeyError,
    MalformedCredentialError,
    UnsupportedPlatformError,
)
from .models.core import CipherMode, Credential
from .storage import (
    CredentialStorage,
    FileSystemStorageStrategy,
    MemoryStorageStrategy,
)

__all__ = [
    "CipherMode",
    "Credential",
    "CredentialStorage",
    "CredentialStoreError",
    "DecryptionError",
    "FileSystemStorageStrategy",
    "InvalidEnvelopeError",
    "InvalidKeyLengthError",
    "InvalidStorageKeyError",
    "MalformedCredentialError",
    "MemoryStorageStrategy",
    "UnsupportedPlatformError",
]
