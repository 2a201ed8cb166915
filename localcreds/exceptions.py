"""
Structured exception hierarchy for credential storage.

Every error kind raised by the package derives from ``CredentialStoreError``
so callers can catch the whole family, while the concrete classes keep the
failure kinds distinguishable. Filesystem errors are not wrapped: ``OSError``
and its subclasses propagate unchanged from the I/O layer.
"""

from typing import Any, Dict, Optional


class CredentialStoreError(Exception):
    """
    Base exception for all credential storage errors.

    Attributes:
        message: Human-readable error message
        error_type: Categorization of the error
        metadata: Additional context about the error (never secrets)
    """

    error_type: str = "CredentialStoreError"

    def __init__(self, message: str, metadata: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.metadata = metadata or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for serialization.

        Returns:
            Dictionary representation of the error
        """
        return {
            "error": self.message,
            "error_type": self.error_type,
            "metadata": self.metadata,
        }


class UnsupportedPlatformError(CredentialStoreError):
    """Raised when the host OS has no known credential directory."""

    error_type = "UnsupportedPlatform"

    def __init__(self, platform: str):
        super().__init__(
            f"Unsupported platform: {platform}", metadata={"platform": platform}
        )
        self.platform = platform


class InvalidKeyLengthError(CredentialStoreError, ValueError):
    """Raised when an encryption key is not exactly 32 bytes."""

    error_type = "InvalidKeyLength"

    def __init__(self, actual_length: int, expected_length: int = 32):
        super().__init__(
            f"Invalid encryption key length: expected {expected_length} bytes, "
            f"got {actual_length}",
            metadata={
                "actual_length": actual_length,
                "expected_length": expected_length,
            },
        )
        self.actual_length = actual_length
        self.expected_length = expected_length


class InvalidEnvelopeError(CredentialStoreError):
    """Raised when stored text lacks the ``iv:ciphertext`` structure."""

    error_type = "InvalidEnvelope"


class DecryptionError(CredentialStoreError):
    """Raised when the cipher rejects a ciphertext (wrong key, tampering)."""

    error_type = "DecryptionFailure"


class MalformedCredentialError(CredentialStoreError):
    """Raised when plaintext cannot be parsed into a credential record."""

    error_type = "MalformedRecord"


class InvalidStorageKeyError(CredentialStoreError, ValueError):
    """Raised when a storage key is not a single file name."""

    error_type = "InvalidStorageKey"

    def __init__(self, key: str, reason: str):
        super().__init__(
            f"Invalid storage key {key!r}: {reason}",
            metadata={"reason": reason},
        )
        self.key = key
        self.reason = reason
