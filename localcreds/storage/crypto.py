"""
Symmetric encryption of credentials at rest.

Envelope format is ``<iv-hex>:<ciphertext-hex>`` with a fresh 16-byte IV per
call. ``CipherMode.CBC`` is AES-256-CBC with PKCS7 padding and no
authentication tag; ``CipherMode.GCM`` is AES-256-GCM over the same framing,
with the 16-byte tag appended to the ciphertext so tampering is detected by
the cipher rather than at parse time.
"""

import logging
import os
from typing import Tuple, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..exceptions import (
    DecryptionError,
    InvalidEnvelopeError,
    InvalidKeyLengthError,
    MalformedCredentialError,
)
from ..models.core import CipherMode, Credential, parse_credential, serialize_credential
from ..utils.logging import log_event

KEY_LENGTH = 32
IV_LENGTH = 16
ENVELOPE_SEPARATOR = ":"

EncryptionKey = Union[str, bytes]


def validate_encryption_key(encryption_key: EncryptionKey) -> bytes:
    """
    Normalize an encryption key to bytes and check its length.

    String keys are used as their UTF-8 encoding.

    Raises:
        InvalidKeyLengthError: If the key is not exactly 32 bytes
    """
    if isinstance(encryption_key, str):
        key_bytes = encryption_key.encode("utf-8")
    else:
        key_bytes = bytes(encryption_key)

    if len(key_bytes) != KEY_LENGTH:
        raise InvalidKeyLengthError(len(key_bytes), KEY_LENGTH)
    return key_bytes


def split_envelope(envelope: str) -> Tuple[bytes, bytes]:
    """
    Split an envelope into its IV and ciphertext bytes.

    Everything after the first separator is ciphertext, so stray separators
    are tolerated.

    Raises:
        InvalidEnvelopeError: If the separator is missing or a part is not hex
    """
    parts = envelope.split(ENVELOPE_SEPARATOR)
    if len(parts) < 2:
        raise InvalidEnvelopeError(
            "Invalid encrypted string: expected '<iv>:<ciphertext>'"
        )

    iv_hex = parts[0]
    ciphertext_hex = ENVELOPE_SEPARATOR.join(parts[1:])
    try:
        return bytes.fromhex(iv_hex), bytes.fromhex(ciphertext_hex)
    except ValueError as e:
        raise InvalidEnvelopeError(
            "Invalid encrypted string: iv and ciphertext must be hex-encoded"
        ) from e


def _encrypt_bytes(key: bytes, iv: bytes, plaintext: bytes, mode: CipherMode) -> bytes:
    if mode == CipherMode.GCM:
        return AESGCM(key).encrypt(iv, plaintext, None)

    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def _decrypt_bytes(key: bytes, iv: bytes, ciphertext: bytes, mode: CipherMode) -> bytes:
    if mode == CipherMode.GCM:
        return AESGCM(key).decrypt(iv, ciphertext, None)

    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    return unpadder.update(padded) + unpadder.finalize()


def encrypt_credential(
    credential: Credential,
    encryption_key: EncryptionKey,
    mode: Union[CipherMode, str] = CipherMode.CBC,
) -> str:
    """
    Encrypt a credential into an ``iv:ciphertext`` envelope.

    Args:
        credential: The credential to encrypt
        encryption_key: 32-byte key (str keys are UTF-8 encoded)
        mode: Cipher mode

    Returns:
        Hex envelope; repeated calls on the same input differ because the
        IV is random
    """
    mode = CipherMode(mode)
    key = validate_encryption_key(encryption_key)
    iv = os.urandom(IV_LENGTH)
    plaintext = serialize_credential(credential).encode("utf-8")
    ciphertext = _encrypt_bytes(key, iv, plaintext, mode)
    return f"{iv.hex()}{ENVELOPE_SEPARATOR}{ciphertext.hex()}"


def decrypt_credential(
    envelope: str,
    encryption_key: EncryptionKey,
    mode: Union[CipherMode, str] = CipherMode.CBC,
) -> Credential:
    """
    Decrypt an envelope produced by ``encrypt_credential``.

    Args:
        envelope: ``<iv-hex>:<ciphertext-hex>`` text
        encryption_key: 32-byte key used for encryption
        mode: Cipher mode used for encryption

    Returns:
        The decrypted credential

    Raises:
        InvalidEnvelopeError: If the envelope structure is invalid. This
            includes corrupted hex (a non-hex character or an odd length),
            so callers guarding against tampering should catch both errors.
        DecryptionError: If the cipher rejects the data, or the plaintext is
            not a UTF-8 credential record (wrong key or tampering)
    """
    mode = CipherMode(mode)
    key = validate_encryption_key(encryption_key)
    iv, ciphertext = split_envelope(envelope)

    try:
        plaintext = _decrypt_bytes(key, iv, ciphertext, mode)
    except (ValueError, InvalidTag) as e:
        log_event(
            "credential_decryption_failed",
            {"cipher_mode": mode.value, "reason": "cipher_rejected"},
            level=logging.WARNING,
        )
        raise DecryptionError(
            f"Failed to decrypt credential with {mode.value}: ciphertext rejected",
            metadata={"cipher_mode": mode.value},
        ) from e

    try:
        return parse_credential(plaintext.decode("utf-8"))
    except (UnicodeDecodeError, MalformedCredentialError) as e:
        log_event(
            "credential_decryption_failed",
            {"cipher_mode": mode.value, "reason": "invalid_plaintext"},
            level=logging.WARNING,
        )
        raise DecryptionError(
            f"Failed to decrypt credential with {mode.value}: "
            "plaintext is not a credential record",
            metadata={"cipher_mode": mode.value},
        ) from e
