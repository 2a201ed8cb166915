import logging

import pytest

from localcreds.exceptions import (
    DecryptionError,
    InvalidEnvelopeError,
    InvalidKeyLengthError,
)
from localcreds.models.core import CipherMode, serialize_credential
from localcreds.storage.crypto import (
    IV_LENGTH,
    decrypt_credential,
    encrypt_credential,
    split_envelope,
    validate_encryption_key,
)
from tests.factories import CredentialFactory


def _flip_ciphertext_byte(envelope: str, index: int, mask: int = 0xFF) -> str:
    iv_hex, ciphertext_hex = envelope.split(":")
    ciphertext = bytearray(bytes.fromhex(ciphertext_hex))
    ciphertext[index] ^= mask
    return f"{iv_hex}:{ciphertext.hex()}"


class TestEncryptCredential:

    def test_envelope_is_not_plaintext(self, test_credential, encryption_key):
        envelope = encrypt_credential(test_credential, encryption_key)

        assert envelope != serialize_credential(test_credential)
        assert "test-token" not in envelope

    def test_envelope_format(self, test_credential, encryption_key):
        envelope = encrypt_credential(test_credential, encryption_key)

        iv_hex, ciphertext_hex = envelope.split(":")
        assert len(bytes.fromhex(iv_hex)) == IV_LENGTH
        # 31 bytes of JSON padded to two AES blocks
        assert len(bytes.fromhex(ciphertext_hex)) == 32

    def test_gcm_envelope_carries_tag(self, test_credential, encryption_key):
        envelope = encrypt_credential(test_credential, encryption_key, CipherMode.GCM)

        _, ciphertext_hex = envelope.split(":")
        assert len(bytes.fromhex(ciphertext_hex)) == 31 + 16

    @pytest.mark.parametrize("mode", list(CipherMode))
    def test_repeated_encryption_differs(self, test_credential, encryption_key, mode):
        first = encrypt_credential(test_credential, encryption_key, mode)
        second = encrypt_credential(test_credential, encryption_key, mode)

        assert first != second
        assert first.split(":")[0] != second.split(":")[0]
        assert decrypt_credential(first, encryption_key, mode) == test_credential
        assert decrypt_credential(second, encryption_key, mode) == test_credential

    def test_rejects_short_key(self, test_credential):
        with pytest.raises(InvalidKeyLengthError):
            encrypt_credential(test_credential, "too-short")

    def test_accepts_mode_by_value(self, test_credential, encryption_key):
        envelope = encrypt_credential(test_credential, encryption_key, "aes-256-gcm")

        assert decrypt_credential(envelope, encryption_key, CipherMode.GCM) == test_credential


class TestDecryptCredential:

    @pytest.mark.parametrize("mode", list(CipherMode))
    def test_round_trip(self, test_credential, encryption_key, mode):
        envelope = encrypt_credential(test_credential, encryption_key, mode)

        assert decrypt_credential(envelope, encryption_key, mode) == test_credential

    def test_round_trip_with_documented_example(self):
        key = "a" * 32
        credential = CredentialFactory.create_credential(id="1", token="test-token")

        decrypted = decrypt_credential(encrypt_credential(credential, key), key)

        assert decrypted.id == "1"
        assert decrypted.token == "test-token"

    def test_round_trip_preserves_extra_fields_and_unicode(self, encryption_key):
        credential = CredentialFactory.create_credential(
            token="jeton-été-🔑", refresh_token="r-123", expires_at=1700000000
        )

        envelope = encrypt_credential(credential, encryption_key)

        assert decrypt_credential(envelope, encryption_key) == credential

    def test_bytes_key_matches_string_key(self, test_credential, encryption_key):
        envelope = encrypt_credential(test_credential, encryption_key)

        decrypted = decrypt_credential(envelope, encryption_key.encode("utf-8"))

        assert decrypted == test_credential

    def test_invalid_envelope_without_separator(self, encryption_key):
        with pytest.raises(InvalidEnvelopeError):
            decrypt_credential("invalid", encryption_key)

    def test_invalid_envelope_with_non_hex_parts(self, encryption_key):
        with pytest.raises(InvalidEnvelopeError):
            decrypt_credential('{"id":"1","token":"x"}', encryption_key)

    @pytest.mark.parametrize(
        "corrupt",
        [lambda hex_text: "z" + hex_text[1:], lambda hex_text: hex_text[:-1]],
        ids=["non_hex_character", "odd_length"],
    )
    def test_corrupted_ciphertext_hex_is_an_envelope_error(
        self, test_credential, encryption_key, corrupt
    ):
        iv_hex, ciphertext_hex = encrypt_credential(
            test_credential, encryption_key
        ).split(":")

        with pytest.raises(InvalidEnvelopeError):
            decrypt_credential(f"{iv_hex}:{corrupt(ciphertext_hex)}", encryption_key)

    @pytest.mark.parametrize("mode", list(CipherMode))
    def test_wrong_key_is_rejected(self, test_credential, encryption_key, mode):
        envelope = encrypt_credential(test_credential, encryption_key, mode)
        other_key = "b" * 32

        with pytest.raises(DecryptionError):
            decrypt_credential(envelope, other_key, mode)

    @pytest.mark.parametrize("mask", [0x01, 0xFF])
    @pytest.mark.parametrize("index", range(32))
    def test_cbc_any_byte_tamper_is_rejected(
        self, test_credential, encryption_key, index, mask
    ):
        envelope = encrypt_credential(test_credential, encryption_key)

        # Byte 15 lands on the padding byte; the second block decrypts to noise
        tampered = _flip_ciphertext_byte(envelope, index, mask)

        with pytest.raises(DecryptionError):
            decrypt_credential(tampered, encryption_key)

    def test_cbc_tamper_with_intact_padding_reports_invalid_plaintext(
        self, test_credential, encryption_key, caplog
    ):
        caplog.set_level(logging.WARNING, logger="localcreds")
        envelope = encrypt_credential(test_credential, encryption_key)

        # Garbles the first plaintext block and leaves the padding untouched
        tampered = _flip_ciphertext_byte(envelope, 0, mask=0x01)

        with pytest.raises(DecryptionError):
            decrypt_credential(tampered, encryption_key)

        failures = [
            getattr(r, "structured_data", {})
            for r in caplog.records
            if getattr(r, "structured_data", {}).get("event")
            == "credential_decryption_failed"
        ]
        assert [f["reason"] for f in failures] == ["invalid_plaintext"]

    def test_cbc_truncated_ciphertext_is_rejected(self, test_credential, encryption_key):
        envelope = encrypt_credential(test_credential, encryption_key)

        with pytest.raises(DecryptionError):
            decrypt_credential(envelope[:-2], encryption_key)

    @pytest.mark.parametrize("index", [0, 7, 16, 30, 46])
    def test_gcm_any_byte_tamper_is_rejected(
        self, test_credential, encryption_key, index
    ):
        envelope = encrypt_credential(test_credential, encryption_key, CipherMode.GCM)

        tampered = _flip_ciphertext_byte(envelope, index, mask=0x01)

        with pytest.raises(DecryptionError):
            decrypt_credential(tampered, encryption_key, CipherMode.GCM)

    def test_gcm_iv_tamper_is_rejected(self, test_credential, encryption_key):
        envelope = encrypt_credential(test_credential, encryption_key, CipherMode.GCM)
        iv_hex, ciphertext_hex = envelope.split(":")
        iv = bytearray(bytes.fromhex(iv_hex))
        iv[0] ^= 0x01

        with pytest.raises(DecryptionError):
            decrypt_credential(
                f"{iv.hex()}:{ciphertext_hex}", encryption_key, CipherMode.GCM
            )

    def test_mode_mismatch_is_rejected(self, test_credential, encryption_key):
        envelope = encrypt_credential(test_credential, encryption_key, CipherMode.GCM)

        with pytest.raises(DecryptionError):
            decrypt_credential(envelope, encryption_key, CipherMode.CBC)

    def test_bad_iv_length_is_rejected(self, test_credential, encryption_key):
        envelope = encrypt_credential(test_credential, encryption_key)
        _, ciphertext_hex = envelope.split(":")

        with pytest.raises(DecryptionError):
            decrypt_credential(f"abcd:{ciphertext_hex}", encryption_key)


class TestEnvelopeHelpers:

    def test_split_envelope(self):
        iv, ciphertext = split_envelope("00ff:a1b2")

        assert iv == b"\x00\xff"
        assert ciphertext == b"\xa1\xb2"

    def test_split_envelope_requires_separator(self):
        with pytest.raises(InvalidEnvelopeError):
            split_envelope("00ffa1b2")

    def test_validate_key_normalizes_to_bytes(self, encryption_key):
        assert validate_encryption_key(encryption_key) == encryption_key.encode()

    @pytest.mark.parametrize("key", ["", "a" * 31, "a" * 33, b"\x00" * 16])
    def test_validate_key_rejects_wrong_length(self, key):
        with pytest.raises(InvalidKeyLengthError) as exc_info:
            validate_encryption_key(key)

        assert exc_info.value.expected_length == 32

    def test_validate_key_accepts_generated_key(self):
        key = CredentialFactory.create_key()

        assert validate_encryption_key(key) == key.encode("utf-8")

    @pytest.mark.parametrize("length", [16, 31, 33, 64])
    def test_validate_key_reports_generated_length(self, length):
        with pytest.raises(InvalidKeyLengthError) as exc_info:
            validate_encryption_key(CredentialFactory.create_key(length))

        assert exc_info.value.actual_length == length

    def test_validate_key_counts_utf8_bytes(self):
        # 32 characters, but 64 bytes once encoded
        with pytest.raises(InvalidKeyLengthError) as exc_info:
            validate_encryption_key("é" * 32)

        assert exc_info.value.actual_length == 64
