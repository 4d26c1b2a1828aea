from __future__ import annotations

import base64
import binascii
import os
import struct

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from accountguard.contexts.two_factor.application.ports import AccountSecretCipher
from accountguard.shared_kernel.primitives import AccountId

_ENVELOPE_VERSION_V1 = 1
_NONCE_LENGTH = 12
_TAG_LENGTH = 16
_HEADER_STRUCT = struct.Struct(">BBBH")
_AAD_PREFIX = b"accountguard.two_factor.v1|"
_SUPPORTED_KEK_LENGTHS = {16, 24, 32}


class AesGcmAccountSecretCipher(AccountSecretCipher):
    """
    AesGcmAccountSecretCipher — AES-GCM envelope cipher binding ciphertext to one account.

    Each value gets a fresh data key wrapped by the key-encryption key. The account id
    is part of the associated data, so a value copied to another account fails to
    decrypt. Output is url-safe base64 text suitable for directory attributes.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/ports/secret_cipher.py
      - src/accountguard/contexts/two_factor/application/services/credential_envelope.py
    """

    def __init__(self, *, kek_b64: str) -> None:
        """
        Initialize cipher using base64-encoded KEK from runtime settings.

        Args:
            kek_b64: Base64-encoded KEK bytes (`ACCOUNTGUARD_TWO_FACTOR_KEK_B64`).
        Returns:
            None.
        Assumptions:
            KEK bytes length is one of AES valid sizes (16/24/32).
        Raises:
            ValueError: If KEK value is empty, malformed, or unsupported length.
        Side Effects:
            None.
        """
        normalized_kek_b64 = kek_b64.strip()
        if not normalized_kek_b64:
            raise ValueError("AesGcmAccountSecretCipher requires non-empty kek_b64")
        try:
            kek_bytes = base64.b64decode(normalized_kek_b64, validate=True)
        except binascii.Error as error:
            raise ValueError("ACCOUNTGUARD_TWO_FACTOR_KEK_B64 must be valid base64") from error
        if len(kek_bytes) not in _SUPPORTED_KEK_LENGTHS:
            raise ValueError(
                "ACCOUNTGUARD_TWO_FACTOR_KEK_B64 must decode to 16, 24, or 32 bytes for AES-GCM"
            )
        self._kek = kek_bytes

    def encrypt(self, *, account_id: AccountId, plaintext: str) -> str:
        """
        Encrypt credential plaintext for one account.

        Args:
            account_id: Account that owns the value.
            plaintext: Serialized credential text.
        Returns:
            str: Url-safe base64 envelope text.
        Assumptions:
            Plaintext is never persisted or logged.
        Raises:
            ValueError: If plaintext is empty.
        Side Effects:
            Uses OS CSPRNG for data key and nonces.
        """
        if not plaintext:
            raise ValueError("AesGcmAccountSecretCipher plaintext must be non-empty")

        aad = _associated_data(account_id=account_id)
        dek = os.urandom(32)
        dek_nonce = os.urandom(_NONCE_LENGTH)
        value_nonce = os.urandom(_NONCE_LENGTH)
        encrypted_dek = AESGCM(self._kek).encrypt(dek_nonce, dek, aad)
        encrypted_value = AESGCM(dek).encrypt(value_nonce, plaintext.encode("utf-8"), aad)

        header = _HEADER_STRUCT.pack(
            _ENVELOPE_VERSION_V1,
            len(dek_nonce),
            len(value_nonce),
            len(encrypted_dek),
        )
        blob = b"".join((header, dek_nonce, encrypted_dek, value_nonce, encrypted_value))
        return base64.urlsafe_b64encode(blob).decode("ascii")

    def decrypt(self, *, account_id: AccountId, ciphertext: str) -> str:
        """
        Decrypt envelope text produced by `encrypt` for the same account.

        Args:
            account_id: Account that owns the value.
            ciphertext: Url-safe base64 envelope text.
        Returns:
            str: Serialized credential plaintext.
        Assumptions:
            Decryption is used only transiently.
        Raises:
            ValueError: If envelope is malformed, authentication fails, or account differs.
        Side Effects:
            None.
        """
        normalized = ciphertext.strip()
        if not normalized:
            raise ValueError("AesGcmAccountSecretCipher ciphertext must be non-empty")
        try:
            blob = base64.urlsafe_b64decode(normalized.encode("ascii"))
        except (binascii.Error, UnicodeEncodeError) as error:
            raise ValueError("Encrypted two-factor value is not valid base64") from error

        version, dek_nonce_len, value_nonce_len, encrypted_dek_len, payload = _parse_header(
            blob=blob
        )
        if version != _ENVELOPE_VERSION_V1:
            raise ValueError("Unsupported encrypted two-factor value version")
        if dek_nonce_len != _NONCE_LENGTH or value_nonce_len != _NONCE_LENGTH:
            raise ValueError("Encrypted two-factor value contains invalid nonce length")
        if encrypted_dek_len <= _TAG_LENGTH:
            raise ValueError("Encrypted two-factor value contains invalid encrypted key length")

        dek_nonce = payload[:dek_nonce_len]
        encrypted_dek_end = dek_nonce_len + encrypted_dek_len
        encrypted_dek = payload[dek_nonce_len:encrypted_dek_end]
        value_nonce_end = encrypted_dek_end + value_nonce_len
        value_nonce = payload[encrypted_dek_end:value_nonce_end]
        encrypted_value = payload[value_nonce_end:]

        aad = _associated_data(account_id=account_id)
        try:
            dek = AESGCM(self._kek).decrypt(dek_nonce, encrypted_dek, aad)
            plaintext = AESGCM(dek).decrypt(value_nonce, encrypted_value, aad)
        except InvalidTag as error:
            raise ValueError("Encrypted two-factor value authentication failed") from error

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as error:
            raise ValueError("Encrypted two-factor plaintext is not valid UTF-8") from error


def _associated_data(*, account_id: AccountId) -> bytes:
    return _AAD_PREFIX + str(account_id).encode("utf-8")


def _parse_header(*, blob: bytes) -> tuple[int, int, int, int, bytes]:
    """
    Parse envelope header and return metadata plus payload bytes.

    Args:
        blob: Complete decoded envelope.
    Returns:
        tuple[int, int, int, int, bytes]: `(version, dek_nonce_len, value_nonce_len,
            encrypted_dek_len, payload)` tuple.
    Assumptions:
        Header uses deterministic binary layout from `_HEADER_STRUCT`.
    Raises:
        ValueError: If blob is shorter than header or payload is truncated.
    Side Effects:
        None.
    """
    if len(blob) < _HEADER_STRUCT.size:
        raise ValueError("Encrypted two-factor value is too short")
    version, dek_nonce_len, value_nonce_len, encrypted_dek_len = _HEADER_STRUCT.unpack_from(blob)
    payload = blob[_HEADER_STRUCT.size :]
    minimum_payload = dek_nonce_len + encrypted_dek_len + value_nonce_len + _TAG_LENGTH + 1
    if len(payload) < minimum_payload:
        raise ValueError("Encrypted two-factor value payload is truncated")
    return version, dek_nonce_len, value_nonce_len, encrypted_dek_len, payload
