from __future__ import annotations

import pytest

from accountguard.contexts.two_factor.application.dto import CredentialConfig
from accountguard.contexts.two_factor.application.services import (
    CredentialGenerator,
    decode_credential_text,
    encode_credential_bytes,
)
from accountguard.contexts.two_factor.domain import (
    CredentialEncoding,
    TwoFactorAuthError,
    TwoFactorErrorKind,
)


class _CountingRandomSource:
    """
    Deterministic byte source producing increasing high-bit-set byte values.
    """

    def __init__(self) -> None:
        self._next_value = 0

    def __call__(self, size: int) -> bytes:
        chunk = bytes(((self._next_value + index) % 256) | 0x80 for index in range(size))
        self._next_value += size
        return chunk


def _build_config(
    *,
    num_scratch_codes: int = 10,
    secret_encoding: CredentialEncoding = CredentialEncoding.BASE32,
    scratch_code_encoding: CredentialEncoding = CredentialEncoding.BASE32,
) -> CredentialConfig:
    return CredentialConfig(
        secret_bytes=20,
        scratch_code_bytes=10,
        num_scratch_codes=num_scratch_codes,
        secret_encoding=secret_encoding,
        scratch_code_encoding=scratch_code_encoding,
    )


def test_generate_credentials_returns_full_distinct_scratch_pool() -> None:
    """
    Verify generator returns secret and exactly N distinct scratch codes.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        10-byte BASE32 scratch codes are 16 characters long.
    Raises:
        AssertionError: If pool size, distinctness or lengths differ.
    Side Effects:
        None.
    """
    generator = CredentialGenerator(config=_build_config(), random_bytes=_CountingRandomSource())

    credentials = generator.generate_credentials()

    assert len(credentials.secret) == 32
    assert len(credentials.scratch_codes) == 10
    assert len(set(credentials.scratch_codes)) == 10
    assert all(len(code) == 16 for code in credentials.scratch_codes)


def test_generated_bytes_are_masked_and_text_is_uppercase() -> None:
    """
    Verify every drawn byte loses its high bit and encoded text is uppercase.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Random source sets the high bit of every byte.
    Raises:
        AssertionError: If masking or case normalization is missing.
    Side Effects:
        None.
    """
    generator = CredentialGenerator(
        config=_build_config(
            num_scratch_codes=3,
            secret_encoding=CredentialEncoding.BASE64,
        ),
        random_bytes=_CountingRandomSource(),
    )

    credentials = generator.generate_credentials()

    assert credentials.secret == credentials.secret.upper()
    for code in credentials.scratch_codes:
        raw = decode_credential_text(text=code, encoding=CredentialEncoding.BASE32)
        assert len(raw) == 10
        assert all(value < 0x80 for value in raw)


def test_generator_with_zero_pool_size_returns_no_scratch_codes() -> None:
    """
    Verify class-of-service pool size zero yields empty scratch tuple.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        None.
    Raises:
        AssertionError: If codes are produced.
    Side Effects:
        None.
    """
    generator = CredentialGenerator(
        config=_build_config(num_scratch_codes=0),
        random_bytes=_CountingRandomSource(),
    )

    assert generator.generate_scratch_codes() == ()


def test_generator_short_read_raises_generation_error() -> None:
    """
    Verify truncated RNG output maps to `CREDENTIAL_GENERATION`.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        None.
    Raises:
        AssertionError: If short read is accepted.
    Side Effects:
        None.
    """
    generator = CredentialGenerator(config=_build_config(), random_bytes=lambda size: b"\x01")

    with pytest.raises(TwoFactorAuthError, match="could not be generated") as error_info:
        generator.generate_credentials()

    assert error_info.value.kind is TwoFactorErrorKind.CREDENTIAL_GENERATION
    assert error_info.value.details == {"reason": "random source short read"}


def test_generator_rejects_invalid_config() -> None:
    """
    Verify non-positive byte sizes are rejected at construction.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        None.
    Raises:
        AssertionError: If invalid config is accepted.
    Side Effects:
        None.
    """
    config = CredentialConfig(
        secret_bytes=0,
        scratch_code_bytes=10,
        num_scratch_codes=1,
        secret_encoding=CredentialEncoding.BASE32,
        scratch_code_encoding=CredentialEncoding.BASE32,
    )

    with pytest.raises(TwoFactorAuthError) as error_info:
        CredentialGenerator(config=config)

    assert error_info.value.details["reason"] == "secret_bytes must be > 0"


def test_credential_codec_accepts_unpadded_and_lowercase_base32() -> None:
    """
    Verify decoder restores padding and folds case for BASE32 text.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        None.
    Raises:
        AssertionError: If decoding differs.
    Side Effects:
        None.
    """
    encoded = encode_credential_bytes(raw=b"hello", encoding=CredentialEncoding.BASE32)

    assert encoded == "NBSWY3DP"
    assert decode_credential_text(text="jbswy3dpehpk3pxp", encoding=CredentialEncoding.BASE32) == (
        b"Hello!\xde\xad\xbe\xef"
    )
    assert decode_credential_text(text="aGk", encoding=CredentialEncoding.BASE64) == b"hi"
    with pytest.raises(ValueError, match="not valid BASE32"):
        decode_credential_text(text="!!!!", encoding=CredentialEncoding.BASE32)
    with pytest.raises(ValueError, match="non-empty"):
        encode_credential_bytes(raw=b"", encoding=CredentialEncoding.BASE64)
