from __future__ import annotations

from datetime import datetime, timezone

import pytest

from accountguard.contexts.two_factor.domain import (
    AppPassword,
    EmailCode,
    SharedSecret,
    TrustedDevice,
    TrustedDeviceToken,
    TwoFactorCredentials,
)

_TOKEN_ID = "0123456789abcdef"


def test_trusted_device_token_parse_and_encode_are_symmetric() -> None:
    """
    Verify token literal layout `<token_id>.<secret>` and delete sentinel.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Parsed tokens carry no expiry.
    Raises:
        AssertionError: If parsing or sentinel construction differs.
    Side Effects:
        None.
    """
    token = TrustedDeviceToken.parse(f"  {_TOKEN_ID}.s3cr3t-value_x  ")

    assert token.token_id == _TOKEN_ID
    assert token.secret == "s3cr3t-value_x"
    assert token.expires_ms is None
    assert token.encode() == f"{_TOKEN_ID}.s3cr3t-value_x"
    assert token.marked_for_delete().delete is True
    assert token.with_expiry(expires_ms=5000).expires_ms == 5000
    assert "s3cr3t" not in repr(token)


@pytest.mark.parametrize(
    "raw_value",
    [
        "",
        "no-separator",
        "ABCDEF0123456789.secret",
        "0123.secret",
        f"{_TOKEN_ID}.",
        f"{_TOKEN_ID}.a.b",
    ],
)
def test_trusted_device_token_parse_rejects_malformed_literals(raw_value: str) -> None:
    """
    Verify malformed token literals raise `ValueError`.

    Args:
        raw_value: Malformed token literal.
    Returns:
        None.
    Assumptions:
        Token id must be 16 lowercase hex chars.
    Raises:
        AssertionError: If malformed literal is accepted.
    Side Effects:
        None.
    """
    with pytest.raises(ValueError):
        TrustedDeviceToken.parse(raw_value)


def test_trusted_device_matches_registered_attributes_only() -> None:
    """
    Verify attribute matching ignores extra presented attributes.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Attribute values are compared as strings.
    Raises:
        AssertionError: If matching semantics differ.
    Side Effects:
        None.
    """
    device = TrustedDevice(
        token_id=_TOKEN_ID,
        secret_hash="abc",
        issued_ms=1000,
        expires_ms=2000,
        attributes={"user_agent": "firefox", "build": 7},  # type: ignore[dict-item]
    )

    assert list(device.attributes) == ["build", "user_agent"]
    assert device.matches_attributes(attributes={"user_agent": "firefox", "build": "7", "ip": "x"})
    assert not device.matches_attributes(attributes={"user_agent": "firefox"})
    assert not device.matches_attributes(attributes={"user_agent": "chrome", "build": "7"})
    assert device.is_expired(now_ms=2001)
    assert not device.is_expired(now_ms=2000)
    with pytest.raises(ValueError, match="expires_ms"):
        TrustedDevice(token_id=_TOKEN_ID, secret_hash="abc", issued_ms=10, expires_ms=9)


def test_app_password_expiry_touch_and_metadata() -> None:
    """
    Verify app password record helpers.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        `expires_ms=None` means the password never expires.
    Raises:
        AssertionError: If helpers return unexpected values.
    Side Effects:
        None.
    """
    record = AppPassword(name="mail", password_hash="deadbeef", created_ms=100, expires_ms=500)

    assert not record.is_expired(now_ms=500)
    assert record.is_expired(now_ms=501)
    assert not AppPassword(name="x", password_hash="h", created_ms=1).is_expired(now_ms=10**15)
    touched = record.touched(now_ms=300)
    assert touched.last_used_ms == 300
    assert record.last_used_ms is None
    metadata = touched.metadata()
    assert (metadata.name, metadata.created_ms, metadata.last_used_ms) == ("mail", 100, 300)
    with pytest.raises(ValueError, match="non-empty name"):
        AppPassword(name=" ", password_hash="h", created_ms=1)


def test_secret_bearing_entities_mask_repr() -> None:
    """
    Verify secrets never appear in entity representations.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        None.
    Raises:
        AssertionError: If secret text leaks into `repr`.
    Side Effects:
        None.
    """
    generated_at = datetime(2020, 1, 1, tzinfo=timezone.utc)
    secret = SharedSecret(secret="JBSWY3DPEHPK3PXP", generated_at=generated_at)
    credentials = TwoFactorCredentials(secret="JBSWY3DPEHPK3PXP", scratch_codes=("AAAA", "BBBB"))
    email_code = EmailCode(code="12345678", issued_at_ms=1000)

    assert "JBSWY3DPEHPK3PXP" not in repr(secret)
    assert "JBSWY3DPEHPK3PXP" not in repr(credentials)
    assert "AAAA" not in repr(credentials)
    assert "12345678" not in repr(email_code)
    assert email_code.expires_at_ms(lifetime_ms=60000) == 61000
    with pytest.raises(ValueError):
        SharedSecret(secret="", generated_at=None)
    with pytest.raises(ValueError):
        SharedSecret(secret="X", generated_at=datetime(2020, 1, 1))
