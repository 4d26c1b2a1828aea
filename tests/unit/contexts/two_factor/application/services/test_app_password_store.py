from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from accountguard.contexts.two_factor.adapters.outbound import InMemoryTwoFactorAttributeStore
from accountguard.contexts.two_factor.application.services import (
    AppPasswordStore,
    CredentialEnvelope,
)
from accountguard.contexts.two_factor.domain import (
    TwoFactorAuthError,
    TwoFactorCodeType,
    TwoFactorErrorKind,
)
from accountguard.shared_kernel.primitives import AccountId

_ACCOUNT_ID = AccountId("uid=alice,ou=people")
_NOW = datetime(2026, 2, 14, 16, 0, 0, tzinfo=timezone.utc)
_NOW_MS = 1771084800000


class _MutableClock:
    """
    Deterministic mutable UTC clock for expiry tests.
    """

    def __init__(self, now: datetime) -> None:
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, *, milliseconds: int) -> None:
        self._now = self._now + timedelta(milliseconds=milliseconds)


class _PlainCipher:
    """
    Reversible account-bound fake cipher keeping plaintext readable in assertions.
    """

    def encrypt(self, *, account_id: AccountId, plaintext: str) -> str:
        return f"enc:{account_id}:{plaintext}"

    def decrypt(self, *, account_id: AccountId, ciphertext: str) -> str:
        prefix = f"enc:{account_id}:"
        if not ciphertext.startswith(prefix):
            raise ValueError("ciphertext bound to another account")
        return ciphertext[len(prefix) :]


def _build_password_store(
    *,
    store: InMemoryTwoFactorAttributeStore,
    clock: _MutableClock,
    max_count: int = 3,
    lifetime_ms: int = 0,
) -> AppPasswordStore:
    return AppPasswordStore(
        envelope=CredentialEnvelope(account_id=_ACCOUNT_ID, cipher=_PlainCipher()),
        store=store,
        clock=clock,
        max_count=max_count,
        password_length=16,
        lifetime_ms=lifetime_ms,
    )


def test_generate_stores_only_password_digest() -> None:
    """
    Verify generated password is 16 lowercase letters and never persisted in clear.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Stored record is JSON inside the cipher envelope.
    Raises:
        AssertionError: If plaintext leaks into storage or record layout differs.
    Side Effects:
        None.
    """
    store = InMemoryTwoFactorAttributeStore()
    password_store = _build_password_store(store=store, clock=_MutableClock(_NOW))

    password = password_store.generate(name="  mail client ")

    assert len(password) == 16
    assert password.isalpha() and password.islower()
    (raw_value,) = store.list_app_passwords(account_id=_ACCOUNT_ID)
    assert password not in raw_value
    record = json.loads(raw_value[len(f"enc:{_ACCOUNT_ID}:") :])
    assert record["name"] == "mail client"
    assert record["created_ms"] == _NOW_MS
    assert record["last_used_ms"] is None
    assert record["expires_ms"] is None
    assert len(record["hash"]) == 64


def test_generate_rejects_duplicate_name_and_limit() -> None:
    """
    Verify `NAME_IN_USE` and `LIMIT_REACHED` policy errors.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Max count is 2.
    Raises:
        AssertionError: If policy is not enforced.
    Side Effects:
        None.
    """
    store = InMemoryTwoFactorAttributeStore()
    password_store = _build_password_store(store=store, clock=_MutableClock(_NOW), max_count=2)
    password_store.generate(name="mail")

    with pytest.raises(TwoFactorAuthError) as name_error:
        password_store.generate(name="mail")
    assert name_error.value.kind is TwoFactorErrorKind.NAME_IN_USE

    password_store.generate(name="calendar")
    with pytest.raises(TwoFactorAuthError) as limit_error:
        password_store.generate(name="contacts")
    assert limit_error.value.kind is TwoFactorErrorKind.LIMIT_REACHED
    assert limit_error.value.details == {"limit": 2}
    assert password_store.count() == 2


def test_generate_requires_app_passwords_feature() -> None:
    """
    Verify disabled feature raises `SETUP_ERROR` before any write.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        None.
    Raises:
        AssertionError: If password is generated.
    Side Effects:
        None.
    """
    store = InMemoryTwoFactorAttributeStore()
    store.configure_account(account_id=_ACCOUNT_ID, app_passwords_feature_enabled=False)
    password_store = _build_password_store(store=store, clock=_MutableClock(_NOW))

    with pytest.raises(TwoFactorAuthError, match="setup precondition") as error_info:
        password_store.generate(name="mail")

    assert error_info.value.kind is TwoFactorErrorKind.SETUP_ERROR
    assert store.list_app_passwords(account_id=_ACCOUNT_ID) == ()


def test_authenticate_updates_last_used_and_rejects_unknown_password() -> None:
    """
    Verify successful authentication refreshes `last_used_ms` on the matched entry.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        None.
    Raises:
        AssertionError: If metadata or error differ.
    Side Effects:
        None.
    """
    store = InMemoryTwoFactorAttributeStore()
    clock = _MutableClock(_NOW)
    password_store = _build_password_store(store=store, clock=clock)
    password = password_store.generate(name="mail")
    password_store.generate(name="calendar")

    clock.advance(milliseconds=5_000)
    metadata = password_store.authenticate(password=password)

    assert metadata.name == "mail"
    assert metadata.last_used_ms == _NOW_MS + 5_000
    listed = {item.name: item for item in password_store.list_passwords()}
    assert listed["mail"].last_used_ms == _NOW_MS + 5_000
    assert listed["calendar"].last_used_ms is None
    assert len(store.list_app_passwords(account_id=_ACCOUNT_ID)) == 2

    with pytest.raises(TwoFactorAuthError) as error_info:
        password_store.authenticate(password="notapasswordatall")
    assert error_info.value.kind is TwoFactorErrorKind.CODE_INVALID
    assert error_info.value.code_type is TwoFactorCodeType.APP


def test_expired_passwords_are_revoked_on_load() -> None:
    """
    Verify passwords past their lifetime are removed and no longer authenticate.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Lifetime is 10 seconds.
    Raises:
        AssertionError: If expired password survives.
    Side Effects:
        None.
    """
    store = InMemoryTwoFactorAttributeStore()
    clock = _MutableClock(_NOW)
    password_store = _build_password_store(store=store, clock=clock, lifetime_ms=10_000)
    password = password_store.generate(name="mail")

    assert password_store.list_passwords()[0].expires_ms == _NOW_MS + 10_000
    clock.advance(milliseconds=10_001)

    with pytest.raises(TwoFactorAuthError):
        password_store.authenticate(password=password)
    assert store.list_app_passwords(account_id=_ACCOUNT_ID) == ()


def test_revoke_by_name_and_revoke_all() -> None:
    """
    Verify single and bulk revocation, including undecodable entries.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Bulk revoke does not decrypt entries.
    Raises:
        AssertionError: If revocation differs.
    Side Effects:
        None.
    """
    store = InMemoryTwoFactorAttributeStore()
    password_store = _build_password_store(store=store, clock=_MutableClock(_NOW))
    password_store.generate(name="mail")
    password_store.generate(name="calendar")

    assert password_store.revoke(name="mail") is True
    assert password_store.revoke(name="mail") is False
    assert [item.name for item in password_store.list_passwords()] == ["calendar"]

    store.add_app_password(account_id=_ACCOUNT_ID, value="garbage")
    assert password_store.revoke_all() == 2
    assert store.list_app_passwords(account_id=_ACCOUNT_ID) == ()


def test_revoke_matches_name_normalized_like_generate() -> None:
    """
    Verify surrounding whitespace is ignored when revoking by name.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Generation stores names stripped.
    Raises:
        AssertionError: If padded name does not match stored entry.
    Side Effects:
        None.
    """
    store = InMemoryTwoFactorAttributeStore()
    password_store = _build_password_store(store=store, clock=_MutableClock(_NOW))
    password_store.generate(name=" calendar ")

    assert [item.name for item in password_store.list_passwords()] == ["calendar"]
    assert password_store.revoke(name="  calendar\t") is True
    assert store.list_app_passwords(account_id=_ACCOUNT_ID) == ()
