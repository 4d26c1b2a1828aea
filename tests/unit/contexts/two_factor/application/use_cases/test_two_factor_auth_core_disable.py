from __future__ import annotations

from datetime import datetime, timezone

import pytest

from accountguard.contexts.two_factor.adapters.outbound import (
    InMemoryTwoFactorAttributeStore,
    LoggingEmailDeliveryChannel,
    LoggingLockoutPolicy,
    LoggingTwoFactorAuditSink,
    PyOtpTotpAuthenticator,
)
from accountguard.contexts.two_factor.application.dto import TwoFactorAuthConfig
from accountguard.contexts.two_factor.application.use_cases import TwoFactorAuthCore
from accountguard.contexts.two_factor.domain import (
    TwoFactorAuthError,
    TwoFactorErrorKind,
    TwoFactorMethod,
)
from accountguard.shared_kernel.primitives import AccountId

_ACCOUNT_ID = AccountId("uid=alice,ou=people")
_NOW = datetime(2026, 2, 14, 16, 0, 0, tzinfo=timezone.utc)


class _FixedClock:
    """
    Deterministic fixed UTC clock.
    """

    def now(self) -> datetime:
        return _NOW


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


class _AcceptingPasswordVerifier:
    """
    Password verifier fake accepting every password.
    """

    def verify_password(self, *, account_id: AccountId, password: str) -> bool:
        return True


def _build_core(store: InMemoryTwoFactorAttributeStore) -> TwoFactorAuthCore:
    config = TwoFactorAuthConfig()
    return TwoFactorAuthCore(
        account_id=_ACCOUNT_ID,
        config=config,
        store=store,
        cipher=_PlainCipher(),
        clock=_FixedClock(),
        totp_authenticator=PyOtpTotpAuthenticator(config=config.authenticator_config()),
        lockout_policy=LoggingLockoutPolicy(),
        audit_sink=LoggingTwoFactorAuditSink(),
        email_delivery_channel=LoggingEmailDeliveryChannel(),
        password_verifier=_AcceptingPasswordVerifier(),
    )


def _seed_enrolled_account(
    *,
    methods: tuple[str, ...],
    feature_required: bool = False,
) -> InMemoryTwoFactorAttributeStore:
    store = InMemoryTwoFactorAttributeStore()
    store.configure_account(account_id=_ACCOUNT_ID, feature_required=feature_required)
    store.set_two_factor_auth_enabled(account_id=_ACCOUNT_ID, enabled=True)
    for method in methods:
        store.add_method_enabled(account_id=_ACCOUNT_ID, method=method)
    store.set_primary_method(account_id=_ACCOUNT_ID, method=methods[0])
    store.set_shared_secret(
        account_id=_ACCOUNT_ID,
        value=f"enc:{_ACCOUNT_ID}:JBSWY3DPEHPK3PXP|20260214160000Z",
    )
    store.set_scratch_codes(account_id=_ACCOUNT_ID, value=f"enc:{_ACCOUNT_ID}:AAAA,BBBB")
    store.set_recovery_address(account_id=_ACCOUNT_ID, address="a@example.org", status="verified")
    return store


def _snapshot(store: InMemoryTwoFactorAttributeStore) -> tuple[object, ...]:
    return (
        store.is_two_factor_auth_enabled(account_id=_ACCOUNT_ID),
        store.get_methods_enabled(account_id=_ACCOUNT_ID),
        store.get_primary_method(account_id=_ACCOUNT_ID),
        store.get_shared_secret(account_id=_ACCOUNT_ID),
        store.get_scratch_codes(account_id=_ACCOUNT_ID),
        store.get_recovery_address(account_id=_ACCOUNT_ID),
    )


def test_disabling_only_method_of_required_account_is_rejected() -> None:
    """
    Verify `CANNOT_DISABLE` for the only enabled method under required policy.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Account has only the e-mail method enabled.
    Raises:
        AssertionError: If state changes or another error is raised.
    Side Effects:
        None.
    """
    store = _seed_enrolled_account(methods=("email",), feature_required=True)
    core = _build_core(store)
    before = _snapshot(store)

    with pytest.raises(TwoFactorAuthError, match="cannot be disabled") as error_info:
        core.disable_email()

    assert error_info.value.kind is TwoFactorErrorKind.CANNOT_DISABLE
    assert _snapshot(store) == before

    with pytest.raises(TwoFactorAuthError) as disable_all_error:
        core.disable_all(delete_credentials=True)
    assert disable_all_error.value.kind is TwoFactorErrorKind.CANNOT_DISABLE
    assert _snapshot(store) == before


def test_disabling_one_of_two_methods_switches_primary() -> None:
    """
    Verify removing the primary method promotes the remaining one.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Required policy allows disabling while another method remains.
    Raises:
        AssertionError: If primary method or credentials differ.
    Side Effects:
        None.
    """
    store = _seed_enrolled_account(methods=("app", "email"), feature_required=True)
    core = _build_core(store)

    core.disable_app()

    assert core.enabled_methods() == (TwoFactorMethod.EMAIL,)
    assert core.primary_method() is TwoFactorMethod.EMAIL
    assert core.is_enabled() is True
    assert store.get_scratch_codes(account_id=_ACCOUNT_ID) is not None


def test_disabling_last_method_purges_credentials_but_keeps_devices() -> None:
    """
    Verify removing the last method clears flag, primary, secret, codes, app passwords.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Trusted devices survive method disable.
    Raises:
        AssertionError: If purge differs.
    Side Effects:
        None.
    """
    store = _seed_enrolled_account(methods=("email",))
    store.add_app_password(account_id=_ACCOUNT_ID, value="app-password-record")
    store.add_trusted_device(account_id=_ACCOUNT_ID, value="0123456789abcdef|device-record")
    core = _build_core(store)

    core.disable_email()

    assert store.is_two_factor_auth_enabled(account_id=_ACCOUNT_ID) is False
    assert store.get_methods_enabled(account_id=_ACCOUNT_ID) == ()
    assert store.get_primary_method(account_id=_ACCOUNT_ID) is None
    assert store.get_shared_secret(account_id=_ACCOUNT_ID) is None
    assert store.get_scratch_codes(account_id=_ACCOUNT_ID) is None
    assert store.get_recovery_address(account_id=_ACCOUNT_ID) is None
    assert store.list_app_passwords(account_id=_ACCOUNT_ID) == ()
    assert store.list_trusted_devices(account_id=_ACCOUNT_ID) == (
        "0123456789abcdef|device-record",
    )


def test_disable_on_disabled_account_is_noop() -> None:
    """
    Verify disabling a method of a disabled account leaves state alone.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        None.
    Raises:
        AssertionError: If state changes.
    Side Effects:
        None.
    """
    store = InMemoryTwoFactorAttributeStore()
    core = _build_core(store)

    core.disable_app()
    core.disable_all(delete_credentials=False)

    assert store.get_methods_enabled(account_id=_ACCOUNT_ID) == ()
    assert store.is_two_factor_auth_enabled(account_id=_ACCOUNT_ID) is False


def _seed_legacy_account(*, feature_required: bool) -> InMemoryTwoFactorAttributeStore:
    store = InMemoryTwoFactorAttributeStore()
    store.configure_account(account_id=_ACCOUNT_ID, feature_required=feature_required)
    store.set_two_factor_auth_enabled(account_id=_ACCOUNT_ID, enabled=True)
    store.set_shared_secret(
        account_id=_ACCOUNT_ID,
        value=f"enc:{_ACCOUNT_ID}:JBSWY3DPEHPK3PXP|20260214160000Z",
    )
    return store


def test_legacy_account_without_method_list_counts_app_as_only_method() -> None:
    """
    Verify implicit app method of a legacy account is guarded by the required policy.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Legacy accounts have the enabled flag and secret but no recorded methods.
    Raises:
        AssertionError: If legacy account can be disabled under required policy.
    Side Effects:
        None.
    """
    required = _seed_legacy_account(feature_required=True)
    before = _snapshot(required)

    with pytest.raises(TwoFactorAuthError, match="cannot be disabled") as error_info:
        _build_core(required).disable_app(delete_credentials=True)

    assert error_info.value.kind is TwoFactorErrorKind.CANNOT_DISABLE
    assert _snapshot(required) == before

    optional = _seed_legacy_account(feature_required=False)
    _build_core(optional).disable_app(delete_credentials=True)

    assert optional.is_two_factor_auth_enabled(account_id=_ACCOUNT_ID) is False
    assert optional.get_shared_secret(account_id=_ACCOUNT_ID) is None


def test_disabling_method_that_is_not_enabled_is_noop() -> None:
    """
    Verify disabling e-mail on an app-only account keeps the app enrollment.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Covers both recorded and legacy implicit app enrollment.
    Raises:
        AssertionError: If app enrollment is purged.
    Side Effects:
        None.
    """
    recorded = _seed_enrolled_account(methods=("app",))
    legacy = _seed_legacy_account(feature_required=False)

    for store in (recorded, legacy):
        before = _snapshot(store)
        _build_core(store).disable_email()
        assert _snapshot(store) == before
        assert store.is_two_factor_auth_enabled(account_id=_ACCOUNT_ID) is True


def test_disable_all_keeps_credentials_unless_requested() -> None:
    """
    Verify `disable_all` clears methods and only deletes credentials on request.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        None.
    Raises:
        AssertionError: If state differs.
    Side Effects:
        None.
    """
    keep_store = _seed_enrolled_account(methods=("app", "email"))
    _build_core(keep_store).disable_all(delete_credentials=False)

    assert keep_store.is_two_factor_auth_enabled(account_id=_ACCOUNT_ID) is False
    assert keep_store.get_methods_enabled(account_id=_ACCOUNT_ID) == ()
    assert keep_store.get_primary_method(account_id=_ACCOUNT_ID) is None
    assert keep_store.get_shared_secret(account_id=_ACCOUNT_ID) is not None

    delete_store = _seed_enrolled_account(methods=("app",))
    _build_core(delete_store).disable_all(delete_credentials=True)

    assert delete_store.get_shared_secret(account_id=_ACCOUNT_ID) is None
    assert delete_store.get_scratch_codes(account_id=_ACCOUNT_ID) is None


def test_clear_all_wipes_every_credential_including_devices() -> None:
    """
    Verify administrative wipe ignores policy and removes trusted devices too.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Required policy does not block clear-all.
    Raises:
        AssertionError: If any state survives.
    Side Effects:
        None.
    """
    store = _seed_enrolled_account(methods=("app",), feature_required=True)
    store.set_email_code(account_id=_ACCOUNT_ID, value=f"enc:{_ACCOUNT_ID}:12345678::0")
    store.add_app_password(account_id=_ACCOUNT_ID, value="app-password-record")
    store.add_trusted_device(account_id=_ACCOUNT_ID, value="0123456789abcdef|device-record")

    _build_core(store).clear_all()

    assert store.is_two_factor_auth_enabled(account_id=_ACCOUNT_ID) is False
    assert store.get_methods_enabled(account_id=_ACCOUNT_ID) == ()
    assert store.get_primary_method(account_id=_ACCOUNT_ID) is None
    assert store.get_shared_secret(account_id=_ACCOUNT_ID) is None
    assert store.get_scratch_codes(account_id=_ACCOUNT_ID) is None
    assert store.get_email_code(account_id=_ACCOUNT_ID) is None
    assert store.list_app_passwords(account_id=_ACCOUNT_ID) == ()
    assert store.list_trusted_devices(account_id=_ACCOUNT_ID) == ()
