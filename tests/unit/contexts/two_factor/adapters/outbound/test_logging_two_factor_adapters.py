from __future__ import annotations

import logging
from datetime import timezone

import pytest

from accountguard.contexts.two_factor.adapters.outbound import (
    InMemoryTwoFactorAttributeStore,
    LoggingEmailDeliveryChannel,
    LoggingLockoutPolicy,
    LoggingTwoFactorAuditSink,
    SystemTwoFactorClock,
)
from accountguard.contexts.two_factor.application.ports import (
    TwoFactorAuditEvent,
    TwoFactorAuditEventType,
)
from accountguard.contexts.two_factor.domain import TwoFactorCodeType
from accountguard.shared_kernel.primitives import AccountId

_ACCOUNT_ID = AccountId("alice")


def test_lockout_policy_counts_failures_and_survives_callback_errors(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """
    Verify per-account failure counting and best-effort callback.

    Args:
        caplog: Pytest log capture fixture.
    Returns:
        None.
    Assumptions:
        None.
    Raises:
        AssertionError: If counter or logging differs.
    Side Effects:
        None.
    """
    calls: list[tuple[AccountId, TwoFactorCodeType]] = []

    def _failing_callback(account_id: AccountId, code_type: TwoFactorCodeType) -> None:
        calls.append((account_id, code_type))
        raise RuntimeError("lockout backend unavailable")

    policy = LoggingLockoutPolicy(on_failure=_failing_callback)

    with caplog.at_level(logging.WARNING):
        policy.record_failed_second_factor(account_id=_ACCOUNT_ID, code_type=TwoFactorCodeType.TOTP)
        policy.record_failed_second_factor(account_id=_ACCOUNT_ID, code_type=TwoFactorCodeType.APP)

    assert policy.failed_attempts(account_id=_ACCOUNT_ID) == 2
    assert policy.failed_attempts(account_id=AccountId("bob")) == 0
    assert calls == [(_ACCOUNT_ID, TwoFactorCodeType.TOTP), (_ACCOUNT_ID, TwoFactorCodeType.APP)]
    assert "failures=2" in caplog.text
    assert "lockout callback failed" in caplog.text


def test_email_delivery_channel_masks_address_and_never_logs_code(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """
    Verify log-only delivery hides the code and masks the address.

    Args:
        caplog: Pytest log capture fixture.
    Returns:
        None.
    Assumptions:
        None.
    Raises:
        AssertionError: If sensitive values leak.
    Side Effects:
        None.
    """
    channel = LoggingEmailDeliveryChannel()

    with caplog.at_level(logging.INFO):
        delivered = channel.send_code(
            account_id=_ACCOUNT_ID,
            recovery_address="alice@example.org",
            code="48151623",
        )

    assert delivered is True
    assert "a***@example.org" in caplog.text
    assert "alice@example.org" not in caplog.text
    assert "48151623" not in caplog.text
    assert "code_length=8" in caplog.text


def test_audit_sink_writes_sorted_details_to_logger(caplog: pytest.LogCaptureFixture) -> None:
    """
    Verify audit line contains event type, account and sorted details.

    Args:
        caplog: Pytest log capture fixture.
    Returns:
        None.
    Assumptions:
        None.
    Raises:
        AssertionError: If audit line differs.
    Side Effects:
        None.
    """
    audit_logger = logging.getLogger("accountguard.audit.test")
    sink = LoggingTwoFactorAuditSink(logger=audit_logger)
    event = TwoFactorAuditEvent(
        event_type=TwoFactorAuditEventType.MFA_VERIFIED,
        account_id=_ACCOUNT_ID,
        occurred_at_ms=1771084800000,
        details={"method": "totp", "code_type": "TOTP"},
    )

    with caplog.at_level(logging.INFO, logger="accountguard.audit.test"):
        sink.record(event=event)

    (record,) = [item for item in caplog.records if item.name == "accountguard.audit.test"]
    assert record.getMessage() == (
        "two-factor audit event_type=auth.mfa.verified account_id=alice "
        "occurred_at_ms=1771084800000 code_type=TOTP method=totp"
    )
    with pytest.raises(TypeError):
        event.details["method"] = "email"  # type: ignore[index]


def test_system_clock_returns_utc_aware_datetime() -> None:
    """
    Verify system clock timezone.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        None.
    Raises:
        AssertionError: If clock returns non-UTC value.
    Side Effects:
        None.
    """
    assert SystemTwoFactorClock().now().tzinfo is timezone.utc


def test_in_memory_store_defaults_and_isolation() -> None:
    """
    Verify unknown accounts read as empty and rows are isolated per account.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Account lock is reentrant.
    Raises:
        AssertionError: If defaults or isolation differ.
    Side Effects:
        None.
    """
    store = InMemoryTwoFactorAttributeStore()
    bob = AccountId("bob")

    assert store.is_feature_available(account_id=_ACCOUNT_ID) is True
    assert store.is_feature_required(account_id=_ACCOUNT_ID) is False
    assert store.get_methods_allowed(account_id=_ACCOUNT_ID) == ("app", "email")
    assert store.get_shared_secret(account_id=_ACCOUNT_ID) is None

    with store.account_lock(account_id=_ACCOUNT_ID):
        with store.account_lock(account_id=_ACCOUNT_ID):
            store.add_method_enabled(account_id=_ACCOUNT_ID, method="app")
            store.add_method_enabled(account_id=_ACCOUNT_ID, method="app")
    store.add_trusted_device(account_id=_ACCOUNT_ID, value="record")
    store.remove_trusted_device(account_id=_ACCOUNT_ID, value="missing")

    assert store.get_methods_enabled(account_id=_ACCOUNT_ID) == ("app",)
    assert store.get_methods_enabled(account_id=bob) == ()
    assert store.list_trusted_devices(account_id=_ACCOUNT_ID) == ("record",)
    assert store.list_trusted_devices(account_id=bob) == ()
