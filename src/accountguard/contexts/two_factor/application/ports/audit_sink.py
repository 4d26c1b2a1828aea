from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Protocol

from accountguard.shared_kernel.primitives import AccountId


class TwoFactorAuditEventType(str, Enum):
    """
    TwoFactorAuditEventType — stable event names emitted to the audit sink.
    """

    MFA_ENABLED = "auth.mfa.enabled"
    MFA_DISABLED = "auth.mfa.disabled"
    MFA_VERIFIED = "auth.mfa.verified"
    MFA_FAILED = "auth.mfa.failed"
    MFA_RESET = "auth.mfa.reset"
    APP_PASSWORD_CREATED = "auth.apppassword.created"
    APP_PASSWORD_REVOKED = "auth.apppassword.revoked"
    TRUSTED_DEVICE_REGISTERED = "auth.trusteddevice.registered"
    TRUSTED_DEVICE_REVOKED = "auth.trusteddevice.revoked"


@dataclass(frozen=True, slots=True)
class TwoFactorAuditEvent:
    """
    TwoFactorAuditEvent — immutable audit record without secret material.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/adapters/outbound/audit/logging_audit_sink.py
    """

    event_type: TwoFactorAuditEventType
    account_id: AccountId
    occurred_at_ms: int
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))


class TwoFactorAuditSink(Protocol):
    """
    TwoFactorAuditSink — fire-and-forget audit port.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/adapters/outbound/audit/logging_audit_sink.py
    """

    def record(self, *, event: TwoFactorAuditEvent) -> None:
        ...
