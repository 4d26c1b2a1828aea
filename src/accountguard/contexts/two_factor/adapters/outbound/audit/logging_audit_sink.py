from __future__ import annotations

import logging

from accountguard.contexts.two_factor.application.ports import (
    TwoFactorAuditEvent,
    TwoFactorAuditSink,
)

log = logging.getLogger(__name__)


class LoggingTwoFactorAuditSink(TwoFactorAuditSink):
    """
    LoggingTwoFactorAuditSink — writes audit events to a dedicated logger.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/ports/audit_sink.py
    """

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._log = logger if logger is not None else log

    def record(self, *, event: TwoFactorAuditEvent) -> None:
        """
        Emit one audit log line in best-effort mode.

        Args:
            event: Audit event without secret material.
        Returns:
            None.
        Assumptions:
            Audit failures never break the two-factor flow.
        Raises:
            None.
        Side Effects:
            Emits one info log.
        """
        try:
            details = " ".join(f"{key}={event.details[key]}" for key in sorted(event.details))
            self._log.info(
                "two-factor audit event_type=%s account_id=%s occurred_at_ms=%s %s",
                event.event_type.value,
                event.account_id,
                event.occurred_at_ms,
                details,
            )
        except Exception:  # noqa: BLE001
            log.exception(
                "two-factor audit record failed event_type=%s account_id=%s",
                event.event_type.value,
                event.account_id,
            )
