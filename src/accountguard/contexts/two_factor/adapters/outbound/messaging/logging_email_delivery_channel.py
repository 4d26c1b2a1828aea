from __future__ import annotations

import logging

from accountguard.contexts.two_factor.application.ports import EmailDeliveryChannel
from accountguard.shared_kernel.primitives import AccountId

log = logging.getLogger(__name__)


class LoggingEmailDeliveryChannel(EmailDeliveryChannel):
    """
    LoggingEmailDeliveryChannel — dev/test adapter that logs code delivery without sending mail.

    The code itself is never logged; only its length and a masked address.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/ports/email_delivery_channel.py
      - configs/dev/two_factor.yaml
    """

    def send_code(self, *, account_id: AccountId, recovery_address: str, code: str) -> bool:
        """
        Log delivery in best-effort mode.

        Args:
            account_id: Account the code belongs to.
            recovery_address: Destination e-mail address.
            code: Plaintext numeric code.
        Returns:
            bool: `True` when the log line was written.
        Assumptions:
            None.
        Raises:
            None.
        Side Effects:
            Emits one info log.
        """
        try:
            log.info(
                "two-factor email code log-only delivery account_id=%s address=%s code_length=%s",
                account_id,
                _mask_address(address=recovery_address),
                len(code),
            )
        except Exception:  # noqa: BLE001
            log.exception(
                "two-factor email code log-only delivery failed account_id=%s",
                account_id,
            )
            return False
        return True


def _mask_address(*, address: str) -> str:
    local, _, domain = address.partition("@")
    if not local:
        return f"***@{domain}"
    return f"{local[0]}***@{domain}"
