from __future__ import annotations

from typing import Protocol

from accountguard.shared_kernel.primitives import AccountId


class EmailDeliveryChannel(Protocol):
    """
    EmailDeliveryChannel — delivery port for e-mail one-time codes.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/adapters/outbound/messaging/
        logging_email_delivery_channel.py
    """

    def send_code(self, *, account_id: AccountId, recovery_address: str, code: str) -> bool:
        """
        Deliver one-time code to recovery address.

        Args:
            account_id: Account the code belongs to.
            recovery_address: Destination e-mail address.
            code: Plaintext numeric code.
        Returns:
            bool: `True` when the channel accepted the message.
        Assumptions:
            Implementations never raise on transport failure; they report `False`.
        Raises:
            None.
        Side Effects:
            Sends one message.
        """
        ...
