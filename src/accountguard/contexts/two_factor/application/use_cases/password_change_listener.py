from __future__ import annotations

import logging

from accountguard.shared_kernel.primitives import AccountId

from .two_factor_auth_core_factory import TwoFactorAuthCoreFactory

log = logging.getLogger(__name__)


class TwoFactorPasswordChangeListener:
    """
    TwoFactorPasswordChangeListener — revokes app-specific passwords after a password change.

    A password change must never fail because of two-factor cleanup, so errors are
    logged and dropped.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/use_cases/two_factor_auth_core_factory.py
      - src/accountguard/contexts/two_factor/application/services/app_password_store.py
    """

    def __init__(self, *, core_factory: TwoFactorAuthCoreFactory) -> None:
        if core_factory is None:  # type: ignore[truthy-bool]
            raise ValueError("TwoFactorPasswordChangeListener requires core_factory")
        self._core_factory = core_factory

    def post_modify(self, *, account_id: AccountId) -> None:
        """
        React to a completed primary-password change.

        Args:
            account_id: Account whose password changed.
        Returns:
            None.
        Assumptions:
            Called after the password change is committed.
        Raises:
            None.
        Side Effects:
            Revokes all app-specific passwords when configured to do so.
        """
        if not self._core_factory.config.revoke_app_passwords_on_password_change:
            return
        try:
            self._core_factory.for_account(account_id).revoke_all_app_passwords()
        except Exception:  # noqa: BLE001
            log.exception(
                "two-factor app password revocation after password change failed account_id=%s",
                account_id,
            )
            return
        log.info(
            "two-factor app passwords revoked after password change account_id=%s",
            account_id,
        )
