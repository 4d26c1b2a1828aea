from __future__ import annotations

import logging
import threading
from typing import Callable

from accountguard.contexts.two_factor.application.ports import LockoutPolicy
from accountguard.contexts.two_factor.domain.errors import TwoFactorCodeType
from accountguard.shared_kernel.primitives import AccountId

log = logging.getLogger(__name__)


class LoggingLockoutPolicy(LockoutPolicy):
    """
    LoggingLockoutPolicy — counts and logs failed second-factor attempts per account.

    Lockout decisions belong to the account-lockout subsystem; this adapter records
    failures and forwards them to an optional callback in best-effort mode.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/ports/lockout_policy.py
      - src/accountguard/contexts/two_factor/application/use_cases/two_factor_auth_core.py
    """

    def __init__(
        self,
        *,
        on_failure: Callable[[AccountId, TwoFactorCodeType], None] | None = None,
    ) -> None:
        self._on_failure = on_failure
        self._failures: dict[str, int] = {}
        self._lock = threading.Lock()

    def record_failed_second_factor(
        self,
        *,
        account_id: AccountId,
        code_type: TwoFactorCodeType,
    ) -> None:
        """
        Record one failed attempt.

        Args:
            account_id: Account whose attempt failed.
            code_type: Code kind the attempt was matched against.
        Returns:
            None.
        Assumptions:
            Callback failures never break the verification flow.
        Raises:
            None.
        Side Effects:
            Increments in-memory counter, emits a warning log, calls optional callback.
        """
        with self._lock:
            count = self._failures.get(str(account_id), 0) + 1
            self._failures[str(account_id)] = count
        log.warning(
            "two-factor failed attempt recorded account_id=%s code_type=%s failures=%s",
            account_id,
            code_type.value,
            count,
        )
        if self._on_failure is None:
            return
        try:
            self._on_failure(account_id, code_type)
        except Exception:  # noqa: BLE001
            log.exception(
                "two-factor lockout callback failed account_id=%s code_type=%s",
                account_id,
                code_type.value,
            )

    def failed_attempts(self, *, account_id: AccountId) -> int:
        with self._lock:
            return self._failures.get(str(account_id), 0)
