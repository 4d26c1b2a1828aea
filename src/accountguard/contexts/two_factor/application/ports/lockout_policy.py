from __future__ import annotations

from typing import Protocol

from accountguard.contexts.two_factor.domain.errors import TwoFactorCodeType
from accountguard.shared_kernel.primitives import AccountId


class LockoutPolicy(Protocol):
    """
    LockoutPolicy — fire-and-forget sink for failed second-factor attempts.

    The lockout algorithm lives outside the two-factor core; the core only reports.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/adapters/outbound/policy/logging_lockout_policy.py
    """

    def record_failed_second_factor(
        self,
        *,
        account_id: AccountId,
        code_type: TwoFactorCodeType,
    ) -> None:
        ...
