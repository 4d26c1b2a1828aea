from __future__ import annotations

from typing import Protocol

from accountguard.shared_kernel.primitives import AccountId


class AccountPasswordVerifier(Protocol):
    """
    AccountPasswordVerifier — primary-credential check required before enrollment.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/use_cases/two_factor_auth_core.py
    """

    def verify_password(self, *, account_id: AccountId, password: str) -> bool:
        ...
