from __future__ import annotations

from datetime import datetime
from typing import Protocol


class TotpAuthenticator(Protocol):
    """
    TotpAuthenticator — RFC 6238 code verification and provisioning URI port.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/adapters/outbound/security/pyotp_totp_authenticator.py
      - src/accountguard/contexts/two_factor/application/use_cases/two_factor_auth_core.py
    """

    def verify_code(self, *, key: bytes, code: str, at_time: datetime) -> bool:
        """
        Verify TOTP code against raw key within configured drift window.

        Args:
            key: Raw secret key bytes, already decoded from storage encoding.
            code: User-submitted code.
            at_time: Timezone-aware UTC verification time.
        Returns:
            bool: `True` when any step in `[-K, +K]` matches.
        Assumptions:
            Comparison is constant-time.
        Raises:
            ValueError: If key is empty or timestamp is not UTC.
        Side Effects:
            None.
        """
        ...

    def build_otpauth_uri(self, *, secret: str, account_label: str, issuer: str) -> str:
        ...
