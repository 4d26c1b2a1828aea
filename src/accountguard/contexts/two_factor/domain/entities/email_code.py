from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class EmailCode:
    """
    EmailCode — outstanding numeric one-time code sent to the recovery address.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/services/email_code_engine.py
      - src/accountguard/contexts/two_factor/application/services/credential_layouts.py
    """

    code: str
    issued_at_ms: int
    reserved: str = ""

    def expires_at_ms(self, *, lifetime_ms: int) -> int:
        """
        Return epoch milliseconds after which the code is no longer accepted.

        Args:
            lifetime_ms: Configured e-mail code lifetime.
        Returns:
            int: Issue timestamp plus lifetime.
        Assumptions:
            Code is still valid exactly at the returned instant.
        Raises:
            None.
        Side Effects:
            None.
        """
        return self.issued_at_ms + lifetime_ms

    def __repr__(self) -> str:
        return f"EmailCode(code='***', issued_at_ms={self.issued_at_ms})"
