from __future__ import annotations

from datetime import datetime
from typing import Protocol


class TwoFactorClock(Protocol):
    """
    TwoFactorClock — port of current UTC time for code lifetimes and TOTP steps.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/adapters/outbound/time/system_two_factor_clock.py
    """

    def now(self) -> datetime:
        """
        Return current UTC timestamp.

        Args:
            None.
        Returns:
            datetime: Timezone-aware UTC datetime.
        Assumptions:
            None.
        Raises:
            None.
        Side Effects:
            None.
        """
        ...
