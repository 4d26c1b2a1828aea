from __future__ import annotations

from datetime import datetime, timezone

from accountguard.contexts.two_factor.application.ports import TwoFactorClock


class SystemTwoFactorClock(TwoFactorClock):
    """
    SystemTwoFactorClock — `TwoFactorClock` backed by system UTC wall clock.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/ports/clock.py
    """

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
