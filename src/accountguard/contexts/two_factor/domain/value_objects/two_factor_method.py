from __future__ import annotations

from enum import Enum


class TwoFactorMethod(str, Enum):
    """
    TwoFactorMethod — second-factor delivery method a user can enroll in.

    Values match the literals stored in the directory method attributes.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/ports/attribute_store.py
      - src/accountguard/contexts/two_factor/application/use_cases/two_factor_auth_core.py
    """

    APP = "app"
    EMAIL = "email"

    @classmethod
    def from_literal(cls, raw_value: str) -> TwoFactorMethod:
        """
        Parse stored method literal with case-insensitive matching.

        Args:
            raw_value: Stored or caller-provided method literal.
        Returns:
            TwoFactorMethod: Parsed method.
        Assumptions:
            None.
        Raises:
            ValueError: If literal is not a known method.
        Side Effects:
            None.
        """
        normalized = raw_value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"unsupported two-factor method: {raw_value!r}")
