from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AccountId:
    """
    AccountId — opaque directory account identifier shared by every context.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/ports/attribute_store.py
      - src/accountguard/contexts/two_factor/application/ports/secret_cipher.py
      - src/accountguard/contexts/two_factor/application/use_cases/two_factor_auth_core.py
    """

    value: str

    def __post_init__(self) -> None:
        """
        Validate and normalize raw account identifier.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Directory ids never carry meaningful surrounding whitespace.
        Raises:
            ValueError: If value is not a string or is blank.
        Side Effects:
            Replaces `value` with stripped representation.
        """
        if not isinstance(self.value, str):
            raise ValueError(f"AccountId requires str value, got {self.value!r}")
        normalized = self.value.strip()
        if not normalized:
            raise ValueError("AccountId requires non-empty value")
        object.__setattr__(self, "value", normalized)

    @classmethod
    def from_string(cls, raw_value: str) -> AccountId:
        """
        Build account id from raw directory value.

        Args:
            raw_value: Raw identifier string.
        Returns:
            AccountId: Normalized account id value object.
        Assumptions:
            None.
        Raises:
            ValueError: If raw value is blank.
        Side Effects:
            None.
        """
        return cls(raw_value)

    def __str__(self) -> str:
        return self.value
