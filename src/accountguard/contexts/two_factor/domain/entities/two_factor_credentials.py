from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from accountguard.shared_kernel.primitives import ensure_utc_datetime


@dataclass(frozen=True, slots=True)
class SharedSecret:
    """
    SharedSecret — decrypted TOTP seed with optional generation timestamp.

    `generated_at is None` marks the legacy single-part layout without timestamp.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/services/credential_layouts.py
      - src/accountguard/contexts/two_factor/application/services/admin_reset.py
    """

    secret: str
    generated_at: datetime | None

    def __post_init__(self) -> None:
        """
        Validate secret text and optional UTC generation timestamp.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Secret text is already encoded (BASE32 or BASE64).
        Raises:
            ValueError: If secret is blank or timestamp is not UTC.
        Side Effects:
            None.
        """
        if not self.secret:
            raise ValueError("SharedSecret requires non-empty secret")
        if self.generated_at is not None:
            ensure_utc_datetime(value=self.generated_at, field_name="generated_at")

    def __repr__(self) -> str:
        return f"SharedSecret(secret='***', generated_at={self.generated_at!r})"


@dataclass(frozen=True, slots=True)
class TwoFactorCredentials:
    """
    TwoFactorCredentials — freshly generated shared secret plus backup scratch codes.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/services/credential_generator.py
      - src/accountguard/contexts/two_factor/application/use_cases/two_factor_auth_core.py
    """

    secret: str
    scratch_codes: tuple[str, ...]

    def __repr__(self) -> str:
        return f"TwoFactorCredentials(secret='***', scratch_codes=<{len(self.scratch_codes)}>)"
