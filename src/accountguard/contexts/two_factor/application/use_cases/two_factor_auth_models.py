from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppEnrollmentStart:
    """
    AppEnrollmentStart — material returned when authenticator-app enrollment begins.

    `otpauth_uri` is only produced for BASE32 secrets, which authenticator apps accept.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/use_cases/two_factor_auth_core.py
    """

    secret: str
    otpauth_uri: str | None

    def __repr__(self) -> str:
        return "AppEnrollmentStart(secret='***', otpauth_uri='***')"


RECOVERY_ADDRESS_STATUS_PENDING = "pending"
RECOVERY_ADDRESS_STATUS_VERIFIED = "verified"
