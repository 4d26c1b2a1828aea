from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class TwoFactorErrorKind(str, Enum):
    """
    TwoFactorErrorKind — discriminator for every failure surfaced by the two-factor core.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/use_cases/two_factor_auth_core.py
      - src/accountguard/contexts/two_factor/adapters/inbound/http/trusted_device_cookie.py
    """

    CODE_INVALID = "two_factor_code_invalid"
    CODE_EXPIRED = "two_factor_code_expired"
    CREDENTIAL_MISSING = "two_factor_credential_missing"
    CREDENTIAL_INVALID_FORMAT = "two_factor_credential_invalid_format"
    CREDENTIAL_CORRUPTED = "two_factor_credential_corrupted"
    CREDENTIAL_GENERATION = "two_factor_credential_generation_failed"
    SETUP_ERROR = "two_factor_setup_error"
    NOT_REQUIRED = "two_factor_not_required"
    CANNOT_DISABLE = "two_factor_cannot_disable"
    LIMIT_REACHED = "two_factor_limit_reached"
    NAME_IN_USE = "two_factor_name_in_use"
    AUTH_FAILED = "two_factor_auth_failed"


class TwoFactorCodeType(str, Enum):
    """
    TwoFactorCodeType — kind of second-factor code a verification attempt was matched against.
    """

    TOTP = "TOTP"
    EMAIL = "EMAIL"
    SCRATCH = "SCRATCH"
    APP = "APP"
    UNKNOWN = "UNKNOWN"


class TwoFactorCredentialType(str, Enum):
    """
    TwoFactorCredentialType — persisted credential category named in credential errors.
    """

    SHARED_SECRET = "shared_secret"
    SCRATCH_CODES = "scratch_codes"
    EMAIL_CODE = "email_code"
    APP_PASSWORD = "app_password"
    TRUSTED_DEVICE = "trusted_device"
    LAST_RESET = "last_reset"


_CODE_INVALID_MESSAGE = "Invalid two-factor authentication code."


class TwoFactorAuthError(ValueError):
    """
    TwoFactorAuthError — single deterministic error type for the two-factor bounded context.

    Callers switch on `kind` instead of relying on an exception hierarchy. Named
    constructors build each kind with a stable `code`, a human `message` and an
    immutable `details` mapping.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/use_cases/two_factor_auth_core.py
      - src/accountguard/contexts/two_factor/application/services/email_code_engine.py
      - src/accountguard/contexts/two_factor/application/services/app_password_store.py
    """

    def __init__(
        self,
        *,
        kind: TwoFactorErrorKind,
        message: str,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        """
        Initialize error with discriminated kind and frozen details payload.

        Args:
            kind: Failure discriminator.
            message: Human-readable deterministic message.
            details: Optional extra fields (`code_type`, `reason`, `credential_type`, ...).
        Returns:
            None.
        Assumptions:
            Details never contain secret material.
        Raises:
            None.
        Side Effects:
            None.
        """
        super().__init__(message)
        self.kind = kind
        self.code = kind.value
        self.message = message
        source = dict(details) if details is not None else {}
        normalized: dict[str, Any] = {}
        for key in sorted(source.keys()):
            value = source[key]
            if value is None:
                continue
            normalized[key] = value.value if isinstance(value, Enum) else value
        self.details: Mapping[str, Any] = MappingProxyType(normalized)

    @property
    def code_type(self) -> TwoFactorCodeType | None:
        """
        Return code type attached to code errors, when present.

        Args:
            None.
        Returns:
            TwoFactorCodeType | None: Matched code type or `None` for non-code errors.
        Assumptions:
            None.
        Raises:
            None.
        Side Effects:
            None.
        """
        raw = self.details.get("code_type")
        if raw is None:
            return None
        return TwoFactorCodeType(raw)

    def payload(self) -> dict[str, Any]:
        """
        Build deterministic error payload with stable key order.

        Args:
            None.
        Returns:
            dict[str, Any]: `{"error": {"code", "message", "details"}}` payload.
        Assumptions:
            Payload is consumed by inbound adapters as-is.
        Raises:
            None.
        Side Effects:
            None.
        """
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": dict(self.details),
            }
        }

    @classmethod
    def code_invalid(
        cls,
        *,
        code_type: TwoFactorCodeType,
        reason: str = "code does not match expected value",
    ) -> TwoFactorAuthError:
        # Same message for every code type, only the details label differs.
        return cls(
            kind=TwoFactorErrorKind.CODE_INVALID,
            message=_CODE_INVALID_MESSAGE,
            details={"code_type": code_type, "reason": reason},
        )

    @classmethod
    def code_expired(
        cls,
        *,
        code_type: TwoFactorCodeType,
        expires_at_ms: int,
    ) -> TwoFactorAuthError:
        return cls(
            kind=TwoFactorErrorKind.CODE_EXPIRED,
            message="Two-factor authentication code has expired.",
            details={"code_type": code_type, "expires_at_ms": expires_at_ms},
        )

    @classmethod
    def credential_missing(cls, *, credential_type: TwoFactorCredentialType) -> TwoFactorAuthError:
        return cls(
            kind=TwoFactorErrorKind.CREDENTIAL_MISSING,
            message="Two-factor credential is missing.",
            details={"credential_type": credential_type},
        )

    @classmethod
    def credential_invalid_format(
        cls,
        *,
        credential_type: TwoFactorCredentialType,
        reason: str,
    ) -> TwoFactorAuthError:
        return cls(
            kind=TwoFactorErrorKind.CREDENTIAL_INVALID_FORMAT,
            message="Two-factor credential has invalid format.",
            details={"credential_type": credential_type, "reason": reason},
        )

    @classmethod
    def credential_corrupted(
        cls,
        *,
        credential_type: TwoFactorCredentialType,
        reason: str,
    ) -> TwoFactorAuthError:
        return cls(
            kind=TwoFactorErrorKind.CREDENTIAL_CORRUPTED,
            message="Two-factor credential is corrupted.",
            details={"credential_type": credential_type, "reason": reason},
        )

    @classmethod
    def credential_generation(cls, *, reason: str) -> TwoFactorAuthError:
        return cls(
            kind=TwoFactorErrorKind.CREDENTIAL_GENERATION,
            message="Two-factor credentials could not be generated.",
            details={"reason": reason},
        )

    @classmethod
    def setup_error(cls, *, phase: str) -> TwoFactorAuthError:
        return cls(
            kind=TwoFactorErrorKind.SETUP_ERROR,
            message="Two-factor setup precondition failed.",
            details={"phase": phase},
        )

    @classmethod
    def not_required(cls) -> TwoFactorAuthError:
        return cls(
            kind=TwoFactorErrorKind.NOT_REQUIRED,
            message="Two-factor authentication is not available for this account.",
        )

    @classmethod
    def cannot_disable(cls) -> TwoFactorAuthError:
        return cls(
            kind=TwoFactorErrorKind.CANNOT_DISABLE,
            message="Two-factor authentication is required and cannot be disabled.",
        )

    @classmethod
    def limit_reached(cls, *, limit: int) -> TwoFactorAuthError:
        return cls(
            kind=TwoFactorErrorKind.LIMIT_REACHED,
            message="Application-specific password limit reached.",
            details={"limit": limit},
        )

    @classmethod
    def name_in_use(cls, *, name: str) -> TwoFactorAuthError:
        return cls(
            kind=TwoFactorErrorKind.NAME_IN_USE,
            message="Application-specific password name is already in use.",
            details={"name": name},
        )

    @classmethod
    def auth_failed(cls, *, reason: str) -> TwoFactorAuthError:
        return cls(
            kind=TwoFactorErrorKind.AUTH_FAILED,
            message="Account authentication failed.",
            details={"reason": reason},
        )
