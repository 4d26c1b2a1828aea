from .two_factor_errors import (
    TwoFactorAuthError,
    TwoFactorCodeType,
    TwoFactorCredentialType,
    TwoFactorErrorKind,
)

__all__ = [
    "TwoFactorAuthError",
    "TwoFactorCodeType",
    "TwoFactorCredentialType",
    "TwoFactorErrorKind",
]
