from .application import (
    AppEnrollmentStart,
    TwoFactorAuthConfig,
    TwoFactorAuthCore,
    TwoFactorAuthCoreFactory,
    TwoFactorPasswordChangeListener,
)
from .domain import (
    TwoFactorAuthError,
    TwoFactorCodeType,
    TwoFactorErrorKind,
    TwoFactorMethod,
)

__all__ = [
    "AppEnrollmentStart",
    "TwoFactorAuthConfig",
    "TwoFactorAuthCore",
    "TwoFactorAuthCoreFactory",
    "TwoFactorAuthError",
    "TwoFactorCodeType",
    "TwoFactorErrorKind",
    "TwoFactorMethod",
    "TwoFactorPasswordChangeListener",
]
