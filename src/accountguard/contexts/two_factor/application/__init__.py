from .dto import CredentialConfig, TotpAuthenticatorConfig, TwoFactorAuthConfig
from .use_cases import (
    AppEnrollmentStart,
    TwoFactorAuthCore,
    TwoFactorAuthCoreFactory,
    TwoFactorPasswordChangeListener,
)

__all__ = [
    "AppEnrollmentStart",
    "CredentialConfig",
    "TotpAuthenticatorConfig",
    "TwoFactorAuthConfig",
    "TwoFactorAuthCore",
    "TwoFactorAuthCoreFactory",
    "TwoFactorPasswordChangeListener",
]
