from .two_factor_auth_config import (
    CredentialConfig,
    TotpAuthenticatorConfig,
    TwoFactorAuthConfig,
)

__all__ = [
    "CredentialConfig",
    "TotpAuthenticatorConfig",
    "TwoFactorAuthConfig",
]
