from .entities import (
    AppPassword,
    AppPasswordMetadata,
    EmailCode,
    SharedSecret,
    TrustedDevice,
    TrustedDeviceToken,
    TwoFactorCredentials,
)
from .errors import (
    TwoFactorAuthError,
    TwoFactorCodeType,
    TwoFactorCredentialType,
    TwoFactorErrorKind,
)
from .value_objects import CredentialEncoding, TotpHashAlgorithm, TwoFactorMethod

__all__ = [
    "AppPassword",
    "AppPasswordMetadata",
    "CredentialEncoding",
    "EmailCode",
    "SharedSecret",
    "TotpHashAlgorithm",
    "TrustedDevice",
    "TrustedDeviceToken",
    "TwoFactorAuthError",
    "TwoFactorCodeType",
    "TwoFactorCredentialType",
    "TwoFactorCredentials",
    "TwoFactorErrorKind",
    "TwoFactorMethod",
]
