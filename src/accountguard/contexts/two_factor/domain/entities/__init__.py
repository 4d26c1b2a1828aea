from .app_password import AppPassword, AppPasswordMetadata
from .email_code import EmailCode
from .trusted_device import TrustedDevice, TrustedDeviceToken
from .two_factor_credentials import SharedSecret, TwoFactorCredentials

__all__ = [
    "AppPassword",
    "AppPasswordMetadata",
    "EmailCode",
    "SharedSecret",
    "TrustedDevice",
    "TrustedDeviceToken",
    "TwoFactorCredentials",
]
