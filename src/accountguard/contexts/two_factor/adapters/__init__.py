"""
Adapters package for two-factor bounded context.
"""

from .inbound import (
    TrustedDeviceCookie,
    register_two_factor_error_handler,
    status_code_for_two_factor_error,
    two_factor_error_handler,
)
from .outbound import (
    AesGcmAccountSecretCipher,
    InMemoryTwoFactorAttributeStore,
    LoggingEmailDeliveryChannel,
    LoggingLockoutPolicy,
    LoggingTwoFactorAuditSink,
    PyOtpTotpAuthenticator,
    SystemTwoFactorClock,
    load_two_factor_auth_config,
    resolve_two_factor_config_path,
)

__all__ = [
    "AesGcmAccountSecretCipher",
    "InMemoryTwoFactorAttributeStore",
    "LoggingEmailDeliveryChannel",
    "LoggingLockoutPolicy",
    "LoggingTwoFactorAuditSink",
    "PyOtpTotpAuthenticator",
    "SystemTwoFactorClock",
    "TrustedDeviceCookie",
    "load_two_factor_auth_config",
    "register_two_factor_error_handler",
    "resolve_two_factor_config_path",
    "status_code_for_two_factor_error",
    "two_factor_error_handler",
]
