from .audit import LoggingTwoFactorAuditSink
from .config import load_two_factor_auth_config, resolve_two_factor_config_path
from .messaging import LoggingEmailDeliveryChannel
from .persistence import InMemoryTwoFactorAttributeStore
from .policy import LoggingLockoutPolicy
from .security import AesGcmAccountSecretCipher, PyOtpTotpAuthenticator
from .time import SystemTwoFactorClock

__all__ = [
    "AesGcmAccountSecretCipher",
    "InMemoryTwoFactorAttributeStore",
    "LoggingEmailDeliveryChannel",
    "LoggingLockoutPolicy",
    "LoggingTwoFactorAuditSink",
    "PyOtpTotpAuthenticator",
    "SystemTwoFactorClock",
    "load_two_factor_auth_config",
    "resolve_two_factor_config_path",
]
