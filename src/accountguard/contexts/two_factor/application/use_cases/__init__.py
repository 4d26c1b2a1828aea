from .password_change_listener import TwoFactorPasswordChangeListener
from .two_factor_auth_core import TwoFactorAuthCore
from .two_factor_auth_core_factory import TwoFactorAuthCoreFactory
from .two_factor_auth_models import (
    RECOVERY_ADDRESS_STATUS_PENDING,
    RECOVERY_ADDRESS_STATUS_VERIFIED,
    AppEnrollmentStart,
)

__all__ = [
    "RECOVERY_ADDRESS_STATUS_PENDING",
    "RECOVERY_ADDRESS_STATUS_VERIFIED",
    "AppEnrollmentStart",
    "TwoFactorAuthCore",
    "TwoFactorAuthCoreFactory",
    "TwoFactorPasswordChangeListener",
]
