from .trusted_device_cookie import TrustedDeviceCookie
from .two_factor_error_handler import (
    register_two_factor_error_handler,
    status_code_for_two_factor_error,
    two_factor_error_handler,
)

__all__ = [
    "TrustedDeviceCookie",
    "register_two_factor_error_handler",
    "status_code_for_two_factor_error",
    "two_factor_error_handler",
]
