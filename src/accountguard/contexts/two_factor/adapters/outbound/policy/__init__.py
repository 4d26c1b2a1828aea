from .logging_lockout_policy import LoggingLockoutPolicy

__all__ = [
    "LoggingLockoutPolicy",
]
