from .logging_audit_sink import LoggingTwoFactorAuditSink

__all__ = [
    "LoggingTwoFactorAuditSink",
]
