from .account_password_verifier import AccountPasswordVerifier
from .attribute_store import TwoFactorAttributeStore
from .audit_sink import TwoFactorAuditEvent, TwoFactorAuditEventType, TwoFactorAuditSink
from .clock import TwoFactorClock
from .email_delivery_channel import EmailDeliveryChannel
from .lockout_policy import LockoutPolicy
from .secret_cipher import AccountSecretCipher
from .totp_authenticator import TotpAuthenticator

__all__ = [
    "AccountPasswordVerifier",
    "AccountSecretCipher",
    "EmailDeliveryChannel",
    "LockoutPolicy",
    "TotpAuthenticator",
    "TwoFactorAttributeStore",
    "TwoFactorAuditEvent",
    "TwoFactorAuditEventType",
    "TwoFactorAuditSink",
    "TwoFactorClock",
]
