from .admin_reset import AdminResetReconciler
from .app_password_store import AppPasswordStore
from .credential_codec import decode_credential_text, encode_credential_bytes
from .credential_envelope import CredentialEnvelope
from .credential_generator import CredentialGenerator
from .credential_layouts import (
    parse_email_code,
    parse_scratch_codes,
    parse_shared_secret,
    serialize_email_code,
    serialize_scratch_codes,
    serialize_shared_secret,
)
from .email_code_engine import EmailCodeEngine
from .scratch_code_store import ScratchCodeStore
from .trusted_device_store import TrustedDeviceStore

__all__ = [
    "AdminResetReconciler",
    "AppPasswordStore",
    "CredentialEnvelope",
    "CredentialGenerator",
    "EmailCodeEngine",
    "ScratchCodeStore",
    "TrustedDeviceStore",
    "decode_credential_text",
    "encode_credential_bytes",
    "parse_email_code",
    "parse_scratch_codes",
    "parse_shared_secret",
    "serialize_email_code",
    "serialize_scratch_codes",
    "serialize_shared_secret",
]
