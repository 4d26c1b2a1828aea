from __future__ import annotations

from typing import Sequence

from accountguard.contexts.two_factor.domain.entities import EmailCode, SharedSecret
from accountguard.contexts.two_factor.domain.errors import (
    TwoFactorAuthError,
    TwoFactorCredentialType,
)
from accountguard.shared_kernel.primitives import (
    format_generalized_time,
    parse_generalized_time,
)

SHARED_SECRET_SEPARATOR = "|"
SCRATCH_CODE_SEPARATOR = ","
EMAIL_CODE_SEPARATOR = ":"
_EMAIL_CODE_PART_COUNT = 3


def serialize_shared_secret(*, shared_secret: SharedSecret) -> str:
    """
    Serialize shared secret as `<secret>|<generalizedTime>`.

    Args:
        shared_secret: Secret with generation timestamp.
    Returns:
        str: Plaintext layout; legacy secrets without timestamp serialize as bare secret.
    Assumptions:
        None.
    Raises:
        ValueError: If generation timestamp is not UTC.
    Side Effects:
        None.
    """
    if shared_secret.generated_at is None:
        return shared_secret.secret
    timestamp = format_generalized_time(value=shared_secret.generated_at)
    return f"{shared_secret.secret}{SHARED_SECRET_SEPARATOR}{timestamp}"


def parse_shared_secret(*, plaintext: str) -> SharedSecret:
    """
    Parse decrypted shared-secret layout, accepting the legacy single-part form.

    Args:
        plaintext: Decrypted attribute value.
    Returns:
        SharedSecret: Secret with `generated_at=None` for legacy values.
    Assumptions:
        None.
    Raises:
        TwoFactorAuthError: `CREDENTIAL_INVALID_FORMAT` for wrong part count, empty secret
            or malformed timestamp.
    Side Effects:
        None.
    """
    parts = plaintext.split(SHARED_SECRET_SEPARATOR)
    if len(parts) == 1:
        generated_at = None
    elif len(parts) == 2:
        try:
            generated_at = parse_generalized_time(raw_value=parts[1])
        except ValueError as error:
            raise TwoFactorAuthError.credential_invalid_format(
                credential_type=TwoFactorCredentialType.SHARED_SECRET,
                reason="invalid generation timestamp",
            ) from error
    else:
        raise TwoFactorAuthError.credential_invalid_format(
            credential_type=TwoFactorCredentialType.SHARED_SECRET,
            reason="unexpected number of parts",
        )
    if not parts[0]:
        raise TwoFactorAuthError.credential_invalid_format(
            credential_type=TwoFactorCredentialType.SHARED_SECRET,
            reason="empty secret",
        )
    return SharedSecret(secret=parts[0], generated_at=generated_at)


def serialize_scratch_codes(*, codes: Sequence[str]) -> str:
    return SCRATCH_CODE_SEPARATOR.join(codes)


def parse_scratch_codes(*, plaintext: str) -> tuple[str, ...]:
    """Split comma-delimited scratch pool, ignoring empty entries."""
    return tuple(code for code in plaintext.split(SCRATCH_CODE_SEPARATOR) if code)


def serialize_email_code(*, email_code: EmailCode) -> str:
    return EMAIL_CODE_SEPARATOR.join(
        (email_code.code, email_code.reserved, str(email_code.issued_at_ms))
    )


def parse_email_code(*, plaintext: str) -> EmailCode:
    """
    Parse decrypted `<code>:<reserved>:<epochMs>` layout.

    Args:
        plaintext: Decrypted attribute value.
    Returns:
        EmailCode: Parsed code; reserved part is carried but not interpreted.
    Assumptions:
        None.
    Raises:
        TwoFactorAuthError: `CREDENTIAL_INVALID_FORMAT` when part count is not three,
            `CREDENTIAL_CORRUPTED` when the timestamp is not an integer.
    Side Effects:
        None.
    """
    parts = plaintext.split(EMAIL_CODE_SEPARATOR)
    if len(parts) != _EMAIL_CODE_PART_COUNT:
        raise TwoFactorAuthError.credential_invalid_format(
            credential_type=TwoFactorCredentialType.EMAIL_CODE,
            reason="unexpected number of parts",
        )
    code, reserved, raw_timestamp = parts
    try:
        issued_at_ms = int(raw_timestamp)
    except ValueError as error:
        raise TwoFactorAuthError.credential_corrupted(
            credential_type=TwoFactorCredentialType.EMAIL_CODE,
            reason="invalid issue timestamp",
        ) from error
    return EmailCode(code=code, issued_at_ms=issued_at_ms, reserved=reserved)
