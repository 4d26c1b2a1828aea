from __future__ import annotations

import hmac
import logging
import secrets
import string

from accountguard.contexts.two_factor.application.ports import (
    TwoFactorAttributeStore,
    TwoFactorClock,
)
from accountguard.contexts.two_factor.domain.entities import EmailCode
from accountguard.contexts.two_factor.domain.errors import (
    TwoFactorAuthError,
    TwoFactorCodeType,
    TwoFactorCredentialType,
)
from accountguard.shared_kernel.primitives import epoch_millis

from .credential_envelope import CredentialEnvelope
from .credential_layouts import parse_email_code, serialize_email_code

log = logging.getLogger(__name__)


class EmailCodeEngine:
    """
    EmailCodeEngine — issue and validate e-mail one-time codes for one account.

    At most one code is outstanding; issuing overwrites the previous one. Successful
    validation does not delete the code, the orchestrating caller decides that.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/services/credential_layouts.py
      - src/accountguard/contexts/two_factor/application/use_cases/two_factor_auth_core.py
    """

    def __init__(
        self,
        *,
        envelope: CredentialEnvelope,
        store: TwoFactorAttributeStore,
        clock: TwoFactorClock,
        code_length: int,
        lifetime_ms: int,
    ) -> None:
        """
        Initialize engine dependencies and policy values.

        Args:
            envelope: Account-bound cipher wrapper.
            store: Attribute store port.
            clock: UTC clock port.
            code_length: Number of digits per issued code.
            lifetime_ms: Default acceptance window after issue.
        Returns:
            None.
        Assumptions:
            Policy values were validated by `TwoFactorAuthConfig`.
        Raises:
            ValueError: If dependency is missing or policy values are non-positive.
        Side Effects:
            None.
        """
        if store is None:  # type: ignore[truthy-bool]
            raise ValueError("EmailCodeEngine requires store")
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("EmailCodeEngine requires clock")
        if code_length <= 0:
            raise ValueError("EmailCodeEngine code_length must be > 0")
        if lifetime_ms <= 0:
            raise ValueError("EmailCodeEngine lifetime_ms must be > 0")
        self._envelope = envelope
        self._store = store
        self._clock = clock
        self._code_length = code_length
        self._lifetime_ms = lifetime_ms

    def issue(self) -> str:
        """
        Generate, encrypt and persist a fresh numeric code.

        Args:
            None.
        Returns:
            str: Plaintext code to hand to the delivery channel.
        Assumptions:
            Caller never logs the returned code.
        Raises:
            ValueError: If encryption fails.
        Side Effects:
            Overwrites `twoFactorCodeForEmail` attribute.
        """
        code = "".join(secrets.choice(string.digits) for _ in range(self._code_length))
        email_code = EmailCode(code=code, issued_at_ms=epoch_millis(value=self._clock.now()))
        self._store.set_email_code(
            account_id=self._envelope.account_id,
            value=self._envelope.seal(plaintext=serialize_email_code(email_code=email_code)),
        )
        log.debug("two-factor email code issued account_id=%s", self._envelope.account_id)
        return code

    def load(self) -> EmailCode:
        """
        Read and parse outstanding code.

        Args:
            None.
        Returns:
            EmailCode: Decrypted outstanding code.
        Assumptions:
            None.
        Raises:
            TwoFactorAuthError: `CREDENTIAL_MISSING`, `CREDENTIAL_INVALID_FORMAT` or
                `CREDENTIAL_CORRUPTED`.
        Side Effects:
            Reads one attribute.
        """
        encrypted = self._store.get_email_code(account_id=self._envelope.account_id)
        if not encrypted:
            raise TwoFactorAuthError.credential_missing(
                credential_type=TwoFactorCredentialType.EMAIL_CODE
            )
        plaintext = self._envelope.open(
            ciphertext=encrypted,
            credential_type=TwoFactorCredentialType.EMAIL_CODE,
        )
        return parse_email_code(plaintext=plaintext)

    def validate(self, *, provided: str, lifetime_ms: int | None = None) -> None:
        """
        Validate provided code against outstanding code and its lifetime.

        Args:
            provided: User-submitted code.
            lifetime_ms: Optional lifetime override; configured lifetime otherwise.
        Returns:
            None.
        Assumptions:
            Code stays stored after success.
        Raises:
            TwoFactorAuthError: `CODE_EXPIRED` when `now > issued + lifetime`,
                `CODE_INVALID` on mismatch, or credential errors from `load`.
        Side Effects:
            Reads one attribute.
        """
        email_code = self.load()
        effective_lifetime_ms = self._lifetime_ms if lifetime_ms is None else lifetime_ms
        expires_at_ms = email_code.expires_at_ms(lifetime_ms=effective_lifetime_ms)
        if epoch_millis(value=self._clock.now()) > expires_at_ms:
            raise TwoFactorAuthError.code_expired(
                code_type=TwoFactorCodeType.EMAIL,
                expires_at_ms=expires_at_ms,
            )
        if not hmac.compare_digest(provided.encode("utf-8"), email_code.code.encode("utf-8")):
            raise TwoFactorAuthError.code_invalid(code_type=TwoFactorCodeType.EMAIL)

    def expiry_ms(self) -> int:
        return self.load().expires_at_ms(lifetime_ms=self._lifetime_ms)

    def clear(self) -> None:
        self._store.set_email_code(account_id=self._envelope.account_id, value=None)
