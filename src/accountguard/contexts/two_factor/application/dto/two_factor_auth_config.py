from __future__ import annotations

import math
from dataclasses import dataclass

from accountguard.contexts.two_factor.domain.value_objects import (
    CredentialEncoding,
    TotpHashAlgorithm,
)

_TOTP_HASH_ALGORITHM_DEFAULT = TotpHashAlgorithm.SHA1
_TOTP_CODE_LENGTH_DEFAULT = 6
_TOTP_TIME_WINDOW_MS_DEFAULT = 30_000
_TOTP_TIME_WINDOW_OFFSET_DEFAULT = 1
_TOTP_ISSUER_DEFAULT = "AccountGuard"
_SECRET_LENGTH_BYTES_DEFAULT = 20
_SECRET_ENCODING_DEFAULT = CredentialEncoding.BASE32
_SCRATCH_CODE_LENGTH_BYTES_DEFAULT = 10
_SCRATCH_CODE_ENCODING_DEFAULT = CredentialEncoding.BASE32
_NUM_SCRATCH_CODES_DEFAULT = 10
_EMAIL_CODE_LENGTH_DEFAULT = 8
_EMAIL_CODE_LIFETIME_MS_DEFAULT = 30 * 60 * 1000
_MAX_APP_SPECIFIC_PASSWORDS_DEFAULT = 10
_APP_PASSWORD_LENGTH_DEFAULT = 16
_APP_PASSWORD_LIFETIME_MS_DEFAULT = 0
_REVOKE_APP_PASSWORDS_ON_PASSWORD_CHANGE_DEFAULT = True
_TRUSTED_DEVICE_TTL_MS_DEFAULT = 30 * 24 * 60 * 60 * 1000
_TRUSTED_DEVICE_COOKIE_NAME_DEFAULT = "ACCOUNTGUARD_TRUST_TOKEN"
_ALLOWED_TOTP_CODE_LENGTHS = (6, 7, 8)


@dataclass(frozen=True, slots=True)
class CredentialConfig:
    """
    CredentialConfig — inputs of the credential generator.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/services/credential_generator.py
    """

    secret_bytes: int
    scratch_code_bytes: int
    num_scratch_codes: int
    secret_encoding: CredentialEncoding
    scratch_code_encoding: CredentialEncoding


@dataclass(frozen=True, slots=True)
class TotpAuthenticatorConfig:
    """
    TotpAuthenticatorConfig — RFC 6238 knobs for TOTP verification.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/adapters/outbound/security/pyotp_totp_authenticator.py
    """

    hash_algorithm: TotpHashAlgorithm
    code_digits: int
    step_seconds: int
    allowed_drift_steps: int

    def __post_init__(self) -> None:
        if self.code_digits not in _ALLOWED_TOTP_CODE_LENGTHS:
            raise ValueError("TotpAuthenticatorConfig code_digits must be one of 6, 7, 8")
        if self.step_seconds <= 0:
            raise ValueError("TotpAuthenticatorConfig step_seconds must be > 0")
        if self.allowed_drift_steps < 0:
            raise ValueError("TotpAuthenticatorConfig allowed_drift_steps must be >= 0")


@dataclass(frozen=True, slots=True)
class TwoFactorAuthConfig:
    """
    TwoFactorAuthConfig — validated runtime options of the two-factor core.

    Loaded from `two_factor.*` YAML sections by
    `accountguard.contexts.two_factor.adapters.outbound.config`. Instances are immutable
    and every derived view (`credential_config`, `authenticator_config`, code lengths) is
    computed from frozen fields only.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - configs/dev/two_factor.yaml
      - src/accountguard/contexts/two_factor/adapters/outbound/config/two_factor_runtime_config.py
      - src/accountguard/contexts/two_factor/application/use_cases/two_factor_auth_core.py
    """

    totp_hash_algorithm: TotpHashAlgorithm = _TOTP_HASH_ALGORITHM_DEFAULT
    totp_code_length: int = _TOTP_CODE_LENGTH_DEFAULT
    totp_time_window_ms: int = _TOTP_TIME_WINDOW_MS_DEFAULT
    totp_time_window_offset: int = _TOTP_TIME_WINDOW_OFFSET_DEFAULT
    totp_issuer: str = _TOTP_ISSUER_DEFAULT
    secret_length_bytes: int = _SECRET_LENGTH_BYTES_DEFAULT
    secret_encoding: CredentialEncoding = _SECRET_ENCODING_DEFAULT
    scratch_code_length_bytes: int = _SCRATCH_CODE_LENGTH_BYTES_DEFAULT
    scratch_code_encoding: CredentialEncoding = _SCRATCH_CODE_ENCODING_DEFAULT
    num_scratch_codes: int = _NUM_SCRATCH_CODES_DEFAULT
    email_code_length: int = _EMAIL_CODE_LENGTH_DEFAULT
    email_code_lifetime_ms: int = _EMAIL_CODE_LIFETIME_MS_DEFAULT
    max_app_specific_passwords: int = _MAX_APP_SPECIFIC_PASSWORDS_DEFAULT
    app_password_length: int = _APP_PASSWORD_LENGTH_DEFAULT
    app_password_lifetime_ms: int = _APP_PASSWORD_LIFETIME_MS_DEFAULT
    revoke_app_passwords_on_password_change: bool = (
        _REVOKE_APP_PASSWORDS_ON_PASSWORD_CHANGE_DEFAULT
    )
    trusted_device_ttl_ms: int = _TRUSTED_DEVICE_TTL_MS_DEFAULT
    trusted_device_cookie_name: str = _TRUSTED_DEVICE_COOKIE_NAME_DEFAULT

    def __post_init__(self) -> None:
        """
        Validate option ranges and cross-field constraints with fail-fast semantics.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Verification dispatch relies on the three code kinds having distinct lengths.
        Raises:
            ValueError: If one option is outside supported range or code lengths collide.
        Side Effects:
            Normalizes string enum literals into enum members.
        """
        object.__setattr__(
            self,
            "totp_hash_algorithm",
            TotpHashAlgorithm.from_literal(str(_enum_literal(self.totp_hash_algorithm))),
        )
        object.__setattr__(
            self,
            "secret_encoding",
            CredentialEncoding.from_literal(str(_enum_literal(self.secret_encoding))),
        )
        object.__setattr__(
            self,
            "scratch_code_encoding",
            CredentialEncoding.from_literal(str(_enum_literal(self.scratch_code_encoding))),
        )

        if self.totp_code_length not in _ALLOWED_TOTP_CODE_LENGTHS:
            raise ValueError("two_factor.totp.code_length must be one of 6, 7, 8")
        if self.totp_time_window_ms <= 0 or self.totp_time_window_ms % 1000 != 0:
            raise ValueError(
                "two_factor.totp.time_window_ms must be > 0 and a whole number of seconds"
            )
        if self.totp_time_window_offset < 0:
            raise ValueError("two_factor.totp.time_window_offset must be >= 0")
        if not self.totp_issuer.strip():
            raise ValueError("two_factor.totp.issuer must be non-empty")
        if self.secret_length_bytes <= 0:
            raise ValueError("two_factor.credentials.secret_length_bytes must be > 0")
        if self.scratch_code_length_bytes <= 0:
            raise ValueError("two_factor.credentials.scratch_code_length_bytes must be > 0")
        if self.num_scratch_codes < 0:
            raise ValueError("two_factor.credentials.num_scratch_codes must be >= 0")
        if self.email_code_length <= 0:
            raise ValueError("two_factor.email.code_length must be > 0")
        if self.email_code_lifetime_ms <= 0:
            raise ValueError("two_factor.email.code_lifetime_ms must be > 0")
        if self.max_app_specific_passwords < 0:
            raise ValueError("two_factor.app_passwords.max_count must be >= 0")
        if self.app_password_length < 12:
            raise ValueError("two_factor.app_passwords.length must be >= 12")
        if self.app_password_lifetime_ms < 0:
            raise ValueError("two_factor.app_passwords.lifetime_ms must be >= 0")
        if self.trusted_device_ttl_ms <= 0:
            raise ValueError("two_factor.trusted_devices.ttl_ms must be > 0")
        if not self.trusted_device_cookie_name.strip():
            raise ValueError("two_factor.trusted_devices.cookie_name must be non-empty")

        lengths = (self.totp_code_length, self.email_code_length, self.scratch_code_length)
        if len(set(lengths)) != len(lengths):
            raise ValueError(
                "two_factor code lengths must be pairwise distinct "
                f"(totp={lengths[0]}, email={lengths[1]}, scratch={lengths[2]})"
            )

    @property
    def scratch_code_length(self) -> int:
        """
        Return character length of one encoded scratch code.

        Args:
            None.
        Returns:
            int: Padded BASE32 or BASE64 length of `scratch_code_length_bytes` bytes.
        Assumptions:
            Encoders keep `=` padding, so the length is fixed per configuration.
        Raises:
            None.
        Side Effects:
            None.
        """
        if self.scratch_code_encoding is CredentialEncoding.BASE32:
            return math.ceil(self.scratch_code_length_bytes / 5) * 8
        return math.ceil(self.scratch_code_length_bytes / 3) * 4

    def credential_config(self, *, num_scratch_codes: int | None = None) -> CredentialConfig:
        """
        Build credential generator inputs.

        Args:
            num_scratch_codes: Optional class-of-service override for pool size.
        Returns:
            CredentialConfig: Generator configuration snapshot.
        Assumptions:
            Class-of-service value wins over configured default when present.
        Raises:
            None.
        Side Effects:
            None.
        """
        return CredentialConfig(
            secret_bytes=self.secret_length_bytes,
            scratch_code_bytes=self.scratch_code_length_bytes,
            num_scratch_codes=(
                self.num_scratch_codes if num_scratch_codes is None else num_scratch_codes
            ),
            secret_encoding=self.secret_encoding,
            scratch_code_encoding=self.scratch_code_encoding,
        )

    def authenticator_config(self) -> TotpAuthenticatorConfig:
        return TotpAuthenticatorConfig(
            hash_algorithm=self.totp_hash_algorithm,
            code_digits=self.totp_code_length,
            step_seconds=self.totp_time_window_ms // 1000,
            allowed_drift_steps=self.totp_time_window_offset,
        )


def _enum_literal(value: object) -> object:
    return getattr(value, "value", value)
