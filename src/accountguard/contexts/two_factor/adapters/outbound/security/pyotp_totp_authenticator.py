from __future__ import annotations

import base64
import hmac
from datetime import datetime

import pyotp

from accountguard.contexts.two_factor.application.dto import TotpAuthenticatorConfig
from accountguard.contexts.two_factor.application.ports import TotpAuthenticator
from accountguard.shared_kernel.primitives import ensure_utc_datetime


class PyOtpTotpAuthenticator(TotpAuthenticator):
    """
    PyOtpTotpAuthenticator — RFC 6238 verification and provisioning URIs backed by pyotp.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/ports/totp_authenticator.py
      - src/accountguard/contexts/two_factor/application/dto/two_factor_auth_config.py
      - src/accountguard/contexts/two_factor/application/use_cases/two_factor_auth_core.py
    """

    def __init__(self, *, config: TotpAuthenticatorConfig) -> None:
        """
        Initialize authenticator from validated TOTP settings.

        Args:
            config: Hash algorithm, digits, step and drift window.
        Returns:
            None.
        Assumptions:
            Config is immutable for the lifetime of the authenticator.
        Raises:
            ValueError: If config is missing.
        Side Effects:
            None.
        """
        if config is None:  # type: ignore[truthy-bool]
            raise ValueError("PyOtpTotpAuthenticator requires config")
        self._config = config

    def verify_code(self, *, key: bytes, code: str, at_time: datetime) -> bool:
        """
        Verify TOTP code for provided UTC timestamp within `[-K, +K]` steps.

        Args:
            key: Raw secret key bytes.
            code: User submitted code string.
            at_time: Timezone-aware UTC datetime.
        Returns:
            bool: `True` when any step in the window matches.
        Assumptions:
            Counters before the epoch are skipped; codes are compared in constant time.
        Raises:
            ValueError: If key is empty or timestamp is not UTC.
        Side Effects:
            None.
        """
        if not key:
            raise ValueError("PyOtpTotpAuthenticator verify requires non-empty key")
        normalized_code = code.strip()
        if not normalized_code:
            return False
        now = ensure_utc_datetime(value=at_time, field_name="at_time")
        totp = self._totp(secret=base64.b32encode(key).decode("ascii"))
        provided = normalized_code.encode("utf-8")
        current_counter = totp.timecode(now)
        drift = self._config.allowed_drift_steps
        for counter in range(current_counter - drift, current_counter + drift + 1):
            # Steps before the epoch do not exist.
            if counter < 0:
                continue
            expected = totp.generate_otp(counter).encode("ascii")
            if hmac.compare_digest(provided, expected):
                return True
        return False

    def build_otpauth_uri(self, *, secret: str, account_label: str, issuer: str) -> str:
        """
        Build standard otpauth URI for authenticator-app provisioning.

        Args:
            secret: BASE32 shared secret text as shown to the user.
            account_label: Account label displayed by the app.
            issuer: Issuer label displayed by the app.
        Returns:
            str: URI string starting with `otpauth://totp`.
        Assumptions:
            Only BASE32 secrets can be provisioned through URIs.
        Raises:
            ValueError: If secret, issuer or label is empty.
        Side Effects:
            None.
        """
        normalized_secret = secret.strip().upper().rstrip("=")
        normalized_issuer = issuer.strip()
        normalized_label = account_label.strip()
        if not normalized_secret:
            raise ValueError("PyOtpTotpAuthenticator requires non-empty secret")
        if not normalized_issuer:
            raise ValueError("PyOtpTotpAuthenticator requires non-empty issuer")
        if not normalized_label:
            raise ValueError("PyOtpTotpAuthenticator requires non-empty account label")

        uri = self._totp(secret=normalized_secret).provisioning_uri(
            name=normalized_label,
            issuer_name=normalized_issuer,
        )
        if not uri.startswith("otpauth://totp"):
            raise ValueError("PyOtpTotpAuthenticator produced invalid otpauth URI")
        return uri

    def _totp(self, *, secret: str) -> pyotp.TOTP:
        return pyotp.TOTP(
            secret,
            digits=self._config.code_digits,
            digest=self._config.hash_algorithm.digest,
            interval=self._config.step_seconds,
        )
