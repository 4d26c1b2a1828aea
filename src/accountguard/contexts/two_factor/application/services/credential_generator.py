from __future__ import annotations

import os
from typing import Callable

from accountguard.contexts.two_factor.application.dto import CredentialConfig
from accountguard.contexts.two_factor.domain.entities import TwoFactorCredentials
from accountguard.contexts.two_factor.domain.errors import TwoFactorAuthError
from accountguard.contexts.two_factor.domain.value_objects import CredentialEncoding

from .credential_codec import encode_credential_bytes

_HIGH_BIT_MASK = 0x7F


class CredentialGenerator:
    """
    CredentialGenerator — CSPRNG-backed producer of TOTP secrets and scratch codes.

    Every random byte is masked with `0x7F` before encoding and the encoded text is
    uppercased, keeping the legacy wire-compatible character set.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/dto/two_factor_auth_config.py
      - src/accountguard/contexts/two_factor/application/use_cases/two_factor_auth_core.py
    """

    def __init__(
        self,
        *,
        config: CredentialConfig,
        random_bytes: Callable[[int], bytes] = os.urandom,
    ) -> None:
        """
        Validate generator configuration.

        Args:
            config: Secret/scratch sizes, pool size and encodings.
            random_bytes: CSPRNG source returning `n` bytes.
        Returns:
            None.
        Assumptions:
            `random_bytes` is only replaced in tests.
        Raises:
            TwoFactorAuthError: `CREDENTIAL_GENERATION` when configuration is invalid.
        Side Effects:
            None.
        """
        if config is None:  # type: ignore[truthy-bool]
            raise TwoFactorAuthError.credential_generation(reason="config is missing")
        if config.secret_bytes <= 0:
            raise TwoFactorAuthError.credential_generation(reason="secret_bytes must be > 0")
        if config.scratch_code_bytes <= 0:
            raise TwoFactorAuthError.credential_generation(
                reason="scratch_code_bytes must be > 0"
            )
        if config.num_scratch_codes < 0:
            raise TwoFactorAuthError.credential_generation(
                reason="num_scratch_codes must be >= 0"
            )
        self._config = config
        self._random_bytes = random_bytes

    def generate_credentials(self) -> TwoFactorCredentials:
        """
        Generate new shared secret plus a full scratch-code pool.

        Args:
            None.
        Returns:
            TwoFactorCredentials: Encoded uppercase secret and distinct scratch codes.
        Assumptions:
            None.
        Raises:
            TwoFactorAuthError: `CREDENTIAL_GENERATION` if the RNG returns short reads.
        Side Effects:
            Reads OS CSPRNG.
        """
        secret = self._draw_encoded(
            size=self._config.secret_bytes,
            encoding=self._config.secret_encoding,
        )
        return TwoFactorCredentials(secret=secret, scratch_codes=self.generate_scratch_codes())

    def generate_scratch_codes(self) -> tuple[str, ...]:
        """
        Generate `num_scratch_codes` distinct scratch codes.

        Args:
            None.
        Returns:
            tuple[str, ...]: Distinct codes in generation order.
        Assumptions:
            Code space is large enough for duplicates to be rare; duplicates are redrawn.
        Raises:
            TwoFactorAuthError: `CREDENTIAL_GENERATION` if the RNG returns short reads.
        Side Effects:
            Reads OS CSPRNG.
        """
        codes: dict[str, None] = {}
        while len(codes) < self._config.num_scratch_codes:
            code = self._draw_encoded(
                size=self._config.scratch_code_bytes,
                encoding=self._config.scratch_code_encoding,
            )
            codes[code] = None
        return tuple(codes)

    def _draw_encoded(self, *, size: int, encoding: CredentialEncoding) -> str:
        raw = self._random_bytes(size)
        if len(raw) != size:
            raise TwoFactorAuthError.credential_generation(reason="random source short read")
        masked = bytes(value & _HIGH_BIT_MASK for value in raw)
        return encode_credential_bytes(raw=masked, encoding=encoding).upper()
