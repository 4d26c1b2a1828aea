from __future__ import annotations

import hashlib
from enum import Enum
from typing import Any, Callable


class TotpHashAlgorithm(str, Enum):
    """
    TotpHashAlgorithm — HMAC hash function used for TOTP code derivation (RFC 6238).

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/adapters/outbound/security/pyotp_totp_authenticator.py
      - src/accountguard/contexts/two_factor/application/dto/two_factor_auth_config.py
    """

    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA512 = "SHA512"

    @classmethod
    def from_literal(cls, raw_value: str) -> TotpHashAlgorithm:
        normalized = raw_value.strip().upper().replace("-", "")
        try:
            return cls(normalized)
        except ValueError as error:
            raise ValueError(f"unsupported TOTP hash algorithm: {raw_value!r}") from error

    @property
    def digest(self) -> Callable[..., Any]:
        """
        Return hashlib constructor matching this algorithm.

        Args:
            None.
        Returns:
            Callable[..., Any]: `hashlib.sha1`, `hashlib.sha256` or `hashlib.sha512`.
        Assumptions:
            None.
        Raises:
            None.
        Side Effects:
            None.
        """
        return _DIGESTS[self]


_DIGESTS: dict[TotpHashAlgorithm, Callable[..., Any]] = {
    TotpHashAlgorithm.SHA1: hashlib.sha1,
    TotpHashAlgorithm.SHA256: hashlib.sha256,
    TotpHashAlgorithm.SHA512: hashlib.sha512,
}
