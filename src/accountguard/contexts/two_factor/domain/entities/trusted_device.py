from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping

_TOKEN_ID_PATTERN = re.compile(r"^[0-9a-f]{16}$")
_TOKEN_SEPARATOR = "."


@dataclass(frozen=True, slots=True)
class TrustedDeviceToken:
    """
    TrustedDeviceToken — bearer token handed to a trusted client.

    The token id is a fixed-width lowercase hex literal so that it can be used as an
    unambiguous prefix of the persisted device record. A token with `delete=True` is a
    sentinel telling the inbound adapter to clear the client cookie.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/services/trusted_device_store.py
      - src/accountguard/contexts/two_factor/adapters/inbound/http/trusted_device_cookie.py
    """

    token_id: str
    secret: str
    expires_ms: int | None = None
    delete: bool = False

    def __post_init__(self) -> None:
        """
        Validate token id layout and secret presence.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Secret is URL-safe text without the separator character.
        Raises:
            ValueError: If token id is not 16 lowercase hex chars or secret is malformed.
        Side Effects:
            None.
        """
        if not _TOKEN_ID_PATTERN.match(self.token_id):
            raise ValueError("TrustedDeviceToken token_id must be 16 lowercase hex chars")
        if not self.secret or _TOKEN_SEPARATOR in self.secret:
            raise ValueError("TrustedDeviceToken secret must be non-empty and separator-free")

    @classmethod
    def parse(cls, raw_value: str) -> TrustedDeviceToken:
        """
        Parse client-presented token literal `<token_id>.<secret>`.

        Args:
            raw_value: Raw token text from request element or cookie.
        Returns:
            TrustedDeviceToken: Parsed token without expiry information.
        Assumptions:
            None.
        Raises:
            ValueError: If literal does not follow token layout.
        Side Effects:
            None.
        """
        token_id, separator, secret = raw_value.strip().partition(_TOKEN_SEPARATOR)
        if not separator:
            raise ValueError("trusted device token must contain separator")
        return cls(token_id=token_id, secret=secret)

    def encode(self) -> str:
        return f"{self.token_id}{_TOKEN_SEPARATOR}{self.secret}"

    def marked_for_delete(self) -> TrustedDeviceToken:
        return replace(self, delete=True)

    def with_expiry(self, *, expires_ms: int) -> TrustedDeviceToken:
        return replace(self, expires_ms=expires_ms)

    def __repr__(self) -> str:
        return (
            f"TrustedDeviceToken(token_id={self.token_id!r}, secret='***', "
            f"expires_ms={self.expires_ms!r}, delete={self.delete!r})"
        )


@dataclass(frozen=True, slots=True)
class TrustedDevice:
    """
    TrustedDevice — registered device record keyed by token id.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/services/trusted_device_store.py
    """

    token_id: str
    secret_hash: str
    issued_ms: int
    expires_ms: int
    attributes: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not _TOKEN_ID_PATTERN.match(self.token_id):
            raise ValueError("TrustedDevice token_id must be 16 lowercase hex chars")
        if self.expires_ms < self.issued_ms:
            raise ValueError("TrustedDevice expires_ms must be >= issued_ms")
        normalized = {str(key): str(self.attributes[key]) for key in sorted(self.attributes)}
        object.__setattr__(self, "attributes", MappingProxyType(normalized))

    def is_expired(self, *, now_ms: int) -> bool:
        return now_ms > self.expires_ms

    def matches_attributes(self, *, attributes: Mapping[str, object]) -> bool:
        """
        Check that every registered fingerprint attribute is presented with same value.

        Args:
            attributes: Fingerprint attributes presented by the client.
        Returns:
            bool: `True` when all registered attributes match.
        Assumptions:
            Extra presented attributes are ignored.
        Raises:
            None.
        Side Effects:
            None.
        """
        for key, expected in self.attributes.items():
            presented = attributes.get(key)
            if presented is None or str(presented) != expected:
                return False
        return True
