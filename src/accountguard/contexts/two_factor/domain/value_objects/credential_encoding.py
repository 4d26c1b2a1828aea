from __future__ import annotations

from enum import Enum


class CredentialEncoding(str, Enum):
    """
    CredentialEncoding — text encoding applied to random credential bytes.
    """

    BASE32 = "BASE32"
    BASE64 = "BASE64"

    @classmethod
    def from_literal(cls, raw_value: str) -> CredentialEncoding:
        normalized = raw_value.strip().upper()
        try:
            return cls(normalized)
        except ValueError as error:
            raise ValueError(f"unsupported credential encoding: {raw_value!r}") from error
