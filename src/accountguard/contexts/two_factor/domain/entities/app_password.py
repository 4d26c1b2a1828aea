from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class AppPasswordMetadata:
    """
    AppPasswordMetadata — caller-visible view of one application-specific password.
    """

    name: str
    created_ms: int
    last_used_ms: int | None
    expires_ms: int | None


@dataclass(frozen=True, slots=True)
class AppPassword:
    """
    AppPassword — stored application-specific password record.

    Only a SHA-256 digest of the password is kept; the plaintext is returned once on
    generation and never persisted.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/services/app_password_store.py
    """

    name: str
    password_hash: str
    created_ms: int
    last_used_ms: int | None = None
    expires_ms: int | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("AppPassword requires non-empty name")
        if not self.password_hash:
            raise ValueError("AppPassword requires non-empty password_hash")

    def is_expired(self, *, now_ms: int) -> bool:
        return self.expires_ms is not None and now_ms > self.expires_ms

    def touched(self, *, now_ms: int) -> AppPassword:
        """Return copy with `last_used_ms` moved to `now_ms`."""
        return replace(self, last_used_ms=now_ms)

    def metadata(self) -> AppPasswordMetadata:
        return AppPasswordMetadata(
            name=self.name,
            created_ms=self.created_ms,
            last_used_ms=self.last_used_ms,
            expires_ms=self.expires_ms,
        )
