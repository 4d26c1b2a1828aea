from __future__ import annotations

import hashlib
import hmac
import json
import logging
import secrets
import string
from typing import Any

from accountguard.contexts.two_factor.application.ports import (
    TwoFactorAttributeStore,
    TwoFactorClock,
)
from accountguard.contexts.two_factor.domain.entities import AppPassword, AppPasswordMetadata
from accountguard.contexts.two_factor.domain.errors import (
    TwoFactorAuthError,
    TwoFactorCodeType,
    TwoFactorCredentialType,
)
from accountguard.shared_kernel.primitives import epoch_millis

from .credential_envelope import CredentialEnvelope

log = logging.getLogger(__name__)

_PASSWORD_ALPHABET = string.ascii_lowercase


class AppPasswordStore:
    """
    AppPasswordStore — generate, validate and revoke application-specific passwords.

    Each entry is stored as one encrypted JSON record holding the password SHA-256
    digest and timestamps. Expired entries are revoked whenever the set is loaded.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/domain/entities/app_password.py
      - src/accountguard/contexts/two_factor/application/use_cases/two_factor_auth_core.py
      - src/accountguard/contexts/two_factor/application/use_cases/password_change_listener.py
    """

    def __init__(
        self,
        *,
        envelope: CredentialEnvelope,
        store: TwoFactorAttributeStore,
        clock: TwoFactorClock,
        max_count: int,
        password_length: int,
        lifetime_ms: int,
    ) -> None:
        """
        Initialize store dependencies and policy values.

        Args:
            envelope: Account-bound cipher wrapper.
            store: Attribute store port.
            clock: UTC clock port.
            max_count: Upper bound on stored passwords.
            password_length: Characters per generated password.
            lifetime_ms: Password lifetime; `0` means passwords never expire.
        Returns:
            None.
        Assumptions:
            Policy values were validated by `TwoFactorAuthConfig`.
        Raises:
            ValueError: If dependency is missing or policy value is invalid.
        Side Effects:
            None.
        """
        if store is None:  # type: ignore[truthy-bool]
            raise ValueError("AppPasswordStore requires store")
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("AppPasswordStore requires clock")
        if max_count < 0:
            raise ValueError("AppPasswordStore max_count must be >= 0")
        if password_length <= 0:
            raise ValueError("AppPasswordStore password_length must be > 0")
        if lifetime_ms < 0:
            raise ValueError("AppPasswordStore lifetime_ms must be >= 0")
        self._envelope = envelope
        self._store = store
        self._clock = clock
        self._max_count = max_count
        self._password_length = password_length
        self._lifetime_ms = lifetime_ms

    def generate(self, *, name: str) -> str:
        """
        Create new named password and return its plaintext once.

        Args:
            name: Application name, unique per account.
        Returns:
            str: Plaintext password.
        Assumptions:
            Plaintext is never persisted or logged.
        Raises:
            TwoFactorAuthError: `SETUP_ERROR` when feature is disabled, `NAME_IN_USE` for
                duplicate name, `LIMIT_REACHED` when count is at policy maximum.
            ValueError: If name is blank.
        Side Effects:
            Adds one multi-valued attribute entry.
        """
        normalized_name = name.strip()
        if not normalized_name:
            raise ValueError("AppPasswordStore name must be non-empty")
        account_id = self._envelope.account_id
        if not self._store.is_app_passwords_feature_enabled(account_id=account_id):
            raise TwoFactorAuthError.setup_error(phase="app-specific passwords feature check")

        with self._store.account_lock(account_id=account_id):
            entries = self._load_entries()
            if any(entry.name == normalized_name for entry, _ in entries):
                raise TwoFactorAuthError.name_in_use(name=normalized_name)
            if len(entries) >= self._max_count:
                raise TwoFactorAuthError.limit_reached(limit=self._max_count)

            password = "".join(
                secrets.choice(_PASSWORD_ALPHABET) for _ in range(self._password_length)
            )
            now_ms = epoch_millis(value=self._clock.now())
            record = AppPassword(
                name=normalized_name,
                password_hash=_hash_password(password=password),
                created_ms=now_ms,
                expires_ms=now_ms + self._lifetime_ms if self._lifetime_ms > 0 else None,
            )
            self._store.add_app_password(account_id=account_id, value=self._seal(record=record))
        log.info(
            "two-factor app password created account_id=%s name=%s",
            account_id,
            normalized_name,
        )
        return password

    def authenticate(self, *, password: str) -> AppPasswordMetadata:
        """
        Validate password against every stored entry and record its use.

        Args:
            password: Presented application password.
        Returns:
            AppPasswordMetadata: Metadata of matching entry after `last_used_ms` update.
        Assumptions:
            Every entry is compared so timing does not reveal position.
        Raises:
            TwoFactorAuthError: `CODE_INVALID` with code type `APP` on mismatch.
        Side Effects:
            Replaces matching entry with refreshed `last_used_ms`.
        """
        candidate_hash = _hash_password(password=password).encode("ascii")
        account_id = self._envelope.account_id
        with self._store.account_lock(account_id=account_id):
            matched: tuple[AppPassword, str] | None = None
            for entry, raw_value in self._load_entries():
                if hmac.compare_digest(entry.password_hash.encode("ascii"), candidate_hash):
                    matched = (entry, raw_value)
            if matched is None:
                log.error("two-factor invalid app password account_id=%s", account_id)
                raise TwoFactorAuthError.code_invalid(
                    code_type=TwoFactorCodeType.APP,
                    reason="password does not match any registered app-specific password",
                )
            entry, raw_value = matched
            touched = entry.touched(now_ms=epoch_millis(value=self._clock.now()))
            self._store.remove_app_password(account_id=account_id, value=raw_value)
            self._store.add_app_password(account_id=account_id, value=self._seal(record=touched))
        log.debug("two-factor app password used account_id=%s name=%s", account_id, entry.name)
        return touched.metadata()

    def list_passwords(self) -> tuple[AppPasswordMetadata, ...]:
        with self._store.account_lock(account_id=self._envelope.account_id):
            entries = self._load_entries()
        return tuple(sorted((entry.metadata() for entry, _ in entries), key=_by_name))

    def count(self) -> int:
        return len(self.list_passwords())

    def revoke(self, *, name: str) -> bool:
        """
        Remove password by application name.

        Args:
            name: Application name.
        Returns:
            bool: `True` when an entry was removed.
        Assumptions:
            Missing name is not an error.
        Raises:
            TwoFactorAuthError: `CREDENTIAL_CORRUPTED` if a stored entry is undecodable.
        Side Effects:
            Removes one multi-valued attribute entry.
        """
        account_id = self._envelope.account_id
        normalized_name = name.strip()
        with self._store.account_lock(account_id=account_id):
            for entry, raw_value in self._load_entries():
                if entry.name == normalized_name:
                    self._store.remove_app_password(account_id=account_id, value=raw_value)
                    log.info(
                        "two-factor app password revoked account_id=%s name=%s",
                        account_id,
                        normalized_name,
                    )
                    return True
        log.debug(
            "two-factor no app password provisioned account_id=%s name=%s",
            account_id,
            normalized_name,
        )
        return False

    def revoke_all(self) -> int:
        """
        Remove every stored password, including undecodable leftovers.

        Args:
            None.
        Returns:
            int: Number of removed entries.
        Assumptions:
            Used by purge paths, so it must not depend on entries being decodable.
        Raises:
            None.
        Side Effects:
            Removes every app-password attribute entry.
        """
        account_id = self._envelope.account_id
        with self._store.account_lock(account_id=account_id):
            raw_values = self._store.list_app_passwords(account_id=account_id)
            for raw_value in raw_values:
                self._store.remove_app_password(account_id=account_id, value=raw_value)
        if raw_values:
            log.info(
                "two-factor app passwords revoked account_id=%s count=%s",
                account_id,
                len(raw_values),
            )
        return len(raw_values)

    def _load_entries(self) -> list[tuple[AppPassword, str]]:
        account_id = self._envelope.account_id
        now_ms = epoch_millis(value=self._clock.now())
        entries: list[tuple[AppPassword, str]] = []
        for raw_value in self._store.list_app_passwords(account_id=account_id):
            entry = self._open(raw_value=raw_value)
            if entry.is_expired(now_ms=now_ms):
                self._store.remove_app_password(account_id=account_id, value=raw_value)
                log.info(
                    "two-factor expired app password revoked account_id=%s name=%s",
                    account_id,
                    entry.name,
                )
                continue
            entries.append((entry, raw_value))
        return entries

    def _seal(self, *, record: AppPassword) -> str:
        payload = {
            "name": record.name,
            "hash": record.password_hash,
            "created_ms": record.created_ms,
            "last_used_ms": record.last_used_ms,
            "expires_ms": record.expires_ms,
        }
        return self._envelope.seal(plaintext=json.dumps(payload, sort_keys=True))

    def _open(self, *, raw_value: str) -> AppPassword:
        plaintext = self._envelope.open(
            ciphertext=raw_value,
            credential_type=TwoFactorCredentialType.APP_PASSWORD,
        )
        try:
            payload: dict[str, Any] = json.loads(plaintext)
            return AppPassword(
                name=str(payload["name"]),
                password_hash=str(payload["hash"]),
                created_ms=int(payload["created_ms"]),
                last_used_ms=_optional_int(payload.get("last_used_ms")),
                expires_ms=_optional_int(payload.get("expires_ms")),
            )
        except (KeyError, TypeError, ValueError) as error:
            raise TwoFactorAuthError.credential_corrupted(
                credential_type=TwoFactorCredentialType.APP_PASSWORD,
                reason="malformed app password record",
            ) from error


def _hash_password(*, password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def _optional_int(value: object) -> int | None:
    if value is None:
        return None
    return int(value)  # type: ignore[call-overload]


def _by_name(metadata: AppPasswordMetadata) -> str:
    return metadata.name
