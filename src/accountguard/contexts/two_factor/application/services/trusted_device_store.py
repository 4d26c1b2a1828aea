from __future__ import annotations

import hashlib
import hmac
import json
import logging
import secrets
from typing import Any, Mapping

from accountguard.contexts.two_factor.application.ports import (
    TwoFactorAttributeStore,
    TwoFactorClock,
)
from accountguard.contexts.two_factor.domain.entities import TrustedDevice, TrustedDeviceToken
from accountguard.contexts.two_factor.domain.errors import (
    TwoFactorAuthError,
    TwoFactorCredentialType,
)
from accountguard.shared_kernel.primitives import epoch_millis

from .credential_envelope import CredentialEnvelope

log = logging.getLogger(__name__)

_RECORD_SEPARATOR = "|"
_TOKEN_ID_BYTES = 8
_TOKEN_SECRET_BYTES = 32


class TrustedDeviceStore:
    """
    TrustedDeviceStore — register, verify and expire trusted-device tokens for one account.

    Persisted record layout is `<token_id>|<encrypted JSON>`, so lookup by token is a
    prefix match on `<token_id>|`. Expired devices are revoked whenever the list is read.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/domain/entities/trusted_device.py
      - src/accountguard/contexts/two_factor/adapters/inbound/http/trusted_device_cookie.py
      - src/accountguard/contexts/two_factor/application/use_cases/two_factor_auth_core.py
    """

    def __init__(
        self,
        *,
        envelope: CredentialEnvelope,
        store: TwoFactorAttributeStore,
        clock: TwoFactorClock,
        ttl_ms: int,
    ) -> None:
        if store is None:  # type: ignore[truthy-bool]
            raise ValueError("TrustedDeviceStore requires store")
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("TrustedDeviceStore requires clock")
        if ttl_ms <= 0:
            raise ValueError("TrustedDeviceStore ttl_ms must be > 0")
        self._envelope = envelope
        self._store = store
        self._clock = clock
        self._ttl_ms = ttl_ms

    def register(self, *, attributes: Mapping[str, object]) -> TrustedDeviceToken | None:
        """
        Register current client as trusted device.

        Args:
            attributes: Device fingerprint attributes that must match on verify.
        Returns:
            TrustedDeviceToken | None: Token with expiry, or `None` when the trusted-device
                feature is disabled for the account.
        Assumptions:
            Caller delivers token to the client (cookie or response element).
        Raises:
            ValueError: If encryption fails.
        Side Effects:
            Adds one multi-valued attribute entry.
        """
        account_id = self._envelope.account_id
        if not self._store.is_trusted_devices_feature_enabled(account_id=account_id):
            log.warning(
                "two-factor trusted device registration skipped "
                "reason=feature_disabled account_id=%s",
                account_id,
            )
            return None

        now_ms = epoch_millis(value=self._clock.now())
        token = TrustedDeviceToken(
            token_id=secrets.token_hex(_TOKEN_ID_BYTES),
            secret=secrets.token_urlsafe(_TOKEN_SECRET_BYTES),
            expires_ms=now_ms + self._ttl_ms,
        )
        device = TrustedDevice(
            token_id=token.token_id,
            secret_hash=_hash_secret(secret=token.secret),
            issued_ms=now_ms,
            expires_ms=now_ms + self._ttl_ms,
            attributes={str(key): str(value) for key, value in attributes.items()},
        )
        with self._store.account_lock(account_id=account_id):
            self._store.add_trusted_device(account_id=account_id, value=self._seal(device=device))
        log.info(
            "two-factor trusted device registered account_id=%s token_id=%s",
            account_id,
            token.token_id,
        )
        return token

    def list_devices(self) -> tuple[TrustedDevice, ...]:
        """
        Return live devices, revoking expired and undecodable records on the way.

        Args:
            None.
        Returns:
            tuple[TrustedDevice, ...]: Non-expired devices ordered by issue time.
        Assumptions:
            Undecodable records can never verify and are dropped.
        Raises:
            None.
        Side Effects:
            Removes expired or undecodable attribute entries.
        """
        account_id = self._envelope.account_id
        now_ms = epoch_millis(value=self._clock.now())
        devices: list[TrustedDevice] = []
        with self._store.account_lock(account_id=account_id):
            for raw_value in self._store.list_trusted_devices(account_id=account_id):
                try:
                    device = self._open(raw_value=raw_value)
                except TwoFactorAuthError as error:
                    log.error(
                        "two-factor trusted device record dropped account_id=%s reason=%s",
                        account_id,
                        error.details.get("reason"),
                    )
                    self._store.remove_trusted_device(account_id=account_id, value=raw_value)
                    continue
                if device.is_expired(now_ms=now_ms):
                    self._store.remove_trusted_device(account_id=account_id, value=raw_value)
                    log.info(
                        "two-factor expired trusted device revoked account_id=%s token_id=%s",
                        account_id,
                        device.token_id,
                    )
                    continue
                devices.append(device)
        return tuple(sorted(devices, key=_by_issue_time))

    def verify(self, *, token: TrustedDeviceToken, attributes: Mapping[str, object]) -> None:
        """
        Verify token secret, expiry and fingerprint attributes.

        Args:
            token: Client-presented token.
            attributes: Fingerprint attributes presented with the request.
        Returns:
            None.
        Assumptions:
            Expired devices are revoked as part of verification.
        Raises:
            TwoFactorAuthError: `AUTH_FAILED` when device is missing, expired, secret does
                not match or attributes differ.
        Side Effects:
            May remove an expired attribute entry.
        """
        account_id = self._envelope.account_id
        with self._store.account_lock(account_id=account_id):
            found = self._find(token_id=token.token_id)
            if found is not None and found[0].is_expired(
                now_ms=epoch_millis(value=self._clock.now())
            ):
                self._store.remove_trusted_device(account_id=account_id, value=found[1])
                found = None
        if found is None:
            raise TwoFactorAuthError.auth_failed(reason="trusted device cannot be verified")
        device = found[0]
        secret_matches = hmac.compare_digest(
            device.secret_hash.encode("ascii"),
            _hash_secret(secret=token.secret).encode("ascii"),
        )
        if not secret_matches or not device.matches_attributes(attributes=attributes):
            raise TwoFactorAuthError.auth_failed(reason="trusted device cannot be verified")
        log.debug(
            "two-factor trusted device verified account_id=%s token_id=%s",
            account_id,
            token.token_id,
        )

    def resolve_token(self, *, encoded_token: str | None) -> TrustedDeviceToken | None:
        """
        Resolve client-presented token literal against registered devices.

        Args:
            encoded_token: Raw `<token_id>.<secret>` literal or `None`.
        Returns:
            TrustedDeviceToken | None: `None` for absent or malformed tokens, a
                `delete=True` sentinel when no live device matches, otherwise the token
                carrying the device expiry.
        Assumptions:
            Sentinel tokens instruct inbound adapters to clear the client cookie.
        Raises:
            TwoFactorAuthError: `CREDENTIAL_CORRUPTED` if the matching record cannot be
                decrypted.
        Side Effects:
            Revokes matching device when it has expired.
        """
        if not encoded_token:
            return None
        try:
            token = TrustedDeviceToken.parse(encoded_token)
        except ValueError:
            log.warning(
                "two-factor invalid trusted device token format account_id=%s",
                self._envelope.account_id,
            )
            return None

        account_id = self._envelope.account_id
        with self._store.account_lock(account_id=account_id):
            found = self._find(token_id=token.token_id)
            if found is None:
                log.debug(
                    "two-factor no trusted device for token account_id=%s token_id=%s",
                    account_id,
                    token.token_id,
                )
                return token.marked_for_delete()
            device, raw_value = found
            if device.is_expired(now_ms=epoch_millis(value=self._clock.now())):
                self._store.remove_trusted_device(account_id=account_id, value=raw_value)
                return token.marked_for_delete()
        return token.with_expiry(expires_ms=device.expires_ms)

    def revoke(self, *, token: TrustedDeviceToken) -> bool:
        account_id = self._envelope.account_id
        with self._store.account_lock(account_id=account_id):
            raw_value = self._find_raw(token_id=token.token_id)
            if raw_value is None:
                log.warning(
                    "two-factor revoke skipped reason=no_trusted_device account_id=%s token_id=%s",
                    account_id,
                    token.token_id,
                )
                return False
            self._store.remove_trusted_device(account_id=account_id, value=raw_value)
        log.info(
            "two-factor trusted device revoked account_id=%s token_id=%s",
            account_id,
            token.token_id,
        )
        return True

    def revoke_all(self) -> int:
        """
        Remove every device record regardless of decodability.

        Args:
            None.
        Returns:
            int: Number of removed records.
        Assumptions:
            None.
        Raises:
            None.
        Side Effects:
            Removes every trusted-device attribute entry.
        """
        account_id = self._envelope.account_id
        log.debug("two-factor revoking all trusted devices account_id=%s", account_id)
        with self._store.account_lock(account_id=account_id):
            raw_values = self._store.list_trusted_devices(account_id=account_id)
            for raw_value in raw_values:
                self._store.remove_trusted_device(account_id=account_id, value=raw_value)
        return len(raw_values)

    def revoke_others(self, *, token: TrustedDeviceToken | None) -> int:
        if token is None:
            return self.revoke_all()
        account_id = self._envelope.account_id
        log.debug("two-factor revoking other trusted devices account_id=%s", account_id)
        removed = 0
        with self._store.account_lock(account_id=account_id):
            for raw_value in self._store.list_trusted_devices(account_id=account_id):
                if _record_token_id(raw_value=raw_value) != token.token_id:
                    self._store.remove_trusted_device(account_id=account_id, value=raw_value)
                    removed += 1
        return removed

    def _find_raw(self, *, token_id: str) -> str | None:
        prefix = f"{token_id}{_RECORD_SEPARATOR}"
        for raw_value in self._store.list_trusted_devices(account_id=self._envelope.account_id):
            if raw_value.startswith(prefix):
                return raw_value
        return None

    def _find(self, *, token_id: str) -> tuple[TrustedDevice, str] | None:
        raw_value = self._find_raw(token_id=token_id)
        if raw_value is None:
            return None
        return self._open(raw_value=raw_value), raw_value

    def _seal(self, *, device: TrustedDevice) -> str:
        payload = {
            "secret_hash": device.secret_hash,
            "attributes": dict(device.attributes),
            "issued_ms": device.issued_ms,
            "expires_ms": device.expires_ms,
        }
        ciphertext = self._envelope.seal(plaintext=json.dumps(payload, sort_keys=True))
        return f"{device.token_id}{_RECORD_SEPARATOR}{ciphertext}"

    def _open(self, *, raw_value: str) -> TrustedDevice:
        token_id, separator, ciphertext = raw_value.partition(_RECORD_SEPARATOR)
        if not separator or not ciphertext:
            raise TwoFactorAuthError.credential_invalid_format(
                credential_type=TwoFactorCredentialType.TRUSTED_DEVICE,
                reason="missing record separator",
            )
        plaintext = self._envelope.open(
            ciphertext=ciphertext,
            credential_type=TwoFactorCredentialType.TRUSTED_DEVICE,
        )
        try:
            payload: dict[str, Any] = json.loads(plaintext)
            return TrustedDevice(
                token_id=token_id,
                secret_hash=str(payload["secret_hash"]),
                issued_ms=int(payload["issued_ms"]),
                expires_ms=int(payload["expires_ms"]),
                attributes=dict(payload.get("attributes") or {}),
            )
        except (KeyError, TypeError, ValueError) as error:
            raise TwoFactorAuthError.credential_corrupted(
                credential_type=TwoFactorCredentialType.TRUSTED_DEVICE,
                reason="malformed trusted device record",
            ) from error


def _hash_secret(*, secret: str) -> str:
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def _record_token_id(*, raw_value: str) -> str:
    return raw_value.partition(_RECORD_SEPARATOR)[0]


def _by_issue_time(device: TrustedDevice) -> int:
    return device.issued_ms
