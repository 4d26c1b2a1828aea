from __future__ import annotations

import logging
from datetime import datetime

from accountguard.contexts.two_factor.application.ports import TwoFactorAttributeStore
from accountguard.contexts.two_factor.domain.errors import (
    TwoFactorAuthError,
    TwoFactorCredentialType,
)
from accountguard.shared_kernel.primitives import parse_generalized_time

from .credential_envelope import CredentialEnvelope
from .credential_layouts import parse_shared_secret

log = logging.getLogger(__name__)


class AdminResetReconciler:
    """
    AdminResetReconciler — purge two-factor state issued before the class-of-service reset.

    Runs before any other read of the account. A stored secret whose generation
    timestamp is missing (legacy layout) or older than `cos.lastReset` invalidates
    every enrolled credential of the account. Idempotent.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/services/credential_layouts.py
      - src/accountguard/contexts/two_factor/application/use_cases/two_factor_auth_core.py
    """

    def __init__(self, *, envelope: CredentialEnvelope, store: TwoFactorAttributeStore) -> None:
        if store is None:  # type: ignore[truthy-bool]
            raise ValueError("AdminResetReconciler requires store")
        self._envelope = envelope
        self._store = store

    def reconcile(self) -> bool:
        """
        Compare secret generation time with admin reset and purge when stale.

        Args:
            None.
        Returns:
            bool: `True` when a purge happened.
        Assumptions:
            Accounts without a stored secret have nothing to reconcile.
        Raises:
            TwoFactorAuthError: `CREDENTIAL_CORRUPTED` if secret cannot be decrypted,
                `CREDENTIAL_INVALID_FORMAT` for malformed secret or reset timestamp.
        Side Effects:
            Clears enabled flag, method set, primary method, secret, scratch codes,
            app passwords and trusted devices.
        """
        account_id = self._envelope.account_id
        with self._store.account_lock(account_id=account_id):
            encrypted = self._store.get_shared_secret(account_id=account_id)
            if not encrypted:
                return False
            shared_secret = parse_shared_secret(
                plaintext=self._envelope.open(
                    ciphertext=encrypted,
                    credential_type=TwoFactorCredentialType.SHARED_SECRET,
                )
            )
            last_reset = self._load_last_reset()
            if last_reset is None:
                return False
            generated_at = shared_secret.generated_at
            if generated_at is not None and last_reset <= generated_at:
                return False
            self._purge()
        log.info(
            "two-factor admin reset purge account_id=%s legacy_secret=%s",
            account_id,
            generated_at is None,
        )
        return True

    def _load_last_reset(self) -> datetime | None:
        raw_value = self._store.get_cos_last_reset(account_id=self._envelope.account_id)
        if raw_value is None or not raw_value.strip():
            return None
        try:
            return parse_generalized_time(raw_value=raw_value)
        except ValueError as error:
            raise TwoFactorAuthError.credential_invalid_format(
                credential_type=TwoFactorCredentialType.LAST_RESET,
                reason="invalid generalized time",
            ) from error

    def _purge(self) -> None:
        account_id = self._envelope.account_id
        self._store.set_two_factor_auth_enabled(account_id=account_id, enabled=False)
        for literal in self._store.get_methods_enabled(account_id=account_id):
            self._store.remove_method_enabled(account_id=account_id, method=literal)
        self._store.set_primary_method(account_id=account_id, method=None)
        self._store.set_shared_secret(account_id=account_id, value=None)
        self._store.set_scratch_codes(account_id=account_id, value=None)
        for raw_value in self._store.list_app_passwords(account_id=account_id):
            self._store.remove_app_password(account_id=account_id, value=raw_value)
        for raw_value in self._store.list_trusted_devices(account_id=account_id):
            self._store.remove_trusted_device(account_id=account_id, value=raw_value)
