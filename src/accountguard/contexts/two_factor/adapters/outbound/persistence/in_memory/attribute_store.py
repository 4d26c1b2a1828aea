from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import ContextManager, Iterable

from accountguard.contexts.two_factor.application.ports import TwoFactorAttributeStore
from accountguard.contexts.two_factor.domain.value_objects import TwoFactorMethod
from accountguard.shared_kernel.primitives import AccountId

_DEFAULT_METHODS_ALLOWED = (TwoFactorMethod.APP.value, TwoFactorMethod.EMAIL.value)


@dataclass(slots=True)
class _AccountAttributes:
    feature_available: bool = True
    feature_required: bool = False
    app_passwords_feature_enabled: bool = True
    trusted_devices_feature_enabled: bool = True
    methods_allowed: tuple[str, ...] = _DEFAULT_METHODS_ALLOWED
    cos_num_scratch_codes: int | None = None
    cos_last_reset: str | None = None
    two_factor_auth_enabled: bool = False
    methods_enabled: list[str] = field(default_factory=list)
    primary_method: str | None = None
    shared_secret: str | None = None
    scratch_codes: str | None = None
    email_code: str | None = None
    recovery_address: str | None = None
    recovery_address_status: str | None = None
    app_passwords: list[str] = field(default_factory=list)
    trusted_devices: list[str] = field(default_factory=list)


class InMemoryTwoFactorAttributeStore(TwoFactorAttributeStore):
    """
    InMemoryTwoFactorAttributeStore — process-local attribute store with per-account locks.

    Unknown accounts read as feature-available with both methods allowed and no state.
    Policy and class-of-service values are seeded through `configure_account`.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/ports/attribute_store.py
      - tests/unit/contexts/two_factor/application/use_cases/test_two_factor_auth_core.py
    """

    def __init__(self) -> None:
        """
        Initialize empty storage and lock registry.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Instance is shared by every core built in one process.
        Raises:
            None.
        Side Effects:
            None.
        """
        self._rows: dict[str, _AccountAttributes] = {}
        self._locks: dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    def configure_account(
        self,
        *,
        account_id: AccountId,
        feature_available: bool = True,
        feature_required: bool = False,
        app_passwords_feature_enabled: bool = True,
        trusted_devices_feature_enabled: bool = True,
        methods_allowed: Iterable[str] = _DEFAULT_METHODS_ALLOWED,
        cos_num_scratch_codes: int | None = None,
        cos_last_reset: str | None = None,
    ) -> None:
        """
        Seed policy flags and class-of-service values for one account.

        Args:
            account_id: Account identifier.
            feature_available: Whether 2FA feature is available.
            feature_required: Whether admin requires 2FA.
            app_passwords_feature_enabled: Whether app-specific passwords are allowed.
            trusted_devices_feature_enabled: Whether trusted devices are allowed.
            methods_allowed: Allowed method literals.
            cos_num_scratch_codes: Class-of-service scratch-code pool size.
            cos_last_reset: Class-of-service admin-reset generalized time.
        Returns:
            None.
        Assumptions:
            Stored two-factor state of the account is preserved.
        Raises:
            None.
        Side Effects:
            Mutates in-memory account row.
        """
        with self.account_lock(account_id=account_id):
            row = self._row(account_id)
            row.feature_available = feature_available
            row.feature_required = feature_required
            row.app_passwords_feature_enabled = app_passwords_feature_enabled
            row.trusted_devices_feature_enabled = trusted_devices_feature_enabled
            row.methods_allowed = tuple(methods_allowed)
            row.cos_num_scratch_codes = cos_num_scratch_codes
            row.cos_last_reset = cos_last_reset

    def account_lock(self, *, account_id: AccountId) -> ContextManager[None]:
        key = str(account_id)
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
        return lock  # type: ignore[return-value]

    def is_feature_available(self, *, account_id: AccountId) -> bool:
        return self._row(account_id).feature_available

    def is_feature_required(self, *, account_id: AccountId) -> bool:
        return self._row(account_id).feature_required

    def is_app_passwords_feature_enabled(self, *, account_id: AccountId) -> bool:
        return self._row(account_id).app_passwords_feature_enabled

    def is_trusted_devices_feature_enabled(self, *, account_id: AccountId) -> bool:
        return self._row(account_id).trusted_devices_feature_enabled

    def is_two_factor_auth_enabled(self, *, account_id: AccountId) -> bool:
        return self._row(account_id).two_factor_auth_enabled

    def set_two_factor_auth_enabled(self, *, account_id: AccountId, enabled: bool) -> None:
        self._row(account_id).two_factor_auth_enabled = enabled

    def get_methods_enabled(self, *, account_id: AccountId) -> tuple[str, ...]:
        return tuple(self._row(account_id).methods_enabled)

    def add_method_enabled(self, *, account_id: AccountId, method: str) -> None:
        methods = self._row(account_id).methods_enabled
        if method not in methods:
            methods.append(method)

    def remove_method_enabled(self, *, account_id: AccountId, method: str) -> None:
        methods = self._row(account_id).methods_enabled
        if method in methods:
            methods.remove(method)

    def get_methods_allowed(self, *, account_id: AccountId) -> tuple[str, ...]:
        return self._row(account_id).methods_allowed

    def get_primary_method(self, *, account_id: AccountId) -> str | None:
        return self._row(account_id).primary_method

    def set_primary_method(self, *, account_id: AccountId, method: str | None) -> None:
        self._row(account_id).primary_method = method

    def get_shared_secret(self, *, account_id: AccountId) -> str | None:
        return self._row(account_id).shared_secret

    def set_shared_secret(self, *, account_id: AccountId, value: str | None) -> None:
        self._row(account_id).shared_secret = value

    def get_scratch_codes(self, *, account_id: AccountId) -> str | None:
        return self._row(account_id).scratch_codes

    def set_scratch_codes(self, *, account_id: AccountId, value: str | None) -> None:
        self._row(account_id).scratch_codes = value

    def get_email_code(self, *, account_id: AccountId) -> str | None:
        return self._row(account_id).email_code

    def set_email_code(self, *, account_id: AccountId, value: str | None) -> None:
        self._row(account_id).email_code = value

    def get_recovery_address(self, *, account_id: AccountId) -> str | None:
        return self._row(account_id).recovery_address

    def get_recovery_address_status(self, *, account_id: AccountId) -> str | None:
        return self._row(account_id).recovery_address_status

    def set_recovery_address(
        self,
        *,
        account_id: AccountId,
        address: str | None,
        status: str | None,
    ) -> None:
        row = self._row(account_id)
        row.recovery_address = address
        row.recovery_address_status = status

    def get_cos_num_scratch_codes(self, *, account_id: AccountId) -> int | None:
        return self._row(account_id).cos_num_scratch_codes

    def get_cos_last_reset(self, *, account_id: AccountId) -> str | None:
        return self._row(account_id).cos_last_reset

    def list_app_passwords(self, *, account_id: AccountId) -> tuple[str, ...]:
        return tuple(self._row(account_id).app_passwords)

    def add_app_password(self, *, account_id: AccountId, value: str) -> None:
        self._row(account_id).app_passwords.append(value)

    def remove_app_password(self, *, account_id: AccountId, value: str) -> None:
        values = self._row(account_id).app_passwords
        if value in values:
            values.remove(value)

    def list_trusted_devices(self, *, account_id: AccountId) -> tuple[str, ...]:
        return tuple(self._row(account_id).trusted_devices)

    def add_trusted_device(self, *, account_id: AccountId, value: str) -> None:
        self._row(account_id).trusted_devices.append(value)

    def remove_trusted_device(self, *, account_id: AccountId, value: str) -> None:
        values = self._row(account_id).trusted_devices
        if value in values:
            values.remove(value)

    def _row(self, account_id: AccountId) -> _AccountAttributes:
        key = str(account_id)
        with self._registry_lock:
            row = self._rows.get(key)
            if row is None:
                row = _AccountAttributes()
                self._rows[key] = row
            return row
