from __future__ import annotations

from typing import ContextManager, Protocol

from accountguard.shared_kernel.primitives import AccountId


class TwoFactorAttributeStore(Protocol):
    """
    TwoFactorAttributeStore — port over the directory attributes owned by the two-factor core.

    Every credential value crossing this port is already encrypted text. Multi-valued
    attributes (app passwords, trusted devices) are manipulated by exact value. The
    store must serialize read-modify-write sequences per account through
    `account_lock`.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/adapters/outbound/persistence/in_memory/
        attribute_store.py
      - src/accountguard/contexts/two_factor/application/use_cases/two_factor_auth_core.py
    """

    def account_lock(self, *, account_id: AccountId) -> ContextManager[None]:
        """
        Return re-entrant per-account lock guarding read-modify-write sequences.

        Args:
            account_id: Account whose attributes are about to be mutated.
        Returns:
            ContextManager[None]: Lock context; re-entrant within one thread.
        Assumptions:
            Locks for different accounts never contend.
        Raises:
            None.
        Side Effects:
            Blocks until lock is acquired.
        """
        ...

    def is_feature_available(self, *, account_id: AccountId) -> bool:
        ...

    def is_feature_required(self, *, account_id: AccountId) -> bool:
        ...

    def is_app_passwords_feature_enabled(self, *, account_id: AccountId) -> bool:
        ...

    def is_trusted_devices_feature_enabled(self, *, account_id: AccountId) -> bool:
        ...

    def is_two_factor_auth_enabled(self, *, account_id: AccountId) -> bool:
        ...

    def set_two_factor_auth_enabled(self, *, account_id: AccountId, enabled: bool) -> None:
        ...

    def get_methods_enabled(self, *, account_id: AccountId) -> tuple[str, ...]:
        """
        Return stored enabled-method literals in insertion order.

        Args:
            account_id: Account identifier.
        Returns:
            tuple[str, ...]: Raw literals such as `app` and `email`.
        Assumptions:
            Order is stable; first element becomes primary method after a disable.
        Raises:
            None.
        Side Effects:
            Reads one multi-valued attribute.
        """
        ...

    def add_method_enabled(self, *, account_id: AccountId, method: str) -> None:
        ...

    def remove_method_enabled(self, *, account_id: AccountId, method: str) -> None:
        ...

    def get_methods_allowed(self, *, account_id: AccountId) -> tuple[str, ...]:
        ...

    def get_primary_method(self, *, account_id: AccountId) -> str | None:
        ...

    def set_primary_method(self, *, account_id: AccountId, method: str | None) -> None:
        ...

    def get_shared_secret(self, *, account_id: AccountId) -> str | None:
        ...

    def set_shared_secret(self, *, account_id: AccountId, value: str | None) -> None:
        ...

    def get_scratch_codes(self, *, account_id: AccountId) -> str | None:
        ...

    def set_scratch_codes(self, *, account_id: AccountId, value: str | None) -> None:
        ...

    def get_email_code(self, *, account_id: AccountId) -> str | None:
        ...

    def set_email_code(self, *, account_id: AccountId, value: str | None) -> None:
        ...

    def get_recovery_address(self, *, account_id: AccountId) -> str | None:
        ...

    def get_recovery_address_status(self, *, account_id: AccountId) -> str | None:
        ...

    def set_recovery_address(
        self,
        *,
        account_id: AccountId,
        address: str | None,
        status: str | None,
    ) -> None:
        """
        Replace password-recovery address and its verification status together.

        Args:
            account_id: Account identifier.
            address: Recovery e-mail address or `None` to unset.
            status: `pending`, `verified` or `None` to unset.
        Returns:
            None.
        Assumptions:
            Both attributes are written in one modification.
        Raises:
            None.
        Side Effects:
            Writes two single-valued attributes.
        """
        ...

    def get_cos_num_scratch_codes(self, *, account_id: AccountId) -> int | None:
        ...

    def get_cos_last_reset(self, *, account_id: AccountId) -> str | None:
        """
        Return class-of-service admin-reset timestamp in generalized-time layout.

        Args:
            account_id: Account identifier.
        Returns:
            str | None: Raw generalized-time literal or `None` when never reset.
        Assumptions:
            Parsing is the caller responsibility.
        Raises:
            None.
        Side Effects:
            Reads class-of-service attribute.
        """
        ...

    def list_app_passwords(self, *, account_id: AccountId) -> tuple[str, ...]:
        ...

    def add_app_password(self, *, account_id: AccountId, value: str) -> None:
        ...

    def remove_app_password(self, *, account_id: AccountId, value: str) -> None:
        ...

    def list_trusted_devices(self, *, account_id: AccountId) -> tuple[str, ...]:
        ...

    def add_trusted_device(self, *, account_id: AccountId, value: str) -> None:
        ...

    def remove_trusted_device(self, *, account_id: AccountId, value: str) -> None:
        ...
