from __future__ import annotations

import os
from typing import Callable

from accountguard.contexts.two_factor.application.dto import TwoFactorAuthConfig
from accountguard.contexts.two_factor.application.ports import (
    AccountPasswordVerifier,
    AccountSecretCipher,
    EmailDeliveryChannel,
    LockoutPolicy,
    TotpAuthenticator,
    TwoFactorAttributeStore,
    TwoFactorAuditSink,
    TwoFactorClock,
)
from accountguard.shared_kernel.primitives import AccountId

from .two_factor_auth_core import TwoFactorAuthCore


class TwoFactorAuthCoreFactory:
    """
    TwoFactorAuthCoreFactory — holds process-wide collaborators and builds per-account cores.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/use_cases/two_factor_auth_core.py
      - src/accountguard/contexts/two_factor/application/use_cases/password_change_listener.py
    """

    def __init__(
        self,
        *,
        config: TwoFactorAuthConfig,
        store: TwoFactorAttributeStore,
        cipher: AccountSecretCipher,
        clock: TwoFactorClock,
        totp_authenticator: TotpAuthenticator,
        lockout_policy: LockoutPolicy,
        audit_sink: TwoFactorAuditSink,
        email_delivery_channel: EmailDeliveryChannel,
        password_verifier: AccountPasswordVerifier,
        random_bytes: Callable[[int], bytes] = os.urandom,
    ) -> None:
        if config is None:  # type: ignore[truthy-bool]
            raise ValueError("TwoFactorAuthCoreFactory requires config")
        self._config = config
        self._store = store
        self._cipher = cipher
        self._clock = clock
        self._totp_authenticator = totp_authenticator
        self._lockout_policy = lockout_policy
        self._audit_sink = audit_sink
        self._email_delivery_channel = email_delivery_channel
        self._password_verifier = password_verifier
        self._random_bytes = random_bytes

    @property
    def config(self) -> TwoFactorAuthConfig:
        return self._config

    def for_account(self, account_id: AccountId | str) -> TwoFactorAuthCore:
        """
        Build a fresh core for one account.

        Args:
            account_id: Account identifier or its string form.
        Returns:
            TwoFactorAuthCore: Core with admin-reset reconciliation already applied.
        Assumptions:
            Cores are short-lived; one per request is expected.
        Raises:
            ValueError: If account id is blank.
            TwoFactorAuthError: If reconciliation cannot read stored state.
        Side Effects:
            May purge account two-factor state (admin reset).
        """
        normalized = (
            account_id if isinstance(account_id, AccountId) else AccountId.from_string(account_id)
        )
        return TwoFactorAuthCore(
            account_id=normalized,
            config=self._config,
            store=self._store,
            cipher=self._cipher,
            clock=self._clock,
            totp_authenticator=self._totp_authenticator,
            lockout_policy=self._lockout_policy,
            audit_sink=self._audit_sink,
            email_delivery_channel=self._email_delivery_channel,
            password_verifier=self._password_verifier,
            random_bytes=self._random_bytes,
        )
