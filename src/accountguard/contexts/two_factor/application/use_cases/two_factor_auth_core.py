from __future__ import annotations

import logging
import os
from typing import Any, Callable, Mapping, NoReturn

from accountguard.contexts.two_factor.application.dto import (
    CredentialConfig,
    TwoFactorAuthConfig,
)
from accountguard.contexts.two_factor.application.ports import (
    AccountPasswordVerifier,
    AccountSecretCipher,
    EmailDeliveryChannel,
    LockoutPolicy,
    TotpAuthenticator,
    TwoFactorAttributeStore,
    TwoFactorAuditEvent,
    TwoFactorAuditEventType,
    TwoFactorAuditSink,
    TwoFactorClock,
)
from accountguard.contexts.two_factor.application.services import (
    AdminResetReconciler,
    AppPasswordStore,
    CredentialEnvelope,
    CredentialGenerator,
    EmailCodeEngine,
    ScratchCodeStore,
    TrustedDeviceStore,
    decode_credential_text,
    parse_shared_secret,
    serialize_shared_secret,
)
from accountguard.contexts.two_factor.domain.entities import (
    AppPasswordMetadata,
    SharedSecret,
    TrustedDevice,
    TrustedDeviceToken,
    TwoFactorCredentials,
)
from accountguard.contexts.two_factor.domain.errors import (
    TwoFactorAuthError,
    TwoFactorCodeType,
    TwoFactorCredentialType,
    TwoFactorErrorKind,
)
from accountguard.contexts.two_factor.domain.value_objects import (
    CredentialEncoding,
    TwoFactorMethod,
)
from accountguard.shared_kernel.primitives import AccountId, epoch_millis

from .two_factor_auth_models import (
    RECOVERY_ADDRESS_STATUS_PENDING,
    RECOVERY_ADDRESS_STATUS_VERIFIED,
    AppEnrollmentStart,
)

log = logging.getLogger(__name__)


class TwoFactorAuthCore:
    """
    TwoFactorAuthCore — per-account orchestrator of two-factor enrollment and verification.

    Construction runs admin-reset reconciliation before anything else reads the
    account, then snapshots credential configuration for the lifetime of the instance.
    Every read-modify-write sequence runs under the store per-account lock.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/use_cases/two_factor_auth_core_factory.py
      - src/accountguard/contexts/two_factor/application/services/admin_reset.py
      - src/accountguard/contexts/two_factor/application/ports/attribute_store.py
    """

    def __init__(
        self,
        *,
        account_id: AccountId,
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
        """
        Wire per-account collaborators and reconcile admin reset.

        Args:
            account_id: Account the core operates on.
            config: Validated runtime options.
            store: Directory attribute store port.
            cipher: Account-scoped at-rest cipher port.
            clock: UTC clock port.
            totp_authenticator: RFC 6238 verification port.
            lockout_policy: Sink for failed second-factor attempts.
            audit_sink: Fire-and-forget audit port.
            email_delivery_channel: Delivery port for e-mail codes.
            password_verifier: Primary password check used by enrollment flows.
            random_bytes: CSPRNG source for credential generation.
        Returns:
            None.
        Assumptions:
            Callers needing fresh configuration construct a new core.
        Raises:
            ValueError: If one dependency is missing.
            TwoFactorAuthError: If reconciliation finds an unreadable secret or reset value.
        Side Effects:
            May purge all two-factor state of the account (admin reset).
        """
        if config is None:  # type: ignore[truthy-bool]
            raise ValueError("TwoFactorAuthCore requires config")
        if store is None:  # type: ignore[truthy-bool]
            raise ValueError("TwoFactorAuthCore requires store")
        if cipher is None:  # type: ignore[truthy-bool]
            raise ValueError("TwoFactorAuthCore requires cipher")
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("TwoFactorAuthCore requires clock")
        if totp_authenticator is None:  # type: ignore[truthy-bool]
            raise ValueError("TwoFactorAuthCore requires totp_authenticator")
        if lockout_policy is None:  # type: ignore[truthy-bool]
            raise ValueError("TwoFactorAuthCore requires lockout_policy")
        if audit_sink is None:  # type: ignore[truthy-bool]
            raise ValueError("TwoFactorAuthCore requires audit_sink")
        if email_delivery_channel is None:  # type: ignore[truthy-bool]
            raise ValueError("TwoFactorAuthCore requires email_delivery_channel")
        if password_verifier is None:  # type: ignore[truthy-bool]
            raise ValueError("TwoFactorAuthCore requires password_verifier")

        self._account_id = account_id
        self._config = config
        self._store = store
        self._clock = clock
        self._totp_authenticator = totp_authenticator
        self._lockout_policy = lockout_policy
        self._audit_sink = audit_sink
        self._email_delivery_channel = email_delivery_channel
        self._password_verifier = password_verifier
        self._envelope = CredentialEnvelope(account_id=account_id, cipher=cipher)

        if AdminResetReconciler(envelope=self._envelope, store=store).reconcile():
            self._audit(event_type=TwoFactorAuditEventType.MFA_RESET)

        self._credential_config = config.credential_config(
            num_scratch_codes=store.get_cos_num_scratch_codes(account_id=account_id)
        )
        self._generator = CredentialGenerator(
            config=self._credential_config,
            random_bytes=random_bytes,
        )
        self._email_codes = EmailCodeEngine(
            envelope=self._envelope,
            store=store,
            clock=clock,
            code_length=config.email_code_length,
            lifetime_ms=config.email_code_lifetime_ms,
        )
        self._scratch_codes = ScratchCodeStore(envelope=self._envelope, store=store)
        self._app_passwords = AppPasswordStore(
            envelope=self._envelope,
            store=store,
            clock=clock,
            max_count=config.max_app_specific_passwords,
            password_length=config.app_password_length,
            lifetime_ms=config.app_password_lifetime_ms,
        )
        self._trusted_devices = TrustedDeviceStore(
            envelope=self._envelope,
            store=store,
            clock=clock,
            ttl_ms=config.trusted_device_ttl_ms,
        )

    @property
    def account_id(self) -> AccountId:
        return self._account_id

    @property
    def credential_config(self) -> CredentialConfig:
        return self._credential_config

    # Policy queries

    def is_feature_available(self) -> bool:
        return self._store.is_feature_available(account_id=self._account_id)

    def two_factor_auth_required(self) -> bool:
        """
        Return whether a second factor applies to this account.

        Args:
            None.
        Returns:
            bool: Feature available AND (user enabled OR admin required).
        Assumptions:
            None.
        Raises:
            None.
        Side Effects:
            Reads policy attributes.
        """
        if not self.is_feature_available():
            return False
        is_required = self._store.is_feature_required(account_id=self._account_id)
        is_user_enabled = self._store.is_two_factor_auth_enabled(account_id=self._account_id)
        return is_required or is_user_enabled

    def is_enabled(self) -> bool:
        if not self.two_factor_auth_required():
            return False
        return bool(self._store.get_shared_secret(account_id=self._account_id))

    def app_passwords_enabled(self) -> bool:
        if not self.two_factor_auth_required():
            return False
        return self._store.is_app_passwords_feature_enabled(account_id=self._account_id)

    def is_method_enabled(self, method: TwoFactorMethod | str) -> bool:
        """
        Check enrollment of one method with legacy fallback for the app method.

        Args:
            method: Method enum or stored literal.
        Returns:
            bool: `True` when method is recorded as enabled. For APP, an account with no
                recorded methods but the enabled flag set also counts as enabled.
        Assumptions:
            Accounts enrolled before methods were recorded only used the app method.
        Raises:
            ValueError: If method literal is unknown.
        Side Effects:
            Reads method attributes.
        """
        normalized = _coerce_method(method=method)
        return normalized.value in self._effective_method_literals()

    def is_method_allowed(self, method: TwoFactorMethod | str) -> bool:
        normalized = _coerce_method(method=method)
        return normalized.value in self._store.get_methods_allowed(account_id=self._account_id)

    def enabled_methods(self) -> tuple[TwoFactorMethod, ...]:
        methods: list[TwoFactorMethod] = []
        for literal in self._effective_method_literals():
            try:
                methods.append(TwoFactorMethod.from_literal(literal))
            except ValueError:
                log.warning(
                    "two-factor unknown enabled method ignored account_id=%s method=%s",
                    self._account_id,
                    literal,
                )
        return tuple(methods)

    def primary_method(self) -> TwoFactorMethod | None:
        literal = self._store.get_primary_method(account_id=self._account_id)
        if literal is None:
            methods = self.enabled_methods()
            return methods[0] if methods else None
        return TwoFactorMethod.from_literal(literal)

    # Credentials

    def load_shared_secret(self) -> SharedSecret | None:
        """
        Read and parse stored shared secret.

        Args:
            None.
        Returns:
            SharedSecret | None: Parsed secret or `None` when absent.
        Assumptions:
            Legacy single-part values are accepted.
        Raises:
            TwoFactorAuthError: `CREDENTIAL_CORRUPTED` or `CREDENTIAL_INVALID_FORMAT`.
        Side Effects:
            Reads one attribute.
        """
        encrypted = self._store.get_shared_secret(account_id=self._account_id)
        if not encrypted:
            return None
        return parse_shared_secret(
            plaintext=self._envelope.open(
                ciphertext=encrypted,
                credential_type=TwoFactorCredentialType.SHARED_SECRET,
            )
        )

    def generate_credentials(self) -> TwoFactorCredentials | None:
        """
        Generate and store new secret and scratch codes unless 2FA is already enabled.

        Args:
            None.
        Returns:
            TwoFactorCredentials | None: New credentials, or `None` when already enabled.
        Assumptions:
            Re-enrollment before enabling replaces pending credentials.
        Raises:
            TwoFactorAuthError: `CREDENTIAL_GENERATION` on generator failure.
        Side Effects:
            Writes secret and scratch-code attributes.
        """
        with self._store.account_lock(account_id=self._account_id):
            if self._store.is_two_factor_auth_enabled(account_id=self._account_id):
                log.info(
                    "two-factor credentials not generated reason=already_enabled account_id=%s",
                    self._account_id,
                )
                return None
            credentials = self._generator.generate_credentials()
            self._store_credentials(credentials=credentials)
        return credentials

    def generate_new_scratch_codes(self) -> tuple[str, ...]:
        return self._scratch_codes.generate(generator=self._generator)

    def scratch_codes(self) -> tuple[str, ...]:
        return self._scratch_codes.load()

    # Verification

    def authenticate(self, code: str | None) -> TwoFactorCodeType:
        """
        Verify one second-factor code, dispatching on its length.

        Args:
            code: User-submitted code.
        Returns:
            TwoFactorCodeType: Code kind that validated.
        Assumptions:
            TOTP, e-mail and scratch codes have distinct configured lengths; exactly one
            candidate kind is tried per call.
        Raises:
            TwoFactorAuthError: `CODE_INVALID` after notifying lockout policy; e-mail
                `CODE_EXPIRED` and credential errors propagate unchanged.
        Side Effects:
            Consumes a scratch code on success; emits audit event.
        """
        if not code:
            self._fail(code_type=TwoFactorCodeType.UNKNOWN, reason="code is null or missing")

        length = len(code)
        if length == self._config.totp_code_length:
            code_type = TwoFactorCodeType.TOTP
            success = self._check_totp(code=code)
        elif length == self._config.email_code_length:
            code_type = TwoFactorCodeType.EMAIL
            success = self._check_email_code(code=code)
        elif length == self._config.scratch_code_length:
            code_type = TwoFactorCodeType.SCRATCH
            success = self._scratch_codes.verify_and_consume(provided=code)
        else:
            code_type = TwoFactorCodeType.UNKNOWN
            success = False

        if not success:
            self._fail(code_type=code_type)
        self._succeed(code_type=code_type)
        return code_type

    def authenticate_totp(self, code: str) -> None:
        if not self._check_totp(code=code):
            self._fail(code_type=TwoFactorCodeType.TOTP)
        self._succeed(code_type=TwoFactorCodeType.TOTP)

    def authenticate_app_password(self, password: str) -> AppPasswordMetadata:
        """
        Validate application-specific password.

        Args:
            password: Presented application password.
        Returns:
            AppPasswordMetadata: Metadata of the matched password.
        Assumptions:
            None.
        Raises:
            TwoFactorAuthError: `CODE_INVALID` with code type `APP` after lockout notify.
        Side Effects:
            Updates `last_used_ms` of matched entry.
        """
        try:
            metadata = self._app_passwords.authenticate(password=password)
        except TwoFactorAuthError as error:
            if error.kind is TwoFactorErrorKind.CODE_INVALID:
                self._report_failure(code_type=TwoFactorCodeType.APP)
            raise
        self._succeed(code_type=TwoFactorCodeType.APP)
        return metadata

    def app_name_for_password(self, password: str) -> str:
        return self.authenticate_app_password(password).name

    # E-mail codes

    def send_email_code(self) -> None:
        """
        Issue and deliver login-time e-mail code to the verified recovery address.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            None.
        Raises:
            TwoFactorAuthError: `SETUP_ERROR` when e-mail method is not enabled, no
                verified recovery address exists, or delivery fails.
        Side Effects:
            Overwrites outstanding e-mail code; sends one message.
        """
        if not self.is_method_enabled(TwoFactorMethod.EMAIL):
            raise TwoFactorAuthError.setup_error(phase="email method check")
        address = self._store.get_recovery_address(account_id=self._account_id)
        status = self._store.get_recovery_address_status(account_id=self._account_id)
        if not address or status != RECOVERY_ADDRESS_STATUS_VERIFIED:
            raise TwoFactorAuthError.setup_error(phase="recovery address check")
        self._deliver_email_code(recovery_address=address)

    def email_code_expiry_ms(self) -> int:
        return self._email_codes.expiry_ms()

    # Enrollment

    def begin_app_enrollment(self, *, password: str) -> AppEnrollmentStart | None:
        """
        Start authenticator-app enrollment after primary password check.

        Args:
            password: Account primary password.
        Returns:
            AppEnrollmentStart | None: Shared secret and provisioning URI, or `None` when
                the app method is already enabled.
        Assumptions:
            Existing credentials are reused when 2FA is already enabled through e-mail.
        Raises:
            TwoFactorAuthError: `AUTH_FAILED`, `NOT_REQUIRED` or `SETUP_ERROR`.
        Side Effects:
            May generate and store credentials.
        """
        self._verify_password(password=password)
        self._ensure_method_allowed(method=TwoFactorMethod.APP)
        if self.is_method_enabled(TwoFactorMethod.APP):
            log.info("two-factor app method already enabled account_id=%s", self._account_id)
            return None

        self.generate_credentials()
        shared_secret = self.load_shared_secret()
        if shared_secret is None:
            raise TwoFactorAuthError.credential_missing(
                credential_type=TwoFactorCredentialType.SHARED_SECRET
            )
        otpauth_uri = None
        if self._config.secret_encoding is CredentialEncoding.BASE32:
            otpauth_uri = self._totp_authenticator.build_otpauth_uri(
                secret=shared_secret.secret,
                account_label=str(self._account_id),
                issuer=self._config.totp_issuer,
            )
        return AppEnrollmentStart(secret=shared_secret.secret, otpauth_uri=otpauth_uri)

    def enable_app(self, *, code: str) -> tuple[str, ...]:
        """
        Finish authenticator-app enrollment with a TOTP code.

        Args:
            code: TOTP code from the freshly provisioned authenticator.
        Returns:
            tuple[str, ...]: Current scratch codes to show the user once.
        Assumptions:
            `begin_app_enrollment` stored the shared secret.
        Raises:
            TwoFactorAuthError: `SETUP_ERROR` when enrollment was not started or the app
                method is not allowed, `CODE_INVALID` on wrong code.
        Side Effects:
            Sets enabled flag, adds app method, sets primary method when unset.
        """
        self._ensure_method_allowed(method=TwoFactorMethod.APP)
        if self.load_shared_secret() is None:
            raise TwoFactorAuthError.setup_error(phase="app enrollment not started")
        if not self._check_totp(code=code):
            self._fail(code_type=TwoFactorCodeType.TOTP)
        with self._store.account_lock(account_id=self._account_id):
            self._store.set_two_factor_auth_enabled(account_id=self._account_id, enabled=True)
            self._add_method(method=TwoFactorMethod.APP)
        self._audit(
            event_type=TwoFactorAuditEventType.MFA_ENABLED,
            method=TwoFactorMethod.APP.value,
        )
        log.info("two-factor app method enabled account_id=%s", self._account_id)
        return self._scratch_codes.load()

    def begin_email_enrollment(self, *, password: str, recovery_address: str) -> None:
        """
        Start e-mail enrollment by sending a code to the proposed recovery address.

        Args:
            password: Account primary password.
            recovery_address: Address that will receive login codes.
        Returns:
            None.
        Assumptions:
            Recovery address is recorded as pending until `enable_email` succeeds.
        Raises:
            TwoFactorAuthError: `AUTH_FAILED`, `NOT_REQUIRED` or `SETUP_ERROR`.
            ValueError: If recovery address is malformed.
        Side Effects:
            Overwrites e-mail code and recovery address; sends one message.
        """
        normalized_address = recovery_address.strip()
        if "@" not in normalized_address:
            raise ValueError("recovery_address must be an e-mail address")
        self._verify_password(password=password)
        self._ensure_method_allowed(method=TwoFactorMethod.EMAIL)
        with self._store.account_lock(account_id=self._account_id):
            self._store.set_recovery_address(
                account_id=self._account_id,
                address=normalized_address,
                status=RECOVERY_ADDRESS_STATUS_PENDING,
            )
            self._deliver_email_code(recovery_address=normalized_address)

    def enable_email(self, *, code: str) -> None:
        """
        Finish e-mail enrollment with the code sent by `begin_email_enrollment`.

        Args:
            code: E-mail one-time code.
        Returns:
            None.
        Assumptions:
            Enrollment code is single-use and cleared on success.
        Raises:
            TwoFactorAuthError: `CODE_INVALID`, `CODE_EXPIRED`, `CREDENTIAL_MISSING` or
                `SETUP_ERROR`.
        Side Effects:
            May generate credentials, sets enabled flag, adds e-mail method and marks
            recovery address verified.
        """
        self._ensure_method_allowed(method=TwoFactorMethod.EMAIL)
        if not self._check_email_code(code=code):
            self._fail(code_type=TwoFactorCodeType.EMAIL)
        with self._store.account_lock(account_id=self._account_id):
            self._email_codes.clear()
            if not self._store.is_two_factor_auth_enabled(account_id=self._account_id):
                self.generate_credentials()
                self._store.set_two_factor_auth_enabled(account_id=self._account_id, enabled=True)
            self._add_method(method=TwoFactorMethod.EMAIL)
            self._store.set_recovery_address(
                account_id=self._account_id,
                address=self._store.get_recovery_address(account_id=self._account_id),
                status=RECOVERY_ADDRESS_STATUS_VERIFIED,
            )
        self._audit(
            event_type=TwoFactorAuditEventType.MFA_ENABLED,
            method=TwoFactorMethod.EMAIL.value,
        )
        log.info("two-factor email method enabled account_id=%s", self._account_id)

    # Disable

    def disable_app(self, *, delete_credentials: bool = False) -> None:
        """
        Disable authenticator-app method.

        Args:
            delete_credentials: Accepted for interface parity; credentials are purged
                whenever the last method is removed.
        Returns:
            None.
        Assumptions:
            None.
        Raises:
            TwoFactorAuthError: `CANNOT_DISABLE` when it is the only method and 2FA is
                required by policy; state is left unchanged.
        Side Effects:
            Updates method set, enabled flag, primary method; may purge credentials.
        """
        self._disable_method(
            method=TwoFactorMethod.APP,
            delete_credentials=delete_credentials,
        )

    def disable_email(self) -> None:
        self._disable_method(method=TwoFactorMethod.EMAIL, delete_credentials=False)

    def disable_all(self, *, delete_credentials: bool) -> None:
        """
        Disable two-factor authentication as a whole.

        Args:
            delete_credentials: Also delete shared secret and scratch codes.
        Returns:
            None.
        Assumptions:
            Trusted devices survive; only clear-all removes them.
        Raises:
            TwoFactorAuthError: `CANNOT_DISABLE` when 2FA is required by policy.
        Side Effects:
            Clears enabled flag, method set, primary method; revokes app passwords.
        """
        with self._store.account_lock(account_id=self._account_id):
            if self._store.is_feature_required(account_id=self._account_id):
                raise TwoFactorAuthError.cannot_disable()
            if not self._store.is_two_factor_auth_enabled(account_id=self._account_id):
                log.info("two-factor already disabled account_id=%s", self._account_id)
                return
            self._store.set_two_factor_auth_enabled(account_id=self._account_id, enabled=False)
            for literal in self._store.get_methods_enabled(account_id=self._account_id):
                self._store.remove_method_enabled(account_id=self._account_id, method=literal)
            self._store.set_primary_method(account_id=self._account_id, method=None)
            if delete_credentials:
                self._delete_credentials()
            self._app_passwords.revoke_all()
        self._audit(event_type=TwoFactorAuditEventType.MFA_DISABLED, method="all")
        log.info(
            "two-factor disabled account_id=%s delete_credentials=%s",
            self._account_id,
            delete_credentials,
        )

    def clear_all(self) -> None:
        """
        Remove every piece of two-factor state of the account.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Policy flags are not consulted; this is an administrative wipe.
        Raises:
            None.
        Side Effects:
            Clears enabled flag, methods, secret, scratch codes, e-mail code, app
            passwords and trusted devices.
        """
        with self._store.account_lock(account_id=self._account_id):
            self._store.set_two_factor_auth_enabled(account_id=self._account_id, enabled=False)
            for literal in self._store.get_methods_enabled(account_id=self._account_id):
                self._store.remove_method_enabled(account_id=self._account_id, method=literal)
            self._store.set_primary_method(account_id=self._account_id, method=None)
            self._delete_credentials()
            self._email_codes.clear()
            self._app_passwords.revoke_all()
            self._trusted_devices.revoke_all()
        self._audit(event_type=TwoFactorAuditEventType.MFA_DISABLED, method="clear")
        log.info("two-factor state cleared account_id=%s", self._account_id)

    # Trusted devices

    def register_trusted_device(
        self,
        attributes: Mapping[str, object],
    ) -> TrustedDeviceToken | None:
        token = self._trusted_devices.register(attributes=attributes)
        if token is not None:
            self._audit(
                event_type=TwoFactorAuditEventType.TRUSTED_DEVICE_REGISTERED,
                token_id=token.token_id,
            )
        return token

    def verify_trusted_device(
        self,
        token: TrustedDeviceToken,
        attributes: Mapping[str, object],
    ) -> None:
        self._trusted_devices.verify(token=token, attributes=attributes)

    def resolve_trusted_device_token(
        self,
        encoded_token: str | None,
    ) -> TrustedDeviceToken | None:
        return self._trusted_devices.resolve_token(encoded_token=encoded_token)

    def list_trusted_devices(self) -> tuple[TrustedDevice, ...]:
        return self._trusted_devices.list_devices()

    def revoke_trusted_device(self, token: TrustedDeviceToken) -> None:
        if self._trusted_devices.revoke(token=token):
            self._audit(
                event_type=TwoFactorAuditEventType.TRUSTED_DEVICE_REVOKED,
                token_id=token.token_id,
            )

    def revoke_all_trusted_devices(self) -> None:
        removed = self._trusted_devices.revoke_all()
        if removed:
            self._audit(event_type=TwoFactorAuditEventType.TRUSTED_DEVICE_REVOKED, count=removed)

    def revoke_other_trusted_devices(self, token: TrustedDeviceToken | None) -> None:
        removed = self._trusted_devices.revoke_others(token=token)
        if removed:
            self._audit(event_type=TwoFactorAuditEventType.TRUSTED_DEVICE_REVOKED, count=removed)

    # App-specific passwords

    def generate_app_password(self, name: str) -> str:
        """
        Generate new application-specific password.

        Args:
            name: Application name.
        Returns:
            str: Plaintext password, returned once.
        Assumptions:
            None.
        Raises:
            TwoFactorAuthError: `NOT_REQUIRED` when 2FA does not apply to the account,
                `SETUP_ERROR`, `NAME_IN_USE` or `LIMIT_REACHED` from the store.
        Side Effects:
            Adds one app-password entry.
        """
        if not self.two_factor_auth_required():
            raise TwoFactorAuthError.not_required()
        password = self._app_passwords.generate(name=name)
        self._audit(event_type=TwoFactorAuditEventType.APP_PASSWORD_CREATED, name=name.strip())
        return password

    def revoke_app_password(self, name: str) -> None:
        if self._app_passwords.revoke(name=name):
            self._audit(event_type=TwoFactorAuditEventType.APP_PASSWORD_REVOKED, name=name)

    def revoke_all_app_passwords(self) -> None:
        removed = self._app_passwords.revoke_all()
        if removed:
            self._audit(event_type=TwoFactorAuditEventType.APP_PASSWORD_REVOKED, count=removed)

    def list_app_passwords(self) -> tuple[AppPasswordMetadata, ...]:
        return self._app_passwords.list_passwords()

    # Internals

    def _store_credentials(self, *, credentials: TwoFactorCredentials) -> None:
        shared_secret = SharedSecret(
            secret=credentials.secret,
            generated_at=self._clock.now().replace(microsecond=0),
        )
        self._store.set_shared_secret(
            account_id=self._account_id,
            value=self._envelope.seal(
                plaintext=serialize_shared_secret(shared_secret=shared_secret)
            ),
        )
        self._scratch_codes.store(codes=credentials.scratch_codes)
        log.info(
            "two-factor credentials stored account_id=%s scratch_codes=%s",
            self._account_id,
            len(credentials.scratch_codes),
        )

    def _delete_credentials(self) -> None:
        self._store.set_shared_secret(account_id=self._account_id, value=None)
        self._scratch_codes.clear()

    def _check_totp(self, *, code: str) -> bool:
        shared_secret = self.load_shared_secret()
        if shared_secret is None:
            raise TwoFactorAuthError.credential_missing(
                credential_type=TwoFactorCredentialType.SHARED_SECRET
            )
        try:
            key = decode_credential_text(
                text=shared_secret.secret,
                encoding=self._credential_config.secret_encoding,
            )
        except ValueError as error:
            raise TwoFactorAuthError.credential_invalid_format(
                credential_type=TwoFactorCredentialType.SHARED_SECRET,
                reason="secret does not match configured encoding",
            ) from error
        return self._totp_authenticator.verify_code(
            key=key,
            code=code,
            at_time=self._clock.now(),
        )

    def _check_email_code(self, *, code: str) -> bool:
        try:
            self._email_codes.validate(provided=code)
        except TwoFactorAuthError as error:
            if error.kind is TwoFactorErrorKind.CODE_INVALID:
                return False
            raise
        return True

    def _deliver_email_code(self, *, recovery_address: str) -> None:
        code = self._email_codes.issue()
        delivered = self._email_delivery_channel.send_code(
            account_id=self._account_id,
            recovery_address=recovery_address,
            code=code,
        )
        if not delivered:
            log.error("two-factor email code delivery failed account_id=%s", self._account_id)
            raise TwoFactorAuthError.setup_error(phase="email code delivery")

    def _verify_password(self, *, password: str) -> None:
        if not self.is_feature_available():
            raise TwoFactorAuthError.not_required()
        if not self._password_verifier.verify_password(
            account_id=self._account_id,
            password=password,
        ):
            raise TwoFactorAuthError.auth_failed(reason="invalid password")

    def _ensure_method_allowed(self, *, method: TwoFactorMethod) -> None:
        if not self.is_feature_available():
            raise TwoFactorAuthError.not_required()
        if not self.is_method_allowed(method):
            raise TwoFactorAuthError.setup_error(phase="method authorization check")

    def _effective_method_literals(self) -> tuple[str, ...]:
        literals = self._store.get_methods_enabled(account_id=self._account_id)
        if literals or not self._store.is_two_factor_auth_enabled(account_id=self._account_id):
            return literals
        # Accounts enrolled before methods were recorded only used the app method.
        return (TwoFactorMethod.APP.value,)

    def _add_method(self, *, method: TwoFactorMethod) -> None:
        literals = self._store.get_methods_enabled(account_id=self._account_id)
        if method.value not in literals:
            self._store.add_method_enabled(account_id=self._account_id, method=method.value)
        if self._store.get_primary_method(account_id=self._account_id) is None:
            self._store.set_primary_method(account_id=self._account_id, method=method.value)

    def _disable_method(self, *, method: TwoFactorMethod, delete_credentials: bool) -> None:
        with self._store.account_lock(account_id=self._account_id):
            literals = self._effective_method_literals()
            if literals == (method.value,) and self._store.is_feature_required(
                account_id=self._account_id
            ):
                raise TwoFactorAuthError.cannot_disable()
            if not self._store.is_two_factor_auth_enabled(account_id=self._account_id):
                log.info("two-factor already disabled account_id=%s", self._account_id)
                return
            if method.value not in literals:
                log.info(
                    "two-factor method not enabled account_id=%s method=%s",
                    self._account_id,
                    method.value,
                )
                return

            self._store.remove_method_enabled(account_id=self._account_id, method=method.value)
            if method is TwoFactorMethod.EMAIL:
                self._store.set_recovery_address(
                    account_id=self._account_id,
                    address=None,
                    status=None,
                )
            remaining = self._store.get_methods_enabled(account_id=self._account_id)
            if remaining:
                self._store.set_primary_method(account_id=self._account_id, method=remaining[0])
            else:
                self._store.set_two_factor_auth_enabled(
                    account_id=self._account_id,
                    enabled=False,
                )
                self._store.set_primary_method(account_id=self._account_id, method=None)
                self._delete_credentials()
                self._email_codes.clear()
                self._app_passwords.revoke_all()
        self._audit(event_type=TwoFactorAuditEventType.MFA_DISABLED, method=method.value)
        log.info(
            "two-factor method disabled account_id=%s method=%s remaining=%s "
            "delete_credentials=%s",
            self._account_id,
            method.value,
            len(remaining),
            delete_credentials,
        )

    def _report_failure(self, *, code_type: TwoFactorCodeType) -> None:
        self._lockout_policy.record_failed_second_factor(
            account_id=self._account_id,
            code_type=code_type,
        )
        self._audit(event_type=TwoFactorAuditEventType.MFA_FAILED, code_type=code_type.value)
        log.error(
            "two-factor authentication failed account_id=%s code_type=%s",
            self._account_id,
            code_type.value,
        )

    def _fail(
        self,
        *,
        code_type: TwoFactorCodeType,
        reason: str = "code does not match expected value",
    ) -> NoReturn:
        self._report_failure(code_type=code_type)
        raise TwoFactorAuthError.code_invalid(code_type=code_type, reason=reason)

    def _succeed(self, *, code_type: TwoFactorCodeType) -> None:
        self._audit(event_type=TwoFactorAuditEventType.MFA_VERIFIED, code_type=code_type.value)
        log.info(
            "two-factor authentication succeeded account_id=%s code_type=%s",
            self._account_id,
            code_type.value,
        )

    def _audit(self, *, event_type: TwoFactorAuditEventType, **details: Any) -> None:
        self._audit_sink.record(
            event=TwoFactorAuditEvent(
                event_type=event_type,
                account_id=self._account_id,
                occurred_at_ms=epoch_millis(value=self._clock.now()),
                details=details,
            )
        )


def _coerce_method(*, method: TwoFactorMethod | str) -> TwoFactorMethod:
    if isinstance(method, TwoFactorMethod):
        return method
    return TwoFactorMethod.from_literal(method)
