from __future__ import annotations

from accountguard.contexts.two_factor.application.ports import AccountSecretCipher
from accountguard.contexts.two_factor.domain.errors import (
    TwoFactorAuthError,
    TwoFactorCredentialType,
)
from accountguard.shared_kernel.primitives import AccountId


class CredentialEnvelope:
    """
    CredentialEnvelope — account-bound seal/open wrapper around the secret cipher.

    Maps cipher failures into `CREDENTIAL_CORRUPTED` errors labelled with the credential
    category so callers never see raw cipher exceptions.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/ports/secret_cipher.py
      - src/accountguard/contexts/two_factor/application/services/credential_layouts.py
    """

    def __init__(self, *, account_id: AccountId, cipher: AccountSecretCipher) -> None:
        if cipher is None:  # type: ignore[truthy-bool]
            raise ValueError("CredentialEnvelope requires cipher")
        self._account_id = account_id
        self._cipher = cipher

    @property
    def account_id(self) -> AccountId:
        return self._account_id

    def seal(self, *, plaintext: str) -> str:
        return self._cipher.encrypt(account_id=self._account_id, plaintext=plaintext)

    def open(self, *, ciphertext: str, credential_type: TwoFactorCredentialType) -> str:
        """
        Decrypt stored credential text.

        Args:
            ciphertext: Stored attribute value.
            credential_type: Category label used in error details.
        Returns:
            str: Plaintext layout.
        Assumptions:
            None.
        Raises:
            TwoFactorAuthError: `CREDENTIAL_CORRUPTED` when decryption fails.
        Side Effects:
            None.
        """
        try:
            return self._cipher.decrypt(account_id=self._account_id, ciphertext=ciphertext)
        except ValueError as error:
            raise TwoFactorAuthError.credential_corrupted(
                credential_type=credential_type,
                reason="decryption failed",
            ) from error
