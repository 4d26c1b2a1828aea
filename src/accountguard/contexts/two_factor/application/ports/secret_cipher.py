from __future__ import annotations

from typing import Protocol

from accountguard.shared_kernel.primitives import AccountId


class AccountSecretCipher(Protocol):
    """
    AccountSecretCipher — port for account-scoped at-rest encryption of credential text.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/adapters/outbound/security/
        aes_gcm_account_secret_cipher.py
      - src/accountguard/contexts/two_factor/application/services/credential_envelope.py
    """

    def encrypt(self, *, account_id: AccountId, plaintext: str) -> str:
        """
        Encrypt UTF-8 plaintext bound to one account.

        Args:
            account_id: Owner account; ciphertext is only decryptable for this account.
            plaintext: Serialized credential layout.
        Returns:
            str: Opaque ASCII ciphertext suitable for a directory attribute.
        Assumptions:
            Plaintext is never logged.
        Raises:
            ValueError: If plaintext is empty or encryption fails.
        Side Effects:
            Uses OS CSPRNG for nonces.
        """
        ...

    def decrypt(self, *, account_id: AccountId, ciphertext: str) -> str:
        """
        Decrypt ciphertext previously produced for the same account.

        Args:
            account_id: Owner account.
            ciphertext: Opaque ASCII ciphertext.
        Returns:
            str: Plaintext credential layout.
        Assumptions:
            None.
        Raises:
            ValueError: If ciphertext is malformed, tampered, or bound to another account.
        Side Effects:
            None.
        """
        ...
