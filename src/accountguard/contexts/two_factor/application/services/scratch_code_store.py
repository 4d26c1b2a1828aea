from __future__ import annotations

import hmac
import logging
from typing import Sequence

from accountguard.contexts.two_factor.application.ports import TwoFactorAttributeStore
from accountguard.contexts.two_factor.domain.errors import TwoFactorCredentialType

from .credential_envelope import CredentialEnvelope
from .credential_generator import CredentialGenerator
from .credential_layouts import parse_scratch_codes, serialize_scratch_codes

log = logging.getLogger(__name__)


class ScratchCodeStore:
    """
    ScratchCodeStore — single persistence path for one account's backup scratch codes.

    `verify_and_consume` holds the per-account lock across load, match and store, so a
    code that validated once is gone for every later caller.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/ports/attribute_store.py
      - src/accountguard/contexts/two_factor/application/use_cases/two_factor_auth_core.py
    """

    def __init__(self, *, envelope: CredentialEnvelope, store: TwoFactorAttributeStore) -> None:
        if store is None:  # type: ignore[truthy-bool]
            raise ValueError("ScratchCodeStore requires store")
        self._envelope = envelope
        self._store = store

    def load(self) -> tuple[str, ...]:
        """
        Read and decrypt current scratch pool.

        Args:
            None.
        Returns:
            tuple[str, ...]: Remaining codes; empty when attribute is absent.
        Assumptions:
            None.
        Raises:
            TwoFactorAuthError: `CREDENTIAL_CORRUPTED` if decryption fails.
        Side Effects:
            Reads one attribute.
        """
        encrypted = self._store.get_scratch_codes(account_id=self._envelope.account_id)
        if not encrypted:
            return ()
        plaintext = self._envelope.open(
            ciphertext=encrypted,
            credential_type=TwoFactorCredentialType.SCRATCH_CODES,
        )
        return parse_scratch_codes(plaintext=plaintext)

    def store(self, *, codes: Sequence[str]) -> None:
        """
        Replace persisted pool wholesale.

        Args:
            codes: New pool; empty sequence clears the attribute.
        Returns:
            None.
        Assumptions:
            Codes never contain the `,` separator.
        Raises:
            ValueError: If encryption fails.
        Side Effects:
            Writes one attribute.
        """
        if not codes:
            self.clear()
            return
        self._store.set_scratch_codes(
            account_id=self._envelope.account_id,
            value=self._envelope.seal(plaintext=serialize_scratch_codes(codes=codes)),
        )

    def generate(self, *, generator: CredentialGenerator) -> tuple[str, ...]:
        with self._store.account_lock(account_id=self._envelope.account_id):
            codes = generator.generate_scratch_codes()
            self.store(codes=codes)
        log.info(
            "two-factor scratch codes regenerated account_id=%s count=%s",
            self._envelope.account_id,
            len(codes),
        )
        return codes

    def verify_and_consume(self, *, provided: str) -> bool:
        """
        Consume matching scratch code exactly once.

        Args:
            provided: User-submitted scratch code.
        Returns:
            bool: `True` when a code matched and the shortened pool was persisted.
        Assumptions:
            Linear scan is acceptable for small pools.
        Raises:
            TwoFactorAuthError: `CREDENTIAL_CORRUPTED` if stored pool cannot be decrypted.
        Side Effects:
            Rewrites the pool attribute on success.
        """
        provided_bytes = provided.encode("utf-8")
        with self._store.account_lock(account_id=self._envelope.account_id):
            codes = self.load()
            for index, code in enumerate(codes):
                if hmac.compare_digest(code.encode("utf-8"), provided_bytes):
                    self.store(codes=codes[:index] + codes[index + 1 :])
                    log.info(
                        "two-factor scratch code consumed account_id=%s remaining=%s",
                        self._envelope.account_id,
                        len(codes) - 1,
                    )
                    return True
        return False

    def clear(self) -> None:
        self._store.set_scratch_codes(account_id=self._envelope.account_id, value=None)
