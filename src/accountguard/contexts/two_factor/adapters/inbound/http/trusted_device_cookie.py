from __future__ import annotations

import logging
from typing import Literal

from starlette.requests import Request
from starlette.responses import Response

from accountguard.contexts.two_factor.application.ports import TwoFactorClock
from accountguard.contexts.two_factor.application.use_cases import TwoFactorAuthCore
from accountguard.contexts.two_factor.domain.entities import TrustedDeviceToken
from accountguard.shared_kernel.primitives import epoch_millis

log = logging.getLogger(__name__)

_DEFAULT_COOKIE_PATH = "/"


class TrustedDeviceCookie:
    """
    TrustedDeviceCookie — starlette bridge between trusted-device tokens and client cookies.

    The core only understands token values; this adapter decides where a token comes
    from (explicit request value first, then cookie) and how a resolved token is written
    back to the client.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/services/trusted_device_store.py
      - src/accountguard/contexts/two_factor/domain/entities/trusted_device.py
    """

    def __init__(
        self,
        *,
        cookie_name: str,
        clock: TwoFactorClock,
        cookie_path: str = _DEFAULT_COOKIE_PATH,
        cookie_secure: bool = True,
        cookie_samesite: Literal["lax", "strict", "none"] = "lax",
    ) -> None:
        """
        Initialize cookie settings.

        Args:
            cookie_name: Cookie key holding the encoded token.
            clock: UTC clock used to compute cookie max-age.
            cookie_path: Cookie path attribute.
            cookie_secure: Whether cookie is HTTPS-only.
            cookie_samesite: SameSite cookie attribute.
        Returns:
            None.
        Assumptions:
            Cookie name matches `two_factor.trusted_devices.cookie_name`.
        Raises:
            ValueError: If cookie name or path is empty, or clock is missing.
        Side Effects:
            None.
        """
        normalized_cookie_name = cookie_name.strip()
        normalized_cookie_path = cookie_path.strip()
        if not normalized_cookie_name:
            raise ValueError("TrustedDeviceCookie requires non-empty cookie_name")
        if not normalized_cookie_path:
            raise ValueError("TrustedDeviceCookie requires non-empty cookie_path")
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("TrustedDeviceCookie requires clock")
        self._cookie_name = normalized_cookie_name
        self._cookie_path = normalized_cookie_path
        self._cookie_secure = cookie_secure
        self._cookie_samesite = cookie_samesite
        self._clock = clock

    @property
    def cookie_name(self) -> str:
        return self._cookie_name

    def read_encoded_token(
        self,
        *,
        request: Request,
        explicit_token: str | None = None,
    ) -> str | None:
        if explicit_token is not None and explicit_token.strip():
            return explicit_token.strip()
        cookie_value = request.cookies.get(self._cookie_name)
        if cookie_value is None or not cookie_value.strip():
            return None
        return cookie_value.strip()

    def resolve(
        self,
        *,
        core: TwoFactorAuthCore,
        request: Request,
        explicit_token: str | None = None,
    ) -> TrustedDeviceToken | None:
        """
        Resolve token presented by the client against stored devices.

        Args:
            core: Per-account two-factor core.
            request: Incoming starlette request.
            explicit_token: Token passed in the request body, preferred over cookie.
        Returns:
            TrustedDeviceToken | None: `None` when absent or malformed, a delete sentinel
                when unknown or expired, otherwise the live token with expiry.
        Assumptions:
            None.
        Raises:
            None.
        Side Effects:
            May revoke an expired device record.
        """
        return core.resolve_trusted_device_token(
            self.read_encoded_token(request=request, explicit_token=explicit_token)
        )

    def apply(self, *, response: Response, token: TrustedDeviceToken | None) -> None:
        """
        Write resolved token state to the outgoing response.

        Args:
            response: Outgoing starlette response.
            token: Resolved or freshly registered token.
        Returns:
            None.
        Assumptions:
            `None` leaves the client cookie untouched.
        Raises:
            None.
        Side Effects:
            Sets or deletes the trusted-device cookie.
        """
        if token is None:
            return
        if token.delete:
            response.delete_cookie(key=self._cookie_name, path=self._cookie_path)
            return

        max_age_seconds = self._max_age_seconds(token=token)
        if max_age_seconds <= 0:
            log.debug("two-factor trusted device cookie expired token_id=%s", token.token_id)
            response.delete_cookie(key=self._cookie_name, path=self._cookie_path)
            return
        response.set_cookie(
            key=self._cookie_name,
            value=token.encode(),
            max_age=max_age_seconds,
            path=self._cookie_path,
            secure=self._cookie_secure,
            httponly=True,
            samesite=self._cookie_samesite,
        )

    def _max_age_seconds(self, *, token: TrustedDeviceToken) -> int:
        if token.expires_ms is None:
            return 0
        now_ms = epoch_millis(value=self._clock.now())
        return max((token.expires_ms - now_ms) // 1000, 0)
