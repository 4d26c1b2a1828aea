from __future__ import annotations

from typing import Mapping, cast

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse

from accountguard.contexts.two_factor.domain.errors import TwoFactorAuthError, TwoFactorErrorKind

_STATUS_BY_KIND: Mapping[TwoFactorErrorKind, int] = {
    TwoFactorErrorKind.CODE_INVALID: 401,
    TwoFactorErrorKind.CODE_EXPIRED: 401,
    TwoFactorErrorKind.AUTH_FAILED: 401,
    TwoFactorErrorKind.NOT_REQUIRED: 403,
    TwoFactorErrorKind.CANNOT_DISABLE: 409,
    TwoFactorErrorKind.SETUP_ERROR: 409,
    TwoFactorErrorKind.LIMIT_REACHED: 409,
    TwoFactorErrorKind.NAME_IN_USE: 409,
    TwoFactorErrorKind.CREDENTIAL_MISSING: 409,
    TwoFactorErrorKind.CREDENTIAL_INVALID_FORMAT: 500,
    TwoFactorErrorKind.CREDENTIAL_CORRUPTED: 500,
    TwoFactorErrorKind.CREDENTIAL_GENERATION: 500,
}


def status_code_for_two_factor_error(*, error: TwoFactorAuthError) -> int:
    return _STATUS_BY_KIND.get(error.kind, 500)


def two_factor_error_handler(_request: Request, error: Exception) -> JSONResponse:
    """
    Convert `TwoFactorAuthError` into deterministic JSON response payload.

    Args:
        _request: Starlette request object (unused).
        error: Raised two-factor error.
    Returns:
        JSONResponse: Response with payload `{"error": {"code", "message", "details"}}`.
    Assumptions:
        Status code is derived from error kind via stable mapping table.
    Raises:
        None.
    Side Effects:
        None.
    """
    typed_error = cast(TwoFactorAuthError, error)
    return JSONResponse(
        status_code=status_code_for_two_factor_error(error=typed_error),
        content=typed_error.payload(),
    )


def register_two_factor_error_handler(*, app: Starlette) -> None:
    if app is None:  # type: ignore[truthy-bool]
        raise ValueError("register_two_factor_error_handler requires app")
    app.add_exception_handler(TwoFactorAuthError, two_factor_error_handler)
