"""Cookie bridge endpoints that mirror the client token into an HTTP-only cookie."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse

from travel_admin.api.models import AuthStatus, SetCookieRequest
from travel_admin.domain.session import SESSION_COOKIE_NAME

if TYPE_CHECKING:
    from travel_admin.containers import AppContainer

_logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("")
async def auth_status(request: Request) -> AuthStatus:
    """Report whether the session cookie is present."""
    return AuthStatus(isAuthenticated=bool(request.cookies.get(SESSION_COOKIE_NAME)))


@router.post("", response_model=None)
async def set_auth_cookie(
    body: SetCookieRequest, request: Request, response: Response
) -> dict[str, object] | JSONResponse:
    """Store the access token in an HTTP-only cookie."""
    if not body.token:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": "No token provided"},
        )
    container: AppContainer = request.app.state.container
    settings = container.settings
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=body.token,
        max_age=settings.auth_cookie_max_age_seconds,
        path="/",
        secure=settings.is_production,
        httponly=True,
        samesite="lax",
    )
    _logger.info("Auth cookie set (token length %s)", len(body.token))
    return {"success": True, "message": "Cookie set successfully"}


@router.post("/logout")
async def clear_auth_cookie(response: Response) -> dict[str, bool]:
    """Delete the session cookie."""
    response.delete_cookie(key=SESSION_COOKIE_NAME, path="/")
    return {"success": True}
