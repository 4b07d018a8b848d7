"""HTTP middleware for the dashboard server."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse

from travel_admin.domain.session import SESSION_COOKIE_NAME
from travel_admin.services.route_guard import evaluate_route

_logger = logging.getLogger(__name__)


def setup_route_guard(app: FastAPI) -> None:
    """Redirect navigations that do not match the caller's session state."""

    @app.middleware("http")
    async def route_guard(request: Request, call_next):  # noqa: ANN001, ANN202
        path = request.url.path
        has_cookie = bool(request.cookies.get(SESSION_COOKIE_NAME))
        decision = evaluate_route(path, has_cookie)
        if decision.allow or decision.redirect_to is None:
            return await call_next(request)
        _logger.info(
            "Route guard redirecting %s to %s (session cookie: %s)",
            path,
            decision.redirect_to,
            has_cookie,
        )
        target = request.url.replace(path=decision.redirect_to, query="")
        return RedirectResponse(url=str(target), status_code=307)
