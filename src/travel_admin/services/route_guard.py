"""Navigation gating based on path class and session cookie presence."""

from dataclasses import dataclass
from enum import StrEnum

LOGIN_PATH = "/login"
DASHBOARD_HOME = "/dashboard"

PUBLIC_PATHS = frozenset({"/login", "/register", "/verify-email"})
PROTECTED_PREFIXES = (
    "/dashboard",
    "/packages",
    "/events",
    "/destinations",
    "/business-verification",
    "/blog",
    "/users",
    "/reviews",
    "/analytics",
    "/settings",
)


class RouteClass(StrEnum):
    PUBLIC = "public"
    PROTECTED = "protected"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class RouteDecision:
    """Allow the navigation, or redirect it elsewhere."""

    allow: bool
    redirect_to: str | None = None


ALLOW = RouteDecision(allow=True)


def classify_path(path: str) -> RouteClass:
    """Classify a request path for the route guard."""
    if path in PUBLIC_PATHS:
        return RouteClass.PUBLIC
    for prefix in PROTECTED_PREFIXES:
        if path == prefix or path.startswith(f"{prefix}/"):
            return RouteClass.PROTECTED
    return RouteClass.UNCLASSIFIED


def evaluate_route(path: str, has_session_cookie: bool) -> RouteDecision:
    """Decide whether a navigation may proceed.

    Only the presence of the session cookie is considered; the token itself
    is never validated here.
    """
    route_class = classify_path(path)
    if route_class is RouteClass.PUBLIC and has_session_cookie:
        return RouteDecision(allow=False, redirect_to=DASHBOARD_HOME)
    if route_class is RouteClass.PROTECTED and not has_session_cookie:
        return RouteDecision(allow=False, redirect_to=LOGIN_PATH)
    return ALLOW
