"""Tests for route classification and gating."""

import pytest

from travel_admin.services.route_guard import (
    ALLOW,
    RouteClass,
    RouteDecision,
    classify_path,
    evaluate_route,
)


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/login", RouteClass.PUBLIC),
        ("/register", RouteClass.PUBLIC),
        ("/verify-email", RouteClass.PUBLIC),
        ("/dashboard", RouteClass.PROTECTED),
        ("/packages/12/edit", RouteClass.PROTECTED),
        ("/business-verification", RouteClass.PROTECTED),
        ("/settings/profile", RouteClass.PROTECTED),
        ("/dashboards", RouteClass.UNCLASSIFIED),
        ("/", RouteClass.UNCLASSIFIED),
        ("/api/auth", RouteClass.UNCLASSIFIED),
    ],
)
def test_classify_path(path: str, expected: RouteClass) -> None:
    assert classify_path(path) is expected


def test_protected_path_without_cookie_redirects_to_login() -> None:
    assert evaluate_route("/dashboard", has_session_cookie=False) == RouteDecision(
        allow=False, redirect_to="/login"
    )


def test_public_path_with_cookie_redirects_to_dashboard() -> None:
    assert evaluate_route("/login", has_session_cookie=True) == RouteDecision(
        allow=False, redirect_to="/dashboard"
    )


def test_matching_state_is_allowed() -> None:
    assert evaluate_route("/events/3", has_session_cookie=True) == ALLOW
    assert evaluate_route("/register", has_session_cookie=False) == ALLOW


def test_unclassified_path_is_always_allowed() -> None:
    assert evaluate_route("/about", has_session_cookie=False) == ALLOW
    assert evaluate_route("/about", has_session_cookie=True) == ALLOW
