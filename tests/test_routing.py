"""
Route guard tests.
"""

import pytest

from superhub.models.enums import AuthPhase, RouteAction, UserRole
from superhub.models.user import UserProfile
from superhub.routing import (
    LANDING_ROUTE,
    LOGIN_ROUTE,
    VERIFY_ROUTE,
    RouteDecision,
    RouteRequirements,
    build_path,
    evaluate_route,
    parse_route,
)

PROTECTED = RouteRequirements(require_auth=True, require_verification=True)
AUTH_ONLY = RouteRequirements(require_auth=True)
ADMIN = RouteRequirements(require_auth=True, require_verification=True, admin_only=True)
PUBLIC = RouteRequirements()


@pytest.fixture
def member():
    return UserProfile(id="u-1", name="Jane", email="jane@example.com", is_email_verified=True)


@pytest.fixture
def admin():
    return UserProfile(
        id="u-2", name="Root", email="root@example.com",
        role=UserRole.ADMIN, is_email_verified=True,
    )


class TestEvaluateRoute:
    @pytest.mark.parametrize("requirements", [PUBLIC, AUTH_ONLY, PROTECTED, ADMIN])
    def test_loading_wins_over_everything(self, requirements):
        decision = evaluate_route(AuthPhase.AUTHENTICATING, None, "/dashboard", requirements)
        assert decision.action == RouteAction.LOADING

    def test_signed_out_goes_to_login_with_return_to(self):
        decision = evaluate_route(AuthPhase.UNAUTHENTICATED, None, "/admin?tab=users", ADMIN)
        assert decision.action == RouteAction.REDIRECT
        assert decision.target == LOGIN_ROUTE
        assert decision.return_to == "/admin?tab=users"
        assert parse_route(decision.redirect_path) == (
            LOGIN_ROUTE, {"return_to": "/admin?tab=users"},
        )

    def test_unverified_goes_to_verification(self, member):
        decision = evaluate_route(
            AuthPhase.AUTHENTICATED_UNVERIFIED, member, "/dashboard", PROTECTED,
        )
        assert decision.redirect_path == VERIFY_ROUTE

    def test_unverified_may_open_verification(self, member):
        decision = evaluate_route(
            AuthPhase.AUTHENTICATED_UNVERIFIED, member, VERIFY_ROUTE, AUTH_ONLY,
        )
        assert decision.action == RouteAction.RENDER

    def test_verified_leaves_verification(self, member):
        decision = evaluate_route(
            AuthPhase.AUTHENTICATED_VERIFIED, member, VERIFY_ROUTE, AUTH_ONLY,
        )
        assert decision.redirect_path == LANDING_ROUTE

    def test_non_admin_is_sent_to_landing(self, member):
        decision = evaluate_route(AuthPhase.AUTHENTICATED_VERIFIED, member, "/admin", ADMIN)
        assert decision.redirect_path == LANDING_ROUTE

    def test_admin_renders(self, admin):
        decision = evaluate_route(AuthPhase.AUTHENTICATED_VERIFIED, admin, "/admin", ADMIN)
        assert decision == RouteDecision(action=RouteAction.RENDER)

    @pytest.mark.parametrize("phase", list(AuthPhase))
    def test_public_routes_render_when_resolved(self, phase):
        if phase == AuthPhase.AUTHENTICATING:
            pytest.skip("loading frame")
        assert evaluate_route(phase, None, LOGIN_ROUTE, PUBLIC).action == RouteAction.RENDER


class TestPaths:
    def test_parse_route_with_query(self):
        assert parse_route("/reset-password?token=abc&x=1&x=2") == (
            "/reset-password", {"token": "abc", "x": "1"},
        )

    def test_parse_full_url(self):
        assert parse_route("http://localhost:5173/auth/callback?token=t") == (
            "/auth/callback", {"token": "t"},
        )

    def test_build_path(self):
        assert build_path("/login") == "/login"
        assert build_path("/login", {"return_to": "/a?b=c"}) == "/login?return_to=%2Fa%3Fb%3Dc"
