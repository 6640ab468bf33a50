"""
Route Guard.

Pure decision function consumed by the shell's navigator on every
navigation: given the auth phase, the current profile and a route's
declared requirements, decide whether to render the view, show the
loading frame, or redirect.

Check order is fixed: loading first (no redirect flashes during the
initial profile fetch), then authentication, then verification, then
role.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import parse_qs, urlencode, urlsplit

from pydantic import BaseModel, ConfigDict

from superhub.models.enums import AuthPhase, RouteAction
from superhub.models.user import UserProfile

__all__ = [
    "ADMIN_ROUTE",
    "CALLBACK_ROUTE",
    "FORGOT_PASSWORD_ROUTE",
    "LANDING_ROUTE",
    "LOGIN_ROUTE",
    "REGISTER_ROUTE",
    "RESET_PASSWORD_ROUTE",
    "VERIFY_ROUTE",
    "RouteDecision",
    "RouteRequirements",
    "build_path",
    "evaluate_route",
    "parse_route",
]

LOGIN_ROUTE: str = "/login"
REGISTER_ROUTE: str = "/register"
VERIFY_ROUTE: str = "/verify-email"
FORGOT_PASSWORD_ROUTE: str = "/forgot-password"
RESET_PASSWORD_ROUTE: str = "/reset-password"
CALLBACK_ROUTE: str = "/auth/callback"
LANDING_ROUTE: str = "/dashboard"
ADMIN_ROUTE: str = "/admin"


class RouteRequirements(BaseModel):
    """Declared access requirements of a route."""

    require_auth: bool = False
    require_verification: bool = False
    admin_only: bool = False

    model_config = ConfigDict(frozen=True)


class RouteDecision(BaseModel):
    """Outcome of :func:`evaluate_route`.

    ``target`` is set only for redirects.  ``return_to`` carries the
    originally requested location on redirects to the login page.
    """

    action: RouteAction
    target: Optional[str] = None
    return_to: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @property
    def redirect_path(self) -> Optional[str]:
        """Full redirect path, with ``return_to`` encoded as a query."""
        if self.target is None:
            return None
        if self.return_to:
            return build_path(self.target, {"return_to": self.return_to})
        return self.target


def parse_route(path: str) -> tuple[str, dict[str, str]]:
    """Split ``/reset-password?token=abc`` into ``("/reset-password", {"token": "abc"})``.

    Repeated query keys keep their first value.
    """
    parts = urlsplit(path or "/")
    query = {key: values[0] for key, values in parse_qs(parts.query).items() if values}
    return parts.path or "/", query


def build_path(route: str, query: Optional[dict[str, str]] = None) -> str:
    if not query:
        return route
    return f"{route}?{urlencode(query)}"


def evaluate_route(
    phase: AuthPhase,
    user: Optional[UserProfile],
    path: str,
    requirements: RouteRequirements,
) -> RouteDecision:
    """Decide render / loading / redirect for *path*.

    Parameters
    ----------
    phase:
        Current auth phase.
    user:
        Current profile; consulted only for the role check.
    path:
        Requested location, optionally with a query string.
    requirements:
        The route's declared requirements.
    """
    route, _ = parse_route(path)

    if phase == AuthPhase.AUTHENTICATING:
        return RouteDecision(action=RouteAction.LOADING)

    if requirements.require_auth and phase == AuthPhase.UNAUTHENTICATED:
        return RouteDecision(
            action=RouteAction.REDIRECT, target=LOGIN_ROUTE, return_to=path,
        )

    if (
        requirements.require_verification
        and phase == AuthPhase.AUTHENTICATED_UNVERIFIED
        and route != VERIFY_ROUTE
    ):
        return RouteDecision(action=RouteAction.REDIRECT, target=VERIFY_ROUTE)

    if route == VERIFY_ROUTE and phase == AuthPhase.AUTHENTICATED_VERIFIED:
        return RouteDecision(action=RouteAction.REDIRECT, target=LANDING_ROUTE)

    if requirements.admin_only and (user is None or not user.is_admin):
        return RouteDecision(action=RouteAction.REDIRECT, target=LANDING_ROUTE)

    return RouteDecision(action=RouteAction.RENDER)
