"""
Shared Enumerations for Super Hub Models.

All string enumerations for type-safe field constraints.
StrEnum values compare equal to their string equivalents,
so code like ``if role == 'admin'`` keeps working.
"""

from __future__ import annotations
from enum import StrEnum


class UserRole(StrEnum):
    """Roles issued by the backend."""

    USER = "user"
    ADMIN = "admin"


class AuthPhase(StrEnum):
    """Canonical session state consumed by every screen.

    ``AUTHENTICATING`` is transient: it only exists while the profile
    fetch that follows a restored or OAuth-issued token is in flight.
    """

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED_UNVERIFIED = "authenticated-unverified"
    AUTHENTICATED_VERIFIED = "authenticated-verified"


class ApiErrorKind(StrEnum):
    """Normalized failure categories produced by ``AuthApiClient``."""

    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    TRANSPORT = "transport"
    SERVER = "server"


class RouteAction(StrEnum):
    """Outcome of a route guard evaluation."""

    RENDER = "render"
    LOADING = "loading"
    REDIRECT = "redirect"
