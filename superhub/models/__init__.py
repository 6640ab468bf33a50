from __future__ import annotations

"""
Data Models Package.

Re-exports the Pydantic models for short imports:
    from superhub.models import UserProfile, Session, AuthResult
    from superhub.models import UserRole, AuthPhase
"""

from superhub.models.enums import ApiErrorKind, AuthPhase, RouteAction, UserRole
from superhub.models.user import UserProfile
from superhub.models.auth_models import (
    ApiErrorDetail,
    AuthResult,
    LoginDraft,
    PasswordRequirement,
    PasswordResetRequest,
    PasswordStrength,
    RegistrationDraft,
    Session,
    ValidationResult,
)

__all__ = [
    "ApiErrorKind",
    "AuthPhase",
    "RouteAction",
    "UserRole",
    "UserProfile",
    "ApiErrorDetail",
    "AuthResult",
    "LoginDraft",
    "PasswordRequirement",
    "PasswordResetRequest",
    "PasswordStrength",
    "RegistrationDraft",
    "Session",
    "ValidationResult",
]
