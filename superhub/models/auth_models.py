"""
Authentication Pipeline Models.

Pydantic models for the auth request/response contracts between the
backend, ``AuthApiClient``, ``AuthService`` and the UI layer.

Every auth operation returns a structured, inspectable result rather
than raw dicts or exception side-channels.  Backend payloads are
validated and narrowed here, at the boundary, so downstream code never
branches on loosely typed optional fields.
"""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from superhub.models.enums import ApiErrorKind, AuthPhase
from superhub.models.user import UserProfile


# ---------------------------------------------------------------------------
# Validation results
# ---------------------------------------------------------------------------

class ValidationResult(BaseModel):
    """Result of a single client-side field validation check.

    Attributes
    ----------
    is_valid:
        ``True`` when the value passes every rule.
    message:
        Describes exactly one violated rule when ``is_valid`` is ``False``;
        a friendly hint when valid; empty for untouched input.
    suggestion:
        Corrected email address, set only for the domain-typo case.
    """

    is_valid: bool
    message: str = ""
    suggestion: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class PasswordRequirement(BaseModel):
    """One strength check.  ``required`` checks block submission."""

    label: str
    met: bool
    required: bool

    model_config = ConfigDict(frozen=True)


class PasswordStrength(BaseModel):
    """Derived strength report for a password."""

    score: int = 0
    label: str = ""
    requirements: tuple[PasswordRequirement, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def unmet_required(self) -> list[PasswordRequirement]:
        return [req for req in self.requirements if req.required and not req.met]

    @property
    def meets_required(self) -> bool:
        """``True`` when every required check passes (empty password fails)."""
        return bool(self.requirements) and not self.unmet_required


# ---------------------------------------------------------------------------
# Transient drafts (UI-local, never persisted)
# ---------------------------------------------------------------------------

class RegistrationDraft(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""


class LoginDraft(BaseModel):
    email: str = ""
    password: str = ""


class PasswordResetRequest(BaseModel):
    """Reset form state.  ``token`` comes from the reset link URL."""

    token: Optional[str] = None
    new_password: str = ""
    confirm_password: str = ""


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

class Session(BaseModel):
    """The single ``{token, user}`` pair owned by ``SessionStore``.

    A user without a token is never valid.  A token without a user is
    the transient shape held while the profile fetch is in flight.
    """

    token: Optional[str] = None
    user: Optional[UserProfile] = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _user_requires_token(self) -> "Session":
        if self.user is not None and not self.token:
            raise ValueError("A session cannot hold a user without a token.")
        return self

    @classmethod
    def empty(cls) -> "Session":
        return cls(token=None, user=None)

    @property
    def is_complete(self) -> bool:
        return self.token is not None and self.user is not None


# ---------------------------------------------------------------------------
# Backend response shapes (the ``data`` member of the envelope)
# ---------------------------------------------------------------------------

class _ApiPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class RegisterResponse(_ApiPayload):
    token: str
    user: UserProfile
    requires_verification: bool = Field(
        default=True,
        validation_alias=AliasChoices("requires_verification", "requiresVerification"),
    )


class LoginResponse(_ApiPayload):
    token: str
    user: UserProfile
    requires_verification: bool = Field(
        default=False,
        validation_alias=AliasChoices("requires_verification", "requiresVerification"),
    )


class ProfileResponse(_ApiPayload):
    user: UserProfile


# ---------------------------------------------------------------------------
# Error shape
# ---------------------------------------------------------------------------

class ApiErrorDetail(BaseModel):
    """The single normalized failure shape emitted by ``AuthApiClient``."""

    kind: ApiErrorKind
    message: str
    status_code: Optional[int] = None

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Unified auth response
# ---------------------------------------------------------------------------

class AuthResult(BaseModel):
    """Unified response for every ``AuthService`` operation.

    The UI inspects ``success`` for happy-path vs. error-path rendering,
    ``field_errors`` for inline messages and ``next_route`` for where to
    go next.

    Attributes
    ----------
    success:
        ``True`` when the operation completed without error.
    error_kind:
        Structured error category (``None`` on success).
    error_message:
        Form-level, human-readable message.  On success it may carry an
        informational message (e.g. forgot-password confirmation).
    field_errors:
        Per-field validation messages; non-empty only for client-side
        validation failures, in which case no backend call was made.
    phase:
        Auth phase after the operation.
    user:
        Profile after the operation, when one exists.
    requires_verification:
        ``True`` when the account still has to confirm its email.
    next_route:
        Route the UI should navigate to, if any.
    stale:
        ``True`` when the response arrived after the session it belonged
        to was torn down and was therefore ignored.
    """

    success: bool
    error_kind: Optional[ApiErrorKind] = None
    error_message: Optional[str] = None
    field_errors: dict[str, str] = Field(default_factory=dict)
    phase: Optional[AuthPhase] = None
    user: Optional[UserProfile] = None
    requires_verification: bool = False
    next_route: Optional[str] = None
    stale: bool = False

    @classmethod
    def unexpected(cls, message: str = "Something went wrong. Please try again.") -> "AuthResult":
        """Failed result standing in for an operation that raised."""
        return cls(success=False, error_kind=ApiErrorKind.SERVER, error_message=message)
