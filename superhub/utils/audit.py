"""
Structured Audit Logging Utility.

Every session state change (sign-in, verification, logout, forced
expiry...) is logged as one structured JSON object.  Provides a
Pydantic-validated model and a single function for consistent audit
trail entries.

Secrets never enter the audit trail: passwords, OTP codes and bearer
tokens are rejected by :class:`AuditEvent`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

from superhub.logger import StructuredLogger

__all__ = ["AuditAction", "AuditEvent", "log_audit_event"]

# Flat scalars only; nested structures do not belong in the audit log.
DetailValue = Union[str, int, float, bool, None]

_FORBIDDEN_DETAIL_KEYS: frozenset[str] = frozenset({
    "password",
    "new_password",
    "current_password",
    "confirm_password",
    "otp",
    "token",
})


class AuditAction(StrEnum):
    LOGIN = "LOGIN"
    LOGIN_FAILED = "LOGIN_FAILED"
    REGISTER = "REGISTER"
    EMAIL_VERIFIED = "EMAIL_VERIFIED"
    OTP_RESENT = "OTP_RESENT"
    PASSWORD_RESET_REQUESTED = "PASSWORD_RESET_REQUESTED"
    PASSWORD_RESET = "PASSWORD_RESET"
    PASSWORD_CHANGED = "PASSWORD_CHANGED"
    PROFILE_UPDATED = "PROFILE_UPDATED"
    LOGOUT = "LOGOUT"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    SESSION_RESTORED = "SESSION_RESTORED"
    OAUTH_LOGIN = "OAUTH_LOGIN"
    ACCOUNT_DELETED = "ACCOUNT_DELETED"


class AuditEvent(BaseModel):
    """Schema-validated representation of a single audit trail entry."""

    timestamp: str
    action: AuditAction
    user_id: Optional[str] = None
    details: dict[str, DetailValue] = Field(default_factory=dict)

    @field_validator("details")
    @classmethod
    def _no_secrets(cls, value: dict[str, DetailValue]) -> dict[str, DetailValue]:
        leaked = _FORBIDDEN_DETAIL_KEYS.intersection(key.lower() for key in value)
        if leaked:
            raise ValueError(f"Secret fields may not be audited: {sorted(leaked)}")
        return value


def log_audit_event(
    logger: StructuredLogger,
    action: AuditAction,
    user_id: Optional[str] = None,
    details: Optional[dict[str, DetailValue]] = None,
) -> AuditEvent:
    """Log a structured audit event and return it.

    The action is attached as ``extra["event"]`` so the JSON formatter
    emits it as a filterable field next to the message.

    Args:
        logger: The logger instance to write to.
        action: What happened.
        user_id: ID of the affected account, when known.
        details: Optional flat context (e.g. ``{"email": ...}``).
    """
    event = AuditEvent(
        timestamp=datetime.now(timezone.utc).isoformat(),
        action=action,
        user_id=user_id,
        details=details or {},
    )
    extra: dict[str, DetailValue] = {"event": event.action.value}
    if event.user_id is not None:
        extra["user_id"] = event.user_id
    for key, value in event.details.items():
        extra[f"detail_{key}"] = value
    logger.info("AUDIT: %s", event.action.value, extra=extra)
    return event
