"""
Credential Validators.

Pure, side-effect-free checks for name, email and password input that
run on every keystroke and again on submit, before any network call.

Every function returns a ``ValidationResult`` (or a field → message
error map for whole-form checks) and never raises.  Rules are evaluated
in a fixed order and the first failing rule's message wins, so error
messages stay deterministic.
"""

from __future__ import annotations

import re
from typing import Final

from superhub.models.auth_models import (
    LoginDraft,
    PasswordRequirement,
    PasswordResetRequest,
    PasswordStrength,
    RegistrationDraft,
    ValidationResult,
)

__all__ = [
    "COMMON_DOMAIN_TYPOS",
    "DISPOSABLE_DOMAINS",
    "normalize_email",
    "password_strength",
    "validate_confirm_password",
    "validate_email",
    "validate_forgot_password",
    "validate_login",
    "validate_name",
    "validate_password_reset",
    "validate_registration",
]


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_NAME_MIN: Final[int] = 2
_NAME_MAX: Final[int] = 50

_DIGIT_RE: re.Pattern[str] = re.compile(r"[0-9]")
_NAME_CHARSET_RE: re.Pattern[str] = re.compile(r"^[A-Za-z\s'-]+$")
_NAME_START_RE: re.Pattern[str] = re.compile(r"^[A-Za-z][A-Za-z\s'-]*$")

_EMAIL_SHAPE_RE: re.Pattern[str] = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_LOGIN_EMAIL_RE: re.Pattern[str] = re.compile(r"\S+@\S+\.\S+")

_UPPER_RE: re.Pattern[str] = re.compile(r"[A-Z]")
_LOWER_RE: re.Pattern[str] = re.compile(r"[a-z]")
_SPECIAL_RE: re.Pattern[str] = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")

COMMON_DOMAIN_TYPOS: Final[dict[str, str]] = {
    "gmial.com": "gmail.com",
    "gmal.com": "gmail.com",
    "gamil.com": "gmail.com",
    "gnail.com": "gmail.com",
    "gmail.con": "gmail.com",
    "gmail.co": "gmail.com",
    "hotmal.com": "hotmail.com",
    "hotmial.com": "hotmail.com",
    "hotmail.con": "hotmail.com",
    "yahooo.com": "yahoo.com",
    "yaho.com": "yahoo.com",
    "yahoo.con": "yahoo.com",
    "outlok.com": "outlook.com",
    "outloo.com": "outlook.com",
}

DISPOSABLE_DOMAINS: Final[frozenset[str]] = frozenset({
    "tempmail.com",
    "throwaway.com",
    "mailinator.com",
    "guerrillamail.com",
    "temp-mail.org",
    "10minutemail.com",
    "fakeinbox.com",
    "trashmail.com",
})

# Per-check weights.  Four required checks at 20 plus two bonus checks
# at 10 sum to exactly 100.
_REQUIRED_WEIGHT: Final[int] = 20
_BONUS_WEIGHT: Final[int] = 10


# ---------------------------------------------------------------------------
# Field validators
# ---------------------------------------------------------------------------

def normalize_email(email: str) -> str:
    """Strip whitespace and lowercase."""
    return email.strip().lower()


def validate_name(name: str) -> ValidationResult:
    """Validate a display name.

    Rule order: length ≥ 2, length ≤ 50, no digits, allowed characters
    (letters, space, hyphen, apostrophe), starts with a letter.
    Empty input yields an invalid result with an empty message so the
    field shows nothing until the user types.
    """
    if not name:
        return ValidationResult(is_valid=False)

    trimmed = name.strip()

    if len(trimmed) < _NAME_MIN:
        return ValidationResult(
            is_valid=False, message="Name must be at least 2 characters",
        )
    if len(trimmed) > _NAME_MAX:
        return ValidationResult(
            is_valid=False, message="Name must be less than 50 characters",
        )
    if _DIGIT_RE.search(trimmed):
        return ValidationResult(is_valid=False, message="Name cannot contain numbers")
    if not _NAME_CHARSET_RE.match(trimmed):
        return ValidationResult(
            is_valid=False,
            message="Name can only contain letters, spaces, hyphens, and apostrophes",
        )
    if not _NAME_START_RE.match(trimmed):
        return ValidationResult(is_valid=False, message="Name must start with a letter")

    return ValidationResult(is_valid=True, message="Looks good!")


def validate_email(email: str) -> ValidationResult:
    """Validate an email address for registration.

    Rule order: ``local@domain.tld`` shape, known domain typo (returns
    a ``suggestion`` with the corrected domain), top-level label of at
    least two characters, disposable domain, non-empty local part.
    """
    if not email:
        return ValidationResult(is_valid=False)

    normalized = normalize_email(email)

    if not _EMAIL_SHAPE_RE.match(normalized):
        return ValidationResult(
            is_valid=False, message="Please enter a valid email address",
        )

    local_part, domain = normalized.split("@", 1)

    corrected = COMMON_DOMAIN_TYPOS.get(domain)
    if corrected is not None:
        return ValidationResult(
            is_valid=False,
            message=f"Did you mean @{corrected}?",
            suggestion=f"{local_part}@{corrected}",
        )

    tld = domain.rsplit(".", 1)[-1]
    if len(tld) < 2:
        return ValidationResult(
            is_valid=False, message="Please enter a valid email domain",
        )

    if domain in DISPOSABLE_DOMAINS:
        return ValidationResult(
            is_valid=False, message="Please use a permanent email address",
        )

    if len(local_part) < 1:
        return ValidationResult(is_valid=False, message="Email username is too short")

    return ValidationResult(is_valid=True, message="We'll send important updates here")


def password_strength(password: str) -> PasswordStrength:
    """Score *password* against six independent checks.

    The first four checks are required and weigh 20 each; the last two
    are bonus checks weighing 10 each.  Label thresholds: below 40
    ``Weak``, below 60 ``Fair``, below 80 ``Good``, otherwise ``Strong``.
    An empty password yields an empty report.
    """
    if not password:
        return PasswordStrength()

    requirements = (
        PasswordRequirement(
            label="At least 8 characters", met=len(password) >= 8, required=True,
        ),
        PasswordRequirement(
            label="Contains uppercase letter",
            met=bool(_UPPER_RE.search(password)),
            required=True,
        ),
        PasswordRequirement(
            label="Contains lowercase letter",
            met=bool(_LOWER_RE.search(password)),
            required=True,
        ),
        PasswordRequirement(
            label="Contains a number",
            met=bool(_DIGIT_RE.search(password)),
            required=True,
        ),
        PasswordRequirement(
            label="Contains special character (!@#$%^&*)",
            met=bool(_SPECIAL_RE.search(password)),
            required=False,
        ),
        PasswordRequirement(
            label="At least 12 characters", met=len(password) >= 12, required=False,
        ),
    )

    score = sum(
        _REQUIRED_WEIGHT if req.required else _BONUS_WEIGHT
        for req in requirements
        if req.met
    )
    score = min(score, 100)

    if score < 40:
        label = "Weak"
    elif score < 60:
        label = "Fair"
    elif score < 80:
        label = "Good"
    else:
        label = "Strong"

    return PasswordStrength(score=score, label=label, requirements=requirements)


def validate_confirm_password(password: str, confirm_password: str) -> ValidationResult:
    """Equality check, recomputed whenever either field changes."""
    if not confirm_password:
        return ValidationResult(is_valid=False)
    if password != confirm_password:
        return ValidationResult(is_valid=False, message="Passwords do not match")
    return ValidationResult(is_valid=True, message="Passwords match")


def _password_policy_error(password: str) -> str | None:
    strength = password_strength(password)
    unmet = strength.unmet_required
    if unmet:
        return "Password must have: " + ", ".join(req.label.lower() for req in unmet)
    return None


# ---------------------------------------------------------------------------
# Whole-form checks (submit time)
# ---------------------------------------------------------------------------

def validate_registration(draft: RegistrationDraft) -> dict[str, str]:
    """Aggregate per-field results into a submit-time error map.

    An empty map means the draft may be sent to the backend.
    """
    errors: dict[str, str] = {}

    if not draft.name:
        errors["name"] = "Name is required"
    else:
        name_check = validate_name(draft.name)
        if not name_check.is_valid:
            errors["name"] = name_check.message

    if not draft.email:
        errors["email"] = "Email is required"
    else:
        email_check = validate_email(draft.email)
        if not email_check.is_valid:
            errors["email"] = email_check.message

    if not draft.password:
        errors["password"] = "Password is required"
    else:
        policy_error = _password_policy_error(draft.password)
        if policy_error:
            errors["password"] = policy_error

    if not draft.confirm_password:
        errors["confirm_password"] = "Please confirm your password"
    elif draft.password != draft.confirm_password:
        errors["confirm_password"] = "Passwords do not match"

    return errors


def validate_login(draft: LoginDraft) -> dict[str, str]:
    """Presence and loose shape checks only; the backend owns the rest."""
    errors: dict[str, str] = {}
    if not draft.email:
        errors["email"] = "Email is required"
    elif not _LOGIN_EMAIL_RE.search(draft.email):
        errors["email"] = "Invalid email"
    if not draft.password:
        errors["password"] = "Password is required"
    return errors


def validate_forgot_password(email: str) -> dict[str, str]:
    if not email:
        return {"email": "Email is required"}
    if not _EMAIL_SHAPE_RE.match(email.strip()):
        return {"email": "Please enter a valid email address"}
    return {}


def validate_password_reset(request: PasswordResetRequest) -> dict[str, str]:
    """Validate a reset (or change-password) form before submission."""
    if not request.new_password:
        return {"password": "Password is required"}
    if not password_strength(request.new_password).meets_required:
        return {"password": "Password does not meet requirements"}
    if request.new_password != request.confirm_password:
        return {"confirm_password": "Passwords do not match"}
    return {}
