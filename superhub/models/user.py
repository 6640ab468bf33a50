"""
User Profile Model.

Mirror of the public user document returned by the backend.  The
profile is frozen: a fresher profile replaces the old one wholesale,
it is never patched field by field.
"""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from superhub.models.enums import UserRole


class UserProfile(BaseModel):
    """Represents the authenticated account.

    The backend serialises Mongo documents, so ``id`` may arrive as
    ``_id``; ``isEmailVerified`` arrives camel-cased.
    """

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    name: str
    email: str
    role: UserRole = UserRole.USER
    is_email_verified: bool = Field(
        default=False,
        validation_alias=AliasChoices("is_email_verified", "isEmailVerified"),
    )
    avatar: Optional[str] = None
    google_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("google_id", "googleId"),
    )

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def has_password(self) -> bool:
        """Accounts created through Google sign-in have no local password."""
        return self.google_id is None
