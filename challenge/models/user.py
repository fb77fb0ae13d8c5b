"""User and session models."""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class UserRole(str, Enum):
    """Roles a user can hold."""

    ADMIN = "admin"
    REGULAR = "regular"


class User(BaseModel):
    """Represents a registered user (users/{uid})."""

    uid: str
    email: str
    display_name: str = Field(..., alias="displayName")
    role: UserRole = UserRole.REGULAR
    created_at: datetime = Field(..., alias="createdAt")
    last_login_at: Optional[datetime] = Field(default=None, alias="lastLoginAt")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True


class Session(BaseModel):
    """
    The authenticated caller of a request.

    Built once at the API boundary and passed to every service call.
    """

    uid: str
    email: str = ""
    display_name: str = Field(default="", alias="displayName")
    role: UserRole = UserRole.REGULAR
    token: Optional[str] = None

    class Config:
        """Pydantic configuration."""

        populate_by_name = True

    @property
    def is_admin(self) -> bool:
        """Check if the caller holds the admin role."""
        return self.role == UserRole.ADMIN

    @classmethod
    def for_user(cls, user: User, token: Optional[str] = None) -> "Session":
        """Create a session for a stored user."""
        return cls(
            uid=user.uid,
            email=user.email,
            display_name=user.display_name,
            role=user.role,
            token=token,
        )
