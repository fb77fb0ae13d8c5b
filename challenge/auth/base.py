"""
Abstract base class defining the identity provider interface.

An identity provider owns credentials and session tokens. User documents
(role, display name, timestamps) live in the database and are managed by
the user service.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class AuthResult(BaseModel):
    """Outcome of a successful sign-up or sign-in."""

    uid: str
    email: str
    display_name: str = Field(default="", alias="displayName")
    token: Optional[str] = None
    persistent: bool = False
    expires_in: int = Field(default=0, alias="expiresIn")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True


class IdentityProvider(ABC):
    """
    Abstract interface for authentication backends.

    Failures raise AuthenticationError with a provider-neutral code.
    """

    @abstractmethod
    def sign_up(self, email: str, password: str, display_name: str) -> AuthResult:
        """
        Create an account and start a session.

        Raises:
            AuthenticationError: email-already-in-use, weak-password, invalid-email
        """
        pass

    @abstractmethod
    def sign_in(self, email: str, password: str, remember_me: bool = False) -> AuthResult:
        """
        Start a session.

        Args:
            email: Account email
            password: Account password
            remember_me: Persistent session instead of a session-scoped one

        Raises:
            AuthenticationError: user-not-found, wrong-password, too-many-requests
        """
        pass

    @abstractmethod
    def sign_out(self, token: str) -> None:
        """End a session. Unknown tokens are ignored."""
        pass

    @abstractmethod
    def verify_token(self, token: str) -> str:
        """
        Resolve a bearer token to a user id.

        Raises:
            AuthenticationError: invalid-session
        """
        pass

    @abstractmethod
    def update_display_name(self, uid: str, display_name: str) -> None:
        """Update the display name kept by the provider."""
        pass

    @abstractmethod
    def delete_account(self, uid: str) -> bool:
        """
        Remove an account and end its sessions.

        Returns:
            True if the account existed
        """
        pass

    def stats(self) -> Dict[str, Any]:
        """Session bookkeeping for /health. Empty when the provider keeps none."""
        return {}

    def close(self) -> None:
        """Release provider resources."""
        pass
