"""
User Service - Accounts, sign-in and roles.

Credentials and tokens belong to the identity provider; the user document
(display name, role, timestamps) lives in the database.
"""

import logging
from datetime import datetime, timezone
from typing import List, Tuple

from ..auth import AuthResult, IdentityProvider
from ..errors import AuthenticationError, InvalidInputError, NotFoundError
from ..models import User, UserRole, Session
from ..storage import DatabaseError, DatabaseInterface, parse_document, to_document
from .. import config
from .access import require_admin

logger = logging.getLogger(__name__)

MAX_DISPLAY_NAME_LENGTH = 100


def clean_display_name(display_name: str) -> str:
    name = (display_name or "").strip()
    if not name:
        raise InvalidInputError("Display name is required")
    if len(name) > MAX_DISPLAY_NAME_LENGTH:
        raise InvalidInputError(f"Display name must be at most {MAX_DISPLAY_NAME_LENGTH} characters")
    return name


class UserService:
    """Register, sign in and manage users."""

    def __init__(self, db: DatabaseInterface, identity: IdentityProvider):
        self.db = db
        self.identity = identity

    def _initial_role(self, email: str) -> UserRole:
        if email.strip().lower() in config.ADMIN_EMAILS:
            return UserRole.ADMIN
        return UserRole.REGULAR

    def _create_user(self, result: AuthResult, display_name: str) -> User:
        now = datetime.now(timezone.utc)
        user = User(
            uid=result.uid,
            email=result.email,
            display_name=display_name,
            role=self._initial_role(result.email),
            created_at=now,
            last_login_at=now,
        )
        self.db.save_user(to_document(user))
        logger.info(f"User document created for {user.uid} ({user.role.value})")
        return user

    # =========================================================================
    # AUTHENTICATION
    # =========================================================================

    def register(self, email: str, password: str, display_name: str) -> Tuple[AuthResult, User]:
        """
        Create an account and its user document.

        Returns:
            (auth result with session token, new user)

        Raises:
            AuthenticationError: Provider rejected the sign-up
            DatabaseError: The user document could not be written; the new
                           account is removed again
        """
        display_name = clean_display_name(display_name)
        result = self.identity.sign_up(email, password, display_name)
        try:
            user = self._create_user(result, display_name)
        except DatabaseError:
            logger.error(f"User document for {result.uid} not written, removing the account")
            try:
                self.identity.delete_account(result.uid)
            except DatabaseError as e:
                logger.error(f"Could not remove account {result.uid}: {e}")
            raise
        return result, user

    def sign_in(self, email: str, password: str, remember_me: bool = False) -> Tuple[AuthResult, User]:
        """
        Start a session and record the login time.

        A missing user document is created on first sign-in.
        """
        result = self.identity.sign_in(email, password, remember_me=remember_me)
        user = parse_document(User, self.db.get_user(result.uid))
        if user is None:
            return result, self._create_user(result, result.display_name or result.email.split('@')[0])

        user = user.model_copy(update={'last_login_at': datetime.now(timezone.utc)})
        self.db.update_user(user.uid, {'lastLoginAt': to_document(user)['lastLoginAt']})
        return result, user

    def sign_out(self, token: str) -> None:
        self.identity.sign_out(token)

    def resolve_session(self, token: str) -> Session:
        """
        Build the Session of a bearer token.

        Raises:
            AuthenticationError: invalid-session when the token is unknown or
                                 its user document is gone
        """
        uid = self.identity.verify_token(token)
        user = parse_document(User, self.db.get_user(uid))
        if user is None:
            raise AuthenticationError('invalid-session')
        return Session.for_user(user, token=token)

    # =========================================================================
    # PROFILE
    # =========================================================================

    def get_user(self, uid: str) -> User:
        user = parse_document(User, self.db.get_user(uid))
        if user is None:
            raise NotFoundError(f"User {uid} not found")
        return user

    def get_profile(self, session: Session) -> User:
        return self.get_user(session.uid)

    def update_display_name(self, session: Session, display_name: str) -> User:
        """Change the caller's display name with the provider and in the user document."""
        display_name = clean_display_name(display_name)
        self.identity.update_display_name(session.uid, display_name)
        if not self.db.update_user(session.uid, {'displayName': display_name}):
            raise NotFoundError(f"User {session.uid} not found")
        return self.get_user(session.uid)

    # =========================================================================
    # ADMIN
    # =========================================================================

    def list_users(self, session: Session) -> List[User]:
        require_admin(session)
        return [parse_document(User, doc) for doc in self.db.get_users()]

    def set_role(self, session: Session, uid: str, role: UserRole) -> User:
        """Change a user's role (admin only)."""
        require_admin(session)
        if not self.db.update_user(uid, {'role': UserRole(role).value}):
            raise NotFoundError(f"User {uid} not found")
        logger.info(f"Role of {uid} set to {UserRole(role).value} by {session.uid}")
        return self.get_user(uid)
