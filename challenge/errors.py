"""
Application-level exceptions.

Each exception carries the HTTP status the API layer answers with:
- InvalidInputError: rejected input, caught before anything is written (400)
- AuthenticationError: identity provider failures, keyed by a code
- PermissionDeniedError: the session's role does not allow the operation (403)
- NotFoundError: missing user, competition, participant or weigh-in (404)
- ConflictError: duplicate competition year or participant, bad transition (409)

Storage failures use the separate DatabaseError family in challenge.storage.
"""

from typing import Optional

from . import config


class ChallengeError(Exception):
    """Base exception for all application errors."""

    status_code = 500

    def __init__(self, message: str = "An error occurred. Please try again"):
        super().__init__(message)
        self.message = message


class InvalidInputError(ChallengeError):
    """Input failed validation."""

    status_code = 400


class PermissionDeniedError(ChallengeError):
    """Caller is not allowed to perform this operation."""

    status_code = 403


class NotFoundError(ChallengeError):
    """Requested record does not exist."""

    status_code = 404


class ConflictError(ChallengeError):
    """Operation conflicts with existing state."""

    status_code = 409


# Provider-neutral authentication error codes and their user-facing messages
AUTH_ERROR_MESSAGES = {
    'user-not-found': 'No user found with this email address',
    'wrong-password': 'Incorrect password',
    'email-already-in-use': 'An account with this email already exists',
    'weak-password': 'Password should be at least {min_password_length} characters',
    'invalid-email': 'Invalid email address',
    'too-many-requests': 'Too many failed attempts. Please try again later',
    'invalid-session': 'Your session has expired. Please sign in again',
}

AUTH_ERROR_STATUS = {
    'user-not-found': 401,
    'wrong-password': 401,
    'email-already-in-use': 409,
    'weak-password': 400,
    'invalid-email': 400,
    'too-many-requests': 429,
    'invalid-session': 401,
}


class AuthenticationError(ChallengeError):
    """Identity provider rejected the request."""

    def __init__(self, code: str, message: Optional[str] = None):
        if message is None:
            message = AUTH_ERROR_MESSAGES.get(code, 'An error occurred. Please try again').format(
                min_password_length=config.MIN_PASSWORD_LENGTH
            )
        super().__init__(message)
        self.code = code
        self.status_code = AUTH_ERROR_STATUS.get(code, 400)
