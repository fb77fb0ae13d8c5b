"""
Supabase identity provider.

Uses Supabase Auth through supabase-py. Sign-up and sign-in run on a
fresh client each time so one user's session never lands on the shared
client; token checks and profile updates use the shared service client.

Requires: pip install supabase
Reads SUPABASE_URL and SUPABASE_KEY (service role key).
"""

import logging
import os
from typing import Optional

from ..errors import AuthenticationError
from ..storage.exceptions import ConfigurationError, ConnectionError
from .base import AuthResult, IdentityProvider

logger = logging.getLogger(__name__)

# Supabase Auth error codes -> provider-neutral codes
ERROR_CODES = {
    'user_already_exists': 'email-already-in-use',
    'email_exists': 'email-already-in-use',
    'weak_password': 'weak-password',
    'invalid_credentials': 'wrong-password',
    'user_not_found': 'user-not-found',
    'email_address_invalid': 'invalid-email',
    'validation_failed': 'invalid-email',
    'over_request_rate_limit': 'too-many-requests',
    'over_email_send_rate_limit': 'too-many-requests',
    'bad_jwt': 'invalid-session',
    'no_authorization': 'invalid-session',
    'session_not_found': 'invalid-session',
    'session_expired': 'invalid-session',
}


def map_auth_error(error: Exception, default: str) -> AuthenticationError:
    """Translate a supabase-py auth exception into an AuthenticationError."""
    code = getattr(error, 'code', None)
    if code in ERROR_CODES:
        return AuthenticationError(ERROR_CODES[code])
    if getattr(error, 'status', None) == 429:
        return AuthenticationError('too-many-requests')
    return AuthenticationError(default)


class SupabaseIdentityProvider(IdentityProvider):
    """Supabase Auth implementation of the IdentityProvider interface."""

    def __init__(self):
        self._url = os.environ.get('SUPABASE_URL')
        self._key = os.environ.get('SUPABASE_KEY')
        self._client = None

        if not self._url or not self._key:
            raise ConfigurationError(
                "SUPABASE_URL and SUPABASE_KEY environment variables are required "
                "for the Supabase identity provider"
            )

    def _new_client(self):
        try:
            from supabase import create_client
        except ImportError:
            raise ConfigurationError(
                "supabase package not installed. "
                "Install with: pip install supabase"
            )

        try:
            return create_client(self._url, self._key)
        except Exception as e:
            raise ConnectionError(f"Failed to create Supabase client: {e}")

    def _get_client(self):
        """Get or create the shared service client."""
        if self._client is None:
            self._client = self._new_client()
        return self._client

    @staticmethod
    def _result(response, persistent: bool) -> AuthResult:
        user = response.user
        session = response.session
        metadata = getattr(user, 'user_metadata', None) or {}
        return AuthResult(
            uid=user.id,
            email=user.email or "",
            display_name=metadata.get('display_name', ""),
            token=session.access_token if session else None,
            persistent=persistent,
            expires_in=(session.expires_in or 0) if session else 0,
        )

    def sign_up(self, email: str, password: str, display_name: str) -> AuthResult:
        try:
            response = self._new_client().auth.sign_up({
                'email': email,
                'password': password,
                'options': {'data': {'display_name': display_name}},
            })
        except Exception as e:
            logger.warning(f"Supabase sign-up failed for {email}: {e}")
            raise map_auth_error(e, 'invalid-email')

        if response.user is None:
            raise AuthenticationError('invalid-email')
        if response.session is None:
            # Email confirmation pending; no token until the user confirms
            logger.info(f"Sign-up for {email} awaits email confirmation")
        return self._result(response, persistent=False)

    def sign_in(self, email: str, password: str, remember_me: bool = False) -> AuthResult:
        try:
            response = self._new_client().auth.sign_in_with_password({
                'email': email,
                'password': password,
            })
        except Exception as e:
            logger.warning(f"Supabase sign-in failed for {email}: {e}")
            raise map_auth_error(e, 'wrong-password')

        if response.user is None or response.session is None:
            raise AuthenticationError('wrong-password')
        return self._result(response, persistent=remember_me)

    def sign_out(self, token: str) -> None:
        try:
            self._get_client().auth.admin.sign_out(token)
        except Exception as e:
            logger.warning(f"Supabase sign-out failed: {e}")

    def verify_token(self, token: str) -> str:
        if not token:
            raise AuthenticationError('invalid-session')
        try:
            response = self._get_client().auth.get_user(token)
        except Exception as e:
            raise map_auth_error(e, 'invalid-session')

        if response is None or response.user is None:
            raise AuthenticationError('invalid-session')
        return response.user.id

    def update_display_name(self, uid: str, display_name: str) -> None:
        try:
            self._get_client().auth.admin.update_user_by_id(
                uid, {'user_metadata': {'display_name': display_name}}
            )
        except Exception as e:
            raise ConnectionError(f"Failed to update Supabase user {uid}: {e}")

    def delete_account(self, uid: str) -> bool:
        try:
            self._get_client().auth.admin.delete_user(uid)
        except Exception as e:
            if getattr(e, 'code', None) == 'user_not_found':
                return False
            raise ConnectionError(f"Failed to delete Supabase user {uid}: {e}")
        logger.info(f"Deleted Supabase user {uid}")
        return True

    def close(self) -> None:
        self._client = None
