"""
Authentication for the challenge API.

Usage:
    from challenge.auth import get_identity_provider

    provider = get_identity_provider()  # Uses AUTH_PROVIDER env var
    result = provider.sign_in(email, password, remember_me=True)
"""

from .base import AuthResult, IdentityProvider
from .factory import get_identity_provider, reset_identity_provider
from .session_store import SessionStore

__all__ = [
    'AuthResult',
    'IdentityProvider',
    'SessionStore',
    'get_identity_provider',
    'reset_identity_provider',
]
