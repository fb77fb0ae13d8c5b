"""
Local identity provider.

Keeps accounts in process memory with PBKDF2 password hashes and issues
random bearer tokens. Meant for development, self-hosting with a single
worker, and tests; accounts do not survive a restart.
"""

import hashlib
import hmac
import logging
import re
import secrets
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..errors import AuthenticationError
from .. import config
from .base import AuthResult, IdentityProvider
from .session_store import SessionStore

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass
class _Account:
    uid: str
    email: str
    display_name: str
    salt: str
    password_hash: str


def hash_password(password: str, salt: str, iterations: Optional[int] = None) -> str:
    """PBKDF2-SHA256 hash of a password, hex encoded."""
    digest = hashlib.pbkdf2_hmac(
        'sha256',
        password.encode('utf-8'),
        bytes.fromhex(salt),
        iterations or config.PASSWORD_HASH_ITERATIONS,
    )
    return digest.hex()


class LocalIdentityProvider(IdentityProvider):
    """In-memory accounts with TTL session tokens and sign-in throttling."""

    def __init__(self, store: Optional[SessionStore] = None, iterations: Optional[int] = None):
        self.store = store or SessionStore()
        self.iterations = iterations or config.PASSWORD_HASH_ITERATIONS
        self._accounts: Dict[str, _Account] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _normalize(email: str) -> str:
        return (email or "").strip().lower()

    def _issue(self, account: _Account, persistent: bool) -> AuthResult:
        token = secrets.token_urlsafe(32)
        self.store.put(token, account.uid, persistent=persistent)
        return AuthResult(
            uid=account.uid,
            email=account.email,
            display_name=account.display_name,
            token=token,
            persistent=persistent,
            expires_in=self.store.ttl_for(persistent),
        )

    def sign_up(self, email: str, password: str, display_name: str) -> AuthResult:
        email = self._normalize(email)
        if not EMAIL_PATTERN.match(email):
            raise AuthenticationError('invalid-email')
        if len(password or "") < config.MIN_PASSWORD_LENGTH:
            raise AuthenticationError('weak-password')

        salt = secrets.token_hex(16)
        with self._lock:
            if email in self._accounts:
                raise AuthenticationError('email-already-in-use')
            account = _Account(
                uid=uuid.uuid4().hex,
                email=email,
                display_name=display_name,
                salt=salt,
                password_hash=hash_password(password, salt, self.iterations),
            )
            self._accounts[email] = account

        logger.info(f"Account created for {email}")
        return self._issue(account, persistent=False)

    def sign_in(self, email: str, password: str, remember_me: bool = False) -> AuthResult:
        email = self._normalize(email)
        if self.store.failures(email) >= config.MAX_FAILED_LOGINS:
            raise AuthenticationError('too-many-requests')

        with self._lock:
            account = self._accounts.get(email)
        if account is None:
            self.store.record_failure(email)
            raise AuthenticationError('user-not-found')

        candidate = hash_password(password or "", account.salt, self.iterations)
        if not hmac.compare_digest(candidate, account.password_hash):
            failures = self.store.record_failure(email)
            logger.warning(f"Failed sign-in for {email} ({failures})")
            raise AuthenticationError('wrong-password')

        self.store.clear_failures(email)
        return self._issue(account, persistent=remember_me)

    def sign_out(self, token: str) -> None:
        self.store.delete(token)

    def verify_token(self, token: str) -> str:
        uid = self.store.get(token) if token else None
        if uid is None:
            raise AuthenticationError('invalid-session')
        return uid

    def update_display_name(self, uid: str, display_name: str) -> None:
        with self._lock:
            for account in self._accounts.values():
                if account.uid == uid:
                    account.display_name = display_name
                    return

    def delete_account(self, uid: str) -> bool:
        """Remove an account and its sessions."""
        with self._lock:
            for email, account in list(self._accounts.items()):
                if account.uid == uid:
                    del self._accounts[email]
                    self.store.delete_user(uid)
                    return True
            return False

    def stats(self) -> Dict[str, Any]:
        return {'accounts': len(self._accounts), 'sessions': self.store.stats()}

    def close(self) -> None:
        self.store.clear()
