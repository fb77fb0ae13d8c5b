"""In-memory session and login-attempt store with TTL support."""

from typing import Any, Optional
from cachetools import TTLCache
import threading

from .. import config


class SessionStore:
    """Thread-safe in-memory store with different TTLs per session kind."""

    def __init__(
        self,
        session_ttl: Optional[int] = None,
        persistent_ttl: Optional[int] = None,
        lockout_ttl: Optional[int] = None,
    ) -> None:
        """Initialize stores with the configured TTLs (in seconds)."""
        session_ttl = session_ttl or config.SESSION_TTL_MINUTES * 60
        persistent_ttl = persistent_ttl or config.REMEMBER_ME_TTL_DAYS * 24 * 3600
        lockout_ttl = lockout_ttl or config.LOGIN_LOCKOUT_SECONDS

        # Tab-scoped logins and "remember me" logins expire differently
        self._session_cache: TTLCache = TTLCache(maxsize=10000, ttl=session_ttl)
        self._persistent_cache: TTLCache = TTLCache(maxsize=10000, ttl=persistent_ttl)
        # Failed sign-in counters, keyed by email
        self._failed_cache: TTLCache = TTLCache(maxsize=10000, ttl=lockout_ttl)

        self._lock = threading.RLock()

    def ttl_for(self, persistent: bool) -> int:
        """Lifetime in seconds of a new session of the given kind."""
        cache = self._persistent_cache if persistent else self._session_cache
        return int(cache.ttl)

    def put(self, token: str, uid: str, persistent: bool = False) -> None:
        """Store a session token.

        Args:
            token: Opaque bearer token
            uid: User the token authenticates
            persistent: Use the "remember me" lifetime
        """
        with self._lock:
            cache = self._persistent_cache if persistent else self._session_cache
            cache[token] = uid

    def get(self, token: str) -> Optional[str]:
        """Get the user of a token, or None if unknown or expired."""
        with self._lock:
            return self._session_cache.get(token) or self._persistent_cache.get(token)

    def delete(self, token: str) -> bool:
        """Delete a token.

        Returns:
            True if the token was deleted, False if not found
        """
        with self._lock:
            for cache in (self._session_cache, self._persistent_cache):
                if token in cache:
                    del cache[token]
                    return True
            return False

    def delete_user(self, uid: str) -> int:
        """Delete every session of a user. Returns the number removed."""
        with self._lock:
            removed = 0
            for cache in (self._session_cache, self._persistent_cache):
                for token in [t for t, owner in cache.items() if owner == uid]:
                    del cache[token]
                    removed += 1
            return removed

    def record_failure(self, email: str) -> int:
        """Count a failed sign-in. Returns the failures within the lockout window."""
        with self._lock:
            count = self._failed_cache.get(email, 0) + 1
            self._failed_cache[email] = count
            return count

    def failures(self, email: str) -> int:
        with self._lock:
            return self._failed_cache.get(email, 0)

    def clear_failures(self, email: str) -> None:
        with self._lock:
            self._failed_cache.pop(email, None)

    def clear(self) -> None:
        """Drop all sessions and counters."""
        with self._lock:
            self._session_cache.clear()
            self._persistent_cache.clear()
            self._failed_cache.clear()

    def stats(self) -> dict[str, dict[str, Any]]:
        """Get store statistics.

        Returns:
            Dictionary with size and maxsize for each store
        """
        with self._lock:
            return {
                name: {"size": len(cache), "maxsize": cache.maxsize}
                for name, cache in (
                    ("session", self._session_cache),
                    ("persistent", self._persistent_cache),
                    ("failed_logins", self._failed_cache),
                )
            }
