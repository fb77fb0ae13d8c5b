"""Cooldowns for admin endpoints that rewrite a whole competition's data."""

import threading
import time
from typing import Callable, Dict, Optional, Tuple

from .. import config


class RateLimiter:
    """
    Allow one request per key every cooldown_seconds.

    Keys let unrelated targets (for example two competition years) cool
    down independently.
    """

    def __init__(self, cooldown_seconds: int = 60, clock: Callable[[], float] = time.monotonic):
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._last: Dict[str, float] = {}
        self._lock = threading.Lock()

    def try_acquire(self, key: str = "") -> Tuple[bool, int]:
        """
        Claim the slot for a key.

        Returns:
            (True, 0) when allowed, otherwise (False, seconds to wait); the
            wait is rounded down but never below 1
        """
        with self._lock:
            now = self._clock()
            last = self._last.get(key)
            if last is None or now - last >= self.cooldown_seconds:
                self._last[key] = now
                return True, 0
            return False, max(1, int(self.cooldown_seconds - (now - last)))

    def reset(self, key: Optional[str] = None) -> None:
        """Forget one key, or every key when none is given."""
        with self._lock:
            if key is None:
                self._last.clear()
            else:
                self._last.pop(key, None)


# Generation is limited per competition year
test_data_rate_limiter = RateLimiter(cooldown_seconds=config.TEST_DATA_COOLDOWN_SECONDS)
