"""
security/rate_limiter.py
-------------------------
Rate limiting to prevent API abuse.
Limits the number of events a user can send within a time window.
"""

import time
from typing import Callable

from config import RATE_LIMIT_MESSAGES, RATE_LIMIT_WINDOW_SECONDS
from utils.logger import get_logger

logger = get_logger(__name__)

RATE_LIMITED_TEXT = "⚠️ You are sending too many messages. Please wait a bit and try again."


class RateLimiter:
    """
    Sliding-window limiter keyed by user ID.

    Configuration (via .env):
        RATE_LIMIT_MESSAGES: Max events per window (default: 30).
        RATE_LIMIT_WINDOW_SECONDS: Window duration in seconds (default: 60).
    """

    def __init__(
        self,
        max_messages: int = RATE_LIMIT_MESSAGES,
        window_seconds: float = RATE_LIMIT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_messages = max_messages
        self.window_seconds = window_seconds
        self._clock = clock
        # {user_id: [timestamp1, timestamp2, ...]}, only users with recent events
        self._user_timestamps: dict[int, list[float]] = {}
        self._last_sweep = clock()

    def _cleanup(self, user_id: int, now: float) -> list[float]:
        """Remove expired timestamps for a user, forgetting the user once none are left."""
        cutoff = now - self.window_seconds
        recent = [t for t in self._user_timestamps.get(user_id, ()) if t > cutoff]
        if recent:
            self._user_timestamps[user_id] = recent
        else:
            self._user_timestamps.pop(user_id, None)
        return recent

    def _sweep(self, now: float) -> None:
        """Once per window, drop every user whose newest event has expired."""
        if now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        cutoff = now - self.window_seconds
        idle = [uid for uid, stamps in self._user_timestamps.items() if stamps[-1] <= cutoff]
        for uid in idle:
            del self._user_timestamps[uid]

    def allow(self, user_id: int) -> bool:
        """Record one event for the user; return False if over the limit."""
        now = self._clock()
        self._sweep(now)
        recent = self._cleanup(user_id, now)

        if len(recent) >= self.max_messages:
            logger.warning(f"⚠️ Rate limit hit for user {user_id}")
            return False

        self._user_timestamps[user_id] = recent + [now]
        return True
