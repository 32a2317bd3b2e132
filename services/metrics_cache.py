"""
services/metrics_cache.py
-------------------------
Process-local read-through cache in front of the metrics endpoint.

Readers share the lock; the exclusive lock is taken only for dict
mutations, never while the upstream fetch is in flight. Entries expire
lazily: a stale entry is dropped the next time it is read. Failed fetches
are never cached.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from config import METRICS_CACHE_TTL, MONITORING_API_TIMEOUT
from models.metrics import ServerMetrics
from utils.errors import ExternalServiceError
from utils.logger import get_logger
from utils.rwlock import AsyncRWLock

logger = get_logger(__name__)

Fetcher = Callable[[str], Awaitable[ServerMetrics]]


@dataclass
class CacheEntry:
    metrics: ServerMetrics
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at


class MetricsCache:
    """
    TTL cache keyed by server key.

    Args:
        fetch: Coroutine function returning the snapshot for a key
            (normally MonitoringClient.get_server_metrics).
        ttl: Seconds a snapshot stays valid.
        timeout: Upper bound on one upstream fetch.
        clock: Monotonic time source, replaceable in tests.
    """

    def __init__(
        self,
        fetch: Fetcher,
        ttl: float = METRICS_CACHE_TTL,
        timeout: float = MONITORING_API_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._fetch = fetch
        self.ttl = ttl
        self.timeout = timeout
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = AsyncRWLock()
        self.hits = 0
        self.misses = 0

    async def get(self, server_key: str) -> ServerMetrics:
        """
        Return the snapshot for ``server_key``, fetching it on a miss.

        Raises:
            ExternalServiceError: The fetch failed or exceeded the timeout.
            NotFoundError: The key is unknown upstream.
        """
        async with self._lock.reader():
            entry = self._entries.get(server_key)
            if entry is not None and entry.is_fresh(self._clock()):
                self.hits += 1
                logger.debug(f"Metrics cache hit for {server_key}")
                return entry.metrics

        if entry is not None:
            await self._discard_if_stale(server_key)

        self.misses += 1
        logger.debug(f"Metrics cache miss for {server_key}")
        try:
            metrics = await asyncio.wait_for(self._fetch(server_key), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Metrics fetch for {server_key} timed out after {self.timeout}s")
            raise ExternalServiceError("Monitoring API", "metrics fetch timed out") from e

        async with self._lock.writer():
            self._entries[server_key] = CacheEntry(metrics, self._clock() + self.ttl)
        return metrics

    async def _discard_if_stale(self, server_key: str) -> None:
        async with self._lock.writer():
            entry = self._entries.get(server_key)
            # another task may have refreshed it while we waited
            if entry is not None and not entry.is_fresh(self._clock()):
                del self._entries[server_key]

    async def clear(self, *server_keys: str) -> int:
        """
        Drop the given entries, or every entry when no key is given.

        Returns:
            Number of entries removed.
        """
        async with self._lock.writer():
            if not server_keys:
                removed = len(self._entries)
                self._entries.clear()
            else:
                removed = 0
                for key in server_keys:
                    if self._entries.pop(key, None) is not None:
                        removed += 1
        logger.info(f"Metrics cache cleared: {removed} entr{'y' if removed == 1 else 'ies'} removed")
        return removed

    async def status(self) -> dict:
        async with self._lock.reader():
            keys = sorted(self._entries)
        return {
            "cached_servers": len(keys),
            "cache_entries": keys,
            "hits": self.hits,
            "misses": self.misses,
            "ttl_seconds": self.ttl,
        }
