"""Per-key TTL cache for arrival lists with in-flight request coalescing."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from now_departing.adapters.system_time_source import SystemTimeSource
from now_departing.domain.contracts.arrival_cache import ArrivalCacheProtocol
from now_departing.domain.errors import EmptyResultError
from now_departing.domain.models.cache_entry import CacheEntry

if TYPE_CHECKING:
    from now_departing.domain.contracts.time_source import TimeSource
    from now_departing.domain.models.arrival_record import ArrivalRecord
    from now_departing.domain.models.selection import ArrivalKey

logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[list["ArrivalRecord"]]]


class ArrivalCache(ArrivalCacheProtocol):
    """Cache of the last successfully loaded arrivals per (line, station, direction).

    ``fetch`` is the only write path. Concurrent callers for the same key share a
    single loader call. A failed load never replaces or re-timestamps an existing
    entry; callers get the previous value instead and can ask ``last_failure``
    whether that happened. A loader raising ``EmptyResultError`` counts as a
    successful load of nothing.
    """

    def __init__(self, ttl_seconds: float = 30, time_source: TimeSource | None = None) -> None:
        """Initialize the cache.

        Args:
            ttl_seconds: Entries younger than this are served without loading.
            time_source: Clock used for entry ages.
        """
        self.ttl_seconds = ttl_seconds
        self._time_source = time_source or SystemTimeSource()
        self._entries: dict[ArrivalKey, CacheEntry[list[ArrivalRecord]]] = {}
        self._in_flight: dict[ArrivalKey, asyncio.Task[list[ArrivalRecord]]] = {}
        self._failures: dict[ArrivalKey, Exception] = {}

    def get(self, key: ArrivalKey) -> CacheEntry[list[ArrivalRecord]] | None:
        return self._entries.get(key)

    def last_failure(self, key: ArrivalKey) -> Exception | None:
        """The error of the latest load for ``key``, or None if it succeeded."""
        return self._failures.get(key)

    def keys(self) -> set[ArrivalKey]:
        return set(self._entries)

    def is_fresh(self, key: ArrivalKey) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.age_seconds(self._time_source.now()) < self.ttl_seconds

    def invalidate(self, key: ArrivalKey | None = None) -> None:
        """Drop one entry, or all entries when ``key`` is None."""
        if key is None:
            self._entries.clear()
            self._failures.clear()
        else:
            self._entries.pop(key, None)
            self._failures.pop(key, None)

    async def fetch(self, key: ArrivalKey, loader: Loader) -> list[ArrivalRecord]:
        """Return cached arrivals if fresh, otherwise load them once for all waiters.

        Raises:
            Exception: Whatever ``loader`` raised, only when no prior entry exists.
        """
        if self.is_fresh(key):
            logger.debug(f"Serving cached arrivals for {key}")
            return list(self._entries[key].value)

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.create_task(self._load(key, loader))
            task.add_done_callback(_consume_exception)
            self._in_flight[key] = task
        else:
            logger.debug(f"Joining in-flight fetch for {key}")

        # A cancelled waiter must not cancel the load other waiters depend on
        return list(await asyncio.shield(task))

    async def _load(self, key: ArrivalKey, loader: Loader) -> list[ArrivalRecord]:
        try:
            value = list(await loader())
        except EmptyResultError:
            value = []
        except Exception as e:
            self._failures[key] = e
            prior = self._entries.get(key)
            if prior is None:
                raise
            logger.warning(f"Fetching arrivals for {key} failed, serving previous result: {e}")
            return prior.value
        finally:
            self._in_flight.pop(key, None)

        self._failures.pop(key, None)
        self._entries[key] = CacheEntry(key=key, value=value, fetched_at=self._time_source.now())
        return value


def _consume_exception(task: asyncio.Task) -> None:
    # Mark the exception retrieved when every waiter was cancelled
    if not task.cancelled():
        task.exception()
