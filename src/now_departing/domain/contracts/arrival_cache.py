"""Protocol for arrival caching."""

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from now_departing.domain.models.arrival_record import ArrivalRecord
    from now_departing.domain.models.cache_entry import CacheEntry
    from now_departing.domain.models.selection import ArrivalKey


class ArrivalCacheProtocol(Protocol):
    """Protocol for caching arrival lists by (line, station, direction)."""

    def get(self, key: "ArrivalKey") -> "CacheEntry[list[ArrivalRecord]] | None":
        """Get the cached entry for a key.

        Args:
            key: The (line, station, direction) key.

        Returns:
            The last successful entry, or None if nothing was ever stored.
        """
        ...

    def last_failure(self, key: "ArrivalKey") -> Exception | None:
        """Get the error of the latest load for a key.

        Args:
            key: The (line, station, direction) key.

        Returns:
            The exception if the latest load failed and older arrivals were
            served instead, otherwise None.
        """
        ...

    async def fetch(
        self,
        key: "ArrivalKey",
        loader: "Callable[[], Awaitable[list[ArrivalRecord]]]",
    ) -> "list[ArrivalRecord]":
        """Return fresh cached arrivals or load them, at most one load per key at a time.

        Args:
            key: The (line, station, direction) key.
            loader: Coroutine factory that fetches arrivals from upstream.

        Returns:
            The cached or freshly loaded arrivals.
        """
        ...
