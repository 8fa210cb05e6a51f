"""Station catalog with a tiered source chain and TTL-governed remote refresh."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from enum import StrEnum
from typing import TYPE_CHECKING

from now_departing.domain.errors import CATALOG_UNAVAILABLE_MESSAGE, CatalogUnavailableError

if TYPE_CHECKING:
    from datetime import datetime

    from now_departing.domain.contracts.time_source import TimeSource
    from now_departing.domain.models.station import Station
    from now_departing.domain.ports.arrival_repository import ArrivalRepository
    from now_departing.domain.ports.catalog_source import CatalogSource, WritableCatalogSource

logger = logging.getLogger(__name__)

# Lines whose absence suggests a truncated catalog document
CRITICAL_LINES = ("1", "4", "6", "N", "Q", "R", "W")


class CatalogLoadingState(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


def validate_catalog(catalog: dict[str, list[Station]]) -> None:
    """Reject empty catalogs.

    Raises:
        ValueError: If there are no lines or no stations on any line.
    """
    if not catalog:
        raise ValueError("Catalog contains no lines")
    total_stations = sum(len(stations) for stations in catalog.values())
    if total_stations == 0:
        raise ValueError("Catalog contains no stations")
    missing = [line_id for line_id in CRITICAL_LINES if line_id not in catalog]
    if len(missing) == len(CRITICAL_LINES):
        logger.warning("Catalog has none of the major lines, it may be incomplete")


class StationCatalog:
    """Serves the static station list per line.

    Sources are tried in order: the local cache written after the last successful
    remote fetch, the bundled snapshot, then the remote document. The remote
    document is re-fetched by ``refresh_if_stale`` once the TTL has elapsed.
    """

    def __init__(
        self,
        cache_source: WritableCatalogSource,
        bundled_source: CatalogSource,
        remote_source: CatalogSource,
        time_source: TimeSource,
        arrival_repository: ArrivalRepository | None = None,
        ttl_seconds: float = 3600,
        availability_miss_threshold: int = 2,
    ) -> None:
        """Initialize the catalog.

        Args:
            cache_source: Local cache document, also written on remote success.
            bundled_source: Snapshot shipped with the package.
            remote_source: Remote catalog document.
            time_source: Clock used for the TTL.
            arrival_repository: Live feed used by the availability probe.
            ttl_seconds: Minimum age of the last remote fetch before refreshing.
            availability_miss_threshold: Consecutive probe misses before a station
                is flagged as having no known service.
        """
        self._cache_source = cache_source
        self._bundled_source = bundled_source
        self._remote_source = remote_source
        self._time_source = time_source
        self._arrival_repository = arrival_repository
        self._ttl_seconds = ttl_seconds
        self._miss_threshold = max(1, availability_miss_threshold)
        self._catalog: dict[str, list[Station]] = {}
        self._last_remote_fetch: datetime | None = None
        self._misses: dict[tuple[str, str], int] = {}
        self._probe_tasks: set[asyncio.Task] = set()
        self.loading_state = CatalogLoadingState.IDLE
        self.error_message: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self._catalog

    def is_stale(self) -> bool:
        """True when no remote fetch succeeded within the TTL."""
        if self._last_remote_fetch is None:
            return True
        age = (self._time_source.now() - self._last_remote_fetch).total_seconds()
        return age >= self._ttl_seconds

    async def load(self) -> dict[str, list[Station]]:
        """Load the catalog from the first source that yields a valid document.

        Raises:
            CatalogUnavailableError: If every source failed.
        """
        self.loading_state = CatalogLoadingState.LOADING
        for source in (self._cache_source, self._bundled_source):
            if await self._try_source(source):
                return self._snapshot()
        if await self._try_remote():
            return self._snapshot()
        return self._fail()

    async def refresh_if_stale(self) -> bool:
        """Fetch the remote document if the catalog is empty or older than the TTL.

        Returns:
            True if a new remote catalog was installed.

        Raises:
            CatalogUnavailableError: If the remote fetch failed, nothing is loaded
                and the local sources fail too.
        """
        if self._catalog and not self.is_stale():
            logger.debug("Station catalog is fresh, skipping remote refresh")
            return False

        if await self._try_remote():
            return True

        if self._catalog:
            # Keep serving the last good catalog
            return False

        for source in (self._cache_source, self._bundled_source):
            if await self._try_source(source):
                return False
        self._fail()
        return False

    def stations_for(self, line_id: str) -> list[Station] | None:
        """Stations of a line in catalog order, as copies."""
        stations = self._catalog.get(line_id)
        if stations is None:
            return None
        return [replace(station) for station in stations]

    def line_ids(self) -> list[str]:
        return list(self._catalog)

    def find_station(self, canonical_name: str, line_id: str | None = None) -> Station | None:
        """Find a station by canonical name, optionally scoped to a line."""
        lines = [line_id] if line_id is not None else list(self._catalog)
        for candidate_line in lines:
            for station in self._catalog.get(candidate_line, []):
                if station.canonical_name == canonical_name:
                    return replace(station)
        return None

    def resolve_station(self, query: str, line_id: str) -> Station | None:
        """Match a user-typed name against canonical, then display names (case-insensitive)."""
        exact = self.find_station(query, line_id)
        if exact is not None:
            return exact
        folded = query.strip().casefold()
        for station in self._catalog.get(line_id, []):
            if folded in (station.canonical_name.casefold(), station.display_name.casefold()):
                return replace(station)
        return None

    def display_name_for(self, canonical_name: str) -> str | None:
        station = self.find_station(canonical_name)
        return station.display_name if station else None

    def load_stations_for_line(self, line_id: str) -> list[Station] | None:
        """Return the line's stations and probe their availability in the background."""
        stations = self.stations_for(line_id)
        if stations and self._arrival_repository is not None:
            task = asyncio.create_task(self.refresh_availability(line_id))
            self._probe_tasks.add(task)
            task.add_done_callback(self._probe_tasks.discard)
        return stations

    async def refresh_availability(self, line_id: str) -> None:
        """Flag stations of a line by whether the live feed currently serves them.

        A station with at least one arrival in either direction is marked as served.
        A station is marked as not served only after it has been missing from the
        configured number of consecutive probes. Probe failures are logged and
        leave all flags untouched.
        """
        stations = self._catalog.get(line_id)
        if not stations or self._arrival_repository is None:
            return

        try:
            feeds = await self._arrival_repository.fetch_by_route(line_id)
        except Exception as e:
            logger.warning(f"Availability probe for line {line_id} failed: {e}")
            return

        served = {feed.name for feed in feeds if feed.arrivals}
        for station in stations:
            miss_key = (line_id, station.canonical_name)
            if station.canonical_name in served:
                station.has_known_service = True
                self._misses[miss_key] = 0
                continue
            misses = self._misses.get(miss_key, 0) + 1
            self._misses[miss_key] = misses
            if misses >= self._miss_threshold:
                station.has_known_service = False

        logger.debug(
            f"Availability probe for line {line_id}: "
            f"{sum(1 for s in stations if s.has_known_service)}/{len(stations)} served"
        )

    async def _try_source(self, source: CatalogSource) -> bool:
        try:
            catalog = await source.load()
            validate_catalog(catalog)
        except Exception as e:
            logger.info(f"Station catalog source '{source.name}' unavailable: {e}")
            return False
        self._install(catalog)
        logger.info(f"Loaded station catalog from {source.name} ({len(catalog)} lines)")
        return True

    async def _try_remote(self) -> bool:
        try:
            catalog = await self._remote_source.load()
            validate_catalog(catalog)
        except Exception as e:
            logger.warning(f"Remote station catalog fetch failed: {e}")
            return False

        self._install(catalog)
        self._last_remote_fetch = self._time_source.now()
        logger.info(f"Loaded station catalog from {self._remote_source.name} ({len(catalog)} lines)")
        try:
            await self._cache_source.save(catalog)
        except Exception as e:
            logger.warning(f"Failed to write station catalog cache: {e}")
        return True

    def _install(self, catalog: dict[str, list[Station]]) -> None:
        self._catalog = {line_id: list(stations) for line_id, stations in catalog.items()}
        self._misses.clear()
        self.loading_state = CatalogLoadingState.LOADED
        self.error_message = None

    def _snapshot(self) -> dict[str, list[Station]]:
        return {line_id: self.stations_for(line_id) or [] for line_id in self._catalog}

    def _fail(self) -> dict[str, list[Station]]:
        self.loading_state = CatalogLoadingState.ERROR
        self.error_message = CATALOG_UNAVAILABLE_MESSAGE
        logger.error("All station catalog sources failed")
        raise CatalogUnavailableError()
