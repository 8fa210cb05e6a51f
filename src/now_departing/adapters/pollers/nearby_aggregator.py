"""Periodic aggregation of arrivals around a coordinate."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from now_departing.adapters.state.feed_status import FeedStatus
from now_departing.adapters.state.nearby_state import NearbyState
from now_departing.adapters.system_time_source import SystemTimeSource
from now_departing.domain.errors import describe_error
from now_departing.domain.models.error_details import ErrorKind

if TYPE_CHECKING:
    from now_departing.domain.contracts.nearby_ranking import NearbyRankingProtocol
    from now_departing.domain.contracts.state_broadcaster import StateBroadcasterProtocol
    from now_departing.domain.contracts.time_source import TimeSource
    from now_departing.domain.models.coordinate import Coordinate
    from now_departing.domain.ports.arrival_repository import ArrivalRepository

logger = logging.getLogger(__name__)


class NearbyAggregator:
    """Polls the location-scoped feed and publishes ranked, grouped arrivals.

    At most one fetch is outstanding; a poll tick or ``refresh`` call while a
    fetch is in flight does nothing.
    """

    def __init__(
        self,
        arrival_repository: ArrivalRepository,
        ranking_service: NearbyRankingProtocol,
        time_source: TimeSource | None = None,
        broadcaster: StateBroadcasterProtocol | None = None,
        topic: str = "nearby",
        refresh_interval_seconds: float = 60,
    ) -> None:
        self.arrival_repository = arrival_repository
        self.ranking_service = ranking_service
        self.time_source = time_source or SystemTimeSource()
        self.broadcaster = broadcaster
        self.topic = topic
        self.refresh_interval_seconds = refresh_interval_seconds
        self.state = NearbyState()
        self._coordinate: Coordinate | None = None
        self._task: asyncio.Task | None = None
        self._fetch_task: asyncio.Task | None = None
        self._generation = 0

    @property
    def is_fetching(self) -> bool:
        return self._fetch_task is not None and not self._fetch_task.done()

    @property
    def empty_message(self) -> str:
        minutes = int(self.ranking_service.horizon_seconds // 60)
        return f"No trains found within {minutes} minutes"

    async def start(self, coordinate: Coordinate) -> None:
        """Start polling around ``coordinate``, or move an already running poller there."""
        self._coordinate = coordinate
        if self._task is not None and not self._task.done():
            logger.info("Nearby aggregator already running, refreshing for new coordinate")
            await self.refresh()
            return

        self._generation += 1
        self.state = NearbyState(coordinate=coordinate, is_loading=True, status=FeedStatus.LOADING)
        self._task = asyncio.create_task(self._poll_loop())
        logger.info("Started nearby aggregator")

    async def stop(self) -> None:
        """Stop polling. A fetch still in flight is discarded when it completes."""
        self._generation += 1
        tasks = [t for t in (self._task, self._fetch_task) if t is not None and not t.done()]
        self._task = None
        self._fetch_task = None
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        if tasks:
            logger.info("Stopped nearby aggregator")

    async def refresh(self) -> bool:
        """Fetch now unless a fetch is already running.

        Returns:
            True if a fetch was performed.
        """
        if self._coordinate is None:
            return False
        if self.is_fetching:
            logger.debug("Nearby fetch already in flight, skipping")
            return False

        self._fetch_task = asyncio.create_task(self._fetch_cycle(self._coordinate, self._generation))
        await asyncio.shield(self._fetch_task)
        return True

    async def aggregate_once(self, coordinate: Coordinate) -> NearbyState:
        """Run a single fetch cycle for ``coordinate`` without starting the poll loop."""
        self._coordinate = coordinate
        await self.refresh()
        return self.state

    async def _poll_loop(self) -> None:
        while True:
            if not self.is_fetching:
                self._fetch_task = asyncio.create_task(
                    self._fetch_cycle(self._coordinate, self._generation)
                )
            await asyncio.sleep(self.refresh_interval_seconds)

    async def _fetch_cycle(self, coordinate: Coordinate, generation: int) -> None:
        self.state = replace(self.state, coordinate=coordinate, is_loading=True)
        await self._notify()

        try:
            feeds = await self.arrival_repository.fetch_by_location(
                coordinate.latitude, coordinate.longitude
            )
        except Exception as e:
            if generation != self._generation:
                return
            logger.error(f"Failed to fetch nearby arrivals: {e}", exc_info=True)
            self._apply_failure(coordinate, e)
            await self._notify()
            return

        if generation != self._generation:
            logger.debug("Discarding nearby arrivals for stopped aggregator")
            return

        now = self.time_source.now()
        arrivals, groups = self.ranking_service.aggregate(feeds, coordinate, now)
        self.state = NearbyState(
            coordinate=coordinate,
            arrivals=tuple(arrivals),
            groups=tuple(groups),
            is_loading=False,
            status=FeedStatus.READY if arrivals else FeedStatus.EMPTY,
            message=None if arrivals else self.empty_message,
            last_error=None,
            last_update=now,
        )
        logger.info(f"Nearby: {len(arrivals)} arrivals at {len(groups)} stations")
        await self._notify()

    def _apply_failure(self, coordinate: Coordinate, error: Exception) -> None:
        details = describe_error(error)
        if details.kind == ErrorKind.EMPTY_RESULT:
            self.state = NearbyState(
                coordinate=coordinate,
                is_loading=False,
                status=FeedStatus.EMPTY,
                message=self.empty_message,
                last_update=self.time_source.now(),
            )
            return

        # Keep showing older arrivals, minus the trains that have left since
        now = self.time_source.now()
        remaining = [a for a in self.state.arrivals if a.arrival_instant > now]
        if remaining:
            self.state = replace(
                self.state,
                arrivals=tuple(remaining),
                groups=tuple(self.ranking_service.group(remaining)),
                is_loading=False,
                status=FeedStatus.STALE,
                message=details.reason,
                last_error=details,
            )
        else:
            self.state = NearbyState(
                coordinate=coordinate,
                is_loading=False,
                status=FeedStatus.ERROR,
                message=details.reason,
                last_error=details,
            )

    async def _notify(self) -> None:
        if self.broadcaster is not None:
            await self.broadcaster.broadcast_update(self.topic)
