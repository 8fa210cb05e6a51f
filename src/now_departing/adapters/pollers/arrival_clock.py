"""Arrival clock: network polling and countdown display for one selection."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from now_departing.adapters.state.clock_state import ClockState
from now_departing.adapters.state.feed_status import FeedStatus
from now_departing.adapters.system_time_source import SystemTimeSource
from now_departing.domain.errors import (
    NO_TIMES_MESSAGE,
    EmptyResultError,
    NotFoundError,
    describe_error,
)
from now_departing.domain.models.countdown import Countdown
from now_departing.domain.models.error_details import ErrorDetails, ErrorKind

if TYPE_CHECKING:
    from datetime import datetime

    from now_departing.domain.contracts.arrival_cache import ArrivalCacheProtocol
    from now_departing.domain.contracts.state_broadcaster import StateBroadcasterProtocol
    from now_departing.domain.contracts.time_source import TimeSource
    from now_departing.domain.models.arrival_record import ArrivalRecord
    from now_departing.domain.models.selection import Selection
    from now_departing.domain.ports.arrival_repository import ArrivalRepository

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Subscription:
    """Running state of one clock subscription.

    ``active`` is checked after every suspension point; once it is False no
    result may touch the clock's state.
    """

    selection: Selection
    last_known_arrivals: tuple[ArrivalRecord, ...] = ()
    poll_task: asyncio.Task | None = None
    tick_task: asyncio.Task | None = None
    fetch_tasks: set[asyncio.Task] = field(default_factory=set)
    active: bool = True
    has_loaded: bool = False
    status: FeedStatus = FeedStatus.LOADING
    message: str | None = None
    last_error: ErrorDetails | None = None
    last_update: datetime | None = None
    tick_sequence: int = 0
    applied_sequence: int = 0
    wake: asyncio.Event = field(default_factory=asyncio.Event)

    def cancel(self) -> list[asyncio.Task]:
        """Deactivate and cancel every task, returning them for awaiting."""
        self.active = False
        tasks = [t for t in (self.poll_task, self.tick_task, *self.fetch_tasks) if t is not None]
        for task in tasks:
            task.cancel()
        return tasks


class ArrivalClock:
    """Keeps countdowns for one (line, station, direction) selection up to date.

    Two independent loops run per subscription. The network loop fetches arrivals
    through the shared cache every ``active_interval_seconds`` (or
    ``inactive_interval_seconds`` while the app is inactive). The display loop
    recomputes countdowns from the stored absolute arrival instants every
    ``display_tick_seconds``, so a late or failed fetch never makes them drift.
    """

    def __init__(
        self,
        arrival_repository: ArrivalRepository,
        cache: ArrivalCacheProtocol,
        time_source: TimeSource | None = None,
        broadcaster: StateBroadcasterProtocol | None = None,
        topic: str = "arrivals",
        active_interval_seconds: float = 30,
        inactive_interval_seconds: float = 120,
        display_tick_seconds: float = 1,
        background_stop_after_seconds: float = 600,
    ) -> None:
        """Initialize the clock.

        Args:
            arrival_repository: Source of by-route arrival feeds.
            cache: Shared arrival cache.
            time_source: Clock used for countdowns.
            broadcaster: Optional broadcaster notified after every state change.
            topic: Topic used with the broadcaster.
            active_interval_seconds: Network cadence while active.
            inactive_interval_seconds: Network cadence while inactive, 0 suspends.
            display_tick_seconds: Countdown recompute interval.
            background_stop_after_seconds: Stop after this long inactive, 0 never.
        """
        self.arrival_repository = arrival_repository
        self.cache = cache
        self.time_source = time_source or SystemTimeSource()
        self.broadcaster = broadcaster
        self.topic = topic
        self.active_interval_seconds = active_interval_seconds
        self.inactive_interval_seconds = inactive_interval_seconds
        self.display_tick_seconds = display_tick_seconds
        self.background_stop_after_seconds = background_stop_after_seconds
        self.state = ClockState()
        self._subscription: Subscription | None = None
        self._foreground = True
        self._background_timer: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._subscription is not None and self._subscription.active

    @property
    def is_active(self) -> bool:
        return self._foreground

    async def start(self, selection: Selection, initial_delay_seconds: float = 0) -> None:
        """Start polling for ``selection``, replacing any running subscription."""
        if self._subscription is not None:
            logger.info(f"Replacing running subscription for {self._subscription.selection.key}")
            await self.stop()

        subscription = Subscription(selection=selection)
        self._subscription = subscription
        self.state = ClockState(selection=selection, is_loading=True, status=FeedStatus.LOADING)
        subscription.poll_task = asyncio.create_task(
            self._poll_loop(subscription, initial_delay_seconds)
        )
        subscription.tick_task = asyncio.create_task(self._tick_loop(subscription))
        logger.info(f"Started arrival clock for {selection.key}")

    async def stop(self) -> None:
        """Stop the subscription. No state changes happen once this returns."""
        subscription = self._subscription
        if subscription is None:
            return

        self._subscription = None
        tasks = subscription.cancel()
        self._cancel_background_timer()
        for task in tasks:
            if task is asyncio.current_task():
                continue
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.debug(f"Task ended with error during stop: {e}")
        self.state = ClockState(selection=subscription.selection, status=FeedStatus.IDLE)
        logger.info(f"Stopped arrival clock for {subscription.selection.key}")

    def set_active(self, active: bool) -> None:
        """Switch between active and inactive cadence.

        Becoming active triggers an immediate network tick. Staying inactive for
        ``background_stop_after_seconds`` stops the subscription.
        """
        if active == self._foreground:
            return
        self._foreground = active
        subscription = self._subscription
        if subscription is None:
            return

        subscription.wake.set()
        if active:
            self._cancel_background_timer()
        elif self.background_stop_after_seconds > 0:
            self._background_timer = asyncio.create_task(self._stop_when_backgrounded())

    async def refresh(self) -> None:
        """Run one network tick now and wait for it."""
        subscription = self._subscription
        if subscription is None:
            return
        await self._network_tick(subscription, self._next_sequence(subscription))

    async def tick(self) -> ClockState:
        """Run one display tick now and return the resulting state."""
        subscription = self._subscription
        if subscription is not None and subscription.active:
            self._refresh_display(subscription, self.time_source.now())
            await self._notify()
        return self.state

    async def _poll_loop(self, subscription: Subscription, initial_delay_seconds: float) -> None:
        if initial_delay_seconds > 0:
            await asyncio.sleep(initial_delay_seconds)
        while subscription.active:
            self._spawn_network_tick(subscription)
            await self._wait_for_next_poll(subscription)

    async def _wait_for_next_poll(self, subscription: Subscription) -> None:
        while subscription.active:
            subscription.wake.clear()
            interval = (
                self.active_interval_seconds if self._foreground else self.inactive_interval_seconds
            )
            if interval <= 0:
                # Suspended until set_active wakes us
                await subscription.wake.wait()
            else:
                try:
                    await asyncio.wait_for(subscription.wake.wait(), timeout=interval)
                except TimeoutError:
                    return
            if self._foreground:
                return

    async def _tick_loop(self, subscription: Subscription) -> None:
        while subscription.active:
            await asyncio.sleep(self.display_tick_seconds)
            if not subscription.active:
                return
            self._refresh_display(subscription, self.time_source.now())
            await self._notify()

    def _spawn_network_tick(self, subscription: Subscription) -> None:
        # Each tick runs on its own so a hung request cannot delay the next one
        task = asyncio.create_task(
            self._network_tick(subscription, self._next_sequence(subscription))
        )
        subscription.fetch_tasks.add(task)
        task.add_done_callback(subscription.fetch_tasks.discard)

    @staticmethod
    def _next_sequence(subscription: Subscription) -> int:
        subscription.tick_sequence += 1
        return subscription.tick_sequence

    async def _network_tick(self, subscription: Subscription, sequence: int) -> None:
        selection = subscription.selection
        try:
            records = await self.cache.fetch(selection.key, lambda: self._load(selection))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if not subscription.active:
                return
            logger.error(f"Failed to fetch arrivals for {selection.key}: {e}")
            self._apply_failure(subscription, e)
            await self._notify()
            return

        if not subscription.active:
            logger.debug(f"Discarding arrivals for stopped subscription {selection.key}")
            return
        if sequence < subscription.applied_sequence:
            logger.debug(f"Discarding out-of-order arrivals for {selection.key}")
            return

        now = self.time_source.now()
        subscription.applied_sequence = sequence
        subscription.last_known_arrivals = tuple(
            sorted(
                (r for r in records if r.arrival_instant > now),
                key=lambda r: r.arrival_instant,
            )
        )

        failure = self.cache.last_failure(selection.key)
        if failure is not None:
            # The cache answered with the previous result
            self._apply_failure(subscription, failure)
            await self._notify()
            return

        subscription.has_loaded = True
        subscription.status = FeedStatus.READY
        subscription.message = None
        subscription.last_error = None
        subscription.last_update = now
        self._refresh_display(subscription, now)
        await self._notify()

    async def _load(self, selection: Selection) -> list[ArrivalRecord]:
        feeds = await self.arrival_repository.fetch_by_route(selection.line_id)
        for feed in feeds:
            if feed.name == selection.station_name:
                records = feed.arrivals_for(selection.line_id, selection.direction)
                if not records:
                    raise EmptyResultError(NO_TIMES_MESSAGE)
                return records
        raise NotFoundError(f"Station {selection.station_name} not in feed for line {selection.line_id}")

    def _apply_failure(self, subscription: Subscription, error: Exception) -> None:
        details = describe_error(error)
        subscription.last_error = details
        if details.kind in (ErrorKind.NOT_FOUND, ErrorKind.EMPTY_RESULT):
            subscription.last_known_arrivals = ()
            subscription.has_loaded = True
            subscription.status = FeedStatus.EMPTY
            subscription.message = NO_TIMES_MESSAGE
        elif subscription.last_known_arrivals:
            # Turns into ERROR on the display tick once these have all departed
            subscription.status = FeedStatus.STALE
            subscription.message = details.reason
        else:
            subscription.status = FeedStatus.ERROR
            subscription.message = details.reason
        self._refresh_display(subscription, self.time_source.now(), loading=False)

    def _refresh_display(
        self, subscription: Subscription, now: datetime, loading: bool | None = None
    ) -> None:
        """Recompute countdowns from absolute instants and drop departed arrivals."""
        countdowns = tuple(
            countdown
            for record in subscription.last_known_arrivals
            if (countdown := Countdown.between(record, now)) is not None
        )
        subscription.last_known_arrivals = tuple(c.record for c in countdowns)

        if not countdowns:
            if subscription.has_loaded and subscription.status == FeedStatus.READY:
                subscription.status = FeedStatus.EMPTY
                subscription.message = NO_TIMES_MESSAGE
            elif subscription.status == FeedStatus.STALE:
                subscription.status = FeedStatus.ERROR

        is_loading = not subscription.has_loaded and subscription.status == FeedStatus.LOADING
        self.state = ClockState(
            selection=subscription.selection,
            countdowns=countdowns,
            is_loading=is_loading if loading is None else loading,
            status=subscription.status,
            message=subscription.message,
            last_error=subscription.last_error,
            last_update=subscription.last_update,
        )

    async def _stop_when_backgrounded(self) -> None:
        await asyncio.sleep(self.background_stop_after_seconds)
        if not self._foreground:
            logger.info(f"Inactive for {self.background_stop_after_seconds}s, stopping clock")
            await self.stop()

    def _cancel_background_timer(self) -> None:
        timer = self._background_timer
        self._background_timer = None
        if timer is not None and not timer.done() and timer is not asyncio.current_task():
            timer.cancel()

    async def _notify(self) -> None:
        if self.broadcaster is not None:
            await self.broadcaster.broadcast_update(self.topic)
