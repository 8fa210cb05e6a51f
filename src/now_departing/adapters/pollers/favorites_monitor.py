"""Runs one arrival clock per favorite."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from now_departing.adapters.pollers.arrival_clock import ArrivalClock
    from now_departing.adapters.state.clock_state import ClockState
    from now_departing.domain.models.selection import ArrivalKey, Selection

logger = logging.getLogger(__name__)


class FavoritesMonitor:
    """Starts a clock for each favorite, staggering their first fetch."""

    def __init__(
        self,
        clock_factory: Callable[[Selection], ArrivalClock],
        stagger_seconds: float = 0.5,
    ) -> None:
        """Initialize the monitor.

        Args:
            clock_factory: Builds an unstarted clock for a favorite.
            stagger_seconds: The n-th favorite starts ``n * stagger_seconds`` late.
        """
        self.clock_factory = clock_factory
        self.stagger_seconds = stagger_seconds
        self.clocks: dict[ArrivalKey, ArrivalClock] = {}

    async def start(self, favorites: list[Selection]) -> None:
        await self.stop()
        for index, favorite in enumerate(favorites):
            if favorite.key in self.clocks:
                continue
            clock = self.clock_factory(favorite)
            self.clocks[favorite.key] = clock
            await clock.start(favorite, initial_delay_seconds=self.stagger_seconds * index)
        logger.info(f"Monitoring {len(self.clocks)} favorites")

    def set_active(self, active: bool) -> None:
        for clock in self.clocks.values():
            clock.set_active(active)

    async def stop(self) -> None:
        clocks = list(self.clocks.values())
        self.clocks.clear()
        for clock in clocks:
            await clock.stop()

    def states(self) -> dict[ArrivalKey, ClockState]:
        return {key: clock.state for key, clock in self.clocks.items()}
