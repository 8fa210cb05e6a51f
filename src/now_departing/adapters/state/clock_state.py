"""Arrival clock state dataclass."""

from dataclasses import dataclass
from datetime import datetime

from now_departing.adapters.state.feed_status import FeedStatus
from now_departing.domain.models.countdown import Countdown
from now_departing.domain.models.error_details import ErrorDetails
from now_departing.domain.models.selection import Selection


@dataclass(frozen=True)
class ClockState:
    """Snapshot published by an arrival clock on every network or display tick."""

    selection: Selection | None = None
    countdowns: tuple[Countdown, ...] = ()
    is_loading: bool = False
    status: FeedStatus = FeedStatus.IDLE
    message: str | None = None
    last_error: ErrorDetails | None = None
    last_update: datetime | None = None  # Time of the last successful network tick
