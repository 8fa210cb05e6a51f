"""Countdown derived from an arrival record and the current time."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from now_departing.domain.models.arrival_record import ArrivalRecord

DEPARTING_NOW_THRESHOLD_SECONDS = 30
ARRIVING_THRESHOLD_SECONDS = 60


class CountdownStatus(StrEnum):
    """Display bucket for a countdown."""

    DEPARTING_NOW = "departing_now"
    ARRIVING = "arriving"
    MINUTES = "minutes"


@dataclass(frozen=True)
class Countdown:
    """Whole seconds remaining until ``record`` arrives, as of one display tick."""

    record: ArrivalRecord
    total_seconds: int

    @classmethod
    def between(cls, record: ArrivalRecord, now: datetime) -> "Countdown | None":
        """Compute the countdown for ``record`` at ``now``.

        Returns None once the arrival instant has passed.
        """
        remaining = (record.arrival_instant - now).total_seconds()
        if remaining < 0:
            return None
        return cls(record=record, total_seconds=int(remaining))

    @property
    def minutes(self) -> int:
        """Whole minutes remaining, truncated."""
        return self.total_seconds // 60

    @property
    def seconds(self) -> int:
        return self.total_seconds % 60

    @property
    def status(self) -> CountdownStatus:
        if self.total_seconds <= DEPARTING_NOW_THRESHOLD_SECONDS:
            return CountdownStatus.DEPARTING_NOW
        if self.total_seconds < ARRIVING_THRESHOLD_SECONDS:
            return CountdownStatus.ARRIVING
        return CountdownStatus.MINUTES
