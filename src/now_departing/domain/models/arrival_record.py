"""Arrival record domain model."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class Direction(StrEnum):
    """Travel direction as published by the upstream feed."""

    NORTH = "N"
    SOUTH = "S"

    @classmethod
    def parse(cls, value: str) -> "Direction":
        """Parse 'N'/'S' (case-insensitive, also 'north'/'south')."""
        normalized = value.strip().upper()
        if normalized in ("N", "NORTH", "UPTOWN"):
            return cls.NORTH
        if normalized in ("S", "SOUTH", "DOWNTOWN"):
            return cls.SOUTH
        raise ValueError(f"Unknown direction: {value!r}")


@dataclass(frozen=True)
class ArrivalRecord:
    """A single predicted vehicle arrival at a station.

    ``arrival_instant`` is an absolute, timezone-aware UTC instant. Countdowns are
    always derived from it and the current time, never stored.
    """

    route_id: str
    station_name: str
    direction: Direction
    arrival_instant: datetime
