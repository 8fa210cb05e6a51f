"""Grouped nearby arrivals."""

from dataclasses import dataclass

from now_departing.domain.models.arrival_record import Direction
from now_departing.domain.models.nearby_arrival import NearbyArrival


@dataclass(frozen=True)
class LineDirectionGroup:
    """Arrivals of one line in one direction at one station, soonest first."""

    line_id: str
    direction: Direction
    destination_label: str
    arrivals: tuple[NearbyArrival, ...]


@dataclass(frozen=True)
class StationGroup:
    """All line/direction groups at a station."""

    station_id: str
    station_display_name: str
    distance_meters: float
    groups: tuple[LineDirectionGroup, ...]
