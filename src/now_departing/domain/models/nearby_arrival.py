"""Nearby arrival domain model."""

from dataclasses import dataclass
from datetime import datetime

from now_departing.domain.models.arrival_record import ArrivalRecord, Direction


@dataclass(frozen=True)
class NearbyArrival:
    """An arrival at a station near the user, with the distance to that station."""

    record: ArrivalRecord
    station_id: str
    station_display_name: str
    destination_label: str
    distance_meters: float

    @property
    def route_id(self) -> str:
        return self.record.route_id

    @property
    def direction(self) -> Direction:
        return self.record.direction

    @property
    def arrival_instant(self) -> datetime:
        return self.record.arrival_instant

    @property
    def station_name(self) -> str:
        return self.record.station_name
