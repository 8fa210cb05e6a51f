"""Decoded station entry from the live arrival feed."""

from dataclasses import dataclass, field

from now_departing.domain.models.arrival_record import ArrivalRecord, Direction


@dataclass(frozen=True)
class StationFeed:
    """Arrivals for one station as returned by a single upstream query."""

    name: str
    station_id: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    routes: tuple[str, ...] = ()
    arrivals: tuple[ArrivalRecord, ...] = field(default_factory=tuple)

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def arrivals_for(
        self, route_id: str | None = None, direction: Direction | None = None
    ) -> list[ArrivalRecord]:
        """Arrivals matching the given route and/or direction, in feed order."""
        return [
            record
            for record in self.arrivals
            if (route_id is None or record.route_id == route_id)
            and (direction is None or record.direction == direction)
        ]
