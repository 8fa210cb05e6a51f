"""Selection and cache key models."""

from dataclasses import dataclass

from now_departing.domain.models.arrival_record import Direction


@dataclass(frozen=True)
class ArrivalKey:
    """Cache key for one (line, station, direction) triple."""

    line_id: str
    station_name: str
    direction: Direction

    def __str__(self) -> str:
        return f"{self.line_id}:{self.station_name}:{self.direction.value}"


@dataclass(frozen=True)
class Selection:
    """A line, station and direction picked by the user.

    Favorites are persisted selections.
    """

    line_id: str
    station_name: str
    direction: Direction
    station_display: str = ""

    @property
    def key(self) -> ArrivalKey:
        return ArrivalKey(self.line_id, self.station_name, self.direction)

    @property
    def display_name(self) -> str:
        return self.station_display or self.station_name
