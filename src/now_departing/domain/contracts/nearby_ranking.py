"""Protocol for turning a location feed into ranked nearby arrivals."""

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

from now_departing.domain.models.coordinate import Coordinate
from now_departing.domain.models.nearby_arrival import NearbyArrival
from now_departing.domain.models.station_feed import StationFeed
from now_departing.domain.models.station_group import StationGroup


class NearbyRankingProtocol(Protocol):
    """Protocol for filtering, ranking and grouping nearby arrivals."""

    horizon_seconds: float

    def aggregate(
        self, feeds: Iterable[StationFeed], origin: Coordinate, now: datetime
    ) -> tuple[list[NearbyArrival], list[StationGroup]]:
        """Ranked arrivals and their station grouping."""
        ...

    def group(self, arrivals: Iterable[NearbyArrival]) -> list[StationGroup]:
        """Station grouping for already ranked arrivals."""
        ...
