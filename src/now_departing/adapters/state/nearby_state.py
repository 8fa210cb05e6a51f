"""Nearby aggregator state dataclass."""

from dataclasses import dataclass
from datetime import datetime

from now_departing.adapters.state.feed_status import FeedStatus
from now_departing.domain.models.coordinate import Coordinate
from now_departing.domain.models.error_details import ErrorDetails
from now_departing.domain.models.nearby_arrival import NearbyArrival
from now_departing.domain.models.station_group import StationGroup


@dataclass(frozen=True)
class NearbyState:
    """Ranked arrivals and their grouping around a coordinate.

    Replaced as a whole after each fetch so readers never see arrivals and
    groups from different cycles.
    """

    coordinate: Coordinate | None = None
    arrivals: tuple[NearbyArrival, ...] = ()
    groups: tuple[StationGroup, ...] = ()
    is_loading: bool = False
    status: FeedStatus = FeedStatus.IDLE
    message: str | None = None
    last_error: ErrorDetails | None = None
    last_update: datetime | None = None
