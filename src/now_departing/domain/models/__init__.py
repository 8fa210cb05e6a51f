"""Domain models for subway arrivals."""

from now_departing.domain.models.arrival_record import ArrivalRecord, Direction
from now_departing.domain.models.cache_entry import CacheEntry
from now_departing.domain.models.coordinate import Coordinate
from now_departing.domain.models.countdown import Countdown, CountdownStatus
from now_departing.domain.models.error_details import ErrorDetails, ErrorKind
from now_departing.domain.models.line import Line, LineStyling
from now_departing.domain.models.nearby_arrival import NearbyArrival
from now_departing.domain.models.selection import ArrivalKey, Selection
from now_departing.domain.models.station import Station
from now_departing.domain.models.station_feed import StationFeed
from now_departing.domain.models.station_group import LineDirectionGroup, StationGroup

__all__ = [
    "ArrivalKey",
    "ArrivalRecord",
    "CacheEntry",
    "Coordinate",
    "Countdown",
    "CountdownStatus",
    "Direction",
    "ErrorDetails",
    "ErrorKind",
    "Line",
    "LineDirectionGroup",
    "LineStyling",
    "NearbyArrival",
    "Selection",
    "Station",
    "StationFeed",
    "StationGroup",
]
