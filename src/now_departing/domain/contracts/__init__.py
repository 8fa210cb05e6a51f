"""Contracts (protocols) for internal seams between components."""

from now_departing.domain.contracts.arrival_cache import ArrivalCacheProtocol
from now_departing.domain.contracts.line_directory import LineDirectoryProtocol
from now_departing.domain.contracts.nearby_ranking import NearbyRankingProtocol
from now_departing.domain.contracts.state_broadcaster import StateBroadcasterProtocol
from now_departing.domain.contracts.time_source import TimeSource

__all__ = [
    "ArrivalCacheProtocol",
    "LineDirectoryProtocol",
    "NearbyRankingProtocol",
    "StateBroadcasterProtocol",
    "TimeSource",
]
