"""Arrival repository port."""

from typing import Protocol

from now_departing.domain.models.station_feed import StationFeed


class ArrivalRepository(Protocol):
    """Port for retrieving live arrival predictions."""

    async def fetch_by_route(self, line_id: str) -> list[StationFeed]:
        """Get arrivals for every station on a line."""
        ...

    async def fetch_by_location(self, latitude: float, longitude: float) -> list[StationFeed]:
        """Get arrivals for stations near a coordinate."""
        ...
