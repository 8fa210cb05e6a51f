"""Filtering, ranking and grouping of arrivals around a coordinate."""

from __future__ import annotations

import logging
import math
from collections import OrderedDict
from collections.abc import Callable, Iterable
from functools import cmp_to_key
from typing import TYPE_CHECKING

from now_departing.domain.models.nearby_arrival import NearbyArrival
from now_departing.domain.models.station_group import LineDirectionGroup, StationGroup

if TYPE_CHECKING:
    from datetime import datetime

    from now_departing.domain.contracts.line_directory import LineDirectoryProtocol
    from now_departing.domain.models.coordinate import Coordinate
    from now_departing.domain.models.station_feed import StationFeed

logger = logging.getLogger(__name__)

EARTH_RADIUS_METERS = 6_371_000.0

# Upstream names that are too long for compact displays
STATION_NAME_SIMPLIFICATIONS = {
    "Broadway-Lafayette St/Bleecker St": "Broadway-Lafayette",
    "Times Sq-42 St": "Times Square",
    "14 St-Union Sq": "Union Square",
    "Grand Central-42 St": "Grand Central",
    "34 St-Penn Station": "Penn Station",
    "Brooklyn Bridge-City Hall/Chambers St": "Brooklyn Bridge",
    "Atlantic Av-Barclays Ctr": "Barclays Center",
    "59 St-Columbus Circle": "Columbus Circle",
    "34 St-Herald Sq": "Herald Square",
    "Court St/Borough Hall": "Borough Hall",
    "Roosevelt Av/74 St-Broadway": "Roosevelt Ave",
    "Spring St/Prince St": "Spring St",
    "Canal St": "Canal Street",
    "14 St/8 Av": "14th & 8th",
    "14 St/6 Av": "14th & 6th",
    "Lexington Av/59 St": "Lex & 59th",
    "Lexington Av/63 St": "Lex & 63rd",
}


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in meters."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def simplify_station_name(name: str) -> str:
    """Shorten well-known station names, otherwise tidy separators."""
    if name in STATION_NAME_SIMPLIFICATIONS:
        return STATION_NAME_SIMPLIFICATIONS[name]
    return name.replace(" / ", "/").replace("-", "–")


class NearbyRankingService:
    """Turns a location-scoped feed into ranked and grouped nearby arrivals."""

    def __init__(
        self,
        line_directory: LineDirectoryProtocol,
        horizon_minutes: float = 30,
        tie_window_seconds: float = 60,
        display_name_lookup: Callable[[str], str | None] | None = None,
    ) -> None:
        """Initialize the ranking service.

        Args:
            line_directory: Known routes and destination labels.
            horizon_minutes: Arrivals further out than this are dropped.
            tie_window_seconds: Arrivals closer in time than this are ordered by distance.
            display_name_lookup: Optional catalog lookup for station display names.
        """
        self.line_directory = line_directory
        self.horizon_seconds = horizon_minutes * 60
        self.tie_window_seconds = tie_window_seconds
        self.display_name_lookup = display_name_lookup

    def aggregate(
        self, feeds: Iterable[StationFeed], origin: Coordinate, now: datetime
    ) -> tuple[list[NearbyArrival], list[StationGroup]]:
        """Build, rank and group arrivals in one pass."""
        arrivals = self.rank(self.build_arrivals(feeds, origin, now))
        return arrivals, self.group(arrivals)

    def build_arrivals(
        self, feeds: Iterable[StationFeed], origin: Coordinate, now: datetime
    ) -> list[NearbyArrival]:
        """Filter feed entries to known routes within the horizon and attach distances."""
        known_routes = self.line_directory.known_route_ids()
        seen: set[tuple[str, str, str, datetime]] = set()
        arrivals: list[NearbyArrival] = []

        for feed in feeds:
            if not feed.arrivals:
                continue
            if not feed.has_location:
                logger.debug(f"Skipping station without coordinates: {feed.name}")
                continue

            distance = haversine_meters(
                origin.latitude, origin.longitude, feed.latitude, feed.longitude
            )
            station_id = feed.station_id or feed.name
            display_name = self._display_name(feed.name)

            for record in feed.arrivals:
                if record.route_id not in known_routes:
                    continue
                remaining = (record.arrival_instant - now).total_seconds()
                if remaining < 0 or remaining > self.horizon_seconds:
                    continue
                identity = (station_id, record.route_id, record.direction.value, record.arrival_instant)
                if identity in seen:
                    continue
                seen.add(identity)
                arrivals.append(
                    NearbyArrival(
                        record=record,
                        station_id=station_id,
                        station_display_name=display_name,
                        destination_label=self.line_directory.destination_for(
                            record.route_id, record.direction
                        ),
                        distance_meters=distance,
                    )
                )

        return arrivals

    def rank(self, arrivals: Iterable[NearbyArrival]) -> list[NearbyArrival]:
        """Sort by arrival time, falling back to distance inside the tie window."""
        return sorted(arrivals, key=cmp_to_key(self._compare))

    def group(self, arrivals: Iterable[NearbyArrival]) -> list[StationGroup]:
        """Group by station, then by line and direction.

        Sub-groups are ordered by line id then direction, arrivals within a
        sub-group by time, and stations by ascending distance.
        """
        by_station: OrderedDict[str, list[NearbyArrival]] = OrderedDict()
        for arrival in arrivals:
            by_station.setdefault(arrival.station_id, []).append(arrival)

        station_groups = []
        for station_id, station_arrivals in by_station.items():
            by_line: dict[tuple[str, str], list[NearbyArrival]] = {}
            for arrival in station_arrivals:
                by_line.setdefault((arrival.route_id, arrival.direction.value), []).append(arrival)

            groups = tuple(
                LineDirectionGroup(
                    line_id=line_id,
                    direction=members[0].direction,
                    destination_label=members[0].destination_label,
                    arrivals=tuple(sorted(members, key=lambda a: a.arrival_instant)),
                )
                for (line_id, _direction), members in sorted(by_line.items())
            )
            first = station_arrivals[0]
            station_groups.append(
                StationGroup(
                    station_id=station_id,
                    station_display_name=first.station_display_name,
                    distance_meters=first.distance_meters,
                    groups=groups,
                )
            )

        station_groups.sort(key=lambda group: group.distance_meters)
        return station_groups

    def _compare(self, a: NearbyArrival, b: NearbyArrival) -> int:
        delta = (a.arrival_instant - b.arrival_instant).total_seconds()
        if abs(delta) < self.tie_window_seconds and a.distance_meters != b.distance_meters:
            return -1 if a.distance_meters < b.distance_meters else 1
        if delta == 0:
            return 0
        return -1 if delta < 0 else 1

    def _display_name(self, canonical_name: str) -> str:
        if self.display_name_lookup is not None:
            display_name = self.display_name_lookup(canonical_name)
            if display_name:
                return display_name
        return simplify_station_name(canonical_name)
