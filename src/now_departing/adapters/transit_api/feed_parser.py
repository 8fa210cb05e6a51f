"""Parser turning arrivals API payloads into station feeds."""

import logging
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from now_departing.adapters.transit_api.schemas import WireArrival, WireResponse, WireStation
from now_departing.domain.errors import DecodeError
from now_departing.domain.models.arrival_record import ArrivalRecord, Direction
from now_departing.domain.models.station_feed import StationFeed

logger = logging.getLogger(__name__)


def parse_instant(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp into a UTC instant, or None if malformed.

    Timestamps without an offset are taken to be UTC.
    """
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


class FeedParser:
    """Decodes raw JSON payloads. Only arrivals strictly after ``now`` are kept."""

    @staticmethod
    def parse(payload: Any, now: datetime) -> list[StationFeed]:
        """Parse a decoded JSON payload.

        Raises:
            DecodeError: If the payload does not have the expected shape.
        """
        try:
            response = WireResponse.model_validate(payload)
        except ValidationError as e:
            raise DecodeError(f"Unexpected arrivals payload: {e.error_count()} validation errors") from e

        return [FeedParser.parse_station(station, now) for station in response.data]

    @staticmethod
    def parse_station(station: WireStation, now: datetime) -> StationFeed:
        latitude = longitude = None
        if station.location is not None and len(station.location) == 2:
            latitude, longitude = station.location

        arrivals = [
            *FeedParser._parse_arrivals(station.name, Direction.NORTH, station.north, now),
            *FeedParser._parse_arrivals(station.name, Direction.SOUTH, station.south, now),
        ]
        return StationFeed(
            name=station.name,
            station_id=station.id,
            latitude=latitude,
            longitude=longitude,
            routes=tuple(station.routes),
            arrivals=tuple(arrivals),
        )

    @staticmethod
    def _parse_arrivals(
        station_name: str, direction: Direction, entries: list[WireArrival], now: datetime
    ) -> list[ArrivalRecord]:
        records = []
        for entry in entries:
            instant = parse_instant(entry.time)
            if instant is None:
                logger.warning(f"Skipping arrival with unparseable time {entry.time!r} at {station_name}")
                continue
            if instant <= now:
                continue
            records.append(
                ArrivalRecord(
                    route_id=entry.route,
                    station_name=station_name,
                    direction=direction,
                    arrival_instant=instant,
                )
            )
        return records
