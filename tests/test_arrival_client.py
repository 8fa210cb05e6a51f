"""Tests for the arrivals HTTP client."""

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from now_departing.adapters.api_rate_limiter import ApiRateLimiter
from now_departing.adapters.transit_api import ArrivalClient
from now_departing.adapters.transit_api.constants import RATE_LIMITER_NAME
from now_departing.domain.errors import DecodeError, ServerError, TransportError, describe_error
from tests.fakes import FakeTimeSource


def make_session(
    status: int = 200,
    json_data: Any = None,
    json_error: Exception | None = None,
    get_error: Exception | None = None,
    headers: dict[str, str] | None = None,
) -> MagicMock:
    """Build a session whose get() yields a response context manager."""
    response = MagicMock()
    response.status = status
    response.headers = headers or {}
    response.json = AsyncMock(return_value=json_data, side_effect=json_error)
    response.text = AsyncMock(return_value="upstream body")

    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.get = MagicMock(return_value=context, side_effect=get_error)
    return session


BY_ROUTE = {
    "data": [
        {"name": "Times Sq-42 St", "N": [{"route": "1", "time": "2025-06-04T12:01:30Z"}], "S": []}
    ]
}


@pytest.mark.asyncio
async def test_fetch_by_route_requests_route_url(time_source: FakeTimeSource) -> None:
    """Given a by-route response, when fetching, then the route URL is requested and decoded."""
    session = make_session(json_data=BY_ROUTE)
    client = ArrivalClient(session, base_url="https://api.example/", time_source=time_source)

    feeds = await client.fetch_by_route("1")

    assert feeds[0].name == "Times Sq-42 St"
    assert len(feeds[0].arrivals) == 1
    args, kwargs = session.get.call_args
    assert args[0] == "https://api.example/by-route/1"
    assert kwargs["params"] is None
    assert kwargs["timeout"].total == 30


@pytest.mark.asyncio
async def test_fetch_by_location_sends_coordinates_with_location_timeout(
    time_source: FakeTimeSource,
) -> None:
    """Given a coordinate, when fetching by location, then lat/lon params and the short timeout are used."""
    session = make_session(json_data={"data": []})
    client = ArrivalClient(session, location_timeout_seconds=15, time_source=time_source)

    feeds = await client.fetch_by_location(40.7557, -73.987)

    assert feeds == []
    args, kwargs = session.get.call_args
    assert args[0] == "https://api.wheresthefuckingtrain.com/by-location"
    assert kwargs["params"] == {"lat": "40.755700", "lon": "-73.987000"}
    assert kwargs["timeout"].total == 15


@pytest.mark.asyncio
async def test_non_2xx_raises_server_error(time_source: FakeTimeSource) -> None:
    """Given a 503 response, when fetching, then ServerError with the status is raised."""
    client = ArrivalClient(make_session(status=503), time_source=time_source)

    with pytest.raises(ServerError) as exc_info:
        await client.fetch_by_route("1")

    assert exc_info.value.status_code == 503
    assert describe_error(exc_info.value).reason == "Service unavailable"


@pytest.mark.asyncio
async def test_rate_limited_response_backs_off(time_source: FakeTimeSource) -> None:
    """Given a 429 with Retry-After, when fetching, then later requests are held back that long."""
    session = make_session(status=429, headers={"Retry-After": "20"})
    client = ArrivalClient(session, time_source=time_source)

    with pytest.raises(ServerError) as exc_info:
        await client.fetch_by_route("1")

    limiter = await ApiRateLimiter.get_instance(RATE_LIMITER_NAME)
    assert describe_error(exc_info.value).reason == "Rate limit exceeded"
    assert limiter.deferral_count == 1
    assert 19 < limiter.wait_seconds() <= 20


@pytest.mark.asyncio
async def test_invalid_json_raises_decode_error(time_source: FakeTimeSource) -> None:
    """Given a body that is not JSON, when fetching, then DecodeError is raised."""
    session = make_session(json_error=json.JSONDecodeError("Expecting value", "<html>", 0))
    client = ArrivalClient(session, time_source=time_source)

    with pytest.raises(DecodeError):
        await client.fetch_by_route("1")


@pytest.mark.asyncio
async def test_connection_error_raises_transport_error(time_source: FakeTimeSource) -> None:
    """Given a connection failure, when fetching, then TransportError is raised."""
    session = make_session(get_error=aiohttp.ClientConnectionError("refused"))
    client = ArrivalClient(session, time_source=time_source)

    with pytest.raises(TransportError) as exc_info:
        await client.fetch_by_route("1")

    assert exc_info.value.timed_out is False
    assert describe_error(exc_info.value).reason == "Cannot connect to server"


@pytest.mark.asyncio
async def test_timeout_raises_transport_error(time_source: FakeTimeSource) -> None:
    """Given a timeout, when fetching, then TransportError marked as timed out is raised."""
    session = make_session(get_error=TimeoutError())
    client = ArrivalClient(session, time_source=time_source)

    with pytest.raises(TransportError) as exc_info:
        await client.fetch_by_location(40.0, -73.0)

    assert exc_info.value.timed_out is True
    assert describe_error(exc_info.value).reason == "Request timed out"
