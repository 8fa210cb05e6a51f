"""HTTP client for the arrivals API."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import aiohttp

from now_departing.adapters.api_rate_limiter import ApiRateLimiter, parse_retry_after
from now_departing.adapters.api_request_logger import log_api_request, log_api_response
from now_departing.adapters.system_time_source import SystemTimeSource
from now_departing.adapters.transit_api.constants import (
    BY_LOCATION_PATH,
    BY_ROUTE_PATH,
    COORDINATE_PRECISION,
    DEFAULT_API_BASE_URL,
    RATE_LIMITER_NAME,
)
from now_departing.adapters.transit_api.feed_parser import FeedParser
from now_departing.domain.errors import DecodeError, ServerError, TransportError
from now_departing.domain.ports.arrival_repository import ArrivalRepository

if TYPE_CHECKING:
    from now_departing.domain.contracts.time_source import TimeSource
    from now_departing.domain.models.station_feed import StationFeed

logger = logging.getLogger(__name__)


class ArrivalClient(ArrivalRepository):
    """Stateless fetch and decode of by-route and by-location arrivals.

    Every request carries its own timeout. Failures are raised as
    ``TransportError``, ``ServerError`` or ``DecodeError`` and never retried here.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout_seconds: float = 30,
        location_timeout_seconds: float = 15,
        min_delay_seconds: float = 0.0,
        time_source: TimeSource | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            session: Shared aiohttp session.
            base_url: API base URL without trailing slash.
            timeout_seconds: Timeout for by-route requests.
            location_timeout_seconds: Timeout for by-location requests.
            min_delay_seconds: Minimum delay between requests to the API.
            time_source: Clock used to drop arrivals that are already in the past.
        """
        self._session = session
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.location_timeout_seconds = location_timeout_seconds
        self.min_delay_seconds = min_delay_seconds
        self._time_source = time_source or SystemTimeSource()
        self._rate_limiter: ApiRateLimiter | None = None

    async def fetch_by_route(self, line_id: str) -> list[StationFeed]:
        url = self.base_url + BY_ROUTE_PATH.format(line_id=quote(line_id, safe=""))
        return await self._get(url, None, self.timeout_seconds)

    async def fetch_by_location(self, latitude: float, longitude: float) -> list[StationFeed]:
        params = {
            "lat": f"{latitude:.{COORDINATE_PRECISION}f}",
            "lon": f"{longitude:.{COORDINATE_PRECISION}f}",
        }
        return await self._get(self.base_url + BY_LOCATION_PATH, params, self.location_timeout_seconds)

    async def _get_rate_limiter(self) -> ApiRateLimiter:
        if self._rate_limiter is None:
            self._rate_limiter = await ApiRateLimiter.get_instance(
                RATE_LIMITER_NAME, self.min_delay_seconds
            )
        return self._rate_limiter

    async def _get(
        self, url: str, params: dict[str, str] | None, timeout_seconds: float
    ) -> list[StationFeed]:
        rate_limiter = await self._get_rate_limiter()
        await rate_limiter.acquire()

        log_api_request("GET", url, params)
        started = time.monotonic()
        try:
            async with self._session.get(
                url, params=params, timeout=aiohttp.ClientTimeout(total=timeout_seconds)
            ) as response:
                if response.status == 429:
                    rate_limiter.defer(parse_retry_after(response.headers.get("Retry-After")))
                payload = await self._read_payload(url, response)
                log_api_response(url, response.status, time.monotonic() - started)
        except TimeoutError as e:
            logger.warning(f"Request to {url} timed out after {timeout_seconds}s")
            raise TransportError(f"Request to {url} timed out", timed_out=True) from e
        except aiohttp.ClientError as e:
            logger.warning(f"Request to {url} failed: {e}")
            raise TransportError(f"Request to {url} failed: {e}") from e

        return FeedParser.parse(payload, self._time_source.now())

    @staticmethod
    async def _read_payload(url: str, response: aiohttp.ClientResponse) -> Any:
        if not 200 <= response.status < 300:
            response_text = await response.text()
            logger.warning(f"Arrivals API returned status {response.status}: {response_text[:200]}")
            raise ServerError(response.status, f"Arrivals API returned status {response.status} for {url}")

        try:
            return await response.json(content_type=None)
        except (aiohttp.ContentTypeError, ValueError) as e:
            raise DecodeError(f"Response from {url} is not valid JSON: {e}") from e
