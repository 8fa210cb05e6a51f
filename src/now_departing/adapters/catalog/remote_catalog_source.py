"""Catalog source fetching the document over HTTP."""

import logging

import aiohttp

from now_departing.adapters.api_request_logger import log_api_request
from now_departing.adapters.catalog.catalog_document import decode_catalog
from now_departing.domain.errors import DecodeError, ServerError, TransportError
from now_departing.domain.models.station import Station
from now_departing.domain.ports.catalog_source import CatalogSource

logger = logging.getLogger(__name__)


class RemoteCatalogSource(CatalogSource):
    """Downloads and decodes the remote catalog document."""

    name = "remote"

    def __init__(self, session: aiohttp.ClientSession, url: str, timeout_seconds: float = 30) -> None:
        self._session = session
        self.url = url
        self.timeout_seconds = timeout_seconds

    async def load(self) -> dict[str, list[Station]]:
        log_api_request("GET", self.url)
        try:
            async with self._session.get(
                self.url, timeout=aiohttp.ClientTimeout(total=self.timeout_seconds)
            ) as response:
                if response.status != 200:
                    raise ServerError(response.status, f"Catalog download returned {response.status}")
                body = await response.read()
        except TimeoutError as e:
            raise TransportError(f"Catalog download from {self.url} timed out", timed_out=True) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Catalog download from {self.url} failed: {e}") from e

        try:
            return decode_catalog(body)
        except ValueError as e:
            raise DecodeError(f"Remote catalog is malformed: {e}") from e
