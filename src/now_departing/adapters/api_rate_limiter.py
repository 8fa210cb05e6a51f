"""Request pacing for the arrivals API.

Arrival clocks and the nearby aggregator reach the upstream through one
shared limiter. It spaces requests by a minimum delay and backs
off when the upstream answers 429 with a ``Retry-After`` hint.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import ClassVar

logger = logging.getLogger(__name__)

# Backoff applied to a 429 that carries no usable Retry-After header
DEFAULT_RETRY_AFTER_SECONDS = 5.0
MAX_RETRY_AFTER_SECONDS = 300.0


def parse_retry_after(value: str | None) -> float:
    """Seconds to back off for a ``Retry-After`` header value.

    Only the delta-seconds form is understood; anything else falls back to
    ``DEFAULT_RETRY_AFTER_SECONDS``. The result is capped at ``MAX_RETRY_AFTER_SECONDS``.
    """
    try:
        seconds = float(value) if value is not None else DEFAULT_RETRY_AFTER_SECONDS
    except ValueError:
        seconds = DEFAULT_RETRY_AFTER_SECONDS
    return min(max(seconds, 0.0), MAX_RETRY_AFTER_SECONDS)


class ApiRateLimiter:
    """Paces requests to one API.

    Requests are serialized and spaced by ``min_delay_seconds``. After
    ``defer``, no request goes out before the deferral has passed, whatever
    the minimum delay. A delay of 0 only serializes.
    """

    _instances: ClassVar[dict[str, ApiRateLimiter]] = {}
    _registry_lock: ClassVar[asyncio.Lock | None] = None

    def __init__(
        self,
        api_name: str,
        min_delay_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the limiter.

        Args:
            api_name: Name of the API (for logging).
            min_delay_seconds: Minimum spacing between requests, negative counts as 0.
            clock: Monotonic clock in seconds.
        """
        self.api_name = api_name
        self.min_delay_seconds = max(0.0, min_delay_seconds)
        self.request_count = 0
        self.deferral_count = 0
        self._clock = clock
        self._next_allowed: float | None = None
        self._lock = asyncio.Lock()

    @classmethod
    async def get_instance(cls, api_name: str, min_delay_seconds: float = 1.0) -> ApiRateLimiter:
        """Shared limiter for ``api_name``. The first caller's delay wins."""
        if cls._registry_lock is None:
            cls._registry_lock = asyncio.Lock()

        async with cls._registry_lock:
            limiter = cls._instances.get(api_name)
            if limiter is None:
                limiter = cls(api_name, min_delay_seconds)
                cls._instances[api_name] = limiter
                logger.info(
                    f"Pacing {api_name} requests at least {limiter.min_delay_seconds}s apart"
                )
            return limiter

    @classmethod
    def reset(cls) -> None:
        """Forget all shared limiters."""
        cls._instances.clear()
        cls._registry_lock = None

    def wait_seconds(self) -> float:
        """How long a request issued now would have to wait."""
        if self._next_allowed is None:
            return 0.0
        return max(0.0, self._next_allowed - self._clock())

    def defer(self, seconds: float) -> None:
        """Hold back every further request for ``seconds`` from now.

        A shorter deferral never shortens one already in place.
        """
        until = self._clock() + max(0.0, seconds)
        if self._next_allowed is None or until > self._next_allowed:
            self._next_allowed = until
            self.deferral_count += 1
            logger.warning(f"{self.api_name}: backing off for {seconds:.1f}s")

    async def acquire(self) -> None:
        """Wait for the turn of the next request."""
        async with self._lock:
            # A deferral may arrive while sleeping
            while (wait_time := self.wait_seconds()) > 0:
                logger.debug(f"{self.api_name}: waiting {wait_time:.2f}s before next request")
                await asyncio.sleep(wait_time)

            issued_at = self._clock()
            next_allowed = issued_at + self.min_delay_seconds
            if self._next_allowed is None or next_allowed > self._next_allowed:
                self._next_allowed = next_allowed
            self.request_count += 1

    async def __aenter__(self) -> ApiRateLimiter:
        await self.acquire()
        return self

    async def __aexit__(
        self, _exc_type: type | None, _exc_val: Exception | None, _exc_tb: object
    ) -> None:
        """Nothing to release."""
