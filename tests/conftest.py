"""Shared fixtures."""

import pytest

from now_departing.adapters.api_rate_limiter import ApiRateLimiter
from tests.fakes import FakeTimeSource


@pytest.fixture(autouse=True)
def reset_rate_limiters() -> None:
    """Give every test fresh shared rate limiters."""
    ApiRateLimiter.reset()


@pytest.fixture
def time_source() -> FakeTimeSource:
    return FakeTimeSource()
