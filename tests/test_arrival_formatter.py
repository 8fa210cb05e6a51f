"""Tests for ArrivalFormatter."""

from datetime import UTC, datetime

import pytest

from now_departing.adapters.formatters import ArrivalFormatter
from now_departing.domain.models import Countdown
from tests.fakes import record


def countdown(seconds: int) -> Countdown:
    return Countdown(record=record("1", seconds), total_seconds=seconds)


@pytest.mark.parametrize(
    ("seconds", "full", "compact"),
    [
        (0, "departing now", "Now"),
        (30, "departing now", "Now"),
        (31, "arriving", "Soon"),
        (59, "arriving", "Soon"),
        (60, "1 min", "1m"),
        (119, "1 min", "1m"),
        (525, "8 min", "8m"),
    ],
)
def test_format_countdown(seconds: int, full: str, compact: str) -> None:
    """Given a countdown, when formatting, then the bucket label or truncated minutes are shown."""
    assert ArrivalFormatter("full").format_countdown(countdown(seconds)) == full
    assert ArrivalFormatter("compact").format_countdown(countdown(seconds)) == compact


def test_format_countdowns_limits_and_joins() -> None:
    formatter = ArrivalFormatter()
    countdowns = [countdown(s) for s in (20, 90, 620, 1200)]

    assert formatter.format_countdowns(countdowns) == "departing now, 1 min, 10 min"
    assert formatter.format_countdowns(countdowns, limit=1) == "departing now"
    assert formatter.format_countdowns(()) == ""


def test_invalid_style_is_rejected() -> None:
    with pytest.raises(ValueError, match="style must be either"):
        ArrivalFormatter("verbose")


@pytest.mark.parametrize(
    ("meters", "expected"),
    [
        (0, "0ft"),
        (100, "328ft"),
        (400, "0.2mi"),
        (1609.34, "1.0mi"),
        (20000, "12mi"),
    ],
)
def test_format_distance(meters: float, expected: str) -> None:
    assert ArrivalFormatter.format_distance(meters) == expected


def test_format_update_time() -> None:
    assert ArrivalFormatter.format_update_time(None) == "Never"
    update_time = datetime(2025, 6, 4, 12, 0, 5, tzinfo=UTC)
    assert ArrivalFormatter.format_update_time(update_time) == (
        update_time.astimezone().strftime("%H:%M:%S")
    )
