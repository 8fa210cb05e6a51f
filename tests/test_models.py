"""Tests for domain models."""

from datetime import timedelta

import pytest

from now_departing.domain.models import (
    ArrivalKey,
    Countdown,
    CountdownStatus,
    Direction,
    LineStyling,
    Selection,
    StationFeed,
)
from tests.fakes import T0, record


class TestCountdown:
    """Tests for countdown buckets computed from absolute instants."""

    @pytest.mark.parametrize(
        ("seconds", "status", "minutes"),
        [
            (0, CountdownStatus.DEPARTING_NOW, 0),
            (30, CountdownStatus.DEPARTING_NOW, 0),
            (31, CountdownStatus.ARRIVING, 0),
            (59, CountdownStatus.ARRIVING, 0),
            (60, CountdownStatus.MINUTES, 1),
            (119, CountdownStatus.MINUTES, 1),
            (525, CountdownStatus.MINUTES, 8),
        ],
    )
    def test_status_buckets(self, seconds: int, status: CountdownStatus, minutes: int) -> None:
        """Given remaining seconds, when bucketing, then status and truncated minutes match."""
        countdown = Countdown.between(record("1", seconds), T0)

        assert countdown is not None
        assert countdown.status == status
        assert countdown.minutes == minutes

    def test_when_arrival_has_passed_then_no_countdown(self) -> None:
        """Given an arrival one second in the past, when computing, then returns None."""
        assert Countdown.between(record("1", -1), T0) is None

    def test_fractional_seconds_are_truncated(self) -> None:
        """Given 90.9 seconds left, when computing, then total seconds is 90."""
        arrival = record("1", 0)
        countdown = Countdown.between(arrival, arrival.arrival_instant - timedelta(seconds=90.9))

        assert countdown is not None
        assert countdown.total_seconds == 90
        assert countdown.seconds == 30


class TestDirection:
    """Tests for direction parsing."""

    @pytest.mark.parametrize("value", ["N", "n", " north ", "Uptown"])
    def test_parses_north(self, value: str) -> None:
        assert Direction.parse(value) is Direction.NORTH

    @pytest.mark.parametrize("value", ["S", "s", "SOUTH", "downtown"])
    def test_parses_south(self, value: str) -> None:
        assert Direction.parse(value) is Direction.SOUTH

    def test_rejects_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown direction"):
            Direction.parse("E")


def test_selection_key_ignores_display_name() -> None:
    """Given two selections differing only in display name, when keyed, then keys are equal."""
    a = Selection("1", "Times Sq-42 St", Direction.NORTH, "Times Square")
    b = Selection("1", "Times Sq-42 St", Direction.NORTH)

    assert a.key == b.key == ArrivalKey("1", "Times Sq-42 St", Direction.NORTH)
    assert b.display_name == "Times Sq-42 St"
    assert str(a.key) == "1:Times Sq-42 St:N"


def test_station_feed_filters_by_route_and_direction() -> None:
    """Given mixed arrivals, when filtering, then only matching route and direction remain."""
    feed = StationFeed(
        name="Times Sq-42 St",
        arrivals=(
            record("1", 60),
            record("2", 90),
            record("1", 120, Direction.SOUTH),
            record("1", 300),
        ),
    )

    matching = feed.arrivals_for("1", Direction.NORTH)

    assert [r.arrival_instant for r in matching] == [T0 + timedelta(seconds=60), T0 + timedelta(seconds=300)]
    assert feed.has_location is False


def test_line_styling_hex() -> None:
    assert LineStyling(background=(0.92, 0.22, 0.21), foreground="white").background_hex == "#eb3836"
