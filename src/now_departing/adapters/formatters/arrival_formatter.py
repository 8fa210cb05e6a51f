"""Formatter for countdowns, distances and update times."""

from datetime import datetime

from now_departing.domain.models.countdown import Countdown, CountdownStatus

FEET_PER_METER = 3.28084
FEET_PER_MILE = 5280

_FULL = {
    CountdownStatus.DEPARTING_NOW: "departing now",
    CountdownStatus.ARRIVING: "arriving",
}
_COMPACT = {
    CountdownStatus.DEPARTING_NOW: "Now",
    CountdownStatus.ARRIVING: "Soon",
}


class ArrivalFormatter:
    """Formats countdowns in 'full' ("9 min") or 'compact' ("9m") style."""

    def __init__(self, style: str = "full") -> None:
        if style not in ("full", "compact"):
            raise ValueError("style must be either 'full' or 'compact'")
        self.style = style

    def format_countdown(self, countdown: Countdown) -> str:
        labels = _FULL if self.style == "full" else _COMPACT
        if countdown.status in labels:
            return labels[countdown.status]
        if self.style == "full":
            return f"{countdown.minutes} min"
        return f"{countdown.minutes}m"

    def format_countdowns(self, countdowns: list[Countdown] | tuple[Countdown, ...], limit: int = 3) -> str:
        """Join the first ``limit`` countdowns, e.g. '1 min, 8 min'."""
        return ", ".join(self.format_countdown(c) for c in countdowns[:limit])

    @staticmethod
    def format_distance(meters: float) -> str:
        """Feet below 1000 ft, then miles with one decimal below 10 mi."""
        feet = meters * FEET_PER_METER
        if feet < 1000:
            return f"{int(feet)}ft"
        miles = feet / FEET_PER_MILE
        if miles < 10:
            return f"{miles:.1f}mi"
        return f"{int(miles)}mi"

    @staticmethod
    def format_update_time(update_time: datetime | None) -> str:
        if not update_time:
            return "Never"
        return update_time.astimezone().strftime("%H:%M:%S")
