"""Wall clock time source."""

from datetime import UTC, datetime

from now_departing.domain.contracts.time_source import TimeSource


class SystemTimeSource(TimeSource):
    """Reads the system clock as UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)
