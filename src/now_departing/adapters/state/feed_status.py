"""Status shared by arrival clocks and the nearby aggregator."""

from enum import StrEnum


class FeedStatus(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    EMPTY = "empty"  # Successful fetch, nothing to show
    STALE = "stale"  # Last fetch failed, showing older data
    ERROR = "error"  # Fetch failed and there is nothing to show
