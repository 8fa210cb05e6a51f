"""Protocol for reading the current time."""

from datetime import datetime
from typing import Protocol


class TimeSource(Protocol):
    """Source of the current instant."""

    def now(self) -> datetime:
        """Current timezone-aware UTC instant."""
        ...
