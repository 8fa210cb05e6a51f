"""Cache entry model."""

from dataclasses import dataclass
from datetime import datetime
from typing import Generic, TypeVar

from now_departing.domain.models.selection import ArrivalKey

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """Most recent successful result for a key and when it was fetched."""

    key: ArrivalKey
    value: V
    fetched_at: datetime

    def age_seconds(self, now: datetime) -> float:
        return (now - self.fetched_at).total_seconds()
