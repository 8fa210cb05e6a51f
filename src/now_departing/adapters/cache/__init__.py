"""Arrival caching."""

from now_departing.adapters.cache.arrival_cache import ArrivalCache

__all__ = ["ArrivalCache"]
