"""Pollers driving periodic arrival updates."""

from now_departing.adapters.pollers.arrival_clock import ArrivalClock, Subscription
from now_departing.adapters.pollers.favorites_monitor import FavoritesMonitor
from now_departing.adapters.pollers.nearby_aggregator import NearbyAggregator

__all__ = ["ArrivalClock", "FavoritesMonitor", "NearbyAggregator", "Subscription"]
