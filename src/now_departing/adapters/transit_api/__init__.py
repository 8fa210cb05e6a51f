"""Adapter for the real-time subway arrivals API."""

from now_departing.adapters.transit_api.arrival_client import ArrivalClient
from now_departing.adapters.transit_api.feed_parser import FeedParser

__all__ = ["ArrivalClient", "FeedParser"]
