"""Text formatting of arrivals."""

from now_departing.adapters.formatters.arrival_formatter import ArrivalFormatter

__all__ = ["ArrivalFormatter"]
