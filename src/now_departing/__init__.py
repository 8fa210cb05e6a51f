"""Real-time subway arrival aggregation and caching engine."""

__version__ = "0.1.0"
