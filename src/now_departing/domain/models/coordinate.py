"""Coordinate domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Coordinate:
    """WGS84 position in decimal degrees."""

    latitude: float
    longitude: float
