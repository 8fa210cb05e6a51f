"""Ports (interfaces) for the ports-and-adapters architecture."""

from now_departing.domain.ports.arrival_repository import ArrivalRepository
from now_departing.domain.ports.catalog_source import CatalogSource, WritableCatalogSource
from now_departing.domain.ports.favorites_repository import FavoritesRepository

__all__ = [
    "ArrivalRepository",
    "CatalogSource",
    "FavoritesRepository",
    "WritableCatalogSource",
]
