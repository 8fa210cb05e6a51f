"""Application services."""

from now_departing.application.services.favorites_service import FavoritesService
from now_departing.application.services.nearby_ranking_service import NearbyRankingService
from now_departing.application.services.station_catalog import (
    CatalogLoadingState,
    StationCatalog,
)

__all__ = [
    "CatalogLoadingState",
    "FavoritesService",
    "NearbyRankingService",
    "StationCatalog",
]
