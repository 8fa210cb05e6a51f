"""Service for managing favorite selections."""

import logging

from now_departing.domain.models.arrival_record import Direction
from now_departing.domain.models.selection import Selection
from now_departing.domain.ports.favorites_repository import FavoritesRepository

logger = logging.getLogger(__name__)


class FavoritesService:
    """Adds, removes and looks up favorites, keyed by line, station and direction."""

    def __init__(self, repository: FavoritesRepository) -> None:
        self.repository = repository

    def get_all(self) -> list[Selection]:
        return self.repository.get()

    def add(self, selection: Selection) -> bool:
        """Add a favorite unless the same line, station and direction is already stored."""
        favorites = self.repository.get()
        if any(favorite.key == selection.key for favorite in favorites):
            logger.info(f"Favorite already exists: {selection.key}")
            return False
        favorites.append(selection)
        self.repository.set(favorites)
        logger.info(f"Added favorite: {selection.key}")
        return True

    def remove(self, selection: Selection) -> bool:
        favorites = self.repository.get()
        remaining = [favorite for favorite in favorites if favorite.key != selection.key]
        if len(remaining) == len(favorites):
            return False
        self.repository.set(remaining)
        logger.info(f"Removed favorite: {selection.key}")
        return True

    def is_favorite(self, line_id: str, station_name: str, direction: Direction) -> bool:
        return any(
            favorite.line_id == line_id
            and favorite.station_name == station_name
            and favorite.direction == direction
            for favorite in self.repository.get()
        )
