"""Favorites repository port."""

from typing import Protocol

from now_departing.domain.models.selection import Selection


class FavoritesRepository(Protocol):
    """Port for persisting the user's favorite selections."""

    def get(self) -> list[Selection]:
        """Load all favorites, in stored order."""
        ...

    def set(self, favorites: list[Selection]) -> None:
        """Replace all favorites."""
        ...
