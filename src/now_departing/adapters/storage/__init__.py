"""Local persistence."""

from now_departing.adapters.storage.json_favorites_store import JsonFavoritesStore

__all__ = ["JsonFavoritesStore"]
