"""Tests for favorites storage and the favorites service."""

import json
import os
from pathlib import Path

import pytest

from now_departing.adapters.storage import JsonFavoritesStore
from now_departing.application.services import FavoritesService
from now_departing.domain.models import Direction, Selection

TIMES_SQ_NORTH = Selection(
    line_id="1",
    station_name="Times Sq-42 St",
    direction=Direction.NORTH,
    station_display="Times Square-42nd St",
)
EIGHTH_AV_SOUTH = Selection(line_id="L", station_name="8 Av", direction=Direction.SOUTH)


@pytest.fixture
def store(tmp_path: Path) -> JsonFavoritesStore:
    return JsonFavoritesStore(tmp_path / "nested" / "favorites.json")


class TestJsonFavoritesStore:
    """Tests for the JSON document store."""

    def test_missing_file_reads_as_empty(self, store: JsonFavoritesStore) -> None:
        assert store.get() == []

    def test_corrupt_file_reads_as_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "favorites.json"
        path.write_text("{not json")

        assert JsonFavoritesStore(path).get() == []

    def test_set_then_get_keeps_order(self, store: JsonFavoritesStore) -> None:
        """Given two favorites, when stored, then they read back in the same order."""
        store.set([TIMES_SQ_NORTH, EIGHTH_AV_SOUTH])

        assert store.get() == [TIMES_SQ_NORTH, EIGHTH_AV_SOUTH]

    def test_document_shape(self, store: JsonFavoritesStore) -> None:
        store.set([TIMES_SQ_NORTH])

        document = json.loads(store.path.read_text(encoding="utf-8"))
        assert document == [
            {
                "line_id": "1",
                "station_name": "Times Sq-42 St",
                "station_display": "Times Square-42nd St",
                "direction": "N",
            }
        ]

    def test_failed_write_keeps_previous_document(
        self, store: JsonFavoritesStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Given stored favorites, when replacing the file fails, then the old document
        survives and no temporary file is left behind."""
        store.set([TIMES_SQ_NORTH])

        def failing_replace(src: str, dst: Path) -> None:
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", failing_replace)
        with pytest.raises(OSError, match="disk full"):
            store.set([TIMES_SQ_NORTH, EIGHTH_AV_SOUTH])

        assert store.get() == [TIMES_SQ_NORTH]
        assert [p.name for p in store.path.parent.iterdir()] == ["favorites.json"]


class TestFavoritesService:
    """Tests for FavoritesService."""

    def test_add_ignores_duplicates(self, store: JsonFavoritesStore) -> None:
        """Given a stored favorite, when adding the same line, station and direction, then nothing changes."""
        service = FavoritesService(store)

        assert service.add(TIMES_SQ_NORTH) is True
        assert service.add(Selection("1", "Times Sq-42 St", Direction.NORTH)) is False

        assert service.get_all() == [TIMES_SQ_NORTH]

    def test_same_station_other_direction_is_distinct(self, store: JsonFavoritesStore) -> None:
        service = FavoritesService(store)
        service.add(TIMES_SQ_NORTH)

        assert service.add(Selection("1", "Times Sq-42 St", Direction.SOUTH)) is True
        assert len(service.get_all()) == 2

    def test_remove(self, store: JsonFavoritesStore) -> None:
        service = FavoritesService(store)
        service.add(TIMES_SQ_NORTH)
        service.add(EIGHTH_AV_SOUTH)

        assert service.remove(TIMES_SQ_NORTH) is True
        assert service.remove(TIMES_SQ_NORTH) is False
        assert service.get_all() == [EIGHTH_AV_SOUTH]

    def test_is_favorite(self, store: JsonFavoritesStore) -> None:
        service = FavoritesService(store)
        service.add(EIGHTH_AV_SOUTH)

        assert service.is_favorite("L", "8 Av", Direction.SOUTH) is True
        assert service.is_favorite("L", "8 Av", Direction.NORTH) is False
