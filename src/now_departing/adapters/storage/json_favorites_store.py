"""Favorites persisted as a JSON document."""

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import BaseModel, TypeAdapter, ValidationError

from now_departing.domain.models.arrival_record import Direction
from now_departing.domain.models.selection import Selection
from now_departing.domain.ports.favorites_repository import FavoritesRepository

logger = logging.getLogger(__name__)


class FavoriteRecord(BaseModel):
    line_id: str
    station_name: str
    station_display: str = ""
    direction: Direction


_favorites_adapter = TypeAdapter(list[FavoriteRecord])


class JsonFavoritesStore(FavoritesRepository):
    """Reads and writes favorites at ``path``. A missing or corrupt file reads as empty."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()

    def get(self) -> list[Selection]:
        if not self.path.exists():
            return []
        try:
            records = _favorites_adapter.validate_json(self.path.read_bytes())
        except (OSError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable favorites file {self.path}: {e}")
            return []
        return [
            Selection(
                line_id=r.line_id,
                station_name=r.station_name,
                direction=r.direction,
                station_display=r.station_display,
            )
            for r in records
        ]

    def set(self, favorites: list[Selection]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        document = [
            {
                "line_id": f.line_id,
                "station_name": f.station_name,
                "station_display": f.station_display,
                "direction": f.direction.value,
            }
            for f in favorites
        ]
        payload = json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")

        # Readers only ever see the old or the new document
        fd, temp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".favorites-", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.replace(temp_path, self.path)
        except BaseException:
            Path(temp_path).unlink(missing_ok=True)
            raise
        logger.debug(f"Saved {len(favorites)} favorites to {self.path}")
