"""Catalog source backed by a JSON file on disk."""

import logging
import os
import tempfile
from importlib import resources
from pathlib import Path

from now_departing.adapters.catalog.catalog_document import decode_catalog, encode_catalog
from now_departing.domain.models.station import Station
from now_departing.domain.ports.catalog_source import WritableCatalogSource

logger = logging.getLogger(__name__)


class JsonFileCatalogSource(WritableCatalogSource):
    """Reads (and optionally writes) a catalog document at ``path``."""

    def __init__(self, path: Path | str, name: str = "cache") -> None:
        self.path = Path(path).expanduser()
        self.name = name

    async def load(self) -> dict[str, list[Station]]:
        if not self.path.exists():
            raise FileNotFoundError(f"Catalog file not found: {self.path}")
        return decode_catalog(self.path.read_bytes())

    async def save(self, catalog: dict[str, list[Station]]) -> None:
        """Write the catalog atomically, creating parent directories as needed."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(encode_catalog(catalog))
            os.replace(temp_path, self.path)
        except BaseException:
            Path(temp_path).unlink(missing_ok=True)
            raise
        logger.debug(f"Wrote station catalog cache to {self.path}")


def bundled_catalog_source(path: Path | str | None = None) -> JsonFileCatalogSource:
    """Source for the snapshot shipped with the package, or an override path."""
    if path is None:
        path = Path(str(resources.files("now_departing.data").joinpath("stations.json")))
    return JsonFileCatalogSource(path, name="bundled")
