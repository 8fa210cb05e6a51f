"""Station catalog source ports."""

from typing import Protocol

from now_departing.domain.models.station import Station


class CatalogSource(Protocol):
    """Port for one source of the station-by-line catalog."""

    name: str

    async def load(self) -> dict[str, list[Station]]:
        """Load and decode the catalog, raising on any failure."""
        ...


class WritableCatalogSource(CatalogSource, Protocol):
    """Catalog source that can also persist a catalog (the local cache)."""

    async def save(self, catalog: dict[str, list[Station]]) -> None:
        """Persist the catalog."""
        ...
