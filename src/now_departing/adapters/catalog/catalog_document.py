"""Codec for the station catalog document: ``{line_id: [{id?, display, name}]}``."""

import json

from pydantic import BaseModel, ConfigDict, TypeAdapter

from now_departing.domain.models.station import Station


class CatalogStationEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    display: str
    name: str


_document_adapter = TypeAdapter(dict[str, list[CatalogStationEntry]])


def decode_catalog(raw: str | bytes) -> dict[str, list[Station]]:
    """Decode a catalog document. Stations without an id use their name as id.

    Raises:
        ValueError: If the document is not valid JSON or not in the expected shape.
    """
    document = _document_adapter.validate_json(raw)
    return {
        line_id: [
            Station(id=entry.id or entry.name, canonical_name=entry.name, display_name=entry.display)
            for entry in entries
        ]
        for line_id, entries in document.items()
    }


def encode_catalog(catalog: dict[str, list[Station]]) -> bytes:
    document = {
        line_id: [
            {"id": station.id, "display": station.display_name, "name": station.canonical_name}
            for station in stations
        ]
        for line_id, stations in catalog.items()
    }
    return json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")
