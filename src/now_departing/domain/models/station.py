"""Station domain model."""

from dataclasses import dataclass


@dataclass
class Station:
    """Represents a station served by a line.

    ``canonical_name`` is the join key against live arrival feeds, ``display_name``
    is what users see. ``has_known_service`` is scoped to the line the station was
    loaded for and stays ``None`` until the availability probe has an opinion.
    """

    id: str
    canonical_name: str
    display_name: str
    has_known_service: bool | None = None
