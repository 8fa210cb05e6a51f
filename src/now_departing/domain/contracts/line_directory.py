"""Protocol for static line metadata."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from now_departing.domain.models.arrival_record import Direction


class LineDirectoryProtocol(Protocol):
    """Protocol for looking up known routes and their direction labels."""

    def known_route_ids(self) -> frozenset[str]:
        """Route ids that the application knows how to display."""
        ...

    def destination_for(self, line_id: str, direction: "Direction") -> str:
        """Coarse destination label, e.g. 'Uptown' or 'Brooklyn'."""
        ...
