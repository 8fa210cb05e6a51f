"""Static subway line metadata: colors, destinations and terminals."""

from now_departing.domain.contracts.line_directory import LineDirectoryProtocol
from now_departing.domain.models.arrival_record import Direction
from now_departing.domain.models.line import Line, LineStyling

RED = (0.92, 0.22, 0.21)
GREEN = (0.07, 0.57, 0.25)
PURPLE = (0.72, 0.23, 0.67)
BLUE = (0.03, 0.24, 0.64)
LIME = (0.44, 0.74, 0.30)
ORANGE = (0.98, 0.39, 0.17)
YELLOW = (0.98, 0.80, 0.19)
BROWN = (0.60, 0.40, 0.22)
GRAY = (0.65, 0.66, 0.67)

# Display order used when listing lines
LINE_ORDER = (
    "1", "2", "3", "4", "5", "6", "7",
    "A", "C", "E", "G", "B", "D", "F", "M",
    "N", "Q", "R", "W", "J", "Z", "L",
)  # fmt: skip

LINE_COLORS: dict[str, tuple[tuple[float, float, float], str]] = {
    "1": (RED, "white"),
    "2": (RED, "white"),
    "3": (RED, "white"),
    "4": (GREEN, "white"),
    "5": (GREEN, "white"),
    "6": (GREEN, "white"),
    "7": (PURPLE, "white"),
    "A": (BLUE, "white"),
    "C": (BLUE, "white"),
    "E": (BLUE, "white"),
    "G": (LIME, "white"),
    "B": (ORANGE, "white"),
    "D": (ORANGE, "white"),
    "F": (ORANGE, "white"),
    "M": (ORANGE, "white"),
    "N": (YELLOW, "black"),
    "Q": (YELLOW, "black"),
    "R": (YELLOW, "black"),
    "W": (YELLOW, "black"),
    "J": (BROWN, "white"),
    "Z": (BROWN, "white"),
    "L": (GRAY, "white"),
}

# (northbound, southbound) coarse destinations
DESTINATIONS: dict[str, tuple[str, str]] = {
    "1": ("Uptown", "Downtown"),
    "2": ("Uptown", "Brooklyn"),
    "3": ("Uptown", "Brooklyn"),
    "4": ("Uptown", "Brooklyn"),
    "5": ("Uptown", "Brooklyn"),
    "6": ("Uptown", "Downtown"),
    "6X": ("Uptown Express", "Downtown Express"),
    "7": ("Queens", "Manhattan"),
    "7X": ("Queens Express", "Manhattan Express"),
    "A": ("Uptown", "Brooklyn/Queens"),
    "B": ("Uptown", "Brooklyn"),
    "C": ("Uptown", "Brooklyn"),
    "D": ("Uptown", "Brooklyn"),
    "E": ("Queens", "Downtown"),
    "F": ("Queens", "Brooklyn"),
    "G": ("Queens", "Brooklyn"),
    "J": ("Queens", "Manhattan"),
    "L": ("Brooklyn", "Manhattan"),
    "M": ("Queens", "Brooklyn"),
    "N": ("Queens", "Brooklyn"),
    "Q": ("Uptown", "Brooklyn"),
    "R": ("Queens", "Brooklyn"),
    "W": ("Queens", "Manhattan"),
    "Z": ("Queens", "Manhattan"),
}
DEFAULT_DESTINATIONS = ("Uptown", "Downtown")

# (northbound, southbound) terminal stations
TERMINALS: dict[str, tuple[str, str]] = {
    "1": ("Van Cortlandt Park", "South Ferry"),
    "2": ("Wakefield", "Flatbush Av"),
    "3": ("Harlem", "New Lots Av"),
    "4": ("Woodlawn", "New Lots Av/Crown Hts"),
    "5": ("Eastchester", "Flatbush Av"),
    "6": ("Pelham Bay Park", "Brooklyn Bridge"),
    "7": ("Flushing", "Hudson Yards"),
    "A": ("Inwood", "Far Rockaway/Lefferts"),
    "C": ("Washington Heights", "Euclid Av"),
    "E": ("Jamaica Center", "World Trade Center"),
    "G": ("Court Sq", "Church Av"),
    "B": ("Bedford Park", "Brighton Beach"),
    "D": ("Norwood", "Coney Island"),
    "F": ("Jamaica", "Coney Island"),
    "M": ("Forest Hills", "Middle Village"),
    "N": ("Astoria", "Coney Island"),
    "Q": ("96 St", "Coney Island"),
    "R": ("Forest Hills", "Bay Ridge"),
    "W": ("Astoria", "Whitehall St"),
    "J": ("Jamaica Center", "Broad St"),
    "Z": ("Jamaica Center", "Broad St"),
    "L": ("8 Av", "Canarsie"),
}
DEFAULT_TERMINALS = ("Northbound", "Southbound")

DEFAULT_STYLING = LineStyling(background=GRAY, foreground="white")


def _pick(pair: tuple[str, str], direction: Direction) -> str:
    return pair[0] if direction == Direction.NORTH else pair[1]


class LineDirectory(LineDirectoryProtocol):
    """Lookup of the subway lines the application knows about."""

    def __init__(self) -> None:
        self._lines = {
            line_id: Line(
                id=line_id,
                label=line_id,
                styling=LineStyling(background=LINE_COLORS[line_id][0], foreground=LINE_COLORS[line_id][1]),
            )
            for line_id in LINE_ORDER
        }

    def all_lines(self) -> list[Line]:
        return list(self._lines.values())

    def line(self, line_id: str) -> Line:
        """Return the line, or a gray placeholder for unknown route ids."""
        return self._lines.get(line_id) or Line(id=line_id, label=line_id, styling=DEFAULT_STYLING)

    def known_route_ids(self) -> frozenset[str]:
        return frozenset(self._lines)

    def destination_for(self, line_id: str, direction: Direction) -> str:
        return _pick(DESTINATIONS.get(line_id, DEFAULT_DESTINATIONS), direction)

    def terminal_for(self, line_id: str, direction: Direction) -> str:
        return _pick(TERMINALS.get(line_id, DEFAULT_TERMINALS), direction)

    @staticmethod
    def direction_text(direction: Direction) -> str:
        return "Uptown" if direction == Direction.NORTH else "Downtown"
