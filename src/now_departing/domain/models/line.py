"""Line domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class LineStyling:
    """Background color as RGB fractions and a foreground color name."""

    background: tuple[float, float, float]
    foreground: str

    @property
    def background_hex(self) -> str:
        """Background color as a ``#rrggbb`` string."""
        red, green, blue = (round(channel * 255) for channel in self.background)
        return f"#{red:02x}{green:02x}{blue:02x}"


@dataclass(frozen=True)
class Line:
    """A subway line (route) as shown to users."""

    id: str
    label: str
    styling: LineStyling
