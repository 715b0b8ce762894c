from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Location:
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Size") -> "Location":
        return Location(self.x + other.width, self.y + other.height)

    def __sub__(self, other: "Location") -> "Size":
        return Size(self.x - other.x, self.y - other.y)


@dataclass
class Size:
    width: float = 0.0
    height: float = 0.0

    def __mul__(self, factor: float) -> "Size":
        return Size(self.width * factor, self.height * factor)

    def __sub__(self, other: Location) -> "Size":
        return Size(self.width - other.x, self.height - other.y)


@dataclass
class Viewport:
    """Drawable rectangle: top-left ``origin`` and ``size``."""

    origin: Location
    size: Size

    @classmethod
    def from_corners(cls, a: Location, b: Location) -> "Viewport":
        return cls(a, b - a)

    def opposite(self) -> Location:
        return self.origin + self.size

    @property
    def right(self) -> float:
        return self.origin.x + self.size.width

    @property
    def bottom(self) -> float:
        return self.origin.y + self.size.height

    def to_json(self) -> dict:
        return {
            "x": self.origin.x,
            "y": self.origin.y,
            "width": self.size.width,
            "height": self.size.height,
        }
