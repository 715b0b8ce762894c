from __future__ import annotations

import re
from functools import lru_cache
from typing import Union

from .errors import ColorFormatError

_COLOR_RE = re.compile(r"^#([0-9A-Fa-f]{6})(?::([0-9A-Fa-f]{2}))?$")


class Color:
    """RGB colour with transparency packed as ``0xAARRGGBB``.

    ``AA == 0`` is fully opaque, ``AA == 0xFF`` fully transparent. The textual
    form is ``#RRGGBB`` or ``#RRGGBB:AA``.
    """

    __slots__ = ("value",)

    def __init__(self, value: Union[int, str, "Color"] = 0):
        if isinstance(value, Color):
            self.value = value.value
        elif isinstance(value, str):
            self.value = Color.parse(value).value
        else:
            self.value = int(value) & 0xFFFFFFFF

    @classmethod
    def parse(cls, text: str) -> "Color":
        match = _COLOR_RE.match(text) if isinstance(text, str) else None
        if match is None:
            raise ColorFormatError(f"cannot parse Color from {text!r}")
        value = int(match.group(1), 16)
        if match.group(2) is not None:
            value |= int(match.group(2), 16) << 24
        return cls(value)

    @property
    def alpha_i(self) -> int:
        return (self.value >> 24) & 0xFF

    @property
    def rgb_i(self) -> int:
        return self.value & 0xFFFFFF

    @property
    def red(self) -> float:
        return ((self.value >> 16) & 0xFF) / 255.0

    @property
    def green(self) -> float:
        return ((self.value >> 8) & 0xFF) / 255.0

    @property
    def blue(self) -> float:
        return (self.value & 0xFF) / 255.0

    @property
    def alpha(self) -> float:
        """Opacity in [0, 1]."""
        return (0xFF - self.alpha_i) / 255.0

    def to_hex(self) -> str:
        """``#rrggbb`` without transparency, for SVG fill/stroke attributes."""
        return f"#{self.rgb_i:06x}"

    def __str__(self) -> str:
        text = self.to_hex()
        if self.alpha_i:
            text += f":{self.alpha_i:02x}"
        return text

    def __repr__(self) -> str:
        return f"Color({str(self)!r})"

    def __eq__(self, other) -> bool:
        if isinstance(other, Color):
            return self.value == other.value
        if isinstance(other, int):
            return self.value == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.value)


BLACK = Color(0x000000)
GRAY = Color(0x808080)
PINK = Color(0xFFC0CB)

# Kelly's maximum contrast set, the first entry being the most distinct
# against a white background.
DISTINCT_COLORS = (
    0xA6BDD7,  # very light blue
    0xC10020,  # vivid red
    0xFFB300,  # vivid yellow
    0x803E75,  # strong purple
    0xFF6800,  # vivid orange
    0xCEA262,  # grayish yellow
    0x007D34,  # vivid green
    0xF6768E,  # strong purplish pink
    0x00538A,  # strong blue
    0xFF7A5C,  # strong yellowish pink
    0x53377A,  # strong violet
    0xFF8E00,  # vivid orange yellow
    0xB32851,  # strong purplish red
    0xF4C800,  # vivid greenish yellow
    0x7F180D,  # strong reddish brown
    0x93AA00,  # vivid yellowish green
    0x593315,  # deep yellowish brown
    0xF13A13,  # vivid reddish orange
    0x232C16,  # dark olive green
)

CONTINENTS = {
    "EUROPE": 0x00FF00,
    "CENTRAL-AMERICA": 0xAAF9FF,
    "MIDDLE-EAST": 0x8000FF,
    "NORTH-AMERICA": 0x00008B,
    "AFRICA": 0xFF8000,
    "ASIA": 0xFF0000,
    "RUSSIA": 0xB03060,
    "AUSTRALIA-OCEANIA": 0xFF69B4,
    "SOUTH-AMERICA": 0x40E0D0,
    "ANTARCTICA": 0x808080,
    "CHINA-SOUTH": 0xFF0000,
    "CHINA-NORTH": 0x6495ED,
    "CHINA-UNKNOWN": 0x808080,
    "UNKNOWN": 0x808080,
}


class Palette:
    """Read-only colour database shared by all colorings."""

    def __init__(self):
        self._continents = {name: Color(value) for name, value in CONTINENTS.items()}
        self._distinct = tuple(Color(value) for value in DISTINCT_COLORS)

    @property
    def continent_names(self) -> list[str]:
        return list(self._continents)

    def continent(self, name: str) -> Color:
        return self._continents.get(name, self._continents["UNKNOWN"])

    def distinct_by_index(self, index: int) -> Color:
        if 0 <= index < len(self._distinct):
            return self._distinct[index]
        return PINK


@lru_cache(maxsize=None)
def palette() -> Palette:
    """Process-wide palette, created on first access."""
    return Palette()
