"""
Node colorings.

A coloring maps a leaf to the colour of its label and time series dash, and
knows how to draw its legend: a column of coloured labels.
"""

from __future__ import annotations

from collections import Counter
from typing import List, Optional, Tuple

from .color import BLACK, GRAY, Color, palette
from .errors import PhyloPdfError
from .geometry import Location
from .settings import ColoringSettings, LegendSettings
from .tree import Node, Tree, iterate


class Coloring:
    name = "black"

    def color(self, node: Node) -> Color:
        return BLACK

    def legend_entries(self) -> List[Tuple[str, Color]]:
        return []

    def draw_legend(self, surface, origin: Location, settings: LegendSettings) -> None:
        """Draw the entries top to bottom starting with the first baseline at ``origin``."""
        y = origin.y
        for text, color in self.legend_entries():
            surface.text(Location(origin.x, y), text, color, settings.label_size)
            y += settings.label_size * settings.line_interleave


class ColoringByContinent(Coloring):
    name = "continent"

    def __init__(self, tree: Optional[Tree] = None):
        self.continents: List[str] = []
        if tree is not None:
            seen = set()
            iterate(tree, lambda node: seen.add(node.continent or "UNKNOWN"))
            known = [name for name in palette().continent_names if name in seen]
            self.continents = known + sorted(seen.difference(known))

    def color(self, node: Node) -> Color:
        return palette().continent(node.continent)

    def legend_entries(self) -> List[Tuple[str, Color]]:
        names = self.continents or palette().continent_names
        return [(name, palette().continent(name)) for name in names]


class ColoringByPosAA(Coloring):
    """Colour by the amino acid at ``pos``, most frequent residue first in the palette."""

    name = "pos"

    def __init__(self, tree: Tree, pos: str):
        self.pos = pos
        counts: Counter = Counter()

        def count(node: Node) -> None:
            aa = node.aa_at.get(pos)
            if aa:
                counts[aa] += 1

        iterate(tree, count)
        self.counts = counts
        self.alphabet = [aa for aa, _ in sorted(counts.items(), key=lambda item: (-item[1], item[0]))]
        self._rank = {aa: index for index, aa in enumerate(self.alphabet)}

    def color(self, node: Node) -> Color:
        aa = node.aa_at.get(self.pos)
        if aa not in self._rank:
            return GRAY
        return palette().distinct_by_index(self._rank[aa])

    def legend_entries(self) -> List[Tuple[str, Color]]:
        return [(f"{aa} {self.counts[aa]}", palette().distinct_by_index(index)) for index, aa in enumerate(self.alphabet)]


def make_coloring(settings: ColoringSettings, tree: Tree) -> Coloring:
    if settings.coloring == "continent":
        return ColoringByContinent(tree)
    if settings.coloring == "pos":
        if not settings.pos:
            raise PhyloPdfError("coloring by residue requires a position")
        return ColoringByPosAA(tree, settings.pos)
    return Coloring()
