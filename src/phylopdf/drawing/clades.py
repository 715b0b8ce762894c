from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from ..geometry import Location
from ..settings import CladeArrow, CladesSettings, dump_settings
from ..tree import Node, Tree, iterate
from .base import Surface
from .time_series import TimeSeries
from .tree_part import TreePart

logger = logging.getLogger(__name__)


def clade_extents(tree: Tree) -> Dict[str, Tuple[int, int]]:
    """First and last line number of the leaves carrying each clade label, by label."""
    extents: Dict[str, Tuple[int, int]] = {}

    def scan(node: Node) -> None:
        for clade in node.clades:
            if clade in extents:
                first, last = extents[clade]
                extents[clade] = (min(first, node.line_no), max(last, node.line_no))
            else:
                extents[clade] = (node.line_no, node.line_no)

    iterate(tree, scan)
    return dict(sorted(extents.items()))


class Clades:
    """Right region: vertical double arrows marking clades, packed into slots."""

    def __init__(self, settings: Optional[CladesSettings] = None):
        self.settings = settings if settings is not None else CladesSettings()
        self.origin = Location(-1.0, -1.0)
        self.clades: List[CladeArrow] = []
        self._width = 0.0

    def show(self) -> bool:
        return self.settings.show

    @property
    def width(self) -> float:
        return self._width if self.show() else 0.0

    def setup(self, surface: Surface, tree: Tree) -> None:
        overrides = {arrow.id: arrow for arrow in self.settings.per_clade}
        self.clades = [self.make_clade(begin, end, name, overrides.get(name))
                       for name, (begin, end) in clade_extents(tree).items()]
        self.assign_slots(surface)
        logger.debug("Clades: %d  width: %g", len(self.clades), self._width)

    @staticmethod
    def make_clade(begin: int, end: int, clade_id: str, override: Optional[CladeArrow]) -> CladeArrow:
        arrow = CladeArrow(begin=begin, end=end, label=clade_id, id=clade_id)
        if override is not None:
            if override.label:
                arrow.label = override.label
            if override.begin >= 0:
                arrow.begin = override.begin
            if override.end >= 0:
                arrow.end = override.end
            if override.slot >= 0:
                arrow.slot = override.slot
            if override.label_position:
                arrow.label_position = override.label_position
            arrow.label_position_offset = override.label_position_offset
            arrow.label_rotation = override.label_rotation
            arrow.label_offset = override.label_offset
            arrow.show = override.show
        return arrow

    def assign_slots(self, surface: Surface) -> None:
        self.clades.sort(key=lambda arrow: (arrow.begin, -arrow.end))
        for index, arrow in enumerate(self.clades):
            if arrow.slot < 0:
                arrow.slot = index
        self._width = max(
            (arrow.slot * self.settings.slot_width + arrow.label_offset
             + surface.text_size(arrow.label, self.settings.label_size).width
             for arrow in self.clades),
            default=0.0,
        )

    # ------------------------------------------------------------------

    def draw(self, surface: Surface, tree_part: TreePart, time_series: TimeSeries) -> None:
        for arrow in self.clades:
            if arrow.show:
                self.draw_clade(surface, arrow, tree_part, time_series)

    def draw_clade(self, surface: Surface, arrow: CladeArrow, tree_part: TreePart, time_series: TimeSeries) -> None:
        settings = self.settings
        x = self.origin.x + arrow.slot * settings.slot_width
        vertical_step = tree_part.vertical_step
        top = tree_part.line_y(arrow.begin) - settings.arrow_extra * vertical_step
        bottom = tree_part.line_y(arrow.end) + settings.arrow_extra * vertical_step

        if arrow.label_position == "top":
            label_vpos = top
        elif arrow.label_position == "bottom":
            label_vpos = bottom
        else:
            label_vpos = (top + bottom) / 2.0
        label_size = surface.text_size(arrow.label, settings.label_size)
        label_vpos += label_size.height / 2.0 + arrow.label_position_offset

        surface.double_arrow(Location(x, top), Location(x, bottom), settings.arrow_color, settings.line_width, settings.arrow_width)
        surface.text(Location(x + arrow.label_offset, label_vpos), arrow.label, settings.label_color,
                     settings.label_size, arrow.label_rotation)

        extent = self.separator_extent(x, tree_part, time_series)
        if extent is not None:
            left, right = extent
            if arrow.begin > 0:
                surface.line(Location(left, top), Location(right, top), settings.separator_color, settings.separator_width)
            if arrow.end < tree_part.number_of_lines - 1:
                surface.line(Location(left, bottom), Location(right, bottom), settings.separator_color, settings.separator_width)

    def separator_extent(self, x: float, tree_part: TreePart, time_series: TimeSeries) -> Optional[Tuple[float, float]]:
        """Horizontal span of the separator lines drawn from an arrow at ``x``, None if disabled."""
        in_tree = self.settings.separator_in_tree
        in_time_series = self.settings.separator_in_time_series and time_series.show()
        if in_tree and in_time_series:
            return tree_part.origin.x, x
        if in_tree:
            return tree_part.origin.x, (time_series.origin.x if time_series.show() else x)
        if in_time_series:
            return time_series.origin.x, x
        return None

    def dump_to_json(self) -> dict:
        data = dump_settings(self.settings)
        data["per_clade"] = [arrow.to_json() for arrow in self.clades]
        data.update({
            # for information, not re-read
            "width": self.width,
            "width_comment": "width is for information only, it is always re-calculated",
        })
        return data
