from __future__ import annotations

import logging
import math
from typing import Optional

from ..colorings import Coloring
from ..color import BLACK
from ..date import months_between
from ..geometry import Location, Viewport
from ..settings import TimeSeriesSettings, dump_settings
from ..tree import Node, Tree, iterate
from .base import Surface
from .tree_part import TreePart

logger = logging.getLogger(__name__)


class TimeSeries:
    """Calendar strip: one column per month, one dash per dated leaf."""

    def __init__(self, settings: Optional[TimeSeriesSettings] = None):
        self.settings = settings if settings is not None else TimeSeriesSettings()
        self.origin = Location(-1.0, -1.0)
        self.number_of_months = 0

    def show(self) -> bool:
        return self.settings.show and self.number_of_months > 0

    @property
    def width(self) -> float:
        return self.number_of_months * self.settings.month_width if self.show() else 0.0

    def setup(self, tree: Tree) -> None:
        settings = self.settings
        self.number_of_months = 0
        if not settings.show:
            return
        min_date, max_date = tree.min_max_date()
        logger.info("Dates in source tree: %s .. %s", min_date or "-", max_date or "-")
        if settings.begin.empty():
            settings.begin = min_date.without_day()
        if settings.end.empty():
            settings.end = max_date.without_day()
        if settings.begin.empty() or settings.end.empty():
            logger.warning("No dates in the tree, time series is not shown")
            return
        number_of_months = months_between(settings.begin, settings.end) + 1
        if number_of_months <= 0:
            logger.warning("Time series begin %s is after end %s, time series is not shown", settings.begin, settings.end)
            return
        if number_of_months > settings.max_number_of_months:
            settings.begin = settings.end.add_months(-(settings.max_number_of_months - 1))
            number_of_months = settings.max_number_of_months
        self.number_of_months = number_of_months
        logger.info("Dates to show: %s .. %s  months: %d", settings.begin, settings.end, number_of_months)

    # ------------------------------------------------------------------

    def draw(self, surface: Surface, viewport: Viewport, tree_part: TreePart, tree: Tree, coloring: Coloring) -> None:
        self.draw_labels(surface, viewport)
        self.draw_month_separators(surface, viewport)
        self.draw_dashes(surface, tree_part, tree, coloring)
        if self.settings.show_subtree_top_bottom:
            self.draw_subtree_top_bottom(surface, tree_part, tree)

    def draw_labels(self, surface: Surface, viewport: Viewport) -> None:
        label_font_size = self.settings.month_width * self.settings.month_label_scale
        month_max_width = surface.text_size("May ", label_font_size).width
        big_label_size = surface.text_size("May 99", label_font_size)
        x_bearing = surface.text_x_bearing("May 99", label_font_size)
        text_up = (self.settings.month_width - big_label_size.height) * 0.5

        self.draw_labels_at_side(surface, Location(text_up, viewport.origin.y - big_label_size.width - x_bearing),
                                 label_font_size, month_max_width)
        self.draw_labels_at_side(surface, Location(text_up, viewport.bottom + x_bearing),
                                 label_font_size, month_max_width)

    def draw_labels_at_side(self, surface: Surface, a: Location, label_font_size: float, month_max_width: float) -> None:
        current_month = self.settings.begin
        for month_no in range(self.number_of_months):
            left = self.origin.x + month_no * self.settings.month_width + a.x
            surface.text(Location(left, a.y), current_month.month_3(), BLACK,
                         label_font_size, math.pi / 2)
            surface.text(Location(left, a.y + month_max_width), current_month.year_2(), BLACK,
                         label_font_size, math.pi / 2)
            current_month = current_month.increment_month()

    def draw_month_separators(self, surface: Surface, viewport: Viewport) -> None:
        bottom = viewport.bottom
        for month_no in range(self.number_of_months + 1):
            left = self.origin.x + month_no * self.settings.month_width
            surface.line(Location(left, self.origin.y), Location(left, bottom),
                         self.settings.month_separator_color, self.settings.month_separator_width)

    def dash_month(self, node: Node) -> int:
        """Column of the leaf dash, -1 when the leaf is undated or outside the strip."""
        begin = self.settings.begin
        month_no = node.months_from(begin)
        if month_no < 0 or month_no >= self.number_of_months:
            return -1
        # within the first month, days count when both dates have one
        if month_no == 0 and node.date.day and begin.day and node.date < begin:
            return -1
        return month_no

    def draw_dashes(self, surface: Surface, tree_part: TreePart, tree: Tree, coloring: Coloring) -> None:
        settings = self.settings
        base_x = self.origin.x + settings.month_width * (1.0 - settings.dash_width) / 2

        def draw_dash(node: Node) -> None:
            month_no = self.dash_month(node)
            if month_no >= 0:
                a = Location(base_x + settings.month_width * month_no, tree_part.line_y(node.line_no))
                surface.line(a, Location(a.x + settings.month_width * settings.dash_width, a.y),
                             coloring.color(node), settings.dash_line_width, line_cap="round")

        iterate(tree, draw_dash)

    def draw_subtree_top_bottom(self, surface: Surface, tree_part: TreePart, tree: Tree) -> None:
        right = self.origin.x + self.width
        for item in self.settings.subtree_top_bottom:
            if not item.show:
                continue
            node = tree.find_branch(item.branch_id)
            if node is None:
                logger.warning("No branch with id %r for subtree top/bottom lines", item.branch_id)
                continue
            for leaf in (node.first_leaf(), node.last_leaf()):
                y = tree_part.line_y(leaf.line_no)
                surface.line(Location(self.origin.x, y), Location(right, y), item.color, item.line_width)

    def dump_to_json(self) -> dict:
        data = dump_settings(self.settings)
        data.update({
            # for information, not re-read
            "width": self.width,
            "width_comment": "width is for information only, it is always re-calculated",
            "number_of_months": self.number_of_months,
            "number_of_months_comment": "number_of_months is for information only",
        })
        return data
