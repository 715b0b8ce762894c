from __future__ import annotations

import logging
from typing import Optional

from ..colorings import Coloring, make_coloring
from ..geometry import Location, Size, Viewport
from ..settings import Settings, dump_settings
from ..tree import Tree
from .base import DEFAULT_CANVAS_SIZE, Surface
from .clades import Clades
from .time_series import TimeSeries
from .tree_part import TreePart

logger = logging.getLogger(__name__)


class TreeImage:
    """Composes the tree, time series and clades regions side by side on one page.

    Typical use::

        tree.analyse()
        image = TreeImage(settings)
        image.make_pdf("tree.pdf", tree)
        json.dumps(image.dump_to_json())  # settings reproducing the image
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings if settings is not None else Settings()
        self.tree = TreePart(self.settings.tree)
        self.time_series = TimeSeries(self.settings.time_series)
        self.clades = Clades(self.settings.clades)
        self.viewport = Viewport(Location(), Size())
        self.surface: Optional[Surface] = None
        self.tree_right_margin = 0.0

    def make_pdf(self, filename, tree: Tree, coloring: Optional[Coloring] = None,
                 canvas_size: Size = DEFAULT_CANVAS_SIZE) -> None:
        """Lay out and draw an analysed ``tree`` into the PDF ``filename`` (``-`` for stdout)."""
        if coloring is None:
            coloring = make_coloring(self.settings.coloring, tree)
        with Surface(filename, canvas_size) as surface:
            self.surface = surface
            self.setup(surface, tree)
            self.tree.draw(surface, tree, coloring)
            if self.time_series.show():
                self.time_series.draw(surface, self.viewport, self.tree, tree, coloring)
            if self.clades.show():
                self.clades.draw(surface, self.tree, self.time_series)
            self.draw_legend(surface, coloring)
            self.draw_title(surface)

    def setup(self, surface: Surface, tree: Tree) -> None:
        border = self.settings.border
        canvas_size = surface.canvas_size
        self.viewport = Viewport(Location() + canvas_size * (border * 0.5), canvas_size * (1.0 - border))

        self.tree.setup(self.viewport, tree)
        self.time_series.setup(tree)
        if self.clades.show():
            self.clades.setup(surface, tree)

        # budget the regions from the right edge of the viewport leftwards
        right = self.viewport.right
        if self.clades.show() and self.clades.width > 1.0:
            pinned = self.clades.settings.origin_x
            right = (pinned if pinned > 0.0 else right - self.clades.width) - self.settings.space_ts_clades
        if self.time_series.show():
            pinned = self.time_series.settings.origin_x
            right = (pinned if pinned > 0.0 else right - self.time_series.width) - self.settings.space_tree_ts
        self.tree_right_margin = right

        self.tree.adjust_label_scale(surface, tree, self.tree_right_margin)
        self.tree.adjust_horizontal_step(surface, tree, self.tree_right_margin)

        x = self.tree_right_margin
        if self.time_series.show():
            pinned = self.time_series.settings.origin_x
            x = pinned if pinned > 0.0 else x + self.settings.space_tree_ts
            self.time_series.origin = Location(x, self.viewport.origin.y)
            x += self.time_series.width
        if self.clades.show():
            pinned = self.clades.settings.origin_x
            x = pinned if pinned > 0.0 else x + self.settings.space_ts_clades
            self.clades.origin = Location(x, self.viewport.origin.y)
            x += self.clades.width
        logger.info("Image width: %g  canvas width: %g", x, canvas_size.width)

    def draw_legend(self, surface: Surface, coloring: Coloring) -> None:
        legend = self.settings.coloring.legend
        entries = coloring.legend_entries()
        if not legend.show or not entries:
            return
        line_height = legend.label_size * legend.line_interleave
        # the column ends on the last tree line
        y = self.tree.line_y(self.tree.number_of_lines - 1) + legend.offset_y - line_height * (len(entries) - 1)
        coloring.draw_legend(surface, Location(self.tree.origin.x + legend.offset_x, y), legend)

    def draw_title(self, surface: Surface) -> None:
        title = self.settings.title
        if not title.show or not title.text:
            return
        height = surface.text_size(title.text, title.size).height
        origin = self.viewport.origin
        surface.text(Location(origin.x + title.offset_x, origin.y + title.offset_y + height), title.text, title.color, title.size)

    def dump_to_json(self) -> dict:
        """Settings with the values computed by the last layout."""
        settings = self.settings
        return {
            "_comment": "Layout settings, negative values and empty strings mean default",
            "border": settings.border,
            "space_tree_ts": settings.space_tree_ts,
            "space_ts_clades": settings.space_ts_clades,
            "viewport": self.viewport.to_json(),
            "viewport_comment": "viewport is for information only",
            "tree": self.tree.dump_to_json(),
            "time_series": self.time_series.dump_to_json(),
            "clades": self.clades.dump_to_json(),
            "coloring": dump_settings(settings.coloring),
            "title": dump_settings(settings.title),
        }
