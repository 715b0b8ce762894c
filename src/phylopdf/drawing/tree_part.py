from __future__ import annotations

import logging
from typing import Dict, Optional

from ..colorings import Coloring
from ..geometry import Location
from ..settings import BranchAnnotation, TreeSettings, dump_settings
from ..tree import Node, Tree
from .base import Surface

logger = logging.getLogger(__name__)

LABEL_SCALE_STEP = 0.95
HORIZONTAL_STEP_GROWTH = 1.05
MIN_HORIZONTAL_STEP = 1e-6


class TreePart:
    """Left region of the image: the tree itself with leaf labels."""

    def __init__(self, settings: Optional[TreeSettings] = None):
        self.settings = settings if settings is not None else TreeSettings()
        self.origin = Location(-1.0, -1.0)
        self.width = 0.0
        self.number_of_lines = 0
        self.vertical_step = 0.0

    @property
    def label_font_size(self) -> float:
        return self.vertical_step * self.settings.label_scale

    def line_y(self, line: float) -> float:
        """Vertical position of a (possibly fractional) line number."""
        return self.origin.y + self.vertical_step * line

    def setup(self, viewport, tree: Tree) -> None:
        self.number_of_lines = tree.number_of_leaves()
        # two extra lines leave space at the top and bottom
        self.vertical_step = viewport.size.height / (self.number_of_lines + 2)
        x = self.settings.origin_x if self.settings.origin_x > 0.0 else viewport.origin.x
        self.origin = Location(x, viewport.origin.y + self.vertical_step)

    # ------------------------------------------------------------------
    # fitting

    def tree_width(self, surface: Surface, node: Node, edge_length: Optional[float] = None) -> float:
        """Horizontal extent of ``node`` including the leaf labels."""
        right = (node.edge_length if edge_length is None else edge_length) * self.settings.horizontal_step
        if node.is_leaf():
            return right + surface.text_size(node.display_name(), self.label_font_size).width + self.settings.name_offset
        return right + max((self.tree_width(surface, child) for child in node.subtree), default=0.0)

    def measure(self, surface: Surface, tree: Tree) -> float:
        self.width = self.tree_width(surface, tree, self.settings.root_edge)
        return self.width

    def adjust_label_scale(self, surface: Surface, tree: Tree, tree_right_margin: float) -> None:
        self.measure(surface, tree)
        while self.label_font_size > 1.0 and (self.width + self.origin.x) > tree_right_margin:
            self.settings.label_scale *= LABEL_SCALE_STEP
            self.measure(surface, tree)
        logger.debug("Label scale: %g  width: %g  right margin: %g", self.settings.label_scale, self.width, tree_right_margin)

    def adjust_horizontal_step(self, surface: Surface, tree: Tree, tree_right_margin: float) -> None:
        depth = tree.width_height()[0] - tree.edge_length + self.settings.root_edge
        if depth <= 0.0 or self.settings.horizontal_step <= 0.0:
            return
        if (self.width + self.origin.x) > tree_right_margin:
            # labels alone do not fit at the smallest scale, squeeze the branches
            while (self.width + self.origin.x) > tree_right_margin and self.settings.horizontal_step > MIN_HORIZONTAL_STEP:
                self.settings.horizontal_step *= LABEL_SCALE_STEP
                self.measure(surface, tree)
        else:
            while True:
                saved_step, saved_width = self.settings.horizontal_step, self.width
                self.settings.horizontal_step *= HORIZONTAL_STEP_GROWTH
                self.measure(surface, tree)
                if (self.width + self.origin.x) >= tree_right_margin:
                    self.settings.horizontal_step, self.width = saved_step, saved_width
                    break
        logger.debug("Horizontal step: %g  width: %g", self.settings.horizontal_step, self.width)

    # ------------------------------------------------------------------
    # drawing

    def draw(self, surface: Surface, tree: Tree, coloring: Coloring) -> None:
        annotations = {annotation.id: annotation for annotation in self.settings.per_branch}
        self.draw_node(surface, tree, self.origin.x, coloring, annotations, self.settings.root_edge)

    def draw_node(self, surface: Surface, node: Node, left: float, coloring: Coloring,
                  annotations: Dict[str, BranchAnnotation], edge_length: Optional[float] = None) -> None:
        settings = self.settings
        right = left + (node.edge_length if edge_length is None else edge_length) * settings.horizontal_step
        y = self.line_y(node.middle())

        surface.line(Location(left, y), Location(right, y), settings.line_color, settings.line_width)
        if node.is_leaf():
            text = node.display_name()
            font_size = self.label_font_size
            text_height = surface.text_size(text, font_size).height
            surface.text(Location(right + settings.name_offset, y + text_height * 0.5), text, coloring.color(node), font_size)
        else:
            surface.line(Location(right, self.line_y(node.top)), Location(right, self.line_y(node.bottom)),
                         settings.line_color, settings.line_width)
            self.draw_branch_annotation(surface, node, left, right, y, annotations.get(node.branch_id))
            if settings.show_branch_ids and node.branch_id:
                self.draw_branch_id(surface, node, left, y)
            for child in node.subtree:
                self.draw_node(surface, child, right, coloring, annotations)

    def draw_branch_annotation(self, surface: Surface, node: Node, left: float, right: float, y: float,
                               annotation: Optional[BranchAnnotation]) -> None:
        settings = self.settings
        label = node.name
        if annotation is not None:
            if not annotation.show:
                return
            label = annotation.label or label
        if not label or node.number_strains <= settings.number_strains_threshold:
            return

        font_size = settings.branch_annotation_size
        interleave = settings.line_interleave
        color = settings.branch_annotation_color
        x_mid = (left + right) / 2.0
        top = y + settings.line_width
        if annotation is not None:
            if annotation.label_size >= 0:
                font_size = annotation.label_size
            if annotation.line_interleave >= 0:
                interleave = annotation.line_interleave
            color = annotation.color
            if annotation.line_length > 0:
                surface.line(Location(x_mid, y), Location(x_mid, y + annotation.line_length),
                             annotation.line_color, annotation.line_width)
                top += annotation.line_length
            x_mid += annotation.label_offset_x
            top += annotation.label_offset_y

        for line_no, text in enumerate(label.split("\n")):
            size = surface.text_size(text, font_size)
            baseline = top + size.height * (1.0 + line_no * interleave)
            surface.text(Location(x_mid - size.width / 2.0, baseline), text, color, font_size)

    def draw_branch_id(self, surface: Surface, node: Node, left: float, y: float) -> None:
        settings = self.settings
        surface.text(Location(left, y - settings.line_width - 0.5), node.branch_id,
                     settings.branch_id_color, settings.branch_id_size)

    def dump_to_json(self) -> dict:
        data = dump_settings(self.settings)
        data.update({
            # for information, not re-read
            "width": self.width,
            "width_comment": "width is for information only, it is always re-calculated",
            "number_of_lines": self.number_of_lines,
            "number_of_lines_comment": "number_of_lines is for information only",
            "vertical_step": self.vertical_step,
            "vertical_step_comment": "vertical_step is for information only",
        })
        return data
