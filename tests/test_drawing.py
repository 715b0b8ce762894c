import pytest

from phylopdf.color import GRAY, Color
from phylopdf.colorings import Coloring
from phylopdf.date import Date
from phylopdf.drawing import Clades, Surface, TimeSeries, TreePart
from phylopdf.geometry import Location, Size, Viewport
from phylopdf.parsers import parse_newick
from phylopdf.settings import (
    BranchAnnotation,
    CladesSettings,
    SubtreeTopBottom,
    TimeSeriesSettings,
    TreeSettings,
)

VIEWPORT = Viewport(Location(0.0, 0.0), Size(500.0, 700.0))


class RecordingSurface(Surface):
    """Surface remembering the primitives it was asked to draw."""

    def __init__(self, filename):
        super().__init__(filename)
        self.lines = []
        self.texts = []

    def line(self, a, b, color, width, line_cap="butt"):
        self.lines.append((a, b, color, width))
        super().line(a, b, color, width, line_cap)

    def text(self, a, text, color, size, rotation=0.0):
        self.texts.append((a, text, color, size))
        super().text(a, text, color, size, rotation)

    def texts_named(self, text):
        return [entry for entry in self.texts if entry[1] == text]


@pytest.fixture
def surface(tmp_path):
    return RecordingSurface(tmp_path / "drawing.pdf")


@pytest.fixture
def annotated_tree():
    tree = parse_newick("((A-2019-01-10:1,B-2019-02-10:1,C-2019-03-10:1):1,D-2019-03-20:1);")
    inner = tree.subtree[0]
    inner.name = "HA:N159K\nNA:K220E"
    inner.branch_id = "b1"
    tree.analyse()
    return tree


def draw_tree(surface, tree, settings):
    part = TreePart(settings)
    part.setup(VIEWPORT, tree)
    part.draw(surface, tree, Coloring())
    return part


def test_branch_annotation_needs_more_strains_than_threshold(surface, annotated_tree):
    draw_tree(surface, annotated_tree, TreeSettings(number_strains_threshold=3))
    assert not surface.texts_named("HA:N159K")

    draw_tree(surface, annotated_tree, TreeSettings(number_strains_threshold=2))
    assert surface.texts_named("HA:N159K")
    assert surface.texts_named("NA:K220E")


def test_branch_annotation_lines_stack_under_branch_middle(surface, annotated_tree):
    settings = TreeSettings(number_strains_threshold=2)
    part = draw_tree(surface, annotated_tree, settings)
    (first, _, color, size), = surface.texts_named("HA:N159K")
    (second, *_), = surface.texts_named("NA:K220E")

    height = surface.text_size("HA:N159K", settings.branch_annotation_size).height
    width = surface.text_size("HA:N159K", settings.branch_annotation_size).width
    branch_y = part.line_y(1.0)
    assert size == settings.branch_annotation_size
    assert color == settings.branch_annotation_color
    assert first.x + width / 2 == pytest.approx(part.origin.x + settings.horizontal_step / 2)
    assert first.y == pytest.approx(branch_y + settings.line_width + height)
    assert second.y - first.y == pytest.approx(height * settings.line_interleave)


def test_branch_annotation_override(surface, annotated_tree):
    red = Color(0xFF0000)
    settings = TreeSettings(
        number_strains_threshold=2,
        per_branch=[BranchAnnotation(id="b1", label="3C.2a", color=red, label_size=6.0,
                                     line_length=5.0, line_color=red, line_width=0.5)],
    )
    part = draw_tree(surface, annotated_tree, settings)
    assert not surface.texts_named("HA:N159K")
    (a, _, color, size), = surface.texts_named("3C.2a")
    assert (color, size) == (red, 6.0)

    x_mid = part.origin.x + settings.horizontal_step / 2
    branch_y = part.line_y(1.0)
    connectors = [(a, b) for a, b, color, width in surface.lines if color == red and width == 0.5]
    assert connectors == [(Location(x_mid, branch_y), Location(x_mid, branch_y + 5.0))]
    assert a.y > branch_y + 5.0


def test_hidden_branch_annotation(surface, annotated_tree):
    settings = TreeSettings(number_strains_threshold=2, per_branch=[BranchAnnotation(id="b1", show=False)])
    draw_tree(surface, annotated_tree, settings)
    assert not surface.texts_named("HA:N159K")


def test_branch_ids(surface, annotated_tree):
    settings = TreeSettings(show_branch_ids=True)
    part = draw_tree(surface, annotated_tree, settings)
    (a, _, color, size), = surface.texts_named("b1")
    assert a == Location(part.origin.x, part.line_y(1.0) - settings.line_width - 0.5)
    assert (color, size) == (settings.branch_id_color, settings.branch_id_size)

    other = RecordingSurface(surface.filename)
    draw_tree(other, annotated_tree, TreeSettings())
    assert not other.texts_named("b1")


def test_subtree_top_bottom_guides(surface, annotated_tree):
    part = TreePart()
    part.setup(VIEWPORT, annotated_tree)
    time_series = TimeSeries(TimeSeriesSettings(
        show_subtree_top_bottom=True,
        subtree_top_bottom=[SubtreeTopBottom(branch_id="b1"), SubtreeTopBottom(branch_id="missing")],
    ))
    time_series.setup(annotated_tree)
    time_series.origin = Location(400.0, 0.0)
    time_series.draw_subtree_top_bottom(surface, part, annotated_tree)

    right = 400.0 + time_series.width
    assert [(a, b) for a, b, *_ in surface.lines] == [
        (Location(400.0, part.line_y(0)), Location(right, part.line_y(0))),
        (Location(400.0, part.line_y(2)), Location(right, part.line_y(2))),
    ]
    assert all(color == GRAY for *_, color, _ in surface.lines)


def test_dashes_skip_leaves_before_begin_day(surface, annotated_tree):
    part = TreePart()
    part.setup(VIEWPORT, annotated_tree)
    time_series = TimeSeries(TimeSeriesSettings(begin=Date.parse("2019-01-15")))
    time_series.setup(annotated_tree)
    leaves = {leaf.name: leaf for leaf in annotated_tree.leaves()}
    assert time_series.dash_month(leaves["A"]) == -1
    assert time_series.dash_month(leaves["B"]) == 1

    month_start = TimeSeries(TimeSeriesSettings(begin=Date.parse("2019-01")))
    month_start.setup(annotated_tree)
    assert month_start.dash_month(leaves["A"]) == 0


# ----------------------------------------------------------------------
# clades


@pytest.fixture
def clade_tree():
    tree = parse_newick("(L0:1,L1:1,L2:1,L3:1,(L4:1,(L5:1,L6:1):1,L7:1):1);")
    for leaf in tree.leaves():
        if leaf.name in ("L0", "L1"):
            leaf.clades = {"first"}
        elif leaf.name in ("L4", "L7"):
            leaf.clades = {"outer"}
        elif leaf.name in ("L5", "L6"):
            leaf.clades = {"inner", "outer"}
    tree.analyse()
    return tree


def separators(surface):
    return [(a, b) for a, b, color, _ in surface.lines if color == GRAY]


def test_clade_separators_skip_first_and_last_line(surface, clade_tree):
    part = TreePart()
    part.setup(VIEWPORT, clade_tree)
    clades = Clades(CladesSettings(show=True))
    clades.setup(surface, clade_tree)
    clades.origin = Location(300.0, 0.0)
    arrows = {arrow.id: arrow for arrow in clades.clades}
    time_series = TimeSeries()

    extra = clades.settings.arrow_extra * part.vertical_step
    for name, expected in (("first", [part.line_y(1) + extra]),
                           ("inner", [part.line_y(5) - extra, part.line_y(6) + extra]),
                           ("outer", [part.line_y(4) - extra])):
        surface.lines.clear()
        clades.draw_clade(surface, arrows[name], part, time_series)
        x = 300.0 + arrows[name].slot * clades.settings.slot_width
        assert separators(surface) == [(Location(part.origin.x, y), Location(x, y)) for y in expected]


@pytest.mark.parametrize("in_tree, in_time_series, shown, expected", [
    (True, True, True, (10.0, 350.0)),
    (True, False, True, (10.0, 200.0)),
    (True, True, False, (10.0, 350.0)),
    (False, True, True, (200.0, 350.0)),
    (False, True, False, None),
    (False, False, True, None),
])
def test_separator_extent(in_tree, in_time_series, shown, expected):
    part = TreePart()
    part.origin = Location(10.0, 0.0)
    time_series = TimeSeries(TimeSeriesSettings(show=shown))
    time_series.number_of_months = 3
    time_series.origin = Location(200.0, 0.0)
    clades = Clades(CladesSettings(separator_in_tree=in_tree, separator_in_time_series=in_time_series))
    assert clades.separator_extent(350.0, part, time_series) == expected
