import io

import pytest

from phylopdf.date import Date
from phylopdf.parsers import parse_newick
from phylopdf.tree import Node, Tree, iterate


def names(node):
    return [leaf.name for leaf in node.leaves()]


def test_analyse_line_numbers_and_extents(small_tree):
    inner, c = small_tree.subtree
    a, b = inner.subtree
    assert (a.line_no, b.line_no, c.line_no) == (0, 1, 2)
    assert (inner.top, inner.bottom) == (0, 1)
    assert inner.middle() == 0.5
    assert (small_tree.top, small_tree.bottom) == (0.5, 2)
    assert inner.number_strains == 2
    assert small_tree.number_strains == 3


def test_analyse_invariants(dated_tree):
    lines = [leaf.line_no for leaf in dated_tree.leaves()]
    assert lines == list(range(len(lines)))

    def check(node):
        assert node.top <= node.bottom
        assert node.number_strains == sum(child.number_strains for child in node.subtree)

    iterate(dated_tree, lambda leaf: None, on_post=check)


def test_iterate_callback_order(small_tree):
    events = []
    iterate(
        small_tree,
        lambda node: events.append(node.name),
        lambda node: events.append("pre"),
        lambda node: events.append("post"),
    )
    assert events == ["pre", "pre", "A", "B", "post", "C", "post"]


def test_leaf_predicate():
    assert Node(name="A").is_leaf()
    assert not Node().is_leaf()
    assert not Node(name="annotation", subtree=[Node(name="A")]).is_leaf()


def test_display_name():
    assert Node(name="A").display_name() == "A"
    assert Node(name="A", date=Date(2019, 1, 2)).display_name() == "A 2019-01-02"
    with pytest.raises(ValueError):
        Node(subtree=[Node(name="A")]).display_name()


def test_ladderize_puts_longer_subtree_last():
    tree = parse_newick("((A:1,B:5):1,(C:2,D:2):1);")
    tree.analyse()
    tree.ladderize()
    assert names(tree) == ["C", "D", "A", "B"]
    assert [leaf.line_no for leaf in tree.leaves()] == [0, 1, 2, 3]
    assert tree.subtree[1].max_edge_length == pytest.approx(6)


def test_ladderize_ties_by_date_then_name():
    tree = parse_newick("(B-2019-02-01:1,C:1,A:1,D-2019-01-01:1);")
    tree.analyse()
    tree.ladderize()
    # undated leaves sort before dated ones
    assert names(tree) == ["A", "C", "D", "B"]


def test_ladderize_is_idempotent(dated_tree):
    dated_tree.ladderize()
    first = names(dated_tree)
    dated_tree.ladderize()
    assert names(dated_tree) == first


@pytest.mark.parametrize("raw, fixed", [
    ("A/HUMAN/B", "AB"),
    ("A__B", "A B"),
    ("X(H3N2)/Y", "XY"),
    ("X(H1N1)/Y", "XY"),
    ("A/HUMAN/B__C__D", "AB C__D"),
    ("plain", "plain"),
])
def test_fix_labels(raw, fixed):
    tree = Tree(subtree=[Node(name=raw)])
    tree.fix_labels()
    assert tree.subtree[0].name == fixed


def test_width_height(small_tree):
    assert small_tree.width_height() == (4, 3)
    assert small_tree.number_of_leaves() == 3


def test_min_max_date(dated_tree, small_tree):
    assert dated_tree.min_max_date() == (Date(2019, 1, 15), Date(2019, 5, 20))
    low, high = small_tree.min_max_date()
    assert low.empty() and high.empty()


def test_min_max_edge_ignores_zero():
    tree = parse_newick("((A:0,B:2):0.5,C:4);")
    assert tree.min_max_edge() == (0.5, 4)
    assert parse_newick("(A,B);").min_max_edge() == (0, 0)


def test_months_from():
    start = Date(2019, 1, 1)
    assert Node(name="A", date=Date(2019, 3, 20)).months_from(start) == 2
    assert Node(name="A").months_from(start) == -1


def test_find_branch_and_first_last_leaf(small_tree):
    small_tree.subtree[0].branch_id = "b1"
    node = small_tree.find_branch("b1")
    assert node is small_tree.subtree[0]
    assert node.first_leaf().name == "A"
    assert node.last_leaf().name == "B"
    assert small_tree.last_leaf().name == "C"
    assert small_tree.find_branch("missing") is None


def test_edge_table(small_tree):
    table = small_tree.edge_table()
    assert list(table.columns) == ["edge_length", "count"]
    # root edge 0 and the edges 1, 2, 3, 4
    assert table["count"].sum() == 5
    assert table["edge_length"].tolist() == [0, 1, 2, 3, 4]


def test_print(small_tree):
    out = io.StringIO()
    small_tree.print(out)
    assert out.getvalue() == "(\n  (\n    A:1\n    B:2\n  ):3\n  C:4\n):0\n"


def test_print_edges(small_tree):
    out = io.StringIO()
    small_tree.print_edges(out)
    lines = out.getvalue().splitlines()
    assert lines[0] == "0 1"
    assert lines[-1] == "min: 1  max: 4"


def test_same_as_ignores_computed_fields(small_tree):
    other = parse_newick("((A:1,B:2):3,C:4);")
    assert small_tree.same_as(other)
    other.subtree[1].edge_length = 5
    assert not small_tree.same_as(other)
