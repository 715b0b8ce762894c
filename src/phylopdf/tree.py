"""
Tree model for phylopdf.

A tree is a recursive aggregate of :class:`Node` objects. Each node owns the
ordered list of its children (``subtree``); there are no parent pointers. Every
per-node computation (line numbers, subtree extents, date range, ladderizing,
printing) is expressed as callbacks handed to :func:`iterate`, the only place
where the recursion happens:

- ``on_leaf(node)`` is called for leaves,
- ``on_pre(node)`` on entry to an internal node,
- ``on_post(node)`` on exit from an internal node, after all its children.
"""

from __future__ import annotations

import functools
import sys
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set, TextIO, Tuple

import pandas as pd

from .date import Date, months_between

NodeCallback = Callable[["Node"], None]

# Substrings dropped from leaf names by Tree.fix_labels, in order.
LABEL_JUNK = ("/HUMAN/", "(H3N2)/", "(H1N1)/")


def _nope(node: "Node") -> None:
    pass


@dataclass(eq=False)
class Node:
    """Leaf or internal node.

    Leaf iff ``subtree`` is empty and ``name`` is non-empty. For internal nodes
    ``name`` is an optional branch annotation and ``branch_id`` an optional
    branch identifier.
    """

    name: str = ""
    edge_length: float = 0.0
    date: Date = field(default_factory=Date)
    continent: str = ""
    clades: Set[str] = field(default_factory=set)
    aa_at: Dict[str, str] = field(default_factory=dict)
    subtree: List["Node"] = field(default_factory=list)
    branch_id: str = ""

    # computed by Tree.analyse()
    line_no: int = 0
    top: float = 0.0
    bottom: float = 0.0
    number_strains: int = 0

    # computed by Tree.ladderize()
    max_edge_length: float = 0.0
    max_date: Date = field(default_factory=Date)
    max_name: str = ""

    def is_leaf(self) -> bool:
        return not self.subtree and bool(self.name)

    def middle(self) -> float:
        return float(self.line_no) if self.is_leaf() else (self.top + self.bottom) / 2.0

    def display_name(self) -> str:
        """Leaf label as drawn: name followed by the date, if any."""
        if not self.is_leaf():
            raise ValueError("node is not a leaf")
        if self.date.empty():
            return self.name
        return f"{self.name} {self.date}"

    def months_from(self, start: Date) -> int:
        """Month index of the node date relative to ``start``, -1 without a date."""
        return -1 if self.date.empty() else months_between(start, self.date)

    def first_leaf(self) -> "Node":
        node = self
        while not node.is_leaf():
            node = node.subtree[0]
        return node

    def last_leaf(self) -> "Node":
        node = self
        while not node.is_leaf():
            node = node.subtree[-1]
        return node

    def same_as(self, other: "Node", tolerance: float = 1e-9) -> bool:
        """Structural equality on the persistent fields (not the computed ones)."""
        if abs(self.edge_length - other.edge_length) > tolerance:
            return False
        if self.is_leaf() != other.is_leaf() or len(self.subtree) != len(other.subtree):
            return False
        if self.is_leaf():
            return (
                self.name == other.name
                and self.date == other.date
                and self.continent == other.continent
                and set(self.clades) == set(other.clades)
                and self.aa_at == other.aa_at
            )
        return all(a.same_as(b, tolerance) for a, b in zip(self.subtree, other.subtree))


def iterate(
    node: Node,
    on_leaf: NodeCallback,
    on_pre: NodeCallback = _nope,
    on_post: NodeCallback = _nope,
) -> None:
    """Depth-first traversal calling ``on_leaf`` for leaves and ``on_pre``/``on_post`` around internal nodes."""
    if node.is_leaf():
        on_leaf(node)
    else:
        on_pre(node)
        for child in node.subtree:
            iterate(child, on_leaf, on_pre, on_post)
        on_post(node)


def _ladderize_order(a: Node, b: Node) -> int:
    if abs(a.max_edge_length - b.max_edge_length) < sys.float_info.epsilon:
        if a.max_date == b.max_date:
            return (a.max_name > b.max_name) - (a.max_name < b.max_name)
        return -1 if a.max_date < b.max_date else 1
    return -1 if a.max_edge_length < b.max_edge_length else 1


class Tree(Node):
    """Root node. ``edge_length`` of the root is drawn as a stub."""

    def leaves(self) -> List[Node]:
        result: List[Node] = []
        iterate(self, result.append)
        return result

    def analyse(self) -> None:
        """Assign leaf line numbers, subtree tops/bottoms and strain counts."""
        current_line = 0

        def set_line_no(node: Node) -> None:
            nonlocal current_line
            node.line_no = current_line
            node.number_strains = 1
            current_line += 1

        def set_top_bottom(node: Node) -> None:
            assert node.subtree, "internal node without children"
            node.top = node.subtree[0].middle()
            node.bottom = node.subtree[-1].middle()
            node.number_strains = sum(child.number_strains for child in node.subtree)

        iterate(self, set_line_no, _nope, set_top_bottom)

    def ladderize(self) -> None:
        """Sort children by the longest path to a leaf, then latest date, then name.

        Line numbers and subtree extents are recomputed afterwards.
        """

        def set_leaf_values(node: Node) -> None:
            node.max_edge_length = node.edge_length
            node.max_date = node.date
            node.max_name = node.name

        def set_subtree_values(node: Node) -> None:
            node.max_edge_length = node.edge_length + max(child.max_edge_length for child in node.subtree)
            node.max_date = max(child.max_date for child in node.subtree)
            node.max_name = max(child.max_name for child in node.subtree)
            node.subtree.sort(key=functools.cmp_to_key(_ladderize_order))

        iterate(self, set_leaf_values, _nope, set_subtree_values)
        self.analyse()

    def fix_labels(self) -> None:
        def fix(node: Node) -> None:
            for junk in LABEL_JUNK:
                node.name = node.name.replace(junk, "", 1)
            node.name = node.name.replace("__", " ", 1)

        iterate(self, fix)

    def number_of_leaves(self) -> int:
        return self.width_height()[1]

    def width_height(self) -> Tuple[float, int]:
        """Longest root-to-leaf edge sum (root edge included) and leaf count."""

        def walk(node: Node) -> Tuple[float, int]:
            if node.is_leaf():
                return node.edge_length, 1
            width, height = 0.0, 0
            for child in node.subtree:
                child_width, child_height = walk(child)
                width = max(width, child_width)
                height += child_height
            return width + node.edge_length, height

        return walk(self)

    def min_max_date(self) -> Tuple[Date, Date]:
        min_date, max_date = Date(), Date()

        def update(node: Node) -> None:
            nonlocal min_date, max_date
            if not node.date.empty():
                if min_date.empty() or node.date < min_date:
                    min_date = node.date
                if max_date.empty() or max_date < node.date:
                    max_date = node.date

        iterate(self, update)
        return min_date, max_date

    def min_max_edge(self) -> Tuple[float, float]:
        """Shortest and longest positive edge, (0, 0) when there are none."""
        edges: List[float] = []

        def collect(node: Node) -> None:
            if node.edge_length > 0.0:
                edges.append(node.edge_length)

        iterate(self, collect, collect)
        if not edges:
            return 0.0, 0.0
        return min(edges), max(edges)

    def find_branch(self, branch_id: str) -> Optional[Node]:
        found: List[Node] = []

        def check(node: Node) -> None:
            if node.branch_id == branch_id:
                found.append(node)

        iterate(self, check, check)
        return found[0] if found else None

    def edge_table(self) -> pd.DataFrame:
        """Histogram of edge lengths: one row per distinct length."""
        counts: Counter = Counter()

        def collect(node: Node) -> None:
            counts[node.edge_length] += 1

        iterate(self, collect, collect)
        table = pd.DataFrame(sorted(counts.items()), columns=["edge_length", "count"])
        return table

    def print(self, out: Optional[TextIO] = None) -> None:
        out = out or sys.stdout
        indent = 0

        def p_name(node: Node) -> None:
            out.write(f"{' ' * indent}{node.display_name()}:{node.edge_length:g}\n")

        def p_subtree_pre(node: Node) -> None:
            nonlocal indent
            out.write(f"{' ' * indent}(\n")
            indent += 2

        def p_subtree_post(node: Node) -> None:
            nonlocal indent
            indent -= 2
            out.write(f"{' ' * indent}):{node.edge_length:g}\n")

        iterate(self, p_name, p_subtree_pre, p_subtree_post)

    def print_edges(self, out: Optional[TextIO] = None) -> None:
        out = out or sys.stdout
        table = self.edge_table()
        for edge_length, count in table.itertuples(index=False):
            out.write(f"{edge_length:g} {count}\n")
        min_edge, max_edge = self.min_max_edge()
        out.write(f"min: {min_edge:g}  max: {max_edge:g}\n")
