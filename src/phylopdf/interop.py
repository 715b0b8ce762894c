"""Conversion to and from ete3 trees."""

from __future__ import annotations

import ete3
from ete3.coretype.tree import TreeError

from .date import Date
from .errors import PhyloPdfError
from .tree import Node, Tree


def to_ete3(tree: Tree) -> ete3.Tree:
    """Copy ``tree`` into an ete3 tree.

    The root edge becomes ``dist`` of the ete3 root; leaf annotations (date,
    continent, clades, aa_at) are kept as node features.
    """

    def copy(node: Node, target: ete3.TreeNode) -> None:
        target.dist = node.edge_length
        if node.is_leaf():
            target.name = node.name
            if not node.date.empty():
                target.add_feature("date", node.date.display())
            if node.continent:
                target.add_feature("continent", node.continent)
            if node.clades:
                target.add_feature("clades", sorted(node.clades))
            if node.aa_at:
                target.add_feature("aa_at", dict(node.aa_at))
        else:
            if node.name:
                target.name = node.name
            if node.branch_id:
                target.add_feature("branch_id", node.branch_id)
            for child in node.subtree:
                copy(child, target.add_child())

    root = ete3.Tree()
    copy(tree, root)
    return root


def from_ete3(source: ete3.TreeNode) -> Tree:
    """Build a :class:`Tree` from an ete3 tree, root ``dist`` becoming the root edge."""

    def copy(node: ete3.TreeNode, target: Node) -> Node:
        target.edge_length = float(getattr(node, "dist", 0.0) or 0.0)
        if node.is_leaf():
            target.name = node.name
            if getattr(node, "date", None):
                target.date = Date.parse(node.date)
            target.continent = getattr(node, "continent", "") or ""
            target.clades = set(getattr(node, "clades", []) or [])
            target.aa_at = dict(getattr(node, "aa_at", {}) or {})
        else:
            target.name = node.name or ""
            target.branch_id = getattr(node, "branch_id", "") or ""
            target.subtree = [copy(child, Node()) for child in node.children]
        return target

    tree = Tree()
    copy(source, tree)
    return tree


def compare_trees(tree1: Tree, tree2: Tree) -> dict:
    """Robinson-Foulds comparison of two trees by leaf name (unrooted)."""
    try:
        result = to_ete3(tree1).robinson_foulds(to_ete3(tree2), unrooted_trees=True)
    except TreeError as err:
        raise PhyloPdfError(f"cannot compare trees: {err}") from err
    rf, max_rf, common, edges1, edges2, _, _ = result
    return {
        "rf": rf,
        "max_rf": max_rf,
        "normalized_rf": rf / max_rf if max_rf else 0.0,
        "common_leaves": len(common),
        "partitions_only_in_first": len(edges1 - edges2),
        "partitions_only_in_second": len(edges2 - edges1),
    }
