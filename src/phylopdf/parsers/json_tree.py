"""
JSON tree format ``phylogenetic-tree-v1``.

Top level object::

    {
      "version": "phylogenetic-tree-v1",
      "updated": {"user": ..., "date": ..., "creator": ...},
      "tree": <node>,
      "_settings": <layout settings, optional>
    }

A node has ``edge_length`` and either ``subtree`` (internal node, optionally
with ``name``, ``number_strains`` and ``id``) or leaf fields ``name``,
``date``, ``continent``, ``clades`` and ``aa_at``.
"""

from __future__ import annotations

import getpass
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from ..date import Date
from ..errors import InputOutputError, JsonStructureError
from ..settings import Settings, dump_settings, load_settings
from ..tree import Node, Tree
from ..xz import xz_compress

logger = logging.getLogger(__name__)

TREE_JSON_DUMP_VERSION = "phylogenetic-tree-v1"


def dump_node(node: Node) -> Dict[str, Any]:
    data: Dict[str, Any] = {"edge_length": node.edge_length}
    if node.is_leaf():
        data["name"] = node.name
        if not node.date.empty():
            data["date"] = node.date.display()
        if node.continent:
            data["continent"] = node.continent
        if node.clades:
            data["clades"] = sorted(node.clades)
        if node.aa_at:
            data["aa_at"] = dict(node.aa_at)
    else:
        if node.name:
            data["name"] = node.name
        if node.number_strains:
            data["number_strains"] = node.number_strains
        if node.branch_id:
            data["id"] = node.branch_id
        data["subtree"] = [dump_node(child) for child in node.subtree]
    return data


def _number(data: Dict[str, Any], key: str, default, convert=float):
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise JsonStructureError(f"cannot import tree: {key} must be a number: {json.dumps(data)[:80]}")
    return convert(value)


def load_node(data: Any, node: Optional[Node] = None) -> Node:
    if not isinstance(data, dict):
        raise JsonStructureError(f"cannot import tree: node is not an object: {data!r}")
    if node is None:
        node = Node()
    node.edge_length = _number(data, "edge_length", 0.0)
    if "subtree" in data:
        subtree = data["subtree"]
        if not isinstance(subtree, list):
            raise JsonStructureError(f"cannot import tree: unrecognized subtree: {json.dumps(subtree)}")
        if not subtree:
            raise JsonStructureError(f"cannot import tree: empty subtree: {json.dumps(data)[:80]}")
        node.subtree = [load_node(child) for child in subtree]
        node.name = str(data.get("name", ""))
        node.number_strains = _number(data, "number_strains", 0, int)
        node.branch_id = str(data.get("id", ""))
    else:
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise JsonStructureError(f"cannot import tree: leaf without name: {json.dumps(data)}")
        node.name = name
        date = data.get("date")
        if date:
            if not isinstance(date, str):
                raise JsonStructureError(f"cannot import tree: date of {name} is not a string: {date!r}")
            node.date = Date.parse(date)
        node.continent = str(data.get("continent", ""))
        clades = data.get("clades", [])
        if not isinstance(clades, list):
            raise JsonStructureError(f"cannot import tree: clades of {name} is not an array")
        node.clades = {str(clade) for clade in clades}
        aa_at = data.get("aa_at", {})
        if not isinstance(aa_at, dict):
            raise JsonStructureError(f"cannot import tree: aa_at of {name} is not an object")
        node.aa_at = {str(pos): str(aa) for pos, aa in aa_at.items()}
    return node


def tree_from_json(source: Union[str, bytes], settings: Optional[Settings] = None) -> Tuple[Tree, Settings]:
    """Load a tree and its ``_settings`` (applied onto ``settings``, defaults if None)."""
    if settings is None:
        settings = Settings()
    try:
        data = json.loads(source)
    except (json.JSONDecodeError, UnicodeDecodeError) as err:
        raise JsonStructureError(f"cannot import tree: {err}") from err
    if not isinstance(data, dict):
        raise JsonStructureError("cannot import tree: top level is not an object")
    version = data.get("version")
    if version != TREE_JSON_DUMP_VERSION:
        raise JsonStructureError(f"cannot import tree: unsupported version {version!r}")
    if "tree" not in data:
        raise JsonStructureError("cannot import tree: no \"tree\" key")
    tree = Tree()
    load_node(data["tree"], tree)
    if "_settings" in data:
        load_settings(data["_settings"], settings)
    return tree, settings


def tree_to_json_text(tree: Tree, creator: str, settings: Optional[Settings] = None, computed: Optional[Dict[str, Any]] = None) -> str:
    """Serialize ``tree`` with the ``updated`` stamp and settings.

    ``computed`` replaces the plain settings dump when the caller has a dump
    that includes values computed by the layout.
    """
    if computed is None:
        computed = dump_settings(settings if settings is not None else Settings())
    data = {
        "version": TREE_JSON_DUMP_VERSION,
        "updated": {
            "user": _user(),
            "date": time.strftime("%Y-%m-%d %H:%M %Z"),
            "creator": creator,
        },
        "tree": dump_node(tree),
        "_settings": computed,
    }
    return json.dumps(data, indent=2)


def tree_to_json(tree: Tree, filename: Union[str, Path], creator: str, settings: Optional[Settings] = None, computed: Optional[Dict[str, Any]] = None) -> None:
    """Write the JSON tree to ``filename``; ``-`` is stdout, ``.xz`` is compressed."""
    text = tree_to_json_text(tree, creator, settings, computed) + "\n"
    filename = str(filename)
    if filename == "-":
        sys.stdout.write(text)
        return
    data = text.encode("utf-8")
    if filename.endswith(".xz"):
        data = xz_compress(data)
    try:
        with open(filename, "wb") as out:
            out.write(data)
    except OSError as err:
        raise InputOutputError(f"cannot write {filename}: {err}") from err
    logger.info("Tree written to %s", filename)


def _user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return ""
