import json

import pytest

from phylopdf.date import Date
from phylopdf.errors import FormatUnrecognizedError, JsonStructureError
from phylopdf.parsers import (
    TREE_JSON_DUMP_VERSION,
    dump_node,
    import_tree,
    tree_from_json,
    tree_to_json,
    tree_to_json_text,
)
from phylopdf.settings import Settings
from phylopdf.xz import XZ_SIGNATURE, xz_compress


def test_dump_leaf_and_internal(dated_tree):
    dated_tree.subtree[0].branch_id = "b1"
    data = dump_node(dated_tree)
    inner = data["subtree"][0]
    assert inner["id"] == "b1"
    assert inner["number_strains"] == 2
    leaf = inner["subtree"][0]
    assert leaf == {
        "edge_length": 1.0,
        "name": "A",
        "date": "2019-01-15",
        "continent": "EUROPE",
        "clades": ["3C"],
        "aa_at": {"159": "N"},
    }


def test_text_round_trip(dated_tree):
    text = tree_to_json_text(dated_tree, "test")
    data = json.loads(text)
    assert data["version"] == TREE_JSON_DUMP_VERSION
    assert data["updated"]["creator"] == "test"
    assert "_settings" in data

    loaded, settings = tree_from_json(text)
    assert loaded.same_as(dated_tree)
    assert isinstance(settings, Settings)


def test_settings_are_loaded_onto_given_object(small_tree):
    settings = Settings()
    settings.tree.horizontal_step = 42.0
    text = tree_to_json_text(small_tree, "test", settings)
    target = Settings()
    _, loaded = tree_from_json(text, target)
    assert loaded is target
    assert target.tree.horizontal_step == 42.0


def test_computed_replaces_settings(small_tree):
    data = json.loads(tree_to_json_text(small_tree, "test", computed={"border": 0.2}))
    assert data["_settings"] == {"border": 0.2}


@pytest.mark.parametrize("document, fragment", [
    ({"version": "phylogenetic-tree-v2", "tree": {}}, "unsupported version"),
    ({"version": TREE_JSON_DUMP_VERSION}, "no \"tree\" key"),
    ({"version": TREE_JSON_DUMP_VERSION, "tree": {"subtree": {"name": "A"}}}, "unrecognized subtree"),
    ({"version": TREE_JSON_DUMP_VERSION, "tree": {"subtree": [{"edge_length": 1}]}}, "leaf without name"),
    ({"version": TREE_JSON_DUMP_VERSION, "tree": {"subtree": [{"name": "A", "clades": "3C"}]}}, "not an array"),
    ([], "not an object"),
    ({"version": TREE_JSON_DUMP_VERSION, "tree": {"subtree": [{"subtree": []}, {"name": "A"}]}}, "empty subtree"),
    ({"version": TREE_JSON_DUMP_VERSION, "tree": {"subtree": [{"name": "A", "date": 20190101}]}}, "not a string"),
    ({"version": TREE_JSON_DUMP_VERSION, "tree": {"subtree": [{"name": "A", "edge_length": "x"}]}}, "must be a number"),
    ({"version": TREE_JSON_DUMP_VERSION, "tree": {"subtree": [{"name": "A"}], "number_strains": "many"}}, "must be a number"),
])
def test_structure_errors(document, fragment):
    with pytest.raises(JsonStructureError, match=fragment):
        tree_from_json(json.dumps(document))


@pytest.mark.parametrize("source", ["{not json", b'{"version": "\xff\xfe\xfa"}'])
def test_invalid_json(source):
    with pytest.raises(JsonStructureError):
        tree_from_json(source)


def test_write_and_import_xz(tmp_path, dated_tree):
    path = tmp_path / "tree.json.xz"
    tree_to_json(dated_tree, path, "test")
    assert path.read_bytes().startswith(XZ_SIGNATURE)
    loaded, _ = import_tree(path)
    assert loaded.same_as(dated_tree)


def test_write_plain(tmp_path, small_tree):
    path = tmp_path / "tree.json"
    tree_to_json(small_tree, path, "test")
    assert json.loads(path.read_text())["tree"]["subtree"][1]["name"] == "C"


def test_import_newick_file_and_inline_text(tmp_path):
    path = tmp_path / "tree.newick.xz"
    path.write_bytes(xz_compress(b"(A-2019-01-01:1,B:2);"))
    tree, _ = import_tree(path)
    assert tree.subtree[0].date == Date(2019, 1, 1)

    tree, _ = import_tree("(A:1,B:2);")
    assert [leaf.name for leaf in tree.leaves()] == ["A", "B"]


def test_import_unrecognized():
    with pytest.raises(FormatUnrecognizedError):
        import_tree("not a tree")
