from .newick import parse_newick, decode_name
from .json_tree import (
    TREE_JSON_DUMP_VERSION,
    dump_node,
    load_node,
    tree_from_json,
    tree_to_json,
    tree_to_json_text,
)
from .importer import import_tree, parse_tree, read_source
