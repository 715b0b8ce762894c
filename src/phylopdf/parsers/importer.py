"""Reading a tree from a file, stdin or an inline string, sniffing its format."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional, Tuple, Union

from ..errors import FormatUnrecognizedError, InputOutputError
from ..settings import Settings
from ..tree import Tree
from ..xz import xz_compressed, xz_decompress
from .json_tree import tree_from_json
from .newick import parse_newick

logger = logging.getLogger(__name__)


def read_source(source: Union[str, Path]) -> bytes:
    """Bytes of ``source``: ``-`` is stdin, an existing path is read, anything else is taken literally."""
    source = str(source)
    if source == "-":
        return sys.stdin.buffer.read()
    if os.path.exists(source):
        try:
            with open(source, "rb") as f:
                return f.read()
        except OSError as err:
            raise InputOutputError(f"cannot open {source}: {err}") from err
    return source.encode("utf-8")


def parse_tree(data: bytes, settings: Optional[Settings] = None) -> Tuple[Tree, Settings]:
    """Decompress if xz, then parse as Newick or JSON depending on the first byte."""
    if settings is None:
        settings = Settings()
    if xz_compressed(data):
        logger.debug("Input is xz compressed")
        data = xz_decompress(data)
    if data[:1] == b"(":
        return parse_newick(data), settings
    if data[:1] == b"{":
        return tree_from_json(data, settings)
    raise FormatUnrecognizedError("cannot import tree: unrecognized source format")


def import_tree(source: Union[str, Path], settings: Optional[Settings] = None) -> Tuple[Tree, Settings]:
    tree, settings = parse_tree(read_source(source), settings)
    logger.info("Imported tree from %s", source if len(str(source)) < 80 else "inline text")
    return tree, settings
