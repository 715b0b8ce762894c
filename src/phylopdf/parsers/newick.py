"""
Newick parser for phylopdf.

Grammar (whitespace is space, tab, newline and carriage return)::

    tre             := *ws root_tree *ws ';' *ws
    root_tree       := '(' subtree_content ')' *ws [':' *ws number *ws]
    subtree         := '(' subtree_content ')'
    subtree_content := element (',' element)*
    element         := *ws (name_elem | subtree_elem) *ws
    name_elem       := name *ws [':' *ws number *ws]
    subtree_elem    := subtree *ws [':' *ws number *ws]

Leaf names are percent-decoded, and a trailing ``-YYYY-MM-DD`` is split off
into the leaf date. Any mismatch raises :class:`ParsingError` carrying the
offset and a preview of the text at that offset.
"""

from __future__ import annotations

import logging
import re
from typing import List, Tuple, Union
from urllib.parse import unquote

from ..date import Date
from ..errors import DateFormatError, ParsingError
from ..tree import Node, Tree

logger = logging.getLogger(__name__)

WHITESPACE = " \t\n\r"
NAME_RE = re.compile(r"[A-Za-z0-9!\"#$%&'*+\-./<=>?@\[\\\]^_`{|}~]+")
NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
NAME_DATE_RE = re.compile(r".+-[12][09][0-9][0-9]-[01][0-9]-[0-3][0-9]$")

PREVIEW_LENGTH = 40
DEFAULT_EDGE_LENGTH = 0.0


def decode_name(raw: str) -> Tuple[str, Date]:
    """Percent-decode ``raw`` and split off a trailing ``-YYYY-MM-DD`` date."""
    # each escape stands for one byte, kept as the character of that code point
    name = unquote(raw, encoding="latin-1")
    if NAME_DATE_RE.fullmatch(name):
        try:
            return name[:-11], Date.parse(name[-10:])
        except DateFormatError:
            logger.warning("Name %r ends with an invalid date, kept as is", name)
    return name, Date()


class NewickParser:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    # -- low level -------------------------------------------------------

    def fail(self, message: str) -> ParsingError:
        preview = self.text[self.pos:self.pos + PREVIEW_LENGTH]
        return ParsingError(f'{message} at {self.pos}: "{preview}"')

    def skip_space(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] in WHITESPACE:
            self.pos += 1

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def expect(self, char: str) -> None:
        if self.peek() != char:
            raise self.fail(f"'{char}' expected")
        self.pos += 1

    def number(self) -> float:
        match = NUMBER_RE.match(self.text, self.pos)
        if match is None:
            raise self.fail("number expected")
        self.pos = match.end()
        return float(match.group())

    def optional_edge_length(self) -> float:
        self.skip_space()
        if self.peek() != ":":
            return DEFAULT_EDGE_LENGTH
        self.pos += 1
        self.skip_space()
        edge_length = self.number()
        self.skip_space()
        return edge_length

    # -- grammar ---------------------------------------------------------

    def parse(self) -> Tree:
        tree = Tree()
        self.skip_space()
        self.expect("(")
        tree.subtree = self.subtree_content()
        self.expect(")")
        tree.edge_length = self.optional_edge_length()
        self.skip_space()
        self.expect(";")
        self.skip_space()
        if self.pos != len(self.text):
            raise self.fail("end of input expected")
        return tree

    def subtree_content(self) -> List[Node]:
        children = [self.element()]
        while self.peek() == ",":
            self.pos += 1
            children.append(self.element())
        return children

    def element(self) -> Node:
        self.skip_space()
        if self.peek() == "(":
            self.pos += 1
            node = Node(subtree=self.subtree_content())
            self.expect(")")
        else:
            match = NAME_RE.match(self.text, self.pos)
            if match is None:
                raise self.fail("either name or subtree expected")
            self.pos = match.end()
            name, date = decode_name(match.group())
            node = Node(name=name, date=date)
        node.edge_length = self.optional_edge_length()
        self.skip_space()
        return node


def parse_newick(source: Union[str, bytes]) -> Tree:
    """Parse Newick text into a :class:`Tree` (not yet analysed)."""
    if isinstance(source, bytes):
        source = source.decode("utf-8", errors="replace")
    tree = NewickParser(source).parse()
    logger.debug("Parsed newick tree with %d leaves", tree.number_of_leaves())
    return tree
