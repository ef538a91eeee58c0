"""Syntax tree model for formula source, built on tree-sitter's Ruby grammar.

The engine never touches tree-sitter objects directly: ``parse_source``
converts the concrete tree into read-only ``SyntaxNode`` objects carrying a
coarse ``NodeKind``, the grammar type, character-based source ranges and the
raw text of every node. Comments stay in the tree as ordinary nodes.
"""

from __future__ import annotations

import logging
from bisect import bisect_right
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

import tree_sitter_ruby
from tree_sitter import Language, Parser, TreeCursor

from .exceptions import ParseError

logger = logging.getLogger(__name__)

RUBY_LANGUAGE = Language(tree_sitter_ruby.language())


class NodeKind(str, Enum):
    """Coarse node categories rules register against."""

    PROGRAM = "program"
    CLASS_DEFINITION = "class-definition"
    METHOD_DEFINITION = "method-definition"
    METHOD_CALL = "method-call"
    LITERAL = "literal"
    CONDITIONAL = "conditional"
    BLOCK = "block"
    COMMENT = "comment"
    CONSTANT_REFERENCE = "constant-reference"
    IDENTIFIER = "identifier"
    OPERATOR = "operator"
    ASSIGNMENT = "assignment"
    ELEMENT_REFERENCE = "element-reference"
    ARGUMENTS = "arguments"
    PAIR = "pair"
    INTERPOLATION = "interpolation"
    OTHER = "other"


KIND_BY_TYPE: Dict[str, NodeKind] = {
    "program": NodeKind.PROGRAM,
    "class": NodeKind.CLASS_DEFINITION,
    "method": NodeKind.METHOD_DEFINITION,
    "singleton_method": NodeKind.METHOD_DEFINITION,
    "call": NodeKind.METHOD_CALL,
    "string": NodeKind.LITERAL,
    "simple_symbol": NodeKind.LITERAL,
    "delimited_symbol": NodeKind.LITERAL,
    "integer": NodeKind.LITERAL,
    "float": NodeKind.LITERAL,
    "true": NodeKind.LITERAL,
    "false": NodeKind.LITERAL,
    "nil": NodeKind.LITERAL,
    "array": NodeKind.LITERAL,
    "hash": NodeKind.LITERAL,
    "if": NodeKind.CONDITIONAL,
    "unless": NodeKind.CONDITIONAL,
    "elsif": NodeKind.CONDITIONAL,
    "if_modifier": NodeKind.CONDITIONAL,
    "unless_modifier": NodeKind.CONDITIONAL,
    "conditional": NodeKind.CONDITIONAL,
    "do_block": NodeKind.BLOCK,
    "block": NodeKind.BLOCK,
    "comment": NodeKind.COMMENT,
    "constant": NodeKind.CONSTANT_REFERENCE,
    "scope_resolution": NodeKind.CONSTANT_REFERENCE,
    "identifier": NodeKind.IDENTIFIER,
    "unary": NodeKind.OPERATOR,
    "binary": NodeKind.OPERATOR,
    "assignment": NodeKind.ASSIGNMENT,
    "operator_assignment": NodeKind.ASSIGNMENT,
    "element_reference": NodeKind.ELEMENT_REFERENCE,
    "argument_list": NodeKind.ARGUMENTS,
    "block_parameters": NodeKind.ARGUMENTS,
    "method_parameters": NodeKind.ARGUMENTS,
    "pair": NodeKind.PAIR,
    "interpolation": NodeKind.INTERPOLATION,
}


@dataclass(frozen=True)
class SourceRange:
    """Location of a node: 1-based lines, 0-based columns, character offsets."""

    start_line: int
    start_column: int
    end_line: int
    end_column: int
    start: int
    end: int


@dataclass(eq=False)
class SyntaxNode:
    """One node of the formula syntax tree.

    Nodes are created once by ``parse_source`` and treated as read-only by
    every rule.
    """

    type: str
    kind: NodeKind
    range: SourceRange
    text: str
    named: bool = True
    field_name: Optional[str] = None
    parent: Optional["SyntaxNode"] = field(default=None, repr=False)
    children: Tuple["SyntaxNode", ...] = field(default=(), repr=False)

    @property
    def line(self) -> int:
        return self.range.start_line

    @property
    def column(self) -> int:
        return self.range.start_column

    @property
    def start(self) -> int:
        return self.range.start

    @property
    def end(self) -> int:
        return self.range.end

    @property
    def named_children(self) -> List["SyntaxNode"]:
        return [child for child in self.children if child.named]

    def child_by_field(self, name: str) -> Optional["SyntaxNode"]:
        for child in self.children:
            if child.field_name == name:
                return child
        return None

    def first_child_of_type(self, *types: str) -> Optional["SyntaxNode"]:
        for child in self.children:
            if child.type in types:
                return child
        return None

    def ancestors(self) -> Iterator["SyntaxNode"]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def walk(self) -> Iterator["SyntaxNode"]:
        """Yield this node and its named descendants in pre-order."""

        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.named_children))


@dataclass(eq=False)
class SyntaxTree:
    """Parsed formula: the source buffer plus its root node."""

    source: str
    root: SyntaxNode
    has_error: bool = False
    lines: Tuple[str, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.lines = tuple(self.source.splitlines())

    def line_text(self, line: int) -> str:
        """Return the raw text of a 1-based line, or an empty string."""

        if 1 <= line <= len(self.lines):
            return self.lines[line - 1]
        return ""

    def class_name(self) -> Optional[str]:
        """Return the name of the first class defined in the file."""

        for node in self.root.walk():
            if node.kind is NodeKind.CLASS_DEFINITION:
                name = node.child_by_field("name")
                return name.text if name is not None else None
        return None


class _OffsetMap:
    """Translate tree-sitter byte offsets into character offsets and columns."""

    def __init__(self, source: str, data: bytes) -> None:
        self._ascii = len(source) == len(data)
        self._chars: List[int] = []
        if not self._ascii:
            for index, char in enumerate(source):
                self._chars.extend([index] * len(char.encode("utf-8")))
            self._chars.append(len(source))
        self._line_starts = [0]
        for index, char in enumerate(source):
            if char == "\n":
                self._line_starts.append(index + 1)

    def char(self, byte_offset: int) -> int:
        if self._ascii:
            return byte_offset
        return self._chars[byte_offset]

    def line_column(self, char_offset: int) -> Tuple[int, int]:
        row = bisect_right(self._line_starts, char_offset) - 1
        return row + 1, char_offset - self._line_starts[row]


def parse_source(source: str) -> SyntaxTree:
    """Parse formula source text into a ``SyntaxTree``."""

    try:
        data = source.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ParseError(f"Formula source is not valid text: {exc}") from exc
    parser = Parser(RUBY_LANGUAGE)
    ts_tree = parser.parse(data)
    offsets = _OffsetMap(source, data)
    root = _convert(ts_tree.walk(), source, offsets, None)
    has_error = ts_tree.root_node.has_error
    if has_error:
        logger.warning("Syntax errors in formula source; analysis may be incomplete")
    return SyntaxTree(source=source, root=root, has_error=has_error)


def _convert(
    cursor: TreeCursor,
    source: str,
    offsets: _OffsetMap,
    parent: Optional[SyntaxNode],
) -> SyntaxNode:
    ts_node = cursor.node
    start = offsets.char(ts_node.start_byte)
    end = offsets.char(ts_node.end_byte)
    start_line, start_column = offsets.line_column(start)
    end_line, end_column = offsets.line_column(end)
    kind = KIND_BY_TYPE.get(ts_node.type, NodeKind.OTHER) if ts_node.is_named else NodeKind.OTHER
    node = SyntaxNode(
        type=ts_node.type,
        kind=kind,
        range=SourceRange(start_line, start_column, end_line, end_column, start, end),
        text=source[start:end],
        named=ts_node.is_named,
        field_name=cursor.field_name,
        parent=parent,
    )
    children: List[SyntaxNode] = []
    if cursor.goto_first_child():
        while True:
            children.append(_convert(cursor, source, offsets, node))
            if not cursor.goto_next_sibling():
                break
        cursor.goto_parent()
    node.children = tuple(children)
    return node
