"""Tree-shape helpers shared by the rule families."""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from formula_audit.result import Fix
from formula_audit.syntax import NodeKind, SyntaxNode

SYMBOL_TYPES = ("simple_symbol", "symbol")
QUERY_COMPLEMENTS = {"with?": "without?", "without?": "with?"}


# ----------------------------------------------------------------------
# Calls
# ----------------------------------------------------------------------
def is_call(node: SyntaxNode, method: Optional[Iterable[str] | str] = None, receiver: Optional[str] = None) -> bool:
    """Match a method call by name and receiver source.

    ``receiver=""`` requires a call without receiver; ``None`` accepts any.
    """

    if node.kind is not NodeKind.METHOD_CALL:
        return False
    if method is not None:
        name = method_name(node)
        if isinstance(method, str):
            if name != method:
                return False
        elif name not in method:
            return False
    if receiver is not None:
        recv = node.child_by_field("receiver")
        if receiver == "":
            return recv is None
        if recv is None or recv.text != receiver:
            return False
    return True


def method_name(node: SyntaxNode) -> Optional[str]:
    method = node.child_by_field("method")
    return method.text if method is not None else None


def receiver_of(node: SyntaxNode) -> Optional[SyntaxNode]:
    return node.child_by_field("receiver")


def arguments(node: SyntaxNode) -> List[SyntaxNode]:
    """Return the argument nodes of a call or element reference."""

    if node.type == "element_reference":
        obj = node.child_by_field("object")
        return [child for child in node.named_children if child is not obj and child.type != "comment"]
    args = node.child_by_field("arguments")
    if args is None:
        return []
    return [child for child in args.named_children if child.type != "comment"]


def first_argument(node: SyntaxNode) -> Optional[SyntaxNode]:
    args = arguments(node)
    return args[0] if args else None


def block_of(node: SyntaxNode) -> Optional[SyntaxNode]:
    return node.child_by_field("block")


def is_build_query(node: SyntaxNode, queries: Iterable[str]) -> bool:
    return is_call(node, tuple(queries), receiver="build")


def complemented_query(call: SyntaxNode) -> str:
    """Return the call's source with ``with?``/``without?`` swapped."""

    method = call.child_by_field("method")
    if method is None or method.text not in QUERY_COMPLEMENTS:
        return call.text
    swapped = QUERY_COMPLEMENTS[method.text]
    return call.text[: method.start - call.start] + swapped + call.text[method.end - call.start :]


# ----------------------------------------------------------------------
# Literals
# ----------------------------------------------------------------------
def string_value(node: Optional[SyntaxNode]) -> Optional[str]:
    """Return the raw content of a string literal without interpolation."""

    if node is None or node.type != "string":
        return None
    if any(child.type == "interpolation" for child in node.children):
        return None
    if len(node.children) < 2:
        return node.text[1:-1]
    opening, closing = node.children[0], node.children[-1]
    return node.text[opening.end - node.start : closing.start - node.start]


def symbol_name(node: Optional[SyntaxNode]) -> Optional[str]:
    if node is None or node.type not in SYMBOL_TYPES:
        return None
    return node.text[1:]


def literal_name(node: Optional[SyntaxNode]) -> Optional[str]:
    """Return the name carried by a string or symbol literal."""

    value = string_value(node)
    if value is not None:
        return value
    return symbol_name(node)


def literal_column(node: SyntaxNode, offset: int = 0) -> int:
    """Column of ``offset`` within a literal, skipping its opening token."""

    return node.column + 1 + offset


def content_range(node: SyntaxNode) -> Tuple[int, int]:
    """Character range of a plain string literal's content."""

    if len(node.children) >= 2:
        return node.children[0].end, node.children[-1].start
    return node.start + 1, node.end - 1


def is_double_quoted(node: SyntaxNode) -> bool:
    return node.type == "string" and node.text.startswith('"')


# ----------------------------------------------------------------------
# Structure
# ----------------------------------------------------------------------
def inside_class(node: SyntaxNode) -> bool:
    return any(ancestor.kind is NodeKind.CLASS_DEFINITION for ancestor in node.ancestors())


def negation_operand(node: SyntaxNode) -> Optional[SyntaxNode]:
    """Return the operand of a ``!``/``not`` expression, else ``None``."""

    if node.type != "unary":
        return None
    operator = node.child_by_field("operator")
    if operator is None or operator.text not in ("!", "not"):
        return None
    operand = node.child_by_field("operand")
    while operand is not None and operand.type == "parenthesized_statements" and len(operand.named_children) == 1:
        operand = operand.named_children[0]
    return operand


# ----------------------------------------------------------------------
# Fixes
# ----------------------------------------------------------------------
def replace(node: SyntaxNode, replacement: str) -> Fix:
    return Fix(start=node.start, end=node.end, replacement=replacement)


def replace_between(start: int, end: int, replacement: str) -> Fix:
    return Fix(start=start, end=end, replacement=replacement)


def remove_statement(source: str, node: SyntaxNode) -> Fix:
    """Delete ``node``, taking its whole lines when nothing else is on them."""

    line_start = source.rfind("\n", 0, node.start) + 1
    line_end = source.find("\n", node.end)
    line_end = len(source) if line_end == -1 else line_end + 1
    before = source[line_start : node.start]
    after = source[node.end : line_end]
    if not before.strip() and not after.strip():
        return Fix(start=line_start, end=line_end, replacement="")
    return Fix(start=node.start, end=node.end, replacement="")
