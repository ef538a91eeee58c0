"""Idiomatic use of ``build.with?``, ``build.without?`` and ``build.include?``."""

from __future__ import annotations

import re
from typing import Iterator, List

from formula_audit.syntax import NodeKind, SyntaxNode

from . import AuditContext, FormulaRule, OffenseDraft, Rule
from .helpers import (
    complemented_query,
    content_range,
    first_argument,
    inside_class,
    is_build_query,
    literal_column,
    method_name,
    negation_operand,
    replace,
    replace_between,
    string_value,
)

FAMILY = "OptionDeclarations"
QUERIES = ("with?", "without?")
DUPLICATED_PREFIX = {
    "with?": re.compile(r"^-?-?with-(.*)"),
    "without?": re.compile(r"^-?-?without-(.*)"),
}
INCLUDE_OPTION = re.compile(r"^with(out)?-(.*)")
DASHED_OPTION = re.compile(r"^--(.*)$")


class UnlessQueryRule(FormulaRule):
    id = "OptionDeclarations/UnlessQuery"
    family = FAMILY
    target_kinds = frozenset({NodeKind.CONDITIONAL})
    correctable = True

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if node.type not in ("unless", "unless_modifier"):
            return
        condition = node.child_by_field("condition")
        keyword = node.first_child_of_type("unless")
        if condition is None or keyword is None or not is_build_query(condition, QUERIES):
            return
        complement = complemented_query(condition)
        gap = context.source[keyword.end : condition.start]
        yield self.at(
            condition,
            f"Use if {complement} instead of unless {condition.text}",
            fix=replace_between(keyword.start, condition.end, f"if{gap}{complement}"),
        )


class NegatedQueryRule(FormulaRule):
    id = "OptionDeclarations/NegatedQuery"
    family = FAMILY
    target_kinds = frozenset({NodeKind.OPERATOR})
    correctable = True

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        query = negation_operand(node)
        if query is None or not is_build_query(query, QUERIES):
            return
        name = method_name(query)
        other = "without?" if name == "with?" else "with?"
        yield self.at(
            node,
            f"Don't negate 'build.{name}': use 'build.{other}'",
            fix=replace(node, complemented_query(query)),
        )


class DuplicatedFlagPrefixRule(FormulaRule):
    id = "OptionDeclarations/DuplicatedFlagPrefix"
    family = FAMILY
    target_kinds = frozenset({NodeKind.METHOD_CALL})
    correctable = True

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if not is_build_query(node, QUERIES):
            return
        option = first_argument(node)
        value = string_value(option)
        if value is None:
            return
        name = method_name(node)
        if name is None:
            return
        match = DUPLICATED_PREFIX[name].search(value)
        if not match or not match.group(1):
            return
        flag = name.rstrip("?")
        bare = match.group(1)
        start, end = content_range(option)
        yield self.at_column(
            option.line,
            literal_column(option, match.start()),
            f"Don't duplicate '{flag}': Use `build.{name} \"{bare}\"` to check for \"--{flag}-{bare}\"",
            fix=replace_between(start, end, bare),
        )


class IncludeQueryRule(FormulaRule):
    id = "OptionDeclarations/IncludeQuery"
    family = FAMILY
    target_kinds = frozenset({NodeKind.METHOD_CALL})
    correctable = True

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if not is_build_query(node, ("include?",)):
            return
        option = first_argument(node)
        value = string_value(option)
        if value is None:
            return
        match = INCLUDE_OPTION.search(value)
        if not match:
            return
        suffix = match.group(1) or ""
        bare = match.group(2)
        yield self.at_column(
            option.line,
            literal_column(option, match.start()),
            f"Use build.with{suffix}? \"{bare}\" instead of build.include? 'with{suffix}-{bare}'",
            fix=replace(node, f'build.with{suffix}? "{bare}"'),
        )


class DashedFlagRule(FormulaRule):
    id = "OptionDeclarations/DashedFlag"
    family = FAMILY
    target_kinds = frozenset({NodeKind.METHOD_CALL})
    correctable = True

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if not is_build_query(node, ("include?",)):
            return
        option = first_argument(node)
        value = string_value(option)
        if value is None:
            return
        match = DASHED_OPTION.search(value)
        if not match:
            return
        start, end = content_range(option)
        yield self.at_column(
            option.line,
            literal_column(option, match.start()),
            f"Reference '{match.group(1)}' without dashes",
            fix=replace_between(start, end, match.group(1)),
        )


class LegacyOptionsMethodRule(FormulaRule):
    id = "OptionDeclarations/LegacyOptionsMethod"
    family = FAMILY
    target_kinds = frozenset({NodeKind.METHOD_DEFINITION})

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if node.type != "method":
            return
        name = node.child_by_field("name")
        if name is not None and name.text == "options" and inside_class(node):
            yield self.at(node, "Use new-style option definitions")


def get_rules() -> List[Rule]:
    return [
        UnlessQueryRule(),
        NegatedQueryRule(),
        DuplicatedFlagPrefixRule(),
        IncludeQueryRule(),
        DashedFlagRule(),
        LegacyOptionsMethodRule(),
    ]
