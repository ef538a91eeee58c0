"""Prefer the dedicated minitest assertions inside ``test do`` blocks."""

from __future__ import annotations

from typing import Iterator, List, Optional

from formula_audit.syntax import NodeKind, SyntaxNode

from . import AuditContext, FormulaRule, OffenseDraft, Rule
from .helpers import first_argument, is_call, method_name, negation_operand, receiver_of, replace

FAMILY = "AssertStatements"
PREDICATES = ("exist?", "executable?")


def _assertion_argument(node: SyntaxNode) -> Optional[SyntaxNode]:
    if not is_call(node, "assert", receiver=""):
        return None
    return first_argument(node)


class AssertIncludeRule(FormulaRule):
    id = "AssertStatements/AssertInclude"
    family = FAMILY
    target_kinds = frozenset({NodeKind.METHOD_CALL})

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        argument = _assertion_argument(node)
        if argument is None or not is_call(argument, "include?"):
            return
        if receiver_of(argument) is None:
            return
        yield self.at(argument, "Use `assert_match` instead of `assert ...include?`")


class AssertPredicateRule(FormulaRule):
    """``assert File.exist? path`` reads better as ``assert_predicate``.

    Negated assertions map to ``refute_predicate``. Only assertions on a
    path object (not the ``File`` class) can be rewritten mechanically.
    """

    id = "AssertStatements/AssertPredicate"
    family = FAMILY
    target_kinds = frozenset({NodeKind.METHOD_CALL})
    correctable = True

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        argument = _assertion_argument(node)
        if argument is None:
            return
        query = negation_operand(argument)
        negated = query is not None
        if query is None:
            query = argument
        if not is_call(query, PREDICATES):
            return
        receiver = receiver_of(query)
        if receiver is None:
            return
        predicate = method_name(query)
        assertion = "refute_predicate" if negated else "assert_predicate"
        message = f"Use `{assertion} <path_to_file>, :{predicate}` instead of `{node.text}`"
        fix = None
        if receiver.text != "File":
            path = receiver
            if path.type == "parenthesized_statements" and len(path.named_children) == 1:
                path = path.named_children[0]
            fix = replace(node, f"{assertion} {path.text}, :{predicate}")
        yield self.at(argument, message, fix=fix)


def get_rules() -> List[Rule]:
    return [AssertIncludeRule(), AssertPredicateRule()]
