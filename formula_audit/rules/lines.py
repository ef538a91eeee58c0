"""Report deprecated dependency symbols passed to ``depends_on``."""

from __future__ import annotations

from typing import Iterator, List

from formula_audit.syntax import NodeKind, SyntaxNode

from . import AuditContext, FormulaRule, OffenseDraft, Ordering, Rule
from .helpers import first_argument, is_call, replace, symbol_name

FAMILY = "Lines"


class DeprecatedDependencyRule(FormulaRule):
    """``depends_on :automake`` and friends name formulae by string now."""

    id = "Lines/DeprecatedDependency"
    family = FAMILY
    target_kinds = frozenset({NodeKind.METHOD_CALL})
    correctable = True
    ordering = Ordering.DESCENDING

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if not is_call(node, "depends_on", receiver=""):
            return
        dependency = first_argument(node)
        if dependency is not None and dependency.type == "pair":
            dependency = dependency.child_by_field("key")
        name = symbol_name(dependency)
        if name is None or name not in context.tables.deprecated_dependencies:
            return
        replacement = context.tables.deprecated_dependencies[name]
        if replacement is None:
            yield self.at(node, f":{name} is deprecated")
            return
        yield self.at(
            node,
            f':{name} is deprecated. Usage should be "{replacement}"',
            fix=replace(dependency, f'"{replacement}"'),
        )


def get_rules() -> List[Rule]:
    return [DeprecatedDependencyRule()]
