"""Check the spacing of ``class Name < Parent`` declarations."""

from __future__ import annotations

from typing import Iterator, List

from formula_audit.syntax import NodeKind, SyntaxNode

from . import AuditContext, FormulaRule, OffenseDraft, Rule
from .helpers import replace_between

FAMILY = "ClassInheritance"


class SpacingRule(FormulaRule):
    id = "ClassInheritance/Spacing"
    family = FAMILY
    target_kinds = frozenset({NodeKind.CLASS_DEFINITION})
    correctable = True

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        name = node.child_by_field("name")
        superclass = node.child_by_field("superclass")
        if name is None or superclass is None or not superclass.named_children:
            return
        parent = superclass.named_children[0]
        gap = context.source[name.end : parent.start]
        # Declarations continued onto another line are left alone.
        if gap == " < " or "\n" in gap:
            return
        yield self.at(
            parent,
            f"Use a space in class inheritance: class {name.text} < {parent.text}",
            fix=replace_between(name.end, parent.start, " < "),
        )


def get_rules() -> List[Rule]:
    return [SpacingRule()]
