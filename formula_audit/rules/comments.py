"""Comment hygiene: leftover template text and commented-out dependencies."""

from __future__ import annotations

import re
from typing import Iterator, List

from formula_audit.syntax import NodeKind, SyntaxNode

from . import AuditContext, FormulaRule, OffenseDraft, Rule

FAMILY = "Comments"
COMMENTED_DEPENDENCY = re.compile(r"#\s*depends_on\s+(.+)\s*$")


class TemplateCommentRule(FormulaRule):
    id = "Comments/TemplateComment"
    family = FAMILY
    target_kinds = frozenset({NodeKind.COMMENT})

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        if any(template in node.text for template in context.tables.template_comments):
            yield self.at(node, "Please remove default template comments")


class CommentedDependencyRule(FormulaRule):
    id = "Comments/CommentedDependency"
    family = FAMILY
    target_kinds = frozenset({NodeKind.COMMENT})

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterator[OffenseDraft]:
        match = COMMENTED_DEPENDENCY.search(node.text)
        if match:
            yield self.at(node, f"Commented-out dependency {match.group(1).rstrip()}")


def get_rules() -> List[Rule]:
    return [TemplateCommentRule(), CommentedDependencyRule()]
