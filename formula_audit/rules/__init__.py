"""Rule protocol and shared inputs for the formula rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, FrozenSet, Iterable, Optional, Protocol

from formula_audit.result import Fix
from formula_audit.severity import Severity
from formula_audit.syntax import NodeKind, SyntaxNode, SyntaxTree
from formula_audit.tables import RuleTables


class Ordering(str, Enum):
    """Direction in which a rule's offenses are reported."""

    ASCENDING = "ascending"
    DESCENDING = "descending"


@dataclass(frozen=True)
class FileIdentity:
    """Where a formula came from; consulted only for exemptions."""

    path: Optional[str] = None
    class_name: Optional[str] = None

    @classmethod
    def from_tree(cls, tree: SyntaxTree, path: Optional[str] = None) -> "FileIdentity":
        return cls(path=path, class_name=tree.class_name())


@dataclass(frozen=True)
class AuditContext:
    """Bundle inputs shared across rules for one file."""

    tree: SyntaxTree
    identity: FileIdentity
    tables: RuleTables = field(default_factory=RuleTables)

    @property
    def source(self) -> str:
        return self.tree.source


@dataclass(frozen=True)
class OffenseDraft:
    """What a rule reports before the auditor attaches rule metadata."""

    message: str
    line: int
    column: int
    fix: Optional[Fix] = None


class Rule(Protocol):
    """Protocol implemented by all rule detectors."""

    id: str
    family: str
    target_kinds: FrozenSet[NodeKind]
    severity: Severity
    correctable: bool
    ordering: Ordering

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterable[OffenseDraft]:
        """Inspect ``node`` and yield an ``OffenseDraft`` per match."""


class FormulaRule:
    """Defaults shared by the built-in rules."""

    id: ClassVar[str] = ""
    family: ClassVar[str] = ""
    target_kinds: ClassVar[FrozenSet[NodeKind]] = frozenset()
    severity: ClassVar[Severity] = Severity.CONVENTION
    correctable: ClassVar[bool] = False
    ordering: ClassVar[Ordering] = Ordering.ASCENDING

    def detect(self, node: SyntaxNode, context: AuditContext) -> Iterable[OffenseDraft]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"

    # ------------------------------------------------------------------
    # Draft helpers
    # ------------------------------------------------------------------
    def at(self, node: SyntaxNode, message: str, fix: Optional[Fix] = None) -> OffenseDraft:
        return OffenseDraft(message=message, line=node.line, column=node.column, fix=self._fix(fix))

    def at_column(self, line: int, column: int, message: str, fix: Optional[Fix] = None) -> OffenseDraft:
        return OffenseDraft(message=message, line=line, column=column, fix=self._fix(fix))

    def _fix(self, fix: Optional[Fix]) -> Optional[Fix]:
        return fix if self.correctable else None
