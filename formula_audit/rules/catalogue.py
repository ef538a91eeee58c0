"""Ordered, immutable registry of formula rules."""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from formula_audit.exceptions import CatalogueError
from formula_audit.syntax import NodeKind

from . import Ordering, Rule
from . import assert_statements, class_inheritance, comments, lines, miscellaneous, option_declarations

FAMILY_MODULES = (
    lines,
    class_inheritance,
    comments,
    assert_statements,
    option_declarations,
    miscellaneous,
)


class RuleCatalogue:
    """Rules in catalogue order, indexed by the node kinds they inspect."""

    def __init__(self, rules: Iterable[Rule]) -> None:
        self._rules: Tuple[Rule, ...] = tuple(rules)
        self._index: Dict[str, int] = {}
        self._orderings: Dict[str, Ordering] = {}
        families: List[str] = []
        by_kind: Dict[NodeKind, List[Rule]] = {}
        for position, rule in enumerate(self._rules):
            self._validate(rule)
            self._index[rule.id] = position
            if rule.family not in self._orderings:
                self._orderings[rule.family] = rule.ordering
                families.append(rule.family)
            for kind in rule.target_kinds:
                by_kind.setdefault(kind, []).append(rule)
        self._families: Tuple[str, ...] = tuple(families)
        self._by_kind: Mapping[NodeKind, Tuple[Rule, ...]] = MappingProxyType(
            {kind: tuple(rules) for kind, rules in by_kind.items()}
        )

    def _validate(self, rule: Rule) -> None:
        if not rule.id or "/" not in rule.id or rule.id.split("/", 1)[0] != rule.family:
            raise CatalogueError(f"Rule id {rule.id!r} must be '<Family>/<Name>' with family {rule.family!r}")
        if rule.id in self._index:
            raise CatalogueError(f"Duplicate rule id {rule.id!r}")
        if not rule.target_kinds:
            raise CatalogueError(f"Rule {rule.id!r} does not target any node kind")
        declared = self._orderings.get(rule.family)
        if declared is not None and declared is not rule.ordering:
            raise CatalogueError(
                f"Rule {rule.id!r} orders offenses {rule.ordering.value} but family "
                f"{rule.family!r} is {declared.value}"
            )

    def __iter__(self):
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return self._rules

    @property
    def rule_ids(self) -> Tuple[str, ...]:
        return tuple(rule.id for rule in self._rules)

    def families(self) -> Tuple[str, ...]:
        return self._families

    def ordering(self, family: str) -> Ordering:
        return self._orderings[family]

    def index(self, rule_id: str) -> int:
        return self._index[rule_id]

    def get(self, rule_id: str) -> Optional[Rule]:
        position = self._index.get(rule_id)
        return self._rules[position] if position is not None else None

    def rules_for(self, kind: NodeKind) -> Tuple[Rule, ...]:
        return self._by_kind.get(kind, ())

    def select(self, families: Optional[Sequence[str]] = None) -> "RuleCatalogue":
        """Return a catalogue restricted to ``families``, keeping rule order."""

        if not families:
            return self
        unknown = [family for family in families if family not in self._orderings]
        if unknown:
            raise CatalogueError(f"Unknown rule families: {', '.join(unknown)}")
        return RuleCatalogue(rule for rule in self._rules if rule.family in families)


def default_catalogue() -> RuleCatalogue:
    rules: List[Rule] = []
    for module in FAMILY_MODULES:
        rules.extend(module.get_rules())
    return RuleCatalogue(rules)
