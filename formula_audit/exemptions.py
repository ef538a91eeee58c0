"""Per-file rule suppression based on formula path and declared class name."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Any, Iterable, List, Mapping, Optional, Pattern, Sequence, Tuple

from .exceptions import ConfigError
from .rules import FileIdentity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExemptionRule:
    """Suppress the rules matching ``rule`` for files matching every given pattern.

    ``rule`` is a glob over rule ids (``Miscellaneous/*`` names a whole
    family), ``path`` is searched in the file path and ``class_name`` must
    match the declared class name in full.
    """

    rule: str
    path: Optional[Pattern[str]] = None
    class_name: Optional[Pattern[str]] = None

    def covers(self, rule_id: str) -> bool:
        return fnmatchcase(rule_id, self.rule)

    def matches(self, identity: FileIdentity) -> bool:
        if self.path is None and self.class_name is None:
            return False
        if self.path is not None:
            if identity.path is None or not self.path.search(identity.path):
                return False
        if self.class_name is not None:
            if identity.class_name is None or not self.class_name.fullmatch(identity.class_name):
                return False
        return True


@dataclass(frozen=True)
class Restriction:
    """Limit the rules matching ``rule`` to files whose path matches ``path``."""

    rule: str
    path: Pattern[str]

    def covers(self, rule_id: str) -> bool:
        return fnmatchcase(rule_id, self.rule)


class ExemptionPolicy:
    """Read-only lookup deciding whether a rule is suppressed for a file."""

    def __init__(
        self,
        exemptions: Iterable[ExemptionRule] = (),
        restrictions: Iterable[Restriction] = (),
    ) -> None:
        self._exemptions: Tuple[ExemptionRule, ...] = tuple(exemptions)
        self._restrictions: Tuple[Restriction, ...] = tuple(restrictions)

    @property
    def exemptions(self) -> Tuple[ExemptionRule, ...]:
        return self._exemptions

    @property
    def restrictions(self) -> Tuple[Restriction, ...]:
        return self._restrictions

    def is_exempt(self, rule_id: str, identity: FileIdentity) -> bool:
        for exemption in self._exemptions:
            if exemption.covers(rule_id) and exemption.matches(identity):
                return True
        scoped = [restriction for restriction in self._restrictions if restriction.covers(rule_id)]
        if scoped:
            if identity.path is None:
                return True
            return not any(restriction.path.search(identity.path) for restriction in scoped)
        return False

    def merged(self, other: "ExemptionPolicy") -> "ExemptionPolicy":
        return ExemptionPolicy(
            self._exemptions + other.exemptions,
            self._restrictions + other.restrictions,
        )

    def warn_unknown(self, rule_ids: Sequence[str]) -> None:
        """Log entries that do not name any known rule; they stay harmless."""

        for entry in self._exemptions + self._restrictions:
            if not any(entry.covers(rule_id) for rule_id in rule_ids):
                logger.debug("Exemption entry %r matches no known rule", entry.rule)

    @classmethod
    def from_config(cls, data: Mapping[str, Any]) -> "ExemptionPolicy":
        exemptions: List[ExemptionRule] = []
        restrictions: List[Restriction] = []
        for entry in _entries(data, "exemptions"):
            for rule in _rule_patterns(entry):
                exemptions.append(
                    ExemptionRule(
                        rule=rule,
                        path=_compile(entry.get("path")),
                        class_name=_compile(entry.get("class_name")),
                    )
                )
        for entry in _entries(data, "restrictions"):
            path = _compile(entry.get("path"))
            if path is None:
                raise ConfigError(f"Restriction for {entry.get('rules')!r} needs a path pattern")
            for rule in _rule_patterns(entry):
                restrictions.append(Restriction(rule=rule, path=path))
        return cls(exemptions, restrictions)


def _entries(data: Mapping[str, Any], key: str) -> List[Mapping[str, Any]]:
    entries = data.get(key) or []
    if not isinstance(entries, list) or not all(isinstance(entry, dict) for entry in entries):
        raise ConfigError(f"'{key}' must be a list of mappings")
    return entries


def _rule_patterns(entry: Mapping[str, Any]) -> List[str]:
    rules = entry.get("rules", entry.get("rule"))
    if isinstance(rules, str):
        return [rules]
    if isinstance(rules, list) and rules:
        return [str(rule) for rule in rules]
    raise ConfigError(f"Exemption entry {dict(entry)!r} does not name any rule")


def _compile(pattern: Any) -> Optional[Pattern[str]]:
    if pattern is None:
        return None
    try:
        return re.compile(str(pattern))
    except re.error as exc:
        raise ConfigError(f"Invalid pattern {pattern!r}: {exc}") from exc
