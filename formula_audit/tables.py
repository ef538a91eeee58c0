"""Deprecation, shortcut and compiler tables consulted by the rules."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Pattern, Tuple

from .exceptions import ConfigError


def _frozen(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class RuleTables:
    """Immutable data tables; rules never hard-code these values."""

    deprecated_dependencies: Mapping[str, Optional[str]] = field(default_factory=dict)
    template_comments: Tuple[str, ...] = ()
    fileutils_methods: FrozenSet[str] = frozenset()
    compilers: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    path_shortcuts: Mapping[str, Tuple[Pattern[str], ...]] = field(default_factory=dict)
    vendored_languages: Tuple[str, ...] = ()
    environment_commands: Tuple[str, ...] = ()
    dependency_tags: FrozenSet[str] = frozenset()
    legacy_macos_checks: FrozenSet[str] = frozenset()
    deprecated_env_methods: Mapping[str, str] = field(default_factory=dict)
    deprecated_constants: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_config(cls, data: Mapping[str, Any]) -> "RuleTables":
        return cls(
            deprecated_dependencies=_frozen(_mapping(data, "deprecated_dependencies", allow_null=True)),
            template_comments=tuple(_strings(data, "template_comments")),
            fileutils_methods=frozenset(_strings(data, "fileutils_methods")),
            compilers=_frozen(
                {name: tuple(str(item) for item in values) for name, values in _mapping(data, "compilers").items()}
            ),
            path_shortcuts=_frozen(
                {helper: _patterns(helper, values) for helper, values in _mapping(data, "path_shortcuts").items()}
            ),
            vendored_languages=tuple(_strings(data, "vendored_languages")),
            environment_commands=tuple(_strings(data, "environment_commands")),
            dependency_tags=frozenset(_strings(data, "dependency_tags")),
            legacy_macos_checks=frozenset(_strings(data, "legacy_macos_checks")),
            deprecated_env_methods=_frozen(_mapping(data, "deprecated_env_methods")),
            deprecated_constants=_frozen(_mapping(data, "deprecated_constants")),
        )

    def merged(self, data: Mapping[str, Any]) -> "RuleTables":
        """Return tables extended by ``data``; mappings update, lists append."""

        base = self.to_config()
        for key, value in data.items():
            current = base.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                current.update(value)
            elif isinstance(current, list) and isinstance(value, list):
                current.extend(item for item in value if item not in current)
            else:
                base[key] = value
        return RuleTables.from_config(base)

    def to_config(self) -> Dict[str, Any]:
        return {
            "deprecated_dependencies": dict(self.deprecated_dependencies),
            "template_comments": list(self.template_comments),
            "fileutils_methods": sorted(self.fileutils_methods),
            "compilers": {name: list(values) for name, values in self.compilers.items()},
            "path_shortcuts": {
                helper: [pattern.pattern for pattern in patterns] for helper, patterns in self.path_shortcuts.items()
            },
            "vendored_languages": list(self.vendored_languages),
            "environment_commands": list(self.environment_commands),
            "dependency_tags": sorted(self.dependency_tags),
            "legacy_macos_checks": sorted(self.legacy_macos_checks),
            "deprecated_env_methods": dict(self.deprecated_env_methods),
            "deprecated_constants": dict(self.deprecated_constants),
        }


def _mapping(data: Mapping[str, Any], key: str, allow_null: bool = False) -> Dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping")
    result: Dict[str, Any] = {}
    for name, item in value.items():
        if item is None and allow_null:
            result[str(name)] = None
        elif isinstance(item, (str, list)):
            result[str(name)] = item
        else:
            raise ConfigError(f"'{key}.{name}' has unsupported value {item!r}")
    return result


def _strings(data: Mapping[str, Any], key: str) -> List[str]:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise ConfigError(f"'{key}' must be a list")
    return [str(item) for item in value]


def _patterns(helper: str, values: Any) -> Tuple[Pattern[str], ...]:
    if not isinstance(values, list):
        raise ConfigError(f"'path_shortcuts.{helper}' must be a list of patterns")
    compiled = []
    for value in values:
        try:
            pattern = re.compile(str(value))
        except re.error as exc:
            raise ConfigError(f"Invalid path shortcut pattern {value!r}: {exc}") from exc
        if "shortcut" not in pattern.groupindex:
            raise ConfigError(f"Path shortcut pattern {value!r} lacks a 'shortcut' group")
        compiled.append(pattern)
    return tuple(compiled)
