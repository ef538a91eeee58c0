"""Single-pass dispatcher running the rule catalogue over one formula."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set

from .config import AuditConfig, load_config
from .result import FileReport, Offense
from .rules import AuditContext, FileIdentity, OffenseDraft, Ordering, Rule
from .rules.catalogue import RuleCatalogue, default_catalogue
from .syntax import SyntaxTree, parse_source
from .utils import read_text_file

logger = logging.getLogger(__name__)


class Auditor:
    """Run every non-exempt rule over a syntax tree in one traversal.

    The auditor keeps no per-file state, so one instance can serve several
    threads at once.
    """

    def __init__(self, catalogue: Optional[RuleCatalogue] = None, config: Optional[AuditConfig] = None) -> None:
        self._catalogue = catalogue if catalogue is not None else default_catalogue()
        self._config = config if config is not None else load_config()
        self._config.policy.warn_unknown(self._catalogue.rule_ids)

    @property
    def catalogue(self) -> RuleCatalogue:
        return self._catalogue

    @property
    def config(self) -> AuditConfig:
        return self._config

    def analyze(self, tree: SyntaxTree, identity: Optional[FileIdentity] = None) -> List[Offense]:
        return self.run(tree, identity).offenses

    def run(self, tree: SyntaxTree, identity: Optional[FileIdentity] = None) -> FileReport:
        if identity is None:
            identity = FileIdentity.from_tree(tree)
        context = AuditContext(tree=tree, identity=identity, tables=self._config.tables)
        active = {rule.id for rule in self._catalogue if not self._config.policy.is_exempt(rule.id, identity)}
        drafts: Dict[str, List[OffenseDraft]] = {}
        failed: Set[str] = set()

        for node in tree.root.walk():
            for rule in self._catalogue.rules_for(node.kind):
                if rule.id not in active or rule.id in failed:
                    continue
                try:
                    found = list(rule.detect(node, context))
                except Exception:
                    logger.exception(
                        "Rule %s failed on %s line %d; skipping it for this file",
                        rule.id,
                        identity.path or "<source>",
                        node.line,
                    )
                    failed.add(rule.id)
                    drafts.pop(rule.id, None)
                    continue
                if found:
                    drafts.setdefault(rule.id, []).extend(found)

        offenses = self._order(tree, drafts)
        failed_rules = [rule.id for rule in self._catalogue if rule.id in failed]
        return FileReport(path=identity.path, offenses=offenses, failed_rules=failed_rules)

    def audit_source(self, source: str, path: Optional[str] = None) -> FileReport:
        tree = parse_source(source)
        return self.run(tree, FileIdentity.from_tree(tree, path))

    def audit_file(self, path: Path) -> FileReport:
        return self.audit_source(read_text_file(path), str(path))

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------
    def _order(self, tree: SyntaxTree, drafts: Dict[str, List[OffenseDraft]]) -> List[Offense]:
        ordered: List[Offense] = []
        for family in self._catalogue.families():
            keyed = []
            for rule in self._catalogue:
                if rule.family != family:
                    continue
                index = self._catalogue.index(rule.id)
                for draft in drafts.get(rule.id, ()):
                    keyed.append(((draft.line, draft.column, index), self._offense(rule, draft, tree)))
            descending = self._catalogue.ordering(family) is Ordering.DESCENDING
            keyed.sort(key=lambda item: item[0], reverse=descending)
            ordered.extend(offense for _, offense in keyed)
        return ordered

    @staticmethod
    def _offense(rule: Rule, draft: OffenseDraft, tree: SyntaxTree) -> Offense:
        return Offense(
            rule=rule.id,
            message=draft.message,
            severity=rule.severity,
            line=draft.line,
            column=draft.column,
            source_line=tree.line_text(draft.line),
            fix=draft.fix,
        )


def audit_source(source: str, path: Optional[str] = None, families: Optional[Sequence[str]] = None) -> List[Offense]:
    """Audit ``source`` with the packaged configuration."""

    auditor = Auditor(default_catalogue().select(families))
    return auditor.audit_source(source, path).offenses
