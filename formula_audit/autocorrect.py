"""Select a non-overlapping set of fixes and apply them to the source text."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set, Tuple

from .result import Fix, Offense

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorrectionPlan:
    """Fixes accepted for one file, plus the offenses updated to match.

    ``offenses`` keeps the input order. Accepted offenses are marked
    ``corrected``; offenses whose fix collided with an earlier one lose the
    fix but keep their severity.
    """

    fixes: Tuple[Fix, ...]
    offenses: Tuple[Offense, ...]

    @property
    def corrected(self) -> int:
        return len(self.fixes)


def compute_fix(offense: Offense) -> Optional[Fix]:
    return offense.fix


def plan_corrections(offenses: Iterable[Offense]) -> CorrectionPlan:
    """Accept fixes in source order, dropping any that overlap an accepted one."""

    offenses = list(offenses)
    candidates = [(index, compute_fix(offense)) for index, offense in enumerate(offenses)]
    candidates = [(index, fix) for index, fix in candidates if fix is not None]
    candidates.sort(key=lambda item: (item[1].start, item[1].end, item[0]))

    accepted: List[Fix] = []
    accepted_indexes: Set[int] = set()
    for index, fix in candidates:
        if any(fix.overlaps(other) for other in accepted):
            offense = offenses[index]
            logger.debug("Dropping fix for %s at line %d: overlaps an earlier fix", offense.rule, offense.line)
            continue
        accepted.append(fix)
        accepted_indexes.add(index)

    updated = []
    for index, offense in enumerate(offenses):
        if index in accepted_indexes:
            updated.append(dataclasses.replace(offense, corrected=True))
        elif offense.fix is not None:
            updated.append(dataclasses.replace(offense, fix=None))
        else:
            updated.append(offense)
    return CorrectionPlan(fixes=tuple(accepted), offenses=tuple(updated))


def apply_corrections(source: str, plan: CorrectionPlan) -> str:
    """Return ``source`` with every accepted fix applied."""

    text = source
    for fix in sorted(plan.fixes, key=lambda item: (item.start, item.end), reverse=True):
        text = text[: fix.start] + fix.replacement + text[fix.end :]
    return text
