"""Core result data structures for the auditor."""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional, Sequence, Tuple

from .severity import Severity

SEVERITY_ORDER: Sequence[Severity] = (
    Severity.FATAL,
    Severity.ERROR,
    Severity.WARNING,
    Severity.CONVENTION,
)


@dataclass(frozen=True)
class Fix:
    """Replace ``source[start:end]`` with ``replacement``."""

    start: int
    end: int
    replacement: str

    def overlaps(self, other: "Fix") -> bool:
        if self.start == self.end and other.start == other.end:
            return self.start == other.start
        return self.start < other.end and other.start < self.end

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class Offense:
    """Capture a single diagnostic reported by one rule."""

    rule: str
    message: str
    severity: Severity
    line: int
    column: int
    source_line: str
    fix: Optional[Fix] = None
    corrected: bool = False

    @property
    def correctable(self) -> bool:
        return self.fix is not None

    def to_dict(self) -> Dict[str, object]:
        data = asdict(self)
        data["severity"] = self.severity.value
        data["fix"] = self.fix.to_dict() if self.fix else None
        return data


@dataclass
class Summary:
    """Aggregate offense counts by severity."""

    fatal: int = 0
    error: int = 0
    warning: int = 0
    convention: int = 0

    def increment(self, severity: Severity) -> None:
        attr = severity.value
        setattr(self, attr, getattr(self, attr) + 1)

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    def as_rows(self) -> List[Tuple[str, int]]:
        """Return severity/count pairs ordered for reporting."""

        return [(severity.value, getattr(self, severity.value)) for severity in SEVERITY_ORDER]

    @property
    def total(self) -> int:
        return sum(getattr(self, severity.value) for severity in SEVERITY_ORDER)


@dataclass
class FileReport:
    """Offenses found in one formula plus any rules that failed internally."""

    path: Optional[str]
    offenses: List[Offense] = field(default_factory=list)
    failed_rules: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "path": self.path,
            "offenses": [offense.to_dict() for offense in self.offenses],
            "failed_rules": list(self.failed_rules),
        }


@dataclass
class AuditResult:
    """Bundle the audit summary and per-file reports."""

    summary: Summary = field(default_factory=Summary)
    files: List[FileReport] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.summary.total == 0

    def add_report(self, report: FileReport) -> None:
        for offense in report.offenses:
            self.summary.increment(offense.severity)
        self.files.append(report)

    def to_dict(self) -> Dict[str, object]:
        return {
            "summary": self.summary.to_dict(),
            "files": [report.to_dict() for report in self.files],
            "passed": self.passed,
        }

    def exit_code(self) -> int:
        priorities = [offense.severity.exit_priority for report in self.files for offense in report.offenses]
        if not priorities:
            return 0
        return 2 if max(priorities) >= Severity.ERROR.exit_priority else 1


def format_summary_table(result: AuditResult, max_offenses: int = 50) -> str:
    """Create a human-readable summary table for console output."""

    lines: List[str] = []
    shown = 0
    for report in result.files:
        for offense in report.offenses:
            if shown >= max_offenses:
                break
            shown += 1
            marker = " [Corrected]" if offense.corrected else ""
            lines.append(
                f"{report.path or '<source>'}:{offense.line}:{offense.column + 1}: "
                f"{offense.severity.value[0].upper()}: {offense.rule}: {offense.message}{marker}"
            )
            lines.append(f"  {offense.source_line}")
    if lines:
        lines.append("")

    lines.append("Audit Summary")
    lines.append("=" * 40)
    header = f"{'Severity':<10} | {'Count':>5}"
    lines.append(header)
    lines.append("-" * len(header))
    for severity, count in result.summary.as_rows():
        lines.append(f"{severity:<10} | {count:>5}")
    lines.append("-" * len(header))
    status = "PASS" if result.passed else "FAIL"
    lines.append(f"Status    : {status}")
    lines.append(f"Files     : {len(result.files)}")
    lines.append(f"Offenses  : {result.summary.total}")
    return "\n".join(lines)
