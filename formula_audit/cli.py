"""Command-line entry point for the formula auditor."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, List

from .autocorrect import apply_corrections, plan_corrections
from .config import load_config
from .engine import Auditor
from .exceptions import FormulaAuditError
from .result import AuditResult, FileReport, format_summary_table
from .rules import FileIdentity
from .rules.catalogue import default_catalogue
from .syntax import parse_source
from .utils import iter_formula_files, read_text_file

logger = logging.getLogger(__name__)

DEFAULT_PATHS = ("Formula",)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Static analyzer for Homebrew formula files",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        help="Formula files or directories to audit (defaults to ./Formula).",
    )
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Report format (defaults to text).",
    )
    parser.add_argument(
        "--out",
        "--output",
        dest="output_path",
        type=str,
        default=None,
        help="Path to write the JSON report (e.g., artifacts/audit.json).",
    )
    parser.add_argument(
        "--only",
        dest="families",
        action="append",
        default=[],
        help="Restrict the audit to a rule family (repeatable).",
    )
    parser.add_argument(
        "--config",
        "-c",
        dest="config_paths",
        action="append",
        default=[],
        help="Extra YAML tables or exemptions merged over the defaults (repeatable).",
    )
    parser.add_argument(
        "--autocorrect",
        "-a",
        action="store_true",
        help="Rewrite files with the available corrections.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser


def build_auditor(families: List[str], config_paths: List[str]) -> Auditor:
    catalogue = default_catalogue().select(families)
    return Auditor(catalogue, load_config(*config_paths))


def audit_path(auditor: Auditor, path: Path, autocorrect: bool = False) -> FileReport:
    source = read_text_file(path)
    tree = parse_source(source)
    report = auditor.run(tree, FileIdentity.from_tree(tree, str(path)))
    if not autocorrect:
        return report
    plan = plan_corrections(report.offenses)
    report.offenses = list(plan.offenses)
    if plan.fixes:
        path.write_text(apply_corrections(source, plan), encoding="utf-8")
        logger.info("Applied %d corrections to %s", plan.corrected, path)
    return report


def run_audit(paths: Iterable[str], auditor: Auditor, autocorrect: bool = False) -> AuditResult:
    result = AuditResult()
    for path in iter_formula_files(paths):
        result.add_report(audit_path(auditor, path, autocorrect=autocorrect))
    return result


def write_output(result: AuditResult, output_path: str | None, report_format: str) -> None:
    if report_format == "text":
        print(format_summary_table(result))

    payload = json.dumps(result.to_dict(), indent=2)
    if output_path:
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(payload, encoding="utf-8")
        print(f"\nReport written to {output_path}")
    elif report_format == "json":
        print(payload)


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    paths = args.paths or list(DEFAULT_PATHS)
    try:
        auditor = build_auditor(args.families, args.config_paths)
        result = run_audit(paths, auditor, autocorrect=args.autocorrect)
    except FormulaAuditError as exc:
        print(f"formula-audit: {exc}", file=sys.stderr)
        return 2
    write_output(result, args.output_path, args.format)
    return result.exit_code()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
