"""Severity definitions for audit offenses."""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """Enumerate the supported severity levels for offenses."""

    CONVENTION = "convention"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"

    @property
    def exit_priority(self) -> int:
        """Return an integer ranking to drive exit code decisions."""

        ordering = {
            Severity.FATAL: 3,
            Severity.ERROR: 2,
            Severity.WARNING: 1,
            Severity.CONVENTION: 0,
        }
        return ordering[self]
