"""Formula Audit exception hierarchy.

Every public exception inherits from ``FormulaAuditError`` so callers can
handle any analyzer failure with a single ``except`` clause.
"""


class FormulaAuditError(Exception):
    """Base exception for all formula-audit errors."""


class ParseError(FormulaAuditError):
    """Raised when formula source cannot be decoded or parsed."""


class ConfigError(FormulaAuditError):
    """Raised when a deprecation table or exemption file is malformed."""


class CatalogueError(FormulaAuditError):
    """Raised when the rule catalogue is declared inconsistently.

    Covers duplicate rule ids and families whose rules disagree on the
    order in which their offenses are reported.
    """
