import pytest

from formula_audit.autocorrect import apply_corrections, plan_corrections
from formula_audit.engine import Auditor


@pytest.fixture(scope="session")
def auditor():
    return Auditor()


@pytest.fixture
def offenses_for(auditor):
    """Audit a source string and keep offenses of one rule or family."""

    def _audit(source, rule=None, path=None):
        report = auditor.audit_source(source, path)
        assert report.failed_rules == []
        if rule is None:
            return report.offenses
        return [offense for offense in report.offenses if offense.rule == rule or offense.rule.startswith(rule + "/")]

    return _audit


@pytest.fixture
def corrected(auditor):
    """Return ``source`` after applying every fix the auditor offers once."""

    def _correct(source, path=None):
        report = auditor.audit_source(source, path)
        return apply_corrections(source, plan_corrections(report.offenses))

    return _correct
