from formula_audit.autocorrect import apply_corrections, compute_fix, plan_corrections
from formula_audit.result import Fix, Offense
from formula_audit.severity import Severity


def _offense(rule, fix=None, line=1, column=0):
    return Offense(
        rule=rule,
        message="msg",
        severity=Severity.CONVENTION,
        line=line,
        column=column,
        source_line="",
        fix=fix,
    )


def test_compute_fix_returns_offense_fix():
    fix = Fix(0, 3, "bar")

    assert compute_fix(_offense("A/B", fix)) == fix
    assert compute_fix(_offense("A/B")) is None


def test_overlapping_fix_is_downgraded():
    first = _offense("A/First", Fix(4, 10, "x"))
    second = _offense("A/Second", Fix(8, 12, "y"))
    untouched = _offense("A/Plain")

    plan = plan_corrections([second, untouched, first])

    assert plan.fixes == (Fix(4, 10, "x"),)
    downgraded, plain, accepted = plan.offenses
    assert downgraded.fix is None and not downgraded.corrected
    assert downgraded.severity is Severity.CONVENTION
    assert plain == untouched
    assert accepted.corrected


def test_adjacent_fixes_are_both_applied():
    source = "abcdef"
    plan = plan_corrections([_offense("A/B", Fix(0, 2, "X")), _offense("A/C", Fix(2, 4, "Y"))])

    assert plan.corrected == 2
    assert apply_corrections(source, plan) == "XYef"


def test_insertions_at_same_position_conflict():
    plan = plan_corrections([_offense("A/B", Fix(3, 3, "1")), _offense("A/C", Fix(3, 3, "2"))])

    assert plan.fixes == (Fix(3, 3, "1"),)


def test_apply_corrections_leaves_unfixed_text(corrected):
    source = """class Foo<Formula
  desc "foo"
  url 'http://example.com/foo-1.0.tgz'
  depends_on :automake
  FileUtils.rm_rf "build"
end
"""

    assert corrected(source) == """class Foo < Formula
  desc "foo"
  url 'http://example.com/foo-1.0.tgz'
  depends_on "automake"
  rm_rf "build"
end
"""


def test_fixes_converge(corrected, offenses_for):
    source = """class Foo < Formula
  url 'http://example.com/foo-1.0.tgz'
  depends_on :libtool
  depends_on "bar" if build.with? "bar"
  fails_with :llvm do
    build 2335
  end
  def post_install
    return unless build.with? "bar"
  end
end
"""
    fixed = corrected(source)
    remaining = {offense.rule for offense in offenses_for(fixed)}

    assert "fails_with" not in fixed
    assert not remaining & {
        "Lines/DeprecatedDependency",
        "Miscellaneous/ConditionalDependency",
        "Miscellaneous/LlvmFailure",
        "OptionDeclarations/UnlessQuery",
    }
