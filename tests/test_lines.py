import pytest

from formula_audit.severity import Severity

SOURCE = """class Foo < Formula
  url 'http://example.com/foo-1.0.tgz'
  depends_on :{dependency}
end
"""


@pytest.mark.parametrize(
    "dependency, message",
    [
        ("automake", ':automake is deprecated. Usage should be "automake"'),
        ("autoconf", ':autoconf is deprecated. Usage should be "autoconf"'),
        ("libtool", ':libtool is deprecated. Usage should be "libtool"'),
        ("apr", ':apr is deprecated. Usage should be "apr-util"'),
        ("tex", ":tex is deprecated"),
    ],
)
def test_deprecated_dependency_symbols(offenses_for, dependency, message):
    offenses = offenses_for(SOURCE.format(dependency=dependency), "Lines")

    assert len(offenses) == 1
    offense = offenses[0]
    assert offense.rule == "Lines/DeprecatedDependency"
    assert offense.message == message
    assert offense.severity is Severity.CONVENTION
    assert (offense.line, offense.column) == (3, 2)
    assert offense.source_line == f"  depends_on :{dependency}"


def test_string_dependencies_are_fine(offenses_for):
    source = SOURCE.replace(":{dependency}", '"automake"')

    assert offenses_for(source, "Lines") == []


def test_lines_offenses_are_reported_last_line_first(offenses_for):
    source = """class Foo < Formula
  url 'http://example.com/foo-1.0.tgz'
  depends_on :automake
  depends_on :libtool => :build
end
"""
    offenses = offenses_for(source, "Lines")

    assert [offense.line for offense in offenses] == [4, 3]
    assert offenses[0].message == ':libtool is deprecated. Usage should be "libtool"'


def test_deprecated_dependency_fix_quotes_replacement(corrected):
    source = SOURCE.format(dependency="apr")

    assert '  depends_on "apr-util"\n' in corrected(source)


def test_dependency_without_replacement_has_no_fix(offenses_for):
    offenses = offenses_for(SOURCE.format(dependency="tex"), "Lines")

    assert offenses[0].fix is None
