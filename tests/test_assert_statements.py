def _formula(statement):
    return f"""class Foo < Formula
  desc "foo"
  url 'http://example.com/foo-1.0.tgz'
  {statement}
end
"""


def test_assert_include(offenses_for):
    offenses = offenses_for(_formula('assert File.read("inbox").include?("Sample message 1")'), "AssertStatements")

    assert len(offenses) == 1
    assert offenses[0].rule == "AssertStatements/AssertInclude"
    assert offenses[0].message == "Use `assert_match` instead of `assert ...include?`"
    assert (offenses[0].line, offenses[0].column) == (4, 9)
    assert offenses[0].fix is None


def test_assert_exist_without_negation(offenses_for):
    offenses = offenses_for(_formula('assert File.exist? "default.ini"'), "AssertStatements")

    assert len(offenses) == 1
    assert offenses[0].message == (
        'Use `assert_predicate <path_to_file>, :exist?` instead of `assert File.exist? "default.ini"`'
    )
    assert (offenses[0].line, offenses[0].column) == (4, 9)


def test_assert_exist_with_negation(offenses_for):
    offenses = offenses_for(_formula('assert !File.exist?("default.ini")'), "AssertStatements")

    assert len(offenses) == 1
    assert offenses[0].message == (
        'Use `refute_predicate <path_to_file>, :exist?` instead of `assert !File.exist?("default.ini")`'
    )
    assert (offenses[0].line, offenses[0].column) == (4, 9)


def test_assert_executable_without_negation(offenses_for):
    offenses = offenses_for(_formula("assert File.executable? f"), "AssertStatements")

    assert len(offenses) == 1
    assert offenses[0].message == (
        "Use `assert_predicate <path_to_file>, :executable?` instead of `assert File.executable? f`"
    )
    assert (offenses[0].line, offenses[0].column) == (4, 9)


def test_file_class_predicates_are_not_rewritten(offenses_for):
    offenses = offenses_for(_formula('assert File.exist? "default.ini"'), "AssertStatements")

    assert offenses[0].fix is None


def test_path_predicate_fix(corrected, offenses_for):
    source = _formula('assert testpath.exist?')
    fixed = corrected(source)

    assert '  assert_predicate testpath, :exist?\n' in fixed
    assert offenses_for(fixed, "AssertStatements") == []


def test_assert_predicate_is_clean(offenses_for):
    source = _formula('assert_predicate testpath/"output.txt", :exist?')

    assert offenses_for(source, "AssertStatements") == []
