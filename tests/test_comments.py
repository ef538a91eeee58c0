import pytest


def test_commented_cmake_call(offenses_for):
    source = """class Foo < Formula
  desc "foo"
  url 'http://example.com/foo-1.0.tgz'
  # system "cmake", ".", *std_cmake_args
end
"""
    offenses = offenses_for(source, "Comments")

    assert len(offenses) == 1
    assert offenses[0].rule == "Comments/TemplateComment"
    assert offenses[0].message == "Please remove default template comments"
    assert (offenses[0].line, offenses[0].column) == (4, 2)


@pytest.mark.parametrize(
    "comment",
    [
        "# PLEASE REMOVE",
        "# Documentation: https://docs.brew.sh/Formula-Cookbook",
        "# if this fails, try separate make/make install steps",
    ],
)
def test_default_template_comments(offenses_for, comment):
    source = f"""class Foo < Formula
  {comment}
  desc "foo"
  url 'http://example.com/foo-1.0.tgz'
end
"""
    offenses = offenses_for(source, "Comments/TemplateComment")

    assert len(offenses) == 1
    assert (offenses[0].line, offenses[0].column) == (2, 2)


def test_commented_out_depends_on(offenses_for):
    source = """class Foo < Formula
  desc "foo"
  url 'http://example.com/foo-1.0.tgz'
  # depends_on "foo"
end
"""
    offenses = offenses_for(source, "Comments")

    assert len(offenses) == 1
    assert offenses[0].rule == "Comments/CommentedDependency"
    assert offenses[0].message == 'Commented-out dependency "foo"'
    assert (offenses[0].line, offenses[0].column) == (4, 2)


def test_ordinary_comments_are_clean(offenses_for):
    source = """class Foo < Formula
  # Upstream ships a broken configure script.
  desc "foo"
end
"""

    assert offenses_for(source, "Comments") == []
