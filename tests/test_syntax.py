import subprocess
import sys

from formula_audit.rules import FileIdentity
from formula_audit.syntax import NodeKind, SourceRange, SyntaxNode, parse_source

SOURCE = """# A comment
class Foo < Formula
  desc "Café tool"
  depends_on :automake
end
"""


def test_tree_keeps_comments_and_class_name():
    tree = parse_source(SOURCE)
    kinds = [node.kind for node in tree.root.walk()]

    assert tree.root.kind is NodeKind.PROGRAM
    assert NodeKind.COMMENT in kinds
    assert tree.class_name() == "Foo"
    assert not tree.has_error


def test_ranges_are_character_based():
    tree = parse_source(SOURCE)
    calls = [node for node in tree.root.walk() if node.kind is NodeKind.METHOD_CALL]
    depends_on = calls[-1]

    assert depends_on.text == "depends_on :automake"
    assert (depends_on.line, depends_on.column) == (4, 2)
    assert depends_on.start == SOURCE.index("depends_on")


def test_children_are_contained_in_parent():
    tree = parse_source(SOURCE)

    for node in tree.root.walk():
        for child in node.children:
            assert node.start <= child.start <= child.end <= node.end
            assert child.parent is node


def test_line_text():
    tree = parse_source(SOURCE)

    assert tree.line_text(4) == "  depends_on :automake"
    assert tree.line_text(99) == ""


def test_file_identity_from_tree():
    identity = FileIdentity.from_tree(parse_source(SOURCE), "Formula/foo.rb")

    assert identity == FileIdentity(path="Formula/foo.rb", class_name="Foo")


def test_syntax_errors_are_flagged():
    assert parse_source("class Foo < Formula\n  def (\nend\n").has_error


def test_package_imports_in_a_fresh_interpreter():
    completed = subprocess.run(
        [sys.executable, "-c", "import formula_audit.syntax, formula_audit.cli"],
        capture_output=True,
        text=True,
    )

    assert completed.returncode == 0, completed.stderr


def test_nodes_expose_grammar_field_names():
    node = SyntaxNode(type="identifier", kind=NodeKind.IDENTIFIER, range=SourceRange(1, 0, 1, 3, 0, 3), text="foo")

    assert node.field_name is None
    assert node.parent is None
    assert node.children == ()

    call = [item for item in parse_source(SOURCE).root.walk() if item.kind is NodeKind.METHOD_CALL][-1]
    method = call.child_by_field("method")
    assert method is not None
    assert (method.field_name, method.text) == ("method", "depends_on")
