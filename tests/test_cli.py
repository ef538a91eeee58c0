import json

from formula_audit import cli

DIRTY = """class Foo<Formula
  desc "foo"
  url 'http://example.com/foo-1.0.tgz'
  depends_on :automake
end
"""

CLEAN = """class Foo < Formula
  desc "foo"
  url 'http://example.com/foo-1.0.tgz'
  depends_on "automake" => :build
end
"""


def test_cli_generates_json_report(tmp_path, capsys):
    formula = tmp_path / "Formula" / "foo.rb"
    formula.parent.mkdir()
    formula.write_text(DIRTY, encoding="utf-8")
    output_path = tmp_path / "audit.json"

    exit_code = cli.main([str(tmp_path / "Formula"), "--out", str(output_path)])

    captured = capsys.readouterr()
    assert "Audit Summary" in captured.out
    assert "foo.rb:4:3: C: Lines/DeprecatedDependency" in captured.out
    assert exit_code == 1
    data = json.loads(output_path.read_text(encoding="utf-8"))
    assert data["summary"]["convention"] == 2
    assert data["passed"] is False
    rules = [offense["rule"] for offense in data["files"][0]["offenses"]]
    assert rules == ["Lines/DeprecatedDependency", "ClassInheritance/Spacing"]


def test_cli_passes_on_clean_formula(tmp_path, capsys):
    formula = tmp_path / "foo.rb"
    formula.write_text(CLEAN, encoding="utf-8")

    exit_code = cli.main([str(formula), "--format", "json"])

    data = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert data["passed"] is True
    assert data["files"][0]["offenses"] == []


def test_cli_only_runs_selected_family(tmp_path, capsys):
    formula = tmp_path / "foo.rb"
    formula.write_text(DIRTY, encoding="utf-8")

    cli.main([str(formula), "--only", "ClassInheritance", "--format", "json"])

    data = json.loads(capsys.readouterr().out)
    assert [offense["rule"] for offense in data["files"][0]["offenses"]] == ["ClassInheritance/Spacing"]


def test_cli_autocorrect_rewrites_file(tmp_path, capsys):
    formula = tmp_path / "foo.rb"
    formula.write_text(DIRTY, encoding="utf-8")

    exit_code = cli.main([str(formula), "--autocorrect"])

    captured = capsys.readouterr()
    assert "[Corrected]" in captured.out
    assert exit_code == 1
    assert formula.read_text(encoding="utf-8") == DIRTY.replace("Foo<Formula", "Foo < Formula").replace(
        ":automake", '"automake"'
    )
    assert cli.main([str(formula)]) == 0


def test_cli_reports_bad_config(tmp_path, capsys):
    formula = tmp_path / "foo.rb"
    formula.write_text(CLEAN, encoding="utf-8")
    config = tmp_path / "bad.yaml"
    config.write_text("exemptions: [unclosed\n", encoding="utf-8")

    exit_code = cli.main([str(formula), "--config", str(config)])

    assert exit_code == 2
    assert "Invalid YAML" in capsys.readouterr().err
