from concurrent.futures import ThreadPoolExecutor

import pytest

from formula_audit.engine import Auditor, audit_source
from formula_audit.exceptions import CatalogueError
from formula_audit.rules import FormulaRule, Ordering
from formula_audit.rules.catalogue import RuleCatalogue, default_catalogue
from formula_audit.syntax import NodeKind, parse_source

CLEAN = """class Foo < Formula
  desc "Foo tool"
  homepage "https://example.com"
  url "https://example.com/foo-1.0.tgz"
  sha256 "fe0679b932dd43a87fd415b609a7fbac7a069d117642ae8ebaac46ae1fb9f0b3"

  depends_on "pkg-config" => :build

  def install
    system "./configure", "--prefix=#{prefix}"
    system "make", "install"
  end

  test do
    assert_predicate bin/"foo", :exist?
  end
end
"""

MIXED = """class Foo<Formula
  # PLEASE REMOVE
  url 'http://example.com/foo-1.0.tgz'
  depends_on :automake
  depends_on :autoconf
  skip_clean :all
end
"""


class ExplodingRule(FormulaRule):
    id = "Broken/Explodes"
    family = "Broken"
    target_kinds = frozenset({NodeKind.METHOD_CALL})

    def detect(self, node, context):
        if node.line > 3:
            raise RuntimeError("boom")
        yield self.at(node, "seen")


def test_clean_formula_has_no_offenses(auditor):
    assert auditor.audit_source(CLEAN).offenses == []


def test_families_are_reported_in_catalogue_order(auditor):
    offenses = auditor.audit_source(MIXED).offenses
    families = [offense.rule.split("/")[0] for offense in offenses]

    assert families == ["Lines", "Lines", "ClassInheritance", "Comments", "Miscellaneous"]
    assert [offense.line for offense in offenses[:2]] == [5, 4]


def test_analysis_is_idempotent(auditor):
    tree = parse_source(MIXED)

    assert auditor.analyze(tree) == auditor.analyze(tree)


def test_parallel_audits_match_serial_ones(auditor):
    sources = [MIXED, CLEAN, MIXED.replace(":automake", ":libtool")] * 4
    serial = [auditor.audit_source(source).to_dict() for source in sources]

    with ThreadPoolExecutor(max_workers=4) as pool:
        parallel = [report.to_dict() for report in pool.map(auditor.audit_source, sources)]

    assert parallel == serial


def test_failing_rule_is_isolated(caplog):
    catalogue = RuleCatalogue(default_catalogue().rules + (ExplodingRule(),))
    auditor = Auditor(catalogue)

    with caplog.at_level("ERROR", logger="formula_audit.engine"):
        report = auditor.audit_source(MIXED, "Formula/foo.rb")

    assert report.failed_rules == ["Broken/Explodes"]
    assert not [offense for offense in report.offenses if offense.rule == "Broken/Explodes"]
    assert any(offense.rule == "Lines/DeprecatedDependency" for offense in report.offenses)
    assert "Broken/Explodes" in caplog.text


def test_family_selection():
    offenses = audit_source(MIXED, families=["Comments"])

    assert [offense.rule for offense in offenses] == ["Comments/TemplateComment"]


def test_unknown_family_is_rejected():
    with pytest.raises(CatalogueError):
        default_catalogue().select(["Nope"])


def test_duplicate_rule_ids_are_rejected():
    with pytest.raises(CatalogueError):
        RuleCatalogue([ExplodingRule(), ExplodingRule()])


def test_family_rules_must_agree_on_ordering():
    class Descending(ExplodingRule):
        id = "Broken/Descending"
        ordering = Ordering.DESCENDING

    with pytest.raises(CatalogueError):
        RuleCatalogue([ExplodingRule(), Descending()])


def test_catalogue_indexes_rules_by_kind():
    catalogue = default_catalogue()

    assert catalogue.families() == (
        "Lines",
        "ClassInheritance",
        "Comments",
        "AssertStatements",
        "OptionDeclarations",
        "Miscellaneous",
    )
    assert all(NodeKind.COMMENT in rule.target_kinds for rule in catalogue.rules_for(NodeKind.COMMENT))
    assert catalogue.get("Lines/DeprecatedDependency") is catalogue.rules[0]
    assert catalogue.get("Missing/Rule") is None


def test_source_with_syntax_errors_is_still_audited(auditor):
    report = auditor.audit_source("class Foo < Formula\n  def (\nend\n")

    assert report.failed_rules == []
