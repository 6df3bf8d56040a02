"""
Tests: Lint rule engines and the rules config store.

Run with:
    pytest reqlint/tests/test_rules.py -v
"""

import json

import pytest

from reqlint.models.enums import RuleName, Severity
from reqlint.rules.annotation_rules import AnnotationRules
from reqlint.rules.reference_rules import ReferenceRules
from reqlint.rules.rules_config import LintRulesConfig, RulesConfigStore
from reqlint.rules.uniqueness_rules import UniquenessRules
from reqlint.services.scanning_service import ScanningService


def _docs(files: dict[str, str]):
    return [ScanningService.scan_text(path, text) for path, text in files.items()]


def _rules(violations) -> list[str]:
    return [v.rule.value for v in violations]


class TestAnnotationRules:
    def test_clean_annotation_passes(self):
        ar = AnnotationRules(LintRulesConfig())
        docs = _docs({"a.md": '{% include requirement/MUST id="python-naming" %} name things well.\n'})
        assert ar.check_annotation_rules(docs) == []

    def test_lowercase_keyword_suggests_canonical(self):
        ar = AnnotationRules(LintRulesConfig())
        docs = _docs({"a.md": '{% include requirement/should id="python-naming" %} text\n'})
        violations = ar.check_annotation_rules(docs)
        assert _rules(violations) == ["invalid_keyword"]
        assert "did you mean 'SHOULD'" in violations[0].message
        assert violations[0].severity == Severity.ERROR

    def test_unknown_keyword_lists_valid_ones(self):
        ar = AnnotationRules(LintRulesConfig())
        docs = _docs({"a.md": '{% include requirement/MUSTN id="python-naming" %} text\n'})
        violations = ar.check_annotation_rules(docs)
        assert "MUSTNOT" in violations[0].message

    def test_keyword_subset_from_config(self):
        ar = AnnotationRules(LintRulesConfig(keywords=["MUST", "SHOULD"]))
        docs = _docs({"a.md": '{% include requirement/MAY id="python-naming" %} text\n'})
        assert _rules(ar.check_annotation_rules(docs)) == ["invalid_keyword"]

    def test_missing_id(self):
        ar = AnnotationRules(LintRulesConfig())
        docs = _docs({"a.md": "{% include requirement/MUST %} text\n"})
        assert _rules(ar.check_annotation_rules(docs)) == ["missing_id"]

    def test_malformed_id(self):
        ar = AnnotationRules(LintRulesConfig())
        docs = _docs({"a.md": '{% include requirement/MUST id="Python_Naming" %} text\n'})
        violations = ar.check_annotation_rules(docs)
        assert _rules(violations) == ["malformed_id"]
        assert violations[0].requirement_id == "Python_Naming"

    def test_unanchored_pattern_must_match_whole_id(self):
        ar = AnnotationRules(LintRulesConfig(id_pattern=r"[a-z]+"))
        docs = _docs({"a.md": '{% include requirement/MUST id="naming!!" %} text\n'})
        assert _rules(ar.check_annotation_rules(docs)) == ["malformed_id"]

    def test_id_too_long(self):
        ar = AnnotationRules(LintRulesConfig(max_id_length=10))
        docs = _docs({"a.md": '{% include requirement/MUST id="python-client-naming" %} text\n'})
        violations = ar.check_annotation_rules(docs)
        assert _rules(violations) == ["malformed_id"]
        assert "max: 10" in violations[0].message

    def test_prefix_mismatch(self):
        config = LintRulesConfig(id_prefixes={"python/*": "python-"})
        ar = AnnotationRules(config)
        docs = _docs({
            "python/design.md": '{% include requirement/MUST id="golang-naming" %} text\n',
            "golang/design.md": '{% include requirement/MUST id="golang-naming-2" %} text\n',
        })
        violations = ar.check_annotation_rules(docs)
        assert _rules(violations) == ["id_prefix_mismatch"]
        assert violations[0].document == "python/design.md"
        assert violations[0].severity == Severity.WARNING

    def test_unknown_attribute(self):
        ar = AnnotationRules(LintRulesConfig())
        docs = _docs({"a.md": '{% include requirement/MUST id="x-y" level=2 %} text\n'})
        assert _rules(ar.check_annotation_rules(docs)) == ["unknown_attribute"]

    def test_empty_requirement(self):
        ar = AnnotationRules(LintRulesConfig())
        docs = _docs({"a.md": '{% include requirement/MUST id="x-y" %}\n\nNext paragraph.\n'})
        assert _rules(ar.check_annotation_rules(docs)) == ["empty_requirement"]

    def test_disabled_rule_and_severity_override(self):
        config = LintRulesConfig(
            disabled_rules=["unknown_attribute"],
            severity={"empty_requirement": "error"},
        )
        ar = AnnotationRules(config)
        docs = _docs({"a.md": '{% include requirement/MUST id="x-y" extra=1 %}\n'})
        violations = ar.check_annotation_rules(docs)
        assert _rules(violations) == ["empty_requirement"]
        assert violations[0].severity == Severity.ERROR


class TestUniquenessRules:
    def test_unique_ids_pass(self):
        ur = UniquenessRules(LintRulesConfig())
        docs = _docs({
            "a.md": '{% include requirement/MUST id="one" %} x\n',
            "b.md": '{% include requirement/MUST id="two" %} y\n',
        })
        assert ur.check_uniqueness_rules(docs) == []

    def test_duplicate_across_documents_points_at_first(self):
        ur = UniquenessRules(LintRulesConfig())
        docs = _docs({
            "a.md": 'Intro\n{% include requirement/MUST id="shared-id" %} x\n',
            "b.md": '{% include requirement/SHOULD id="shared-id" %} y\n',
        })
        violations = ur.check_uniqueness_rules(docs)
        assert _rules(violations) == ["duplicate_id"]
        assert violations[0].document == "b.md"
        assert "first declared at a.md:2" in violations[0].message

    def test_every_repeat_is_reported(self):
        ur = UniquenessRules(LintRulesConfig())
        docs = _docs({
            "a.md": (
                '{% include requirement/MUST id="dup" %} x\n'
                '{% include requirement/MUST id="dup" %} y\n'
                '{% include requirement/MUST id="dup" %} z\n'
            ),
        })
        violations = ur.check_uniqueness_rules(docs)
        assert [v.line for v in violations] == [2, 3]

    def test_case_insensitive(self):
        ur = UniquenessRules(LintRulesConfig())
        docs = _docs({
            "a.md": '{% include requirement/MUST id="general-auth" %} x\n',
            "b.md": '{% include requirement/MUST id="General-Auth" %} y\n',
        })
        assert _rules(ur.check_uniqueness_rules(docs)) == ["duplicate_id"]

    def test_disabled(self):
        ur = UniquenessRules(LintRulesConfig(disabled_rules=["duplicate_id"]))
        docs = _docs({"a.md": '{% include requirement/MUST id="d" %} x\n{% include requirement/MUST id="d" %} y\n'})
        assert ur.check_uniqueness_rules(docs) == []


class TestReferenceRules:
    def _check(self, files, existing=None, config=None):
        known = set(existing if existing is not None else files)
        rr = ReferenceRules(config or LintRulesConfig(), known.__contains__)
        return rr.check_reference_rules(_docs(files))

    def test_same_document_requirement_anchor(self):
        violations = self._check({
            "a.md": '{% include requirement/MUST id="rule-one" %} x\n\nSee [above](#rule-one).\n',
        })
        assert violations == []

    def test_missing_anchor(self):
        violations = self._check({"a.md": "# Title\n\nSee [nothing](#nowhere).\n"})
        assert _rules(violations) == ["unknown_anchor"]
        assert violations[0].line == 3

    def test_anchor_declared_in_other_document(self):
        violations = self._check({
            "general/intro.md": "See [naming](#python-naming).\n",
            "python/design.md": '{% include requirement/MUST id="python-naming" %} x\n',
        })
        assert _rules(violations) == ["unknown_anchor"]
        assert "declared in python/design.md" in violations[0].message
        assert violations[0].requirement_id == "python-naming"

    def test_permalink_resolution(self):
        violations = self._check({
            "general/intro.md": "[naming]({{ site.baseurl }}/python_design.html#python-naming)\n",
            "python/design.md": (
                "---\npermalink: python_design.html\n---\n"
                '{% include requirement/MUST id="python-naming" %} x\n'
            ),
        })
        assert violations == []

    def test_relative_md_and_html_links(self):
        violations = self._check({
            "python/intro.md": "[a](design.md#naming) [b](design.html#naming) [c](../general/terms.md)\n",
            "python/design.md": "## Naming\n",
            "general/terms.md": "# Terms\n",
        })
        assert violations == []

    def test_unknown_page(self):
        violations = self._check({"a.md": "[gone](missing_page.html#x)\n"})
        assert _rules(violations) == ["unknown_page"]
        assert violations[0].severity == Severity.WARNING

    def test_unknown_page_can_be_switched_off(self):
        violations = self._check(
            {"a.md": "[gone](missing_page.html)\n"},
            config=LintRulesConfig(check_page_links=False),
        )
        assert violations == []

    def test_non_page_links_ignored(self):
        violations = self._check({"a.md": "[pic](images/diagram.svg) [dir](python/)\n"})
        assert violations == []

    def test_include_resolves_against_includes_dir(self):
        files = {"a.md": "{% include tables/env.md %}\n"}
        assert self._check(files, existing={"a.md", "_includes/tables/env.md"}) == []

        violations = self._check(files, existing={"a.md"})
        assert _rules(violations) == ["unresolved_include"]
        assert "_includes/tables/env.md" in violations[0].message

    def test_include_relative(self):
        files = {"python/a.md": "{% include_relative snippets/deps.md %}\n"}
        assert self._check(files, existing={"python/a.md", "python/snippets/deps.md"}) == []
        assert _rules(self._check(files, existing={"python/a.md"})) == ["unresolved_include"]

    def test_include_escaping_root_is_unresolved(self):
        files = {"a.md": "{% include_relative ../../etc/passwd %}\n"}
        assert _rules(self._check(files)) == ["unresolved_include"]

    def test_dynamic_include_skipped(self):
        files = {"a.md": "{% include {{ page.lang }}/deps.md %}\n"}
        assert self._check(files) == []

    def test_custom_includes_dir(self):
        files = {"a.md": "{% include refs.md %}\n"}
        config = LintRulesConfig(includes_dir="partials")
        assert self._check(files, existing={"a.md", "partials/refs.md"}, config=config) == []


class TestRulesConfigStore:
    def test_defaults_when_no_file(self, tmp_path):
        store = RulesConfigStore()
        config = store.load(root=tmp_path)
        assert config.keywords == ["MUST", "SHOULD", "MAY", "MUSTNOT", "SHOULDNOT"]
        assert config.severity_for(RuleName.DUPLICATE_ID) == Severity.ERROR

    def test_loads_root_config(self, tmp_path):
        (tmp_path / ".reqlint.json").write_text(json.dumps({
            "id_prefixes": {"python/**": "python-"},
            "severity": {"unknown_page": "error"},
        }))
        config = RulesConfigStore().load(root=tmp_path)
        assert config.id_prefixes == {"python/**": "python-"}
        assert config.severity_for(RuleName.UNKNOWN_PAGE) == Severity.ERROR

    def test_explicit_path_must_exist(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            RulesConfigStore().load(config_path=tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ValueError, match="Invalid JSON"):
            RulesConfigStore().load(config_path=path)

    def test_invalid_field(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"keywords": ["MUST", "SHALL"]}))
        with pytest.raises(ValueError, match="Invalid lint config"):
            RulesConfigStore().load(config_path=path)

    def test_invalid_pattern(self):
        with pytest.raises(ValueError):
            LintRulesConfig(id_pattern="([a-z")

    def test_cached(self, tmp_path):
        path = tmp_path / "c.json"
        path.write_text(json.dumps({"max_id_length": 20}))
        store = RulesConfigStore()
        first = store.load(config_path=path)
        path.write_text(json.dumps({"max_id_length": 30}))
        assert store.load(config_path=path) is first
        store.invalidate()
        assert store.load(config_path=path).max_id_length == 30
