import pytest

from storyguard.compliance import RULES, Category, RuleTableError, Severity, build_rules, load_rules


def _doc(pattern="治る", severity="HIGH", category="REGULATED_EFFICACY"):
    return {
        "version": "test",
        "categories": [
            {
                "category": category,
                "rules": [{"pattern": pattern, "severity": severity, "suggestion": "変更してください"}],
            }
        ],
    }


def test_packaged_table_loads_in_declaration_order():
    categories = [r.category for r in RULES]
    assert len(RULES) == 31
    assert categories.count(Category.REGULATED_EFFICACY) == 18
    assert categories.count(Category.MISLEADING_CLAIM) == 13
    # 薬機法ルールがすべて景表法ルールより前
    first_b = categories.index(Category.MISLEADING_CLAIM)
    assert all(c == Category.MISLEADING_CLAIM for c in categories[first_b:])


def test_every_rule_has_suggestion_and_known_severity():
    for rule in RULES:
        assert rule.suggestion
        assert rule.severity in (Severity.HIGH, Severity.MEDIUM)


def test_rules_are_immutable():
    with pytest.raises(AttributeError):
        RULES[0].suggestion = "x"


def test_statute_labels():
    assert Category.REGULATED_EFFICACY.statute == "薬機法"
    assert Category.MISLEADING_CLAIM.statute == "景表法"


def test_build_rules_compiles_valid_document():
    rules = build_rules(_doc())
    assert len(rules) == 1
    assert rules[0].category is Category.REGULATED_EFFICACY
    assert rules[0].severity is Severity.HIGH
    assert rules[0].pattern.search("これで治る")


def test_build_rules_rejects_unknown_severity():
    with pytest.raises(RuleTableError, match="schema"):
        build_rules(_doc(severity="LOW"))


def test_build_rules_rejects_unknown_category():
    with pytest.raises(RuleTableError, match="schema"):
        build_rules(_doc(category="ADVERTISING"))


def test_build_rules_rejects_broken_regex():
    with pytest.raises(RuleTableError, match="invalid pattern"):
        build_rules(_doc(pattern="治(る"))


def test_build_rules_rejects_pattern_matching_empty_text():
    with pytest.raises(RuleTableError, match="empty text"):
        build_rules(_doc(pattern="(?:絶対)?"))


def test_load_rules_fails_loudly_on_bad_file(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(RuleTableError):
        load_rules(path)


def test_load_rules_missing_file(tmp_path):
    with pytest.raises(RuleTableError, match="cannot read"):
        load_rules(tmp_path / "missing.yaml")
