import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from copd.rules import DEFAULT_RULES, RULEBOOK_ENV, RulebookError, deep_merge_dict, load_rules, rule


def test_defaults_without_rulebook(monkeypatch):
    monkeypatch.delenv(RULEBOOK_ENV, raising=False)
    rules = load_rules()
    assert rules == DEFAULT_RULES
    assert rules is not DEFAULT_RULES


def test_shipped_rulebook_matches_defaults():
    assert load_rules(ROOT / "copd_rules.yaml") == DEFAULT_RULES


def test_partial_override(tmp_path):
    p = tmp_path / "rules.yaml"
    p.write_text("severity:\n  gold1_ge: 70\n", encoding="utf-8")
    rules = load_rules(p)
    assert rules["severity"]["gold1_ge"] == 70
    assert rules["severity"]["gold2_ge"] == 50
    assert rules["risk"] == DEFAULT_RULES["risk"]


def test_env_override(tmp_path, monkeypatch):
    p = tmp_path / "rules.yaml"
    p.write_text("eosinophils:\n  strong_ge: 250\n", encoding="utf-8")
    monkeypatch.setenv(RULEBOOK_ENV, str(p))
    assert rule(load_rules(), "eosinophils", "strong_ge") == 250


def test_missing_file_falls_back(tmp_path):
    assert load_rules(tmp_path / "absent.yaml") == DEFAULT_RULES


def test_invalid_rulebook(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("severity: [1, 2\n", encoding="utf-8")
    with pytest.raises(RulebookError):
        load_rules(bad)

    listy = tmp_path / "list.yaml"
    listy.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(RulebookError):
        load_rules(listy)


def test_rule_fallback():
    assert rule(None, "risk", "cat_ge") == 10
    assert rule({}, "risk", "cat_ge") == 10
    assert rule({"risk": {"cat_ge": 12}}, "risk", "cat_ge") == 12


def test_deep_merge_does_not_mutate():
    base = {"a": {"b": 1, "c": 2}}
    out = deep_merge_dict(base, {"a": {"b": 5}})
    assert out == {"a": {"b": 5, "c": 2}}
    assert base == {"a": {"b": 1, "c": 2}}
