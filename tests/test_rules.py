"""Tests for moderation rules."""

import pytest
import yaml

from civichub.errors import NotFound, ValidationError
from civichub.moderation.models import ModerationRule, RuleAction, RuleType
from civichub.moderation.rules import evaluate


def _rule(rule_id, pattern, priority=0, enabled=True, type=RuleType.keyword):
    return ModerationRule(id=rule_id, name=rule_id, type=type, pattern=pattern, enabled=enabled, priority=priority)


def test_evaluate_case_insensitive_substring():
    matches = evaluate("Buy CHEAP pills", [_rule("a", "cheap"), _rule("b", "expensive")])
    assert [m.rule_id for m in matches] == ["a"]


def test_evaluate_orders_by_priority_stable():
    rules = [_rule("low", "x", 1), _rule("high1", "x", 5), _rule("high2", "x", 5)]
    assert [m.rule_id for m in evaluate("x", rules)] == ["high1", "high2", "low"]


def test_evaluate_skips_disabled_and_non_keyword_rules():
    rules = [
        _rule("off", "spam", enabled=False),
        _rule("regex", "sp.m", type=RuleType.pattern),
        _rule("empty", ""),
    ]
    assert evaluate("spam spam", rules) == []


def test_evaluate_empty_content():
    assert evaluate("", [_rule("a", "x")]) == []


def test_create_and_list_by_priority(platform):
    low = platform.rules.create_rule("Low", "a", priority=1)
    high = platform.rules.create_rule("High", "b", action="auto-reject", priority=10)

    assert [r.id for r in platform.rules.list_rules()] == [high.id, low.id]
    assert high.action == RuleAction.auto_reject
    assert high.id.startswith("rule_")


def test_create_rule_validation(platform):
    with pytest.raises(ValidationError):
        platform.rules.create_rule("", "x")
    with pytest.raises(ValidationError):
        platform.rules.create_rule("Name", "  ")
    with pytest.raises(ValidationError):
        platform.rules.create_rule("Name", "x", type="regexp")


def test_update_toggle_delete(platform):
    rule = platform.rules.create_rule("Spam", "spam")

    updated = platform.rules.update_rule(rule.id, pattern="viagra", priority="3", unknown="ignored")
    assert (updated.pattern, updated.priority) == ("viagra", 3)

    toggled = platform.rules.toggle_rule(rule.id, False)
    assert toggled.enabled is False
    assert platform.rules.list_rules(enabled_only=True) == []

    platform.rules.delete_rule(rule.id)
    with pytest.raises(NotFound):
        platform.rules.get_rule(rule.id)
    with pytest.raises(NotFound):
        platform.rules.delete_rule(rule.id)


def test_load_rules_from_yaml(platform, tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text(
        yaml.dump(
            {
                "rules": [
                    {"name": "Spam", "pattern": "buy now", "priority": 2},
                    {"name": "Threats", "pattern": "hurt", "action": "notify", "priority": 9},
                ]
            }
        )
    )

    created = platform.rules.load_rules(path)

    assert len(created) == 2
    assert [r.name for r in platform.rules.list_rules()] == ["Threats", "Spam"]


def test_load_rules_rejects_bad_file(platform, tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("just: a mapping\n")
    with pytest.raises(ValidationError):
        platform.rules.load_rules(path)
