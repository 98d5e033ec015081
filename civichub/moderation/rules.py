"""Automated moderation rules.

Rules are admin-defined classifiers.  Matching is advisory: a match is
reported to reviewers and logged, but never changes the state of content.
Only ``keyword`` rules are evaluated; the other rule types are stored for
reviewers and ignored by the matcher.
"""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml

from civichub.errors import NotFound, ValidationError
from civichub.moderation.models import (
    ModerationRule,
    RuleAction,
    RuleMatch,
    RuleType,
    parse_enum,
    utc_now,
)
from civichub.repository import Repository


def evaluate(content: str, rules: Iterable[ModerationRule]) -> list[RuleMatch]:
    """Return the enabled keyword rules found in *content*.

    Matching is a case-insensitive substring test.  Results are ordered by
    rule priority, highest first; equal priorities keep their input order.
    """
    haystack = (content or "").lower()
    matched = [
        rule
        for rule in rules
        if rule.enabled
        and rule.type == RuleType.keyword
        and rule.pattern
        and rule.pattern.lower() in haystack
    ]
    matched.sort(key=lambda r: r.priority, reverse=True)
    return [
        RuleMatch(rule_id=r.id, rule_name=r.name, action=r.action, priority=r.priority)
        for r in matched
    ]


class RuleBook:
    """CRUD for moderation rules."""

    _EDITABLE = ("name", "type", "pattern", "action", "enabled", "priority")

    def __init__(self, repository: Repository) -> None:
        self._repo = repository

    def create_rule(
        self,
        name: str,
        pattern: str,
        type: Any = RuleType.keyword,
        action: Any = RuleAction.flag,
        enabled: bool = True,
        priority: int = 0,
    ) -> ModerationRule:
        if not name or not name.strip():
            raise ValidationError("Rule name is required")
        if not pattern or not pattern.strip():
            raise ValidationError("Rule pattern is required")
        rule = ModerationRule(
            id=f"rule_{uuid.uuid4().hex[:12]}",
            name=name.strip(),
            type=parse_enum(RuleType, type, "rule type"),
            pattern=pattern,
            action=parse_enum(RuleAction, action, "rule action"),
            enabled=enabled,
            priority=int(priority),
        )
        return self._repo.save_rule(rule)

    def get_rule(self, rule_id: str) -> ModerationRule:
        rule = self._repo.get_rule(rule_id)
        if rule is None:
            raise NotFound("Rule not found")
        return rule

    def list_rules(self, enabled_only: bool = False) -> list[ModerationRule]:
        """Return rules by priority, highest first."""
        rules = self._repo.list_rules()
        if enabled_only:
            rules = [r for r in rules if r.enabled]
        return sorted(rules, key=lambda r: r.priority, reverse=True)

    def update_rule(self, rule_id: str, **changes: Any) -> ModerationRule:
        """Update editable fields; unknown keys and ``None`` values are ignored."""
        rule = self.get_rule(rule_id)
        for key, value in changes.items():
            if key not in self._EDITABLE or value is None:
                continue
            if key == "type":
                value = parse_enum(RuleType, value, "rule type")
            elif key == "action":
                value = parse_enum(RuleAction, value, "rule action")
            elif key == "priority":
                value = int(value)
            elif key in ("name", "pattern") and not str(value).strip():
                raise ValidationError(f"Rule {key} cannot be empty")
            setattr(rule, key, value)
        rule.updated_at = utc_now()
        return self._repo.save_rule(rule)

    def toggle_rule(self, rule_id: str, enabled: bool) -> ModerationRule:
        return self.update_rule(rule_id, enabled=enabled)

    def delete_rule(self, rule_id: str) -> None:
        if not self._repo.delete_rule(rule_id):
            raise NotFound("Rule not found")

    def load_rules(self, path: str | Path) -> list[ModerationRule]:
        """Create every rule listed under ``rules:`` in a YAML file."""
        with open(path) as f:
            data: Optional[dict] = yaml.safe_load(f)
        if not isinstance(data, dict) or not isinstance(data.get("rules"), list):
            raise ValidationError(f"{path}: expected a top-level 'rules' list")

        created = []
        for rule_data in data["rules"]:
            created.append(
                self.create_rule(
                    name=rule_data.get("name", ""),
                    pattern=rule_data.get("pattern", ""),
                    type=rule_data.get("type", "keyword"),
                    action=rule_data.get("action", "flag"),
                    enabled=rule_data.get("enabled", True),
                    priority=rule_data.get("priority", 0),
                )
            )
        return created
