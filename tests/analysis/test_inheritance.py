"""Tests for ruleset inheritance resolution and validation."""

from __future__ import annotations

import pytest

from fieldrules.analysis.inheritance import (
    find_rule_set,
    find_rule_set_index,
    get_child_rule_sets,
    get_default_rules,
    get_rule_set_inheritance_chain,
    get_rule_set_rules,
    has_child_rule_sets,
    resolve_rule_set_rules,
    validate_rule_set_inheritance,
)
from fieldrules.domain.models import RuleSet, Template
from fieldrules.errors import InheritanceCycleError
from tests.conftest import dom, make_rule

BASE_RULE = make_rule([dom("a")], [dom("b")])
DEV_RULE = make_rule(None, [dom("debug", "set_to_value", "true")])
LOCAL_RULE = make_rule(None, [dom("local")])


def _template(*rule_sets: RuleSet) -> Template:
    return Template(name="T", rule_sets=list(rule_sets))


@pytest.fixture
def chain_template() -> Template:
    return _template(
        RuleSet(name="Base", rules=[BASE_RULE]),
        RuleSet(name="Development", extends="Base", rules=[DEV_RULE]),
        RuleSet(name="Local", extends="Development", rules=[LOCAL_RULE]),
    )


class TestResolveRuleSetRules:
    def test_parent_rules_first(self, chain_template: Template) -> None:
        assert resolve_rule_set_rules(chain_template, "Development") == [BASE_RULE, DEV_RULE]

    def test_deep_chain_by_index(self, chain_template: Template) -> None:
        assert resolve_rule_set_rules(chain_template, 2) == [BASE_RULE, DEV_RULE, LOCAL_RULE]

    def test_unknown_ruleset_is_empty(self, chain_template: Template) -> None:
        assert resolve_rule_set_rules(chain_template, "Nope") == []
        assert resolve_rule_set_rules(chain_template, 7) == []
        assert resolve_rule_set_rules(chain_template, -1) == []

    def test_missing_parent_degrades(self) -> None:
        template = _template(RuleSet(name="Orphan", extends="Ghost", rules=[DEV_RULE]))
        assert resolve_rule_set_rules(template, "Orphan") == [DEV_RULE]

    def test_self_extension_raises(self) -> None:
        template = _template(RuleSet(name="Loop", extends="Loop", rules=[DEV_RULE]))
        with pytest.raises(InheritanceCycleError, match="Circular inheritance detected in ruleset: Loop"):
            resolve_rule_set_rules(template, "Loop")

    def test_cycle_raises_with_chain(self) -> None:
        template = _template(
            RuleSet(name="A", extends="B"),
            RuleSet(name="B", extends="A"),
        )
        with pytest.raises(InheritanceCycleError) as exc_info:
            resolve_rule_set_rules(template, "A")
        assert exc_info.value.chain == ["A", "B", "A"]
        assert isinstance(exc_info.value, ValueError)


class TestRuleSetRuleHelpers:
    def test_default_rules(self, chain_template: Template) -> None:
        assert get_default_rules(chain_template) == [BASE_RULE]
        assert get_default_rules(_template()) == []

    def test_get_rule_set_rules(self, chain_template: Template) -> None:
        assert get_rule_set_rules(chain_template, 1) == [DEV_RULE]
        assert get_rule_set_rules(chain_template, 1, resolve_inheritance=True) == [BASE_RULE, DEV_RULE]

    def test_find(self, chain_template: Template) -> None:
        found = find_rule_set(chain_template, "Local")
        assert found is not None
        assert found.extends == "Development"
        assert find_rule_set(chain_template, "local") is None
        assert find_rule_set_index(chain_template, "Development") == 1
        assert find_rule_set_index(chain_template, "Nope") == -1

    def test_children(self, chain_template: Template) -> None:
        assert [rs.name for rs in get_child_rule_sets(chain_template, "Base")] == ["Development"]
        assert has_child_rule_sets(chain_template, "Development") is True
        assert has_child_rule_sets(chain_template, "Local") is False


class TestInheritanceChain:
    def test_parent_first(self, chain_template: Template) -> None:
        assert get_rule_set_inheritance_chain(chain_template, "Local") == ["Base", "Development", "Local"]

    def test_cycle_marker(self) -> None:
        template = _template(RuleSet(name="A", extends="B"), RuleSet(name="B", extends="A"))
        assert get_rule_set_inheritance_chain(template, "A") == ["A (circular!)", "B", "A"]

    def test_unknown(self, chain_template: Template) -> None:
        assert get_rule_set_inheritance_chain(chain_template, "Nope") == []


class TestValidateRuleSetInheritance:
    def test_valid(self, chain_template: Template) -> None:
        result = validate_rule_set_inheritance(chain_template)
        assert result.is_valid is True
        assert result.errors == []

    def test_reports_every_problem(self) -> None:
        template = _template(
            RuleSet(name="Orphan", extends="Ghost"),
            RuleSet(name="Self", extends="Self"),
            RuleSet(name="A", extends="B"),
            RuleSet(name="B", extends="A"),
        )
        result = validate_rule_set_inheritance(template)
        assert result.is_valid is False
        assert result.errors == [
            'RuleSet "Orphan" extends non-existent ruleset "Ghost"',
            'RuleSet "Self" cannot extend itself',
            "Circular inheritance detected: A → B → A",
            "Circular inheritance detected: B → A → B",
        ]

    def test_duplicate_cycle_reports_collapse(self) -> None:
        template = _template(
            RuleSet(name="A", extends="B"),
            RuleSet(name="B", extends="A"),
            RuleSet(name="C", extends="A"),
        )
        errors = validate_rule_set_inheritance(template).errors
        assert errors.count("Circular inheritance detected: A → B → A") == 1

    def test_does_not_raise_where_resolution_would(self) -> None:
        template = _template(RuleSet(name="Loop", extends="Loop"))
        assert validate_rule_set_inheritance(template).is_valid is False
