"""Rule description renderer — a deterministic sentence for a rule.

Used by the rule engine to explain each rule-driven field change, e.g.
``If 'server.host' is set, then 'database.connection' is required to be set.``
"""

from __future__ import annotations

from typing import TYPE_CHECKING, assert_never

from fieldrules.domain.types import RuleState

if TYPE_CHECKING:
    from fieldrules.domain.models import Rule, RuleDomain


def describe_target(target: RuleDomain) -> str:
    """Render one target clause."""
    neg = "not " if target.negate else ""
    value = target.value or ""
    state = target.state
    if state is RuleState.SET:
        return f"'{target.name}' is required to be {neg}set"
    if state is RuleState.SET_TO_VALUE:
        return f"'{target.name}' is required to be {neg}set to the value '{value}'"
    if state is RuleState.CONTAINS:
        return f"'{target.name}' must {neg}contain '{value}'"
    assert_never(state)


def describe_condition(condition: RuleDomain) -> str:
    """Render one condition clause."""
    neg = "not " if condition.negate else ""
    value = condition.value or ""
    state = condition.state
    if state is RuleState.SET:
        return f"'{condition.name}' is {neg}set"
    if state is RuleState.SET_TO_VALUE:
        return f"'{condition.name}' is {neg}set to the value '{value}'"
    if state is RuleState.CONTAINS:
        return f"'{condition.name}' {neg}contains '{value}'"
    assert_never(state)


def describe_rule(rule: Rule, specific_target: str | None = None) -> str:
    """Render *rule* as one sentence.

    Args:
        rule: The rule to describe.
        specific_target: Only describe targets with this field name.
    """
    targets = rule.targets
    if specific_target is not None:
        targets = [t for t in targets if t.name == specific_target]
    target_text = " and ".join(describe_target(t) for t in targets)

    if rule.is_unconditional:
        return f"{target_text}."
    condition_text = " and ".join(describe_condition(c) for c in rule.condition_list)
    return f"If {condition_text}, then {target_text}."
