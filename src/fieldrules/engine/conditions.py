"""Condition evaluator — does a single condition hold against the current fields?"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, assert_never

from fieldrules.domain.fields import child_fields, field_value_to_string, parse_json_list
from fieldrules.domain.types import RuleState

if TYPE_CHECKING:
    from fieldrules.domain.models import Field, RuleDomain


def _contains(value: object, needle: str) -> bool:
    if isinstance(value, list):
        return any(field_value_to_string(item) == needle for item in value)
    if isinstance(value, str):
        items = parse_json_list(value)
        if items is not None:
            return any(field_value_to_string(item) == needle for item in items)
        return needle in value
    return False


def check_condition(field: Field, condition: RuleDomain) -> bool:
    """Evaluate *condition* against *field*, ignoring ``condition.negate``.

    Every state requires the field to be checked. SET_TO_VALUE compares the
    field's text form with the condition value; CONTAINS checks list
    membership (native or JSON-encoded) and falls back to a substring test.
    """
    if not field.is_checked:
        return False
    state = condition.state
    if state is RuleState.SET:
        return field.value != ""
    if state is RuleState.SET_TO_VALUE:
        return field_value_to_string(field.value) == condition.value
    if state is RuleState.CONTAINS:
        if not condition.value:
            return False
        return _contains(field.value, condition.value)
    assert_never(state)


def evaluate_condition(
    condition: RuleDomain,
    fields_by_name: Mapping[str, Field],
    fields: Sequence[Field],
) -> bool:
    """Evaluate *condition* with group fallback and negation applied.

    If no field carries the exact path, the condition must hold for every
    ``path.*`` child field (vacuously true when there are none).
    """
    field = fields_by_name.get(condition.name)
    if field is not None:
        met = check_condition(field, condition)
    else:
        met = all(check_condition(child, condition) for child in child_fields(fields, condition.name))
    return not met if condition.negate else met
