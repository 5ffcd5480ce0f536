"""Target applier — mutate one field so it satisfies a rule target."""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, assert_never

from fieldrules.domain.fields import field_value_to_string, parse_json_list
from fieldrules.domain.types import RuleState

if TYPE_CHECKING:
    from fieldrules.domain.models import Field, RuleDomain


def _dump(items: list[object]) -> str:
    return json.dumps(items, separators=(",", ":"))


def _has_item(items: list[object], item: str) -> bool:
    return any(field_value_to_string(v) == item for v in items)


def _without_item(items: list[object], item: str) -> list[object]:
    return [v for v in items if field_value_to_string(v) != item]


def _add_item(field: Field, item: str) -> None:
    value = field.value
    if isinstance(value, list):
        if not _has_item(value, item):
            field.value = [*value, item]
    elif isinstance(value, str):
        items = parse_json_list(value)
        if items is not None:
            if not _has_item(items, item):
                field.value = _dump([*items, item])
        elif item not in value:
            field.value = f"{value} {item}" if value else item
    else:
        field.value = item
    field.checked = True


def _remove_item(field: Field, item: str) -> None:
    value = field.value
    if isinstance(value, list):
        remaining = _without_item(value, item)
        field.value = remaining
        empty = not remaining
    elif isinstance(value, str):
        items = parse_json_list(value)
        if items is not None:
            remaining = _without_item(items, item)
            field.value = _dump(remaining)
            empty = not remaining
        else:
            text = re.sub(rf"\s*{re.escape(item)}", "", value).strip()
            field.value = text
            empty = text == ""
    else:
        return
    if empty:
        field.checked = False


def apply_target(field: Field, target: RuleDomain) -> None:
    """Mutate *field* in place to satisfy *target*.

    SET toggles ``checked``. SET_TO_VALUE assigns the value (or clears it
    when negated). CONTAINS appends without duplicates, or when negated
    removes the item and unchecks the field once nothing is left.
    """
    should_apply = not target.negate
    state = target.state
    if state is RuleState.SET:
        field.checked = should_apply
    elif state is RuleState.SET_TO_VALUE:
        if should_apply:
            field.value = target.value or ""
            field.checked = True
        else:
            field.value = ""
            field.checked = False
    elif state is RuleState.CONTAINS:
        if not target.value:
            return
        if should_apply:
            _add_item(field, target.value)
        else:
            _remove_item(field, target.value)
    else:
        assert_never(state)
