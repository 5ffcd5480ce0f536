"""Rule application engine — one ordered pass of rules over a field list.

``apply_rules`` copies the incoming fields, evaluates each rule once in list
order and applies the targets of every rule whose conditions hold. Each
applied target records a human-readable reason and old -> new change
records, which are reported to the injected audit sink as one batch.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fieldrules.domain.describe import describe_rule
from fieldrules.domain.fields import child_fields
from fieldrules.engine.audit import (
    FieldChange,
    StructlogAuditLog,
    TriggerAction,
    TriggerType,
)
from fieldrules.engine.conditions import evaluate_condition
from fieldrules.engine.targets import apply_target

if TYPE_CHECKING:
    from fieldrules.domain.models import Field, Rule, RuleDomain
    from fieldrules.engine.audit import AuditLog

logger = logging.getLogger(__name__)

_BULK_TRIGGERS = {
    TriggerType.CHECK_ALL: "Checked all fields",
    TriggerType.UNCHECK_ALL: "Unchecked all fields",
}

_SINGLE_FIELD_TRIGGERS = frozenset(
    {
        TriggerType.FIELD_CHECK,
        TriggerType.FIELD_UNCHECK,
        TriggerType.FIELD_VALUE_CHANGE,
        TriggerType.AI_CHANGE,
    }
)


@dataclass(frozen=True)
class ApplyRulesResult:
    """Outcome of :func:`apply_rules`.

    Attributes:
        updated_fields: Fresh copies of the input fields, in input order.
        disabled_reasons: Field name -> description of the last rule applied to it.
        changes: Ordered change records (trigger records first).
    """

    updated_fields: list[Field]
    disabled_reasons: dict[str, str] = field(default_factory=dict)
    changes: list[FieldChange] = field(default_factory=list)


def _trigger_changes(
    trigger: TriggerAction | None,
    fields_by_name: dict[str, Field],
    original_fields: Sequence[Field] | None,
) -> list[FieldChange]:
    """Synthesize the change records for the user action that caused this run."""
    if trigger is None:
        return []

    bulk_reason = _BULK_TRIGGERS.get(trigger.type)
    if bulk_reason is not None:
        if original_fields is None:
            return []
        changes: list[FieldChange] = []
        for original in original_fields:
            current = fields_by_name.get(original.name)
            if current is not None and original.checked != current.checked:
                changes.append(
                    FieldChange(
                        field_name=original.name,
                        property="checked",
                        old_value=original.checked,
                        new_value=current.checked,
                        reason=bulk_reason,
                    )
                )
        return changes

    if trigger.type not in _SINGLE_FIELD_TRIGGERS:
        return []
    if not trigger.field_name or trigger.old_value == trigger.new_value:
        return []

    is_ai = trigger.type is TriggerType.AI_CHANGE
    reason = f"AI: {trigger.ai_tool or 'changed field'}" if is_ai else "User action"
    value_edit = is_ai or trigger.type is TriggerType.FIELD_VALUE_CHANGE
    return [
        FieldChange(
            field_name=trigger.field_name,
            property="value" if value_edit else "checked",
            old_value=trigger.old_value,
            new_value=trigger.new_value,
            reason=reason,
        )
    ]


def _apply_and_record(
    target_field: Field,
    rule: Rule,
    target: RuleDomain,
    result: ApplyRulesResult,
) -> None:
    old_checked = target_field.checked
    old_value = target_field.value
    apply_target(target_field, target)

    reason = describe_rule(rule, target.name)
    result.disabled_reasons[target_field.name] = reason
    if old_checked != target_field.checked:
        result.changes.append(
            FieldChange(
                field_name=target_field.name,
                property="checked",
                old_value=old_checked,
                new_value=target_field.checked,
                reason=reason,
            )
        )
    if old_value != target_field.value:
        result.changes.append(
            FieldChange(
                field_name=target_field.name,
                property="value",
                old_value=old_value,
                new_value=target_field.value,
                reason=reason,
            )
        )


def apply_rules(
    fields: Sequence[Field],
    rules: Sequence[Rule] | None = None,
    *,
    audit: AuditLog | None = None,
    trigger: TriggerAction | None = None,
    original_fields: Sequence[Field] | None = None,
) -> ApplyRulesResult:
    """Apply *rules* to copies of *fields* in a single ordered pass.

    A rule sees the mutations of every rule before it, but no rule is
    re-evaluated after a later rule changes one of its condition fields.

    Args:
        fields: Current field states (after any user action).
        rules: Rules in evaluation order.
        audit: Sink for evaluation events and the change batch. Defaults to a
            :class:`StructlogAuditLog` without plugins.
        trigger: The action that prompted this run; prepended to the change
            records for audit purposes only.
        original_fields: Field states before the trigger, used to derive
            bulk check/uncheck records.
    """
    log = audit if audit is not None else StructlogAuditLog()
    updated = [f.model_copy(deep=True) for f in fields]
    by_name = {f.name: f for f in updated}

    result = ApplyRulesResult(updated_fields=updated)
    result.changes.extend(_trigger_changes(trigger, by_name, original_fields))

    for rule in rules or ():
        conditions = rule.condition_list
        met = all(evaluate_condition(c, by_name, updated) for c in conditions)
        log.log_rule_evaluation(", ".join(t.name for t in rule.targets), met, conditions)
        if not met:
            continue

        for target in rule.targets:
            exact = by_name.get(target.name)
            if exact is not None:
                _apply_and_record(exact, rule, target, result)
                continue
            for child in child_fields(updated, target.name):
                _apply_and_record(child, rule, target, result)

    logger.debug("Applied %d rules, %d changes", len(rules or ()), len(result.changes))
    log.log_field_changes(result.changes, trigger)
    return result


def is_field_required(field_name: str, rules: Sequence[Rule]) -> bool:
    """Whether an unconditional, non-negated rule target names *field_name*."""
    return any(
        rule.is_unconditional and not target.negate
        for rule in rules
        for target in rule.targets
        if target.name == field_name
    )
