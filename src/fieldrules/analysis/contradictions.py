"""Contradiction detector — conflicting targets under identical conditions.

Rules are grouped by a condition signature: the multiset of
``(name, state, not, value)`` over their conditions, where ``value`` only
counts for SetToValue/Contains. Unconditional rules share the empty
signature.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from fieldrules.domain.types import VALUE_STATES

if TYPE_CHECKING:
    from fieldrules.domain.models import Rule, RuleDomain

type ConditionSignature = tuple[tuple[str, str, bool, str], ...]


def condition_signature(rule: Rule) -> ConditionSignature:
    """Order-independent key for a rule's conditions."""
    parts = [
        (c.name, c.state.value, c.negate, (c.value or "") if c.state in VALUE_STATES else "")
        for c in rule.condition_list
    ]
    return tuple(sorted(parts))


def group_by_conditions(rules: Sequence[Rule]) -> dict[ConditionSignature, list[int]]:
    """Signature -> indexes of the rules sharing it, in rule order."""
    groups: dict[ConditionSignature, list[int]] = {}
    for index, rule in enumerate(rules):
        groups.setdefault(condition_signature(rule), []).append(index)
    return groups


def target_conflict(t1: RuleDomain, t2: RuleDomain) -> str | None:
    """Describe why two targets on the same field conflict, or None."""
    if t1.negate != t2.negate:
        return (
            f"cannot be both required (not={str(t1.negate).lower()}) and not required "
            f"(not={str(t2.negate).lower()}) under the same conditions"
        )
    if t1.state != t2.state:
        return f"has conflicting states ({t1.state.value} vs {t2.state.value}) under the same conditions"
    if t1.state in VALUE_STATES and t1.value != t2.value:
        return f'has conflicting values ("{t1.value}" vs "{t2.value}") under the same conditions'
    return None


def _targets_by_field(rules: Sequence[Rule]) -> dict[str, list[RuleDomain]]:
    by_field: dict[str, list[RuleDomain]] = {}
    for rule in rules:
        for target in rule.targets:
            by_field.setdefault(target.name, []).append(target)
    return by_field


def find_target_conflicts(rules: Sequence[Rule]) -> list[str]:
    """Pairwise conflict messages among targets of *rules*, grouped by field."""
    errors: list[str] = []
    for field_name, targets in _targets_by_field(rules).items():
        for i, t1 in enumerate(targets):
            for t2 in targets[i + 1 :]:
                conflict = target_conflict(t1, t2)
                if conflict is not None:
                    errors.append(f'Contradiction detected for field "{field_name}": {conflict}')
    return errors


def detect_contradictions(rules: Sequence[Rule]) -> list[str]:
    """Conflicting targets across rules with the same condition signature."""
    errors: list[str] = []
    for indexes in group_by_conditions(rules).values():
        errors.extend(find_target_conflicts([rules[i] for i in indexes]))
    return errors


def detect_rule_contradictions(rules: Sequence[Rule]) -> list[str]:
    """Flag rules whose own conditions or targets disagree on a field.

    Two domains on the same field within one rule conflict when their state
    or ``not`` flag differ. Rule numbers in messages are 1-based.
    """
    errors: list[str] = []
    for number, rule in enumerate(rules, start=1):
        for kind, domains in (("condition", rule.condition_list), ("target", rule.targets)):
            seen: dict[str, RuleDomain] = {}
            for domain in domains:
                first = seen.setdefault(domain.name, domain)
                if first is domain:
                    continue
                if first.state != domain.state or first.negate != domain.negate:
                    errors.append(
                        f"Contradiction detected in rule {number} involving {kind} {domain.name}"
                    )
    return errors
