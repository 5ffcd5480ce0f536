"""Merge suggestions — non-fatal hints that rules could be combined."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from fieldrules.analysis.contradictions import find_target_conflicts, group_by_conditions

if TYPE_CHECKING:
    from fieldrules.domain.models import Rule


def _numbers(indexes: Sequence[int]) -> str:
    return ", ".join(str(i + 1) for i in indexes)


def suggest_rule_merges(rules: Sequence[Rule]) -> list[str]:
    """Suggest merging unconditional rules, and rules with identical conditions.

    Rules sharing conditions are only suggested when their targets do not
    contradict each other.
    """
    suggestions: list[str] = []
    unconditional = [i for i, rule in enumerate(rules) if rule.is_unconditional]
    if len(unconditional) > 1:
        suggestions.append(f"Rules {_numbers(unconditional)} can be merged as they have no conditions.")

    for signature, indexes in group_by_conditions(rules).items():
        if not signature or len(indexes) < 2:
            continue
        if find_target_conflicts([rules[i] for i in indexes]):
            continue
        suggestions.append(f"Rules {_numbers(indexes)} can be merged as they have identical conditions.")
    return suggestions
