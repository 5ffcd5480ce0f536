"""Contrapositive filter — drop cycles that are stable two-rule equilibria.

Example pair::

    If A is set      -> B is not set
    If B is not set  -> A is set

Both rules can fire without ever undoing each other, so the ``A → B → A``
cycle between them is not a loop.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from fieldrules.analysis.graph import CYCLE_PREFIX, PATH_SEPARATOR
from fieldrules.domain.types import RuleState

if TYPE_CHECKING:
    from fieldrules.domain.models import Rule, RuleDomain


def _find_by_name(domains: Iterable[RuleDomain], name: str) -> RuleDomain | None:
    return next((d for d in domains if d.name == name), None)


def _both_set(a: RuleDomain, b: RuleDomain) -> bool:
    return a.state is RuleState.SET and b.state is RuleState.SET


def _links(source: Rule, dest_conditions: Sequence[RuleDomain]) -> list[bool]:
    """``not`` flags of Set targets of *source* that a Set condition of the other rule mirrors."""
    flags: list[bool] = []
    for target in source.targets:
        match = _find_by_name(dest_conditions, target.name)
        if match is not None and _both_set(target, match) and target.negate == match.negate:
            flags.append(target.negate)
    return flags


def are_contrapositives(rule1: Rule, rule2: Rule) -> bool:
    """Whether *rule1* and *rule2* form a contrapositive pair.

    Both rules need conditions, and each rule's targets must touch the
    other's condition fields. A target of *rule1* must then satisfy a Set
    condition of *rule2* (same field, Set state, same ``not`` flag) and a
    target of *rule2* must satisfy a condition of *rule1* the same way, with
    the two links of opposite polarity. ``A -> not B`` with ``not B -> A``
    qualifies; ``A -> B`` with ``B -> A`` does not.
    """
    conditions1 = rule1.condition_list
    conditions2 = rule2.condition_list
    if not conditions1 or not conditions2:
        return False

    names1 = {c.name for c in conditions1}
    names2 = {c.name for c in conditions2}
    if not any(t.name in names2 for t in rule1.targets):
        return False
    if not any(t.name in names1 for t in rule2.targets):
        return False

    forward = _links(rule1, conditions2)
    backward = _links(rule2, conditions1)
    return any(f != b for f in forward for b in backward)


def contrapositive_fields(rules: Sequence[Rule]) -> set[str]:
    """Every field name touched by any contrapositive pair in *rules*."""
    fields: set[str] = set()
    for i, rule1 in enumerate(rules):
        for rule2 in rules[i + 1 :]:
            if not are_contrapositives(rule1, rule2):
                continue
            for rule in (rule1, rule2):
                fields.update(c.name for c in rule.condition_list)
                fields.update(t.name for t in rule.targets)
    return fields


def filter_contrapositive_cycles(cycle_errors: Sequence[str], rules: Sequence[Rule]) -> list[str]:
    """Drop cycle errors whose whole path lies inside contrapositive pairs."""
    if not cycle_errors:
        return []
    safe = contrapositive_fields(rules)

    kept: list[str] = []
    for error in cycle_errors:
        if not error.startswith(CYCLE_PREFIX):
            kept.append(error)
            continue
        path = [part.strip() for part in error.removeprefix(CYCLE_PREFIX).split(PATH_SEPARATOR)]
        if not all(name in safe for name in path):
            kept.append(error)
    return kept
