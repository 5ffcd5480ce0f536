"""RuleSet inheritance — resolve ``extends`` chains into flat rule lists.

Two policies, kept apart on purpose:

* :func:`resolve_rule_set_rules` must produce a usable rule list. It
  tolerates a missing parent (the chain simply stops) but raises
  :class:`~fieldrules.errors.InheritanceCycleError` on a true cycle.
* :func:`validate_rule_set_inheritance` never raises; it reports every
  missing parent, self-extension and cycle so they can be shown at once.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from fieldrules.errors import InheritanceCycleError

if TYPE_CHECKING:
    from fieldrules.domain.models import Rule, RuleSet, Template

logger = logging.getLogger(__name__)

type RuleSetRef = str | int

CIRCULAR_MARKER = " (circular!)"


class InheritanceValidationResult(BaseModel):
    """Outcome of :func:`validate_rule_set_inheritance`."""

    model_config = {"frozen": True}

    is_valid: bool
    errors: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


def find_rule_set(template: Template, name: str) -> RuleSet | None:
    """Return the ruleset called *name*, or None."""
    return next((rs for rs in template.rule_sets if rs.name == name), None)


def find_rule_set_index(template: Template, name: str) -> int:
    """Index of the ruleset called *name*, or -1."""
    for index, rule_set in enumerate(template.rule_sets):
        if rule_set.name == name:
            return index
    return -1


def _lookup(template: Template, ref: RuleSetRef) -> RuleSet | None:
    if isinstance(ref, int):
        if 0 <= ref < len(template.rule_sets):
            return template.rule_sets[ref]
        return None
    return find_rule_set(template, ref)


def get_child_rule_sets(template: Template, parent_name: str) -> list[RuleSet]:
    """Rulesets whose ``extends`` names *parent_name*."""
    return [rs for rs in template.rule_sets if rs.extends == parent_name]


def has_child_rule_sets(template: Template, name: str) -> bool:
    """Whether any ruleset extends *name*."""
    return any(rs.extends == name for rs in template.rule_sets)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def resolve_rule_set_rules(template: Template, ref: RuleSetRef) -> list[Rule]:
    """All rules of a ruleset with inherited rules first.

    Ancestor rules come root-first, the ruleset's own rules last. An unknown
    ruleset yields ``[]``; an unknown parent ends the chain quietly.

    Raises:
        InheritanceCycleError: The ``extends`` chain revisits a ruleset.
    """
    rule_set = _lookup(template, ref)
    if rule_set is None:
        return []

    chain: list[RuleSet] = []
    visited: list[str] = []
    current: RuleSet | None = rule_set
    while current is not None:
        if current.name in visited:
            raise InheritanceCycleError([*visited, current.name])
        visited.append(current.name)
        chain.append(current)
        current = find_rule_set(template, current.extends) if current.extends else None

    rules: list[Rule] = []
    for ancestor in reversed(chain):
        rules.extend(ancestor.rules)
    return rules


def get_default_rules(template: Template, resolve_inheritance: bool = False) -> list[Rule]:
    """Rules of the first ruleset, optionally with inherited rules."""
    return get_rule_set_rules(template, 0, resolve_inheritance)


def get_rule_set_rules(template: Template, index: int, resolve_inheritance: bool = False) -> list[Rule]:
    """Rules of the ruleset at *index*; own rules only unless *resolve_inheritance*."""
    if resolve_inheritance:
        return resolve_rule_set_rules(template, index)
    rule_set = _lookup(template, index)
    return list(rule_set.rules) if rule_set is not None else []


def get_rule_set_inheritance_chain(template: Template, ref: RuleSetRef) -> list[str]:
    """Ruleset names from the root ancestor down to *ref*.

    A cycle never loops: the repeated name is prepended with a
    ``" (circular!)"`` marker and the walk stops.

    Examples:
        Production extends Base -> ``["Base", "Production"]``.
    """
    rule_set = _lookup(template, ref)
    if rule_set is None:
        return []

    chain: list[str] = []
    visited: set[str] = set()
    current: RuleSet | None = rule_set
    while current is not None:
        if current.name in visited:
            chain.insert(0, f"{current.name}{CIRCULAR_MARKER}")
            break
        visited.add(current.name)
        chain.insert(0, current.name)
        current = find_rule_set(template, current.extends) if current.extends else None
    return chain


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_rule_set_inheritance(template: Template) -> InheritanceValidationResult:
    """Report missing parents, self-extension, and cycles without raising.

    A cycle reachable from several rulesets is reported once per distinct
    path; identical messages are collapsed.
    """
    names = {rs.name for rs in template.rule_sets}
    parents: dict[str, str | None] = {}
    for rs in template.rule_sets:
        parents.setdefault(rs.name, rs.extends)
    errors: list[str] = []

    for rule_set in template.rule_sets:
        if not rule_set.extends:
            continue
        if rule_set.extends not in names:
            errors.append(f'RuleSet "{rule_set.name}" extends non-existent ruleset "{rule_set.extends}"')
            continue
        if rule_set.extends == rule_set.name:
            errors.append(f'RuleSet "{rule_set.name}" cannot extend itself')
            continue

        path: list[str] = []
        current: str | None = rule_set.name
        while current:
            if current in path:
                cycle = [*path[path.index(current) :], current]
                errors.append(f"Circular inheritance detected: {' → '.join(cycle)}")
                break
            path.append(current)
            current = parents.get(current)

    unique = list(dict.fromkeys(errors))
    if unique:
        logger.debug("Inheritance problems: %s", unique)
    return InheritanceValidationResult(is_valid=not unique, errors=unique)
