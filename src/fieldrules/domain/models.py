"""Field, rule, ruleset, and template records.

These are the plain structured records every other layer consumes. They
parse from the template JSON shape (``ruleSets``, ``fileName``, ``not``)
and dump back to it with ``model_dump(by_alias=True)``.

``Field`` is intentionally mutable: the rule engine copies each field and
mutates the copy. Rule records are frozen.
"""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic import Field as ModelField

from fieldrules.domain.types import VALUE_STATES, RuleState

FieldValue = str | bool | int | float | list[str | int | float]


class Field(BaseModel):
    """A named configuration value with validation metadata.

    Attributes:
        name: Dot-delimited hierarchical path, unique within a field list.
        value: Current value (text, number, boolean, or a list of those).
        info: Description shown to the user.
        example: Example value.
        range: Range DSL string (see :mod:`fieldrules.domain.ranges`).
        link: Optional documentation link.
        checked: Inclusion flag; ``None`` is treated as unchecked.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    value: FieldValue = ""
    info: str = ""
    example: str = ""
    range: str = ""
    link: str | None = None
    checked: bool | None = None

    @property
    def is_checked(self) -> bool:
        return bool(self.checked)


class RuleDomain(BaseModel):
    """A single condition or target: a field path, a state, and an optional value.

    INVARIANT: ``value`` is present when ``state`` is SET_TO_VALUE or CONTAINS.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    state: RuleState
    value: str | None = None
    negate: bool = ModelField(default=False, alias="not")

    @model_validator(mode="after")
    def _require_value(self) -> Self:
        if self.state in VALUE_STATES and self.value is None:
            msg = f"RuleDomain {self.name!r} with state {self.state.value!r} requires a value"
            raise ValueError(msg)
        return self


class Rule(BaseModel):
    """Conditions (AND-combined, optional) plus the targets applied when they hold."""

    model_config = ConfigDict(frozen=True)

    conditions: list[RuleDomain] | None = None
    targets: list[RuleDomain] = ModelField(min_length=1)
    description: str | None = None

    @property
    def is_unconditional(self) -> bool:
        """True when the rule has no conditions (absent or empty)."""
        return not self.conditions

    @property
    def condition_list(self) -> list[RuleDomain]:
        return list(self.conditions or [])


class RuleSet(BaseModel):
    """A named, taggable collection of rules that may extend another ruleset."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str = ""
    tags: list[str] = ModelField(default_factory=list)
    rules: list[Rule] = ModelField(default_factory=list)
    extends: str | None = None


class Template(BaseModel):
    """Aggregate of fields and rulesets."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    file_name: str = ModelField(default="", alias="fileName")
    version: str = ""
    description: str = ""
    owner: str = ""
    application: str | None = None
    docs: str | None = None
    command: str | None = None
    fields: list[Field] = ModelField(default_factory=list)
    rule_sets: list[RuleSet] = ModelField(default_factory=list, alias="ruleSets")
