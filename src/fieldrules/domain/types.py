"""Rule states and range classification enums.

These enums are the closed variant sets shared by every layer: the three
rule states, the four scalar data types of the range DSL, and the five
parsed range kinds.
"""

from __future__ import annotations

from enum import StrEnum


class RuleState(StrEnum):
    """State a rule condition checks or a rule target enforces."""

    SET = "set"
    SET_TO_VALUE = "set_to_value"
    CONTAINS = "contains"


class DataType(StrEnum):
    """Scalar data types understood by the range DSL."""

    STRING = "string"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    URL = "url"


class ItemType(StrEnum):
    """Item types allowed inside typed array ranges."""

    STRING = "string"
    INTEGER = "integer"


class RangeType(StrEnum):
    """Discriminator for parsed range variants."""

    SCALAR = "scalar"
    ARRAY = "array"
    ENUM = "enum"
    ENUM_ARRAY = "enum-array"
    PATTERN = "pattern"


# States whose RuleDomain must carry a ``value``.
VALUE_STATES: frozenset[RuleState] = frozenset({RuleState.SET_TO_VALUE, RuleState.CONTAINS})
