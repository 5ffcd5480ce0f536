"""fieldrules — declarative field rules for configuration templates.

Evaluate "if field A is set to X, then field B is required" rules against a
list of fields, and statically check rulesets for cycles, contradictions,
and merge opportunities.
"""

from fieldrules.analysis.inheritance import (
    resolve_rule_set_rules,
    validate_rule_set_inheritance,
)
from fieldrules.analysis.validate import ValidationResult, validate_rules
from fieldrules.domain.describe import describe_rule
from fieldrules.domain.models import Field, Rule, RuleDomain, RuleSet, Template
from fieldrules.domain.ranges import describe_range, parse_range, validate_value
from fieldrules.domain.types import RuleState
from fieldrules.engine.apply import ApplyRulesResult, apply_rules, is_field_required
from fieldrules.engine.audit import (
    FieldChange,
    SilentAuditLog,
    StructlogAuditLog,
    TriggerAction,
    TriggerType,
)
from fieldrules.errors import InheritanceCycleError

__version__ = "0.1.0"

__all__ = [
    "ApplyRulesResult",
    "Field",
    "FieldChange",
    "InheritanceCycleError",
    "Rule",
    "RuleDomain",
    "RuleSet",
    "RuleState",
    "SilentAuditLog",
    "StructlogAuditLog",
    "Template",
    "TriggerAction",
    "TriggerType",
    "ValidationResult",
    "apply_rules",
    "describe_range",
    "describe_rule",
    "is_field_required",
    "parse_range",
    "resolve_rule_set_rules",
    "validate_rule_set_inheritance",
    "validate_rules",
    "validate_value",
]
