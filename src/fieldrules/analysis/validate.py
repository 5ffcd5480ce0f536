"""``validate_rules`` — the combined static check of a rule list."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from fieldrules.analysis.contradictions import detect_contradictions, detect_rule_contradictions
from fieldrules.analysis.contrapositive import filter_contrapositive_cycles
from fieldrules.analysis.graph import detect_circular_dependencies
from fieldrules.analysis.merge import suggest_rule_merges
from fieldrules.config.models import ValidationConfig

if TYPE_CHECKING:
    from fieldrules.domain.models import Rule

logger = logging.getLogger(__name__)


class ValidationResult(BaseModel):
    """Errors must be fixed; warnings are suggestions."""

    model_config = {"frozen": True}

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


def validate_rules(
    rules: Sequence[Rule],
    *,
    config: ValidationConfig | None = None,
) -> ValidationResult:
    """Check *rules* for cycles, contradictions, and merge opportunities.

    errors = cycle errors (contrapositive pairs filtered out), then
    cross-rule contradictions, then internal rule contradictions.
    warnings = merge suggestions.
    """
    cfg = config or ValidationConfig()
    cycles = detect_circular_dependencies(rules)
    if cfg.filter_contrapositives:
        cycles = filter_contrapositive_cycles(cycles, rules)

    errors = [*cycles, *detect_contradictions(rules), *detect_rule_contradictions(rules)]
    warnings = suggest_rule_merges(rules) if cfg.suggest_merges else []
    logger.debug("Validated %d rules: %d errors, %d warnings", len(rules), len(errors), len(warnings))
    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)
