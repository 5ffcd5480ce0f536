"""TemplateService — apply, validate, and check a template's rulesets.

Wraps the engine and analysis layers behind :class:`ServiceResult`. The
template and any settings mapping arrive already decoded; this module does
no file I/O.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel

from fieldrules.analysis.inheritance import (
    RuleSetRef,
    get_rule_set_inheritance_chain,
    resolve_rule_set_rules,
    validate_rule_set_inheritance,
)
from fieldrules.analysis.validate import validate_rules
from fieldrules.config.settings import RulesSettings
from fieldrules.domain.fields import merge_settings_into_fields
from fieldrules.domain.ranges import describe_range, validate_value
from fieldrules.engine.apply import apply_rules, is_field_required
from fieldrules.engine.audit import SilentAuditLog, StructlogAuditLog
from fieldrules.errors import InheritanceCycleError
from fieldrules.plugins.manager import PluginManager
from fieldrules.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from fieldrules.domain.models import Field, FieldValue, Rule, RuleSet, Template
    from fieldrules.engine.audit import AuditLog, TriggerAction

logger = logging.getLogger(__name__)

# Ranges that accept any value are not checked against settings.
_UNCHECKED_RANGES = frozenset({"", "string"})


class SettingsIssue(BaseModel):
    """One problem found by :meth:`TemplateService.validate_settings`."""

    model_config = {"frozen": True}

    field: str
    type: Literal["missing", "invalid", "warning"]
    message: str
    expected: str | None = None
    actual: str | None = None


class TemplateService:
    """Rule operations over one decoded :class:`Template`.

    Parameters:
        template: The template whose fields and rulesets are used.
        audit: Sink for rule application. Defaults to a
            :class:`StructlogAuditLog` configured from *settings*.
        settings: Validation and audit configuration. Defaults to
            :meth:`RulesSettings.load`.
    """

    def __init__(
        self,
        template: Template,
        *,
        audit: AuditLog | None = None,
        settings: RulesSettings | None = None,
    ) -> None:
        self._template = template
        self._settings = settings if settings is not None else RulesSettings.load()
        self._audit = audit if audit is not None else self._default_audit()

    @property
    def template(self) -> Template:
        return self._template

    @property
    def settings(self) -> RulesSettings:
        return self._settings

    def _default_audit(self) -> AuditLog:
        cfg = self._settings.audit
        pm: PluginManager | None = None
        if cfg.load_plugins:
            pm = PluginManager()
            pm.discover_and_load()
        return StructlogAuditLog(plugin_manager=pm, enabled=cfg.enabled)

    # ------------------------------------------------------------------
    # Ruleset selection
    # ------------------------------------------------------------------

    def _resolve(self, op: str, ref: RuleSetRef) -> tuple[RuleSet, list[Rule]] | ServiceResult:
        """Find a ruleset and resolve its inherited rules, or build the error result."""
        rule_sets = self._template.rule_sets
        index = ref if isinstance(ref, int) else self._index_of(ref)
        if not 0 <= index < len(rule_sets):
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="NOT_FOUND",
                    message=f"RuleSet {ref!r} not found",
                    detail={"available": [rs.name for rs in rule_sets]},
                ),
            )
        try:
            rules = resolve_rule_set_rules(self._template, index)
        except InheritanceCycleError as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="INHERITANCE_CYCLE",
                    message=str(exc),
                    detail={"chain": exc.chain},
                ),
            )
        return rule_sets[index], rules

    def _index_of(self, name: str) -> int:
        """Index of the first ruleset named *name*, ignoring case, or -1."""
        wanted = name.lower()
        for index, rs in enumerate(self._template.rule_sets):
            if rs.name.lower() == wanted:
                return index
        return -1

    def _select(self, rule_set: RuleSetRef | None, tag: str | None) -> list[RuleSet]:
        rule_sets = self._template.rule_sets
        if rule_set is not None:
            if isinstance(rule_set, int):
                return [rule_sets[rule_set]] if 0 <= rule_set < len(rule_sets) else []
            wanted = rule_set.lower()
            return [rs for rs in rule_sets if rs.name.lower() == wanted]
        if tag is not None:
            wanted = tag.lower()
            return [rs for rs in rule_sets if any(t.lower() == wanted for t in rs.tags)]
        return list(rule_sets)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def apply(
        self,
        rule_set: RuleSetRef = 0,
        trigger: TriggerAction | None = None,
        original_fields: Sequence[Field] | None = None,
    ) -> ServiceResult:
        """Apply a ruleset (with inherited rules) to the template fields."""
        resolved = self._resolve("apply", rule_set)
        if isinstance(resolved, ServiceResult):
            return resolved
        selected, rules = resolved

        result = apply_rules(
            self._template.fields,
            rules,
            audit=self._audit,
            trigger=trigger,
            original_fields=original_fields,
        )
        return ServiceResult(
            ok=True,
            op="apply",
            data={
                "fields": [f.model_dump(by_alias=True) for f in result.updated_fields],
                "disabled_reasons": result.disabled_reasons,
                "changes": [c.model_dump() for c in result.changes],
            },
            meta={"rule_set": selected.name, "rule_count": len(rules)},
        )

    def validate(self, rule_set: RuleSetRef | None = None, tag: str | None = None) -> ServiceResult:
        """Validate the selected rulesets and the template's inheritance graph.

        With neither *rule_set* nor *tag*, every ruleset is validated. Names
        and tags match case-insensitively.
        """
        selected = self._select(rule_set, tag)
        if not selected:
            what = f"tag {tag!r}" if rule_set is None and tag is not None else f"RuleSet {rule_set!r}"
            return ServiceResult(
                ok=False,
                op="validate",
                error=ServiceError(
                    code="NOT_FOUND",
                    message=f"No rulesets found for {what}",
                    detail={
                        "available": [rs.name for rs in self._template.rule_sets],
                        "tags": sorted({t for rs in self._template.rule_sets for t in rs.tags}),
                    },
                ),
            )

        inheritance = validate_rule_set_inheritance(self._template)
        reports: list[dict[str, Any]] = []
        for rs in selected:
            try:
                rules = resolve_rule_set_rules(self._template, rs.name)
            except InheritanceCycleError as exc:
                reports.append({"name": rs.name, "is_valid": False, "errors": [str(exc)], "warnings": []})
                continue
            outcome = validate_rules(rules, config=self._settings.validation)
            reports.append(
                {
                    "name": rs.name,
                    "rule_count": len(rules),
                    "inheritance_chain": get_rule_set_inheritance_chain(self._template, rs.name),
                    "is_valid": outcome.is_valid,
                    "errors": outcome.errors,
                    "warnings": outcome.warnings,
                }
            )

        ok = inheritance.is_valid and all(r["is_valid"] for r in reports)
        logger.debug("Validated %d rulesets: ok=%s", len(reports), ok)
        return ServiceResult(
            ok=ok,
            op="validate",
            data={"rule_sets": reports, "inheritance_errors": inheritance.errors},
            warnings=[w for r in reports for w in r["warnings"]],
        )

    def check_compliance(self, rule_set: RuleSetRef = 0) -> ServiceResult:
        """Report template fields that rule application would change on load.

        Rules run against copies with a silent audit sink, so this leaves no
        audit trail.
        """
        resolved = self._resolve("check_compliance", rule_set)
        if isinstance(resolved, ServiceResult):
            return resolved
        selected, rules = resolved

        fields = self._template.fields
        result = apply_rules(fields, rules, audit=SilentAuditLog())
        issues: list[dict[str, Any]] = []
        for original, updated in zip(fields, result.updated_fields, strict=True):
            reason = result.disabled_reasons.get(original.name, "Rule enforcement")
            if original.checked != updated.checked:
                issues.append(
                    {
                        "field": original.name,
                        "property": "checked",
                        "expected": updated.checked,
                        "actual": original.checked,
                        "reason": reason,
                    }
                )
            if original.value != updated.value:
                issues.append(
                    {
                        "field": original.name,
                        "property": "value",
                        "expected": updated.value,
                        "actual": original.value,
                        "reason": reason,
                    }
                )

        return ServiceResult(
            ok=not issues,
            op="check_compliance",
            data={"compliant": not issues, "issues": issues},
            meta={"rule_set": selected.name},
        )

    def validate_settings(
        self,
        settings: Mapping[str, FieldValue],
        rule_set: RuleSetRef = 0,
        strict: bool = False,
    ) -> ServiceResult:
        """Check a flat settings mapping against the template and a ruleset.

        Settings are merged into the template fields and the ruleset applied.
        A field still checked afterwards (or unconditionally required) must
        be present in *settings*; present values must satisfy their range.
        Keys unknown to the template, and not nested under a known field,
        are warnings, which fail the check only when *strict*.
        """
        if self._template.rule_sets:
            resolved = self._resolve("validate_settings", rule_set)
            if isinstance(resolved, ServiceResult):
                return resolved
            _, rules = resolved
        else:
            rules = []

        fields = merge_settings_into_fields(self._template.fields, settings)
        updated = apply_rules(fields, rules, audit=SilentAuditLog()).updated_fields

        issues: list[SettingsIssue] = []
        valid = 0
        for field in updated:
            present = field.name in settings
            required = field.checked is True or is_field_required(field.name, rules)
            if required and not present:
                issues.append(
                    SettingsIssue(
                        field=field.name,
                        type="missing",
                        message="Required field is missing",
                        expected=describe_range(field.range) if field.range else "any value",
                    )
                )
                continue
            if present and field.range not in _UNCHECKED_RANGES:
                value = settings[field.name]
                if not validate_value(value, field.range):
                    issues.append(
                        SettingsIssue(
                            field=field.name,
                            type="invalid",
                            message="Value does not match expected range",
                            expected=describe_range(field.range),
                            actual=str(value),
                        )
                    )
                    continue
            if present:
                valid += 1

        known = [f.name for f in self._template.fields]
        known_set = set(known)
        for key in settings:
            if key in known_set or any(key.startswith(f"{name}.") for name in known):
                continue
            issues.append(SettingsIssue(field=key, type="warning", message="Field not defined in template"))

        counts = {kind: sum(1 for i in issues if i.type == kind) for kind in ("missing", "invalid", "warning")}
        is_valid = counts["missing"] == 0 and counts["invalid"] == 0
        return ServiceResult(
            ok=is_valid and not (strict and counts["warning"]),
            op="validate_settings",
            data={
                "is_valid": is_valid,
                "issues": [i.model_dump(exclude_none=True) for i in issues],
                "summary": {
                    "total_fields": len(settings),
                    "valid_fields": valid,
                    "missing_required": counts["missing"],
                    "invalid_values": counts["invalid"],
                    "warnings": counts["warning"],
                },
            },
            warnings=[f"{i.field}: {i.message}" for i in issues if i.type == "warning"],
        )
