"""Audit sink — rule evaluation events and field-change batches.

The engine never owns a logger: callers inject an :class:`AuditLog`.
:class:`StructlogAuditLog` writes structlog events and forwards both event
kinds to pluggy hooks so history/undo features can subscribe.
:class:`SilentAuditLog` drops everything and is meant for validation-only
call sites that must not pollute audit history.

INVARIANT: Plugin failures are warnings, never errors.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Literal, Protocol

import structlog
from pydantic import BaseModel

if TYPE_CHECKING:
    from fieldrules.domain.models import RuleDomain
    from fieldrules.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class TriggerType(StrEnum):
    """What prompted a rule application."""

    FIELD_CHECK = "field_check"
    FIELD_UNCHECK = "field_uncheck"
    FIELD_VALUE_CHANGE = "field_value_change"
    CHECK_ALL = "check_all"
    UNCHECK_ALL = "uncheck_all"
    IMPORT = "import"
    TEMPLATE_LOAD = "template_load"
    RULES_CHANGED = "rules_changed"
    AI_CHANGE = "ai_change"


# User-initiated actions (including AI edits) that an undo feature may revert.
UNDOABLE_ACTIONS: frozenset[TriggerType] = frozenset(
    {
        TriggerType.FIELD_CHECK,
        TriggerType.FIELD_UNCHECK,
        TriggerType.FIELD_VALUE_CHANGE,
        TriggerType.CHECK_ALL,
        TriggerType.UNCHECK_ALL,
        TriggerType.AI_CHANGE,
    }
)


class TriggerAction(BaseModel):
    """The action that led to a rule application."""

    model_config = {"frozen": True}

    type: TriggerType
    field_name: str | None = None
    old_value: Any = None
    new_value: Any = None
    ai_tool: str | None = None


class FieldChange(BaseModel):
    """One old -> new change of a field property, with the reason for it."""

    model_config = {"frozen": True}

    field_name: str
    property: Literal["checked", "value"]
    old_value: Any = None
    new_value: Any = None
    reason: str


DEFAULT_TRIGGER = TriggerAction(type=TriggerType.RULES_CHANGED)


class AuditLog(Protocol):
    """Interface the rule engine reports through."""

    def log_rule_evaluation(
        self,
        targets: str,
        conditions_met: bool,
        conditions: Sequence[RuleDomain],
    ) -> None: ...

    def log_field_changes(
        self,
        changes: Sequence[FieldChange],
        trigger: TriggerAction | None = None,
    ) -> None: ...


class SilentAuditLog:
    """An audit sink that records nothing."""

    def log_rule_evaluation(
        self,
        targets: str,
        conditions_met: bool,
        conditions: Sequence[RuleDomain],
    ) -> None:
        return None

    def log_field_changes(
        self,
        changes: Sequence[FieldChange],
        trigger: TriggerAction | None = None,
    ) -> None:
        return None


class StructlogAuditLog:
    """Structlog-backed audit sink with optional pluggy fan-out.

    Parameters:
        plugin_manager: Receives ``post_rule_evaluation`` and
            ``post_field_changes`` hook calls when given.
        enabled: When False, nothing is logged; plugin hooks still fire so
            history subscribers never miss a batch.
        default_trigger: Trigger reported when a batch arrives without one.
    """

    def __init__(
        self,
        *,
        plugin_manager: PluginManager | None = None,
        enabled: bool = True,
        default_trigger: TriggerAction = DEFAULT_TRIGGER,
    ) -> None:
        self._pm = plugin_manager
        self._enabled = enabled
        self._default_trigger = default_trigger
        self._log = structlog.get_logger("fieldrules.audit")

    @property
    def enabled(self) -> bool:
        return self._enabled

    def log_rule_evaluation(
        self,
        targets: str,
        conditions_met: bool,
        conditions: Sequence[RuleDomain],
    ) -> None:
        dumped = [c.model_dump(by_alias=True, exclude_none=True) for c in conditions]
        if self.enabled:
            self._log.debug(
                "rule.evaluated",
                targets=targets,
                conditions_met=conditions_met,
                conditions=dumped,
            )
        self._dispatch(
            "post_rule_evaluation",
            targets=targets,
            conditions_met=conditions_met,
            conditions=dumped,
        )

    def log_field_changes(
        self,
        changes: Sequence[FieldChange],
        trigger: TriggerAction | None = None,
    ) -> None:
        if not changes:
            return
        effective = trigger or self._default_trigger
        undoable = effective.type in UNDOABLE_ACTIONS
        if self.enabled:
            self._log.info(
                "fields.changed",
                trigger=effective.type.value,
                field=effective.field_name,
                count=len(changes),
                undoable=undoable,
            )
        self._dispatch(
            "post_field_changes",
            trigger=effective.model_dump(),
            changes=[c.model_dump() for c in changes],
            undoable=undoable,
        )

    def _dispatch(self, hook_name: str, **payload: Any) -> None:
        if self._pm is None:
            return
        try:
            getattr(self._pm.hook, hook_name)(**payload)
        except Exception:
            logger.warning("Audit hook %s failed", hook_name, exc_info=True)
