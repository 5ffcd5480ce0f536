"""Pluggy hook specifications for fieldrules audit events.

Both hooks fire synchronously from :class:`~fieldrules.engine.audit.StructlogAuditLog`
with plain ``dict``/``list`` payloads (``model_dump`` output), so plugins do
not need to import fieldrules models.
"""

from __future__ import annotations

from typing import Any

import pluggy

hookspec = pluggy.HookspecMarker("fieldrules")
hookimpl = pluggy.HookimplMarker("fieldrules")


class FieldrulesHookSpec:
    """Hook specifications for the fieldrules plugin system."""

    @hookspec
    def post_rule_evaluation(
        self,
        targets: str,
        conditions_met: bool,
        conditions: list[dict[str, Any]],
    ) -> None:
        """Called after each rule's conditions are evaluated."""

    @hookspec
    def post_field_changes(
        self,
        trigger: dict[str, Any],
        changes: list[dict[str, Any]],
        undoable: bool,
    ) -> None:
        """Called once per rule application with the full change batch.

        *undoable* is true when the trigger was a user or AI edit that an
        undo history may revert.
        """
