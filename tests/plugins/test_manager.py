"""Tests for PluginManager — discovery, registration, and hook relay."""

from __future__ import annotations

from typing import Any

import pytest

from fieldrules.engine.apply import apply_rules
from fieldrules.engine.audit import StructlogAuditLog
from fieldrules.plugins import PluginManager, hookimpl
from tests.conftest import dom, make_field, make_rule


class _HistoryPlugin:
    """Collects every change batch, the way an undo history would."""

    def __init__(self) -> None:
        self.batches: list[tuple[dict[str, Any], list[dict[str, Any]]]] = []
        self.evaluations: list[tuple[str, bool]] = []

    @hookimpl
    def post_field_changes(self, trigger: dict[str, Any], changes: list[dict[str, Any]]) -> None:
        self.batches.append((trigger, changes))

    @hookimpl
    def post_rule_evaluation(self, targets: str, conditions_met: bool, conditions: list[dict[str, Any]]) -> None:
        self.evaluations.append((targets, conditions_met))


class _ClassPlugin:
    @hookimpl
    def post_field_changes(self, trigger: dict[str, Any], changes: list[dict[str, Any]]) -> None:
        pass


class _FailingPlugin:
    @hookimpl
    def post_field_changes(self, trigger: dict[str, Any], changes: list[dict[str, Any]]) -> None:
        msg = "history store unavailable"
        raise RuntimeError(msg)


class TestPluginManager:
    @pytest.mark.parametrize("hook_name", ["post_rule_evaluation", "post_field_changes"])
    def test_hookspecs_registered(self, hook_name: str) -> None:
        assert hasattr(PluginManager().hook, hook_name)

    def test_register_plugin(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_HistoryPlugin(), name="history")
        assert "history" in pm.list_plugin_names()

    def test_register_plugin_default_name(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_HistoryPlugin())
        assert "_HistoryPlugin" in pm.list_plugin_names()

    def test_unregister_plugin(self) -> None:
        pm = PluginManager()
        plugin = _HistoryPlugin()
        pm.register_plugin(plugin, name="history")
        pm.unregister(plugin)
        assert "history" not in pm.list_plugin_names()

    def test_get_plugins_returns_registered(self) -> None:
        pm = PluginManager()
        plugin = _HistoryPlugin()
        pm.register_plugin(plugin, name="history")
        assert plugin in pm.get_plugins()

    def test_is_loaded(self) -> None:
        pm = PluginManager()
        assert pm.is_loaded is False
        pm.discover_and_load()
        assert pm.is_loaded is True

    def test_discover_keeps_registered_instances(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_HistoryPlugin(), name="history")
        assert "history" in pm.discover_and_load()

    def test_class_plugins_are_instantiated(self) -> None:
        pm = PluginManager()
        pm._pm.register(_ClassPlugin, name="class-plugin")
        pm.discover_and_load()
        [plugin] = [p for p in pm.get_plugins() if pm._pm.get_name(p) == "class-plugin"]
        assert isinstance(plugin, _ClassPlugin)

    def test_has_hook_impls(self) -> None:
        assert PluginManager._has_hook_impls(_ClassPlugin) is True
        assert PluginManager._has_hook_impls(object) is False


class TestAuditDispatch:
    def test_rule_application_reaches_plugins(self) -> None:
        pm = PluginManager()
        history = _HistoryPlugin()
        pm.register_plugin(history, name="history")
        fields = [make_field("a", "x"), make_field("b", "", checked=False)]
        apply_rules(fields, [make_rule([dom("a")], [dom("b")])], audit=StructlogAuditLog(plugin_manager=pm))

        assert history.evaluations == [("b", True)]
        [(trigger, changes)] = history.batches
        assert trigger["type"] == "rules_changed"
        assert changes[0]["field_name"] == "b"
        assert changes[0]["new_value"] is True

    def test_disabled_logging_still_dispatches(self) -> None:
        pm = PluginManager()
        history = _HistoryPlugin()
        pm.register_plugin(history, name="history")
        fields = [make_field("a", "x"), make_field("b", "", checked=False)]
        audit = StructlogAuditLog(plugin_manager=pm, enabled=False)
        apply_rules(fields, [make_rule([dom("a")], [dom("b")])], audit=audit)
        assert len(history.batches) == 1

    def test_plugin_failure_is_a_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        pm = PluginManager()
        pm.register_plugin(_FailingPlugin(), name="failing")
        fields = [make_field("a", "x"), make_field("b", "", checked=False)]
        with caplog.at_level("WARNING"):
            result = apply_rules(
                fields,
                [make_rule([dom("a")], [dom("b")])],
                audit=StructlogAuditLog(plugin_manager=pm),
            )
        assert result.updated_fields[1].checked is True
        assert "Audit hook post_field_changes failed" in caplog.text
