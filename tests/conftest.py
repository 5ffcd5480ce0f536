"""Shared pytest fixtures and test helpers for fieldrules tests."""

from __future__ import annotations

from typing import Any

import pytest

from fieldrules.domain.models import Field, Rule, RuleDomain, RuleSet, Template
from fieldrules.engine.audit import FieldChange, TriggerAction

# ---------------------------------------------------------------------------
# Builders (imported by test modules via ``from tests.conftest import ...``)
# ---------------------------------------------------------------------------


def make_field(name: str, value: Any = "", *, checked: bool | None = True, **kwargs: Any) -> Field:
    """Build a Field; checked by default."""
    return Field(name=name, value=value, checked=checked, **kwargs)


def dom(name: str, state: str = "set", value: str | None = None, *, negate: bool = False) -> RuleDomain:
    """Build a condition or target."""
    return RuleDomain(name=name, state=state, value=value, negate=negate)


def make_rule(conditions: list[RuleDomain] | None, targets: list[RuleDomain]) -> Rule:
    return Rule(conditions=conditions, targets=targets)


def by_name(fields: list[Field]) -> dict[str, Field]:
    return {f.name: f for f in fields}


class RecordingAudit:
    """AuditLog that keeps every call for assertions."""

    def __init__(self) -> None:
        self.evaluations: list[tuple[str, bool, list[RuleDomain]]] = []
        self.batches: list[tuple[list[FieldChange], TriggerAction | None]] = []

    def log_rule_evaluation(self, targets: str, conditions_met: bool, conditions: Any) -> None:
        self.evaluations.append((targets, conditions_met, list(conditions)))

    def log_field_changes(self, changes: Any, trigger: TriggerAction | None = None) -> None:
        self.batches.append((list(changes), trigger))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def audit() -> RecordingAudit:
    return RecordingAudit()


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory) -> None:
    """Keep user env vars and stray ``fieldrules.toml`` files out of tests."""
    for var in ("FIELDRULES_CONFIG", "FIELDRULES_VERBOSE", "FIELDRULES_LOG_JSON"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path_factory.mktemp("cwd"))


@pytest.fixture
def server_template() -> Template:
    """A small template: a Base ruleset and a Development ruleset extending it."""
    return Template(
        name="Server",
        file_name="server.guido.json",
        version="1.0.0",
        fields=[
            make_field("server.host", "localhost", range="string"),
            make_field("server.port", 8080, range="integer(1..65535)"),
            make_field("database.connection", "", checked=None),
            make_field("logging.level", "info", checked=False, range="debug||info||warn"),
        ],
        rule_sets=[
            RuleSet(
                name="Base",
                tags=["core"],
                rules=[
                    make_rule([dom("server.host")], [dom("database.connection")]),
                ],
            ),
            RuleSet(
                name="Development",
                tags=["dev"],
                extends="Base",
                rules=[
                    make_rule(None, [dom("logging.level", "set_to_value", "debug")]),
                ],
            ),
        ],
    )
