"""Tests for target application."""

from __future__ import annotations

from fieldrules.engine.conditions import check_condition
from fieldrules.engine.targets import apply_target
from tests.conftest import dom, make_field


class TestSetTargets:
    def test_set_checks(self) -> None:
        f = make_field("a", "", checked=None)
        apply_target(f, dom("a"))
        assert f.checked is True

    def test_negated_set_unchecks_and_keeps_value(self) -> None:
        f = make_field("a", "x")
        apply_target(f, dom("a", negate=True))
        assert f.checked is False
        assert f.value == "x"

    def test_set_to_value(self) -> None:
        f = make_field("a", "old", checked=False)
        apply_target(f, dom("a", "set_to_value", "new"))
        assert (f.value, f.checked) == ("new", True)

    def test_negated_set_to_value_clears(self) -> None:
        f = make_field("a", "old")
        apply_target(f, dom("a", "set_to_value", "old", negate=True))
        assert (f.value, f.checked) == ("", False)


class TestContainsAdd:
    def test_native_list_appends_without_duplicates(self) -> None:
        f = make_field("tags", ["a"], checked=False)
        apply_target(f, dom("tags", "contains", "b"))
        apply_target(f, dom("tags", "contains", "b"))
        assert f.value == ["a", "b"]
        assert f.checked is True

    def test_json_text_is_reencoded(self) -> None:
        f = make_field("tags", '["a"]')
        apply_target(f, dom("tags", "contains", "b"))
        assert f.value == '["a","b"]'

    def test_json_text_existing_item_unchanged(self) -> None:
        f = make_field("tags", '["a", "b"]')
        apply_target(f, dom("tags", "contains", "b"))
        assert f.value == '["a", "b"]'

    def test_free_text_joins_with_space(self) -> None:
        f = make_field("flags", "-v")
        apply_target(f, dom("flags", "contains", "--fast"))
        assert f.value == "-v --fast"

    def test_empty_text_becomes_item(self) -> None:
        f = make_field("flags", "", checked=False)
        apply_target(f, dom("flags", "contains", "--fast"))
        assert (f.value, f.checked) == ("--fast", True)

    def test_number_is_replaced(self) -> None:
        f = make_field("n", 5)
        apply_target(f, dom("n", "contains", "x"))
        assert f.value == "x"

    def test_numeric_list_item_matches_text_value(self) -> None:
        f = make_field("ports", [1, 2])
        target = dom("ports", "contains", "1")
        assert check_condition(f, target) is True
        apply_target(f, target)
        assert f.value == [1, 2]

    def test_numeric_json_item_matches_text_value(self) -> None:
        f = make_field("ports", "[1,2]")
        apply_target(f, dom("ports", "contains", "2"))
        assert f.value == "[1,2]"

    def test_empty_target_value_is_noop(self) -> None:
        f = make_field("tags", ["a"], checked=False)
        apply_target(f, dom("tags", "contains", ""))
        assert (f.value, f.checked) == (["a"], False)


class TestContainsRemove:
    def test_json_text_remove_keeps_checked(self) -> None:
        f = make_field("tags", '["a","b"]')
        apply_target(f, dom("tags", "contains", "b", negate=True))
        assert f.value == '["a"]'
        assert f.checked is True

    def test_removing_last_item_unchecks(self) -> None:
        f = make_field("tags", ["a"])
        apply_target(f, dom("tags", "contains", "a", negate=True))
        assert f.value == []
        assert f.checked is False

    def test_free_text_removes_token_and_whitespace(self) -> None:
        f = make_field("flags", "-v --fast -q")
        apply_target(f, dom("flags", "contains", "--fast", negate=True))
        assert f.value == "-v -q"
        assert f.checked is True

    def test_numeric_json_item_is_removed(self) -> None:
        f = make_field("ports", "[1,2]")
        apply_target(f, dom("ports", "contains", "1", negate=True))
        assert f.value == "[2]"
        assert f.checked is True

    def test_numeric_list_item_is_removed(self) -> None:
        f = make_field("ports", [1, 2.0])
        apply_target(f, dom("ports", "contains", "2", negate=True))
        assert f.value == [1]

    def test_absent_item_is_unchanged(self) -> None:
        f = make_field("tags", ["a"])
        apply_target(f, dom("tags", "contains", "z", negate=True))
        assert (f.value, f.checked) == (["a"], True)
