"""Tests for the dependency graph and cycle detector."""

from __future__ import annotations

from fieldrules.analysis.graph import (
    build_dependency_graph,
    detect_circular_dependencies,
    find_cycles,
    format_cycle,
)
from tests.conftest import dom, make_rule


class TestBuildDependencyGraph:
    def test_condition_to_target_edges(self) -> None:
        g = build_dependency_graph([make_rule([dom("a"), dom("b")], [dom("c")])])
        assert set(g.edges) == {("a", "c"), ("b", "c")}

    def test_self_reference_is_not_an_edge(self) -> None:
        rule = make_rule([dom("x")], [dom("x", "set_to_value", "default")])
        g = build_dependency_graph([rule])
        assert list(g.nodes) == ["x"]
        assert list(g.edges) == []

    def test_unconditional_rules_add_nothing(self) -> None:
        assert build_dependency_graph([make_rule(None, [dom("a")])]).number_of_nodes() == 0

    def test_duplicate_edges_collapse(self) -> None:
        rules = [make_rule([dom("a")], [dom("b")]), make_rule([dom("a")], [dom("b", negate=True)])]
        assert build_dependency_graph(rules).number_of_edges() == 1


class TestFindCycles:
    def test_two_node_cycle(self) -> None:
        rules = [make_rule([dom("A")], [dom("B")]), make_rule([dom("B")], [dom("A")])]
        assert find_cycles(build_dependency_graph(rules)) == [["A", "B", "A"]]

    def test_three_node_cycle(self) -> None:
        rules = [
            make_rule([dom("A")], [dom("B")]),
            make_rule([dom("B")], [dom("C")]),
            make_rule([dom("C")], [dom("A")]),
        ]
        assert detect_circular_dependencies(rules) == ["Circular dependency detected: A → B → C → A"]

    def test_acyclic(self) -> None:
        rules = [make_rule([dom("A")], [dom("B")]), make_rule([dom("B")], [dom("C")])]
        assert detect_circular_dependencies(rules) == []

    def test_disjoint_components(self) -> None:
        rules = [
            make_rule([dom("A")], [dom("B")]),
            make_rule([dom("B")], [dom("A")]),
            make_rule([dom("X")], [dom("Y")]),
            make_rule([dom("Y")], [dom("X")]),
        ]
        assert detect_circular_dependencies(rules) == [
            "Circular dependency detected: A → B → A",
            "Circular dependency detected: X → Y → X",
        ]

    def test_format_cycle(self) -> None:
        assert format_cycle(["a", "b", "a"]) == "Circular dependency detected: a → b → a"

    def test_back_edge_into_middle_of_path(self) -> None:
        rules = [
            make_rule([dom("A")], [dom("B"), dom("D")]),
            make_rule([dom("B")], [dom("C")]),
            make_rule([dom("C")], [dom("B")]),
        ]
        assert find_cycles(build_dependency_graph(rules)) == [["B", "C", "B"]]


class TestLongChains:
    def test_chain_deeper_than_recursion_limit(self) -> None:
        rules = [make_rule([dom(f"f{i}")], [dom(f"f{i + 1}")]) for i in range(1500)]
        assert detect_circular_dependencies(rules) == []

    def test_long_cycle(self) -> None:
        rules = [make_rule([dom(f"f{i}")], [dom(f"f{(i + 1) % 1500}")]) for i in range(1500)]
        [path] = find_cycles(build_dependency_graph(rules))
        assert len(path) == 1501
        assert path[0] == path[-1] == "f0"
        assert path[-2] == "f1499"
