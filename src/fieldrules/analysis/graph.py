"""Dependency graph — condition fields point at the target fields they drive.

Nodes are field names; an edge ``A -> B`` means some rule with a condition
on ``A`` has a target on ``B``. Edges where condition and target name the
same field are left out: "if X is set, set X to 'default'" is a default-value
rule, not a dependency.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING

import networkx as nx

if TYPE_CHECKING:
    from fieldrules.domain.models import Rule

type DependencyGraph = nx.DiGraph

CYCLE_PREFIX = "Circular dependency detected: "
PATH_SEPARATOR = " → "


def build_dependency_graph(rules: Sequence[Rule]) -> DependencyGraph:
    """Build the condition -> target graph for *rules*.

    Nodes keep first-seen order, which fixes the order cycles are reported in.
    """
    g: DependencyGraph = nx.DiGraph()
    for rule in rules:
        for condition in rule.condition_list:
            g.add_node(condition.name)
            for target in rule.targets:
                if target.name == condition.name:
                    continue
                g.add_edge(condition.name, target.name)
    return g


def find_cycles(g: DependencyGraph) -> list[list[str]]:
    """Depth-first search with an explicit stack; one path per back-edge found.

    Each path starts and ends with the node the back-edge returns to, e.g.
    ``["A", "B", "A"]``. Every node is expanded at most once, so disjoint
    components are each visited a single time. Depth is bounded by the graph
    size, not the interpreter's recursion limit.
    """
    cycles: list[list[str]] = []
    visited: set[str] = set()
    on_stack: set[str] = set()

    for root in g.nodes:
        if root in visited:
            continue
        visited.add(root)
        on_stack.add(root)
        path: list[str] = [root]
        frames: list[tuple[str, Iterator[str]]] = [(root, iter(g.successors(root)))]
        while frames:
            node, successors = frames[-1]
            successor = next(successors, None)
            if successor is None:
                frames.pop()
                path.pop()
                on_stack.discard(node)
                continue
            if successor in on_stack:
                start = path.index(successor)
                cycles.append([*path[start:], successor])
                continue
            if successor in visited:
                continue
            visited.add(successor)
            on_stack.add(successor)
            path.append(successor)
            frames.append((successor, iter(g.successors(successor))))
    return cycles


def format_cycle(path: Sequence[str]) -> str:
    """``["A", "B", "A"]`` -> ``"Circular dependency detected: A → B → A"``."""
    return CYCLE_PREFIX + PATH_SEPARATOR.join(path)


def detect_circular_dependencies(rules: Sequence[Rule]) -> list[str]:
    """Cycle error messages for *rules*, unfiltered."""
    return [format_cycle(path) for path in find_cycles(build_dependency_graph(rules))]
