"""NetworkX view of the target dependencies in a decoded graph.

Nodes are targets keyed ``"<project path>::<target name>"``. Edges run
from a target to what it depends on. Dependencies that are not targets
of the graph (frameworks, packages, SDKs...) become leaf nodes keyed
``"<kind>:<label>"`` with ``external=True``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import networkx as nx

from tuistgraph.errors import DependencyCycleError

if TYPE_CHECKING:
    from tuistgraph.domain.graph import Graph, TargetDependency

_Graph = nx.DiGraph


def target_key(project_path: str, target_name: str) -> str:
    return f"{project_path}::{target_name}"


def _dependency_key(project_path: str, dependency: TargetDependency) -> str:
    if dependency.kind == "target" and dependency.name:
        return target_key(project_path, dependency.name)
    if dependency.kind == "project" and dependency.target and dependency.path:
        return target_key(dependency.path, dependency.target)
    return f"{dependency.kind}:{dependency.label}"


def build_dependency_graph(graph: Graph) -> _Graph:
    """Build a DiGraph of targets and their dependencies.

    All targets are added first so isolated targets still appear.
    """
    g: _Graph = nx.DiGraph()
    for project, target in graph.targets():
        g.add_node(
            target_key(project.path, target.name),
            name=target.name,
            project=project.name,
            product=target.product,
            external=project.is_external,
        )

    for project, target in graph.targets():
        source = target_key(project.path, target.name)
        for dependency in target.dependencies:
            key = _dependency_key(project.path, dependency)
            if key not in g:
                g.add_node(key, name=dependency.label, kind=dependency.kind, external=True)
            g.add_edge(source, key, kind=dependency.kind)
    return g


def order_targets(g: _Graph) -> list[str]:
    """Return target keys of *g* with every dependency before its dependents.

    External leaf nodes are left out. Ties are broken by key so the order
    is stable across runs.

    Raises:
        DependencyCycleError: The target dependencies contain a cycle.
    """
    try:
        ordered = list(nx.lexicographical_topological_sort(g.reverse(copy=False)))
    except nx.NetworkXUnfeasible:
        cycle = [source for source, _target in nx.find_cycle(g)]
        raise DependencyCycleError([*cycle, cycle[0]]) from None
    return [key for key in ordered if "kind" not in g.nodes[key]]


def build_order(graph: Graph) -> list[str]:
    """Build the dependency graph of *graph* and order its targets."""
    return order_targets(build_dependency_graph(graph))
