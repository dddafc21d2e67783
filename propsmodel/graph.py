"""
PropsModel Dependency Graph
===========================

Records which properties each derived property (or view) is computed from.

An edge `dependency -> dependent` means the dependent is recomputed whenever
the dependency changes. The model only adds edges from properties that
already exist to the property being defined, so the graph stays acyclic
without a check of its own.

Usage:
    graph = DependencyGraph()
    graph.add_node("price")
    graph.add_node("qty")
    graph.add_edge("price", "total")
    graph.add_edge("qty", "total")

    graph.get_dependencies("total")  # ["price", "qty"]
    graph.get_dependents("price")    # ["total"]
"""

from typing import Dict, List


class DependencyGraph:
    """
    Directed graph of property names.

    Dicts are used as ordered sets so that every query answers in a stable
    order: dependencies in the order they were declared, dependents in the
    order they were defined.

    Attributes:
        graph: Forward edges (name -> names that depend on it)
        reverse_graph: Reverse edges (name -> names it depends on)
    """

    def __init__(self):
        self.graph: Dict[str, Dict[str, None]] = {}
        self.reverse_graph: Dict[str, Dict[str, None]] = {}

    def add_node(self, node: str) -> None:
        """Add a node with no edges if it is not in the graph yet."""
        if node not in self.graph:
            self.graph[node] = {}
            self.reverse_graph[node] = {}

    def add_edge(self, from_node: str, to_node: str) -> bool:
        """
        Add the edge from_node -> to_node: to_node depends on from_node.

        Returns:
            True if the edge is new, False if it already existed
        """
        self.add_node(from_node)
        self.add_node(to_node)

        if to_node in self.graph[from_node]:
            return False

        self.graph[from_node][to_node] = None
        self.reverse_graph[to_node][from_node] = None
        return True

    def get_dependencies(self, node: str) -> List[str]:
        """Direct dependencies of `node`."""
        return list(self.reverse_graph.get(node, ()))

    def get_dependents(self, node: str) -> List[str]:
        """Nodes that depend directly on `node`."""
        return list(self.graph.get(node, ()))

    def __len__(self) -> int:
        return len(self.graph)

    def __contains__(self, node: object) -> bool:
        return node in self.graph

    def __str__(self) -> str:
        edges = sum(len(dependents) for dependents in self.graph.values())
        return f"DependencyGraph(nodes={len(self.graph)}, edges={edges})"
