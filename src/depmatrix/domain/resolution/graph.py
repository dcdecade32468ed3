"""Directed dependency graph and the algorithms run over it.

Nodes are application ids, kept in first-seen order so every traversal is
deterministic. Edges point from the dependent application to the one it
depends on and are unique per ``(target, type)``; the first edge added wins.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import networkx as nx

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from depmatrix.domain.model import ConfidenceScore, Dependency, DependencyType

log = getLogger(__name__)

type EdgeKey = tuple[str, DependencyType]


class CyclicDependencyError(RuntimeError):
    """Raised when an ordering is requested from a graph that contains cycles."""

    def __init__(self, cycles: list[list[str]]) -> None:
        self.cycles = cycles
        super().__init__(
            f"Cannot compute topological order: graph contains {len(cycles)} cycle(s)"
        )


@dataclass(frozen=True, slots=True)
class GraphEdge:
    target: str
    type: DependencyType
    confidence: ConfidenceScore | None = field(default=None, compare=False)

    def as_dict(self) -> dict[str, object]:
        return {
            "target": self.target,
            "type": str(self.type),
            "confidence": float(self.confidence) if self.confidence is not None else None,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class GraphStatistics:
    node_count: int
    edge_count: int
    cycle_count: int
    component_count: int

    def as_dict(self) -> dict[str, int]:
        return {
            "nodeCount": self.node_count,
            "edgeCount": self.edge_count,
            "cycleCount": self.cycle_count,
            "componentCount": self.component_count,
        }


@dataclass(slots=True)
class DependencyGraph:
    _adjacency: dict[str, dict[EdgeKey, GraphEdge]] = field(default_factory=dict, repr=False)

    @property
    def nodes(self) -> tuple[str, ...]:
        return tuple(self._adjacency)

    def __contains__(self, node: object) -> bool:
        return node in self._adjacency

    def __len__(self) -> int:
        return len(self._adjacency)

    @classmethod
    def from_dependencies(cls, dependencies: Iterable[Dependency]) -> DependencyGraph:
        """Build a graph with one edge per dependency.

        The graph offers no public mutators; this and ``extract_subgraph`` are
        the only ways to populate one.
        """

        graph = cls()
        for dependency in dependencies:
            added = graph._add_edge(
                dependency.source_app_id,
                GraphEdge(
                    target=dependency.target_app_id,
                    type=dependency.type,
                    confidence=dependency.confidence_score,
                ),
            )
            if not added:
                log.debug("Ignoring duplicate edge: %s", dependency)
        return graph

    def _add_node(self, node: str) -> None:
        self._adjacency.setdefault(node, {})

    def _add_edge(self, source: str, edge: GraphEdge) -> bool:
        """Add ``edge`` leaving ``source``; return ``False`` if an equal edge exists."""

        self._add_node(source)
        self._add_node(edge.target)
        edges = self._adjacency[source]
        key = (edge.target, edge.type)
        if key in edges:
            return False
        edges[key] = edge
        return True

    def edges(self) -> Iterator[tuple[str, GraphEdge]]:
        for source, edges in self._adjacency.items():
            for edge in edges.values():
                yield source, edge

    @property
    def edge_count(self) -> int:
        return sum(len(edges) for edges in self._adjacency.values())

    def get_dependencies(self, node: str) -> list[GraphEdge]:
        return list(self._adjacency.get(node, {}).values())

    def get_dependents(self, node: str) -> list[str]:
        return [
            source
            for source, edges in self._adjacency.items()
            if any(edge.target == node for edge in edges.values())
        ]

    def _successors(self, node: str) -> list[str]:
        return list(dict.fromkeys(edge.target for edge in self._adjacency.get(node, {}).values()))

    def detect_cycles(self) -> list[list[str]]:
        """Return every cycle closed by a back edge during a depth-first walk.

        Each cycle starts and ends with the revisited node, so a self-loop on
        ``a`` is reported as ``["a", "a"]``.
        """

        visited: set[str] = set()
        cycles: list[list[str]] = []

        for start in self._adjacency:
            if start in visited:
                continue
            visited.add(start)
            path = [start]
            on_path = {start}
            pending = [iter(self._successors(start))]

            while pending:
                neighbor = next(pending[-1], None)
                if neighbor is None:
                    pending.pop()
                    on_path.discard(path.pop())
                    continue
                if neighbor in on_path:
                    cycle = [*path[path.index(neighbor) :], neighbor]
                    log.debug("Detected dependency cycle: %s", " -> ".join(cycle))
                    cycles.append(cycle)
                elif neighbor not in visited:
                    visited.add(neighbor)
                    path.append(neighbor)
                    on_path.add(neighbor)
                    pending.append(iter(self._successors(neighbor)))

        return cycles

    def get_topological_order(self) -> list[str]:
        cycles = self.detect_cycles()
        if cycles:
            raise CyclicDependencyError(cycles)

        in_degree = dict.fromkeys(self._adjacency, 0)
        for node in self._adjacency:
            for target in self._successors(node):
                in_degree[target] += 1

        queue = deque(node for node, degree in in_degree.items() if degree == 0)
        order: list[str] = []
        while queue:
            node = queue.popleft()
            order.append(node)
            for target in self._successors(node):
                in_degree[target] -= 1
                if in_degree[target] == 0:
                    queue.append(target)
        return order

    def to_networkx(self) -> nx.DiGraph:
        """Directed view with one edge per ``source -> target`` pair."""

        digraph = nx.DiGraph()
        digraph.add_nodes_from(self._adjacency)
        digraph.add_edges_from((source, edge.target) for source, edge in self.edges())
        return digraph

    def find_shortest_path(self, source: str, target: str) -> list[str]:
        """Fewest-hop path from ``source`` to ``target``; ``[]`` when there is none."""

        try:
            return list(nx.shortest_path(self.to_networkx(), source=source, target=target))
        except (nx.NetworkXNoPath, nx.NodeNotFound):
            return []

    def extract_subgraph(self, nodes: Iterable[str]) -> DependencyGraph:
        wanted = set(nodes)
        subgraph = DependencyGraph()
        for node, edges in self._adjacency.items():
            if node not in wanted:
                continue
            subgraph._add_node(node)
            for edge in edges.values():
                if edge.target in wanted:
                    subgraph._add_edge(node, edge)
        return subgraph

    def connected_components(self) -> list[set[str]]:
        """Group nodes that are connected when edge direction is ignored."""

        return list(nx.weakly_connected_components(self.to_networkx()))

    def get_statistics(self) -> GraphStatistics:
        return GraphStatistics(
            node_count=len(self._adjacency),
            edge_count=self.edge_count,
            cycle_count=len(self.detect_cycles()),
            component_count=len(self.connected_components()),
        )

    def as_dict(self) -> dict[str, list[dict[str, object]]]:
        return {
            node: [edge.as_dict() for edge in edges.values()]
            for node, edges in self._adjacency.items()
        }


class DependencyGraphBuilder:
    """Builds a ``DependencyGraph`` from inferred dependencies."""

    def build_graph(self, dependencies: Iterable[Dependency]) -> DependencyGraph:
        batch = list(dependencies)
        graph = DependencyGraph.from_dependencies(batch)
        if not batch:
            log.warning("No dependencies provided for graph building")
        log.info(
            "Built dependency graph with %s nodes and %s edges",
            len(graph),
            graph.edge_count,
        )
        return graph


def build_graph(dependencies: Iterable[Dependency]) -> DependencyGraph:
    return DependencyGraphBuilder().build_graph(dependencies)
