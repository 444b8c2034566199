"""
GlyphWeave Transition Graph Analyzer
=====================================

Directed weighted transition graph over trigram values. Nodes are the
distinct token values of a stream; an edge u -> v counts how often v
immediately follows u.

Analyses:
    - Degree statistics: in/out degree (distinct neighbours), hubs,
      sources (in-degree 0) and sinks (out-degree 0).
    - Strongly connected components by two-pass depth-first search
      (Kosaraju): a postorder pass on the graph, then a pass on the
      reversed graph in reverse finishing order.
    - Undirected clusters: connected components after dropping edges
      lighter than a weight floor.

Traversals use explicit stacks and visited markers addressed by each
node's rank in the sorted node list. Nodes are always expanded in
ascending value order, so every result is reproducible.

References:
    - Sharir, M. (1981). A strong-connectivity algorithm and its
      applications in data flow analysis. Computers & Mathematics with
      Applications, 7(1), 67-72.
    - Cormen, T. H. et al. (2009). Introduction to Algorithms, 3rd ed.,
      Section 22.5. MIT Press.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Optional

import networkx as nx

from shared.logger import GlyphLogger

from glyphweave.analyzers.sequence import TokenLike, as_values
from glyphweave.core.errors import AnalysisPreconditionError
from glyphweave.core.models import (
    TransitionClusterAnalysis,
    TransitionGraphAnalysis,
)

logger = GlyphLogger("glyphweave.graph")

Graph = dict[int, dict[int, int]]


class GraphAnalyzer:
    """Builds and analyses transition graphs of token streams.

    Usage::

        analyzer = GraphAnalyzer(hub_threshold=10)
        analysis = analyzer.analyze(tokens)
        clusters = analyzer.clusters(tokens, min_edge_weight=2)
    """

    def __init__(self, hub_threshold: int = 10) -> None:
        """Initialise the graph analyzer.

        Args:
            hub_threshold: Minimum out-degree for a node to count as a hub.
        """
        self.hub_threshold: int = hub_threshold

    # ------------------------------------------------------------------ #
    #  Graph Construction
    # ------------------------------------------------------------------ #

    @staticmethod
    def build_graph(stream: Iterable[TokenLike]) -> Graph:
        """Count adjacent-pair transitions in one pass over the stream.

        Returns:
            Source value -> destination value -> count. Keys appear in
            first-seen order.
        """
        values = as_values(stream)
        graph: Graph = {}
        for src, dst in zip(values, values[1:]):
            edges = graph.setdefault(src, {})
            edges[dst] = edges.get(dst, 0) + 1
        return graph

    # ------------------------------------------------------------------ #
    #  Degree / Component Analysis
    # ------------------------------------------------------------------ #

    def analyze(self, stream: Iterable[TokenLike]) -> TransitionGraphAnalysis:
        """Degree statistics, hubs, sources, sinks and SCCs of a stream.

        Hubs are ranked by descending out-degree; equal out-degrees are
        ordered by ascending node value.
        """
        values = as_values(stream)
        graph = self.build_graph(values)
        nodes = sorted(set(values))

        in_degrees = {node: 0 for node in nodes}
        out_degrees = {node: 0 for node in nodes}
        for src, edges in graph.items():
            out_degrees[src] = len(edges)
            for dst in edges:
                in_degrees[dst] += 1

        sources = [n for n in nodes if in_degrees[n] == 0]
        sinks = [n for n in nodes if out_degrees[n] == 0]
        hubs = sorted(
            (n for n in nodes if out_degrees[n] >= self.hub_threshold),
            key=lambda n: (-out_degrees[n], n),
        )
        components = strongly_connected_components(nodes, graph)

        analysis = TransitionGraphAnalysis(
            graph=graph,
            nodes=nodes,
            sources=sources,
            sinks=sinks,
            hubs=hubs,
            hub_threshold=self.hub_threshold,
            components=components,
            in_degrees=in_degrees,
            out_degrees=out_degrees,
        )

        logger.info(
            f"Transition graph: {analysis.node_count} nodes, "
            f"{analysis.edge_count} edges, "
            f"{analysis.total_transitions} transitions, "
            f"{analysis.component_count} SCCs"
        )
        return analysis

    # ------------------------------------------------------------------ #
    #  Undirected Clusters
    # ------------------------------------------------------------------ #

    def clusters(
        self,
        stream: Iterable[TokenLike],
        min_edge_weight: int = 2,
    ) -> TransitionClusterAnalysis:
        """Connected components of the undirected graph above a floor.

        An undirected edge {u, v} is kept when the directed edge u -> v
        alone has weight >= ``min_edge_weight``.

        Raises:
            AnalysisPreconditionError: If ``min_edge_weight`` < 1.
        """
        if min_edge_weight < 1:
            raise AnalysisPreconditionError(
                f"Edge weight floor must be at least 1 (got {min_edge_weight})."
            )

        values = as_values(stream)
        graph = self.build_graph(values)
        nodes = sorted(set(values))

        neighbours: dict[int, set[int]] = {node: set() for node in nodes}
        for src, edges in graph.items():
            for dst, weight in edges.items():
                if weight < min_edge_weight:
                    continue
                neighbours[src].add(dst)
                neighbours[dst].add(src)
        adjacency = {node: sorted(neighbours[node]) for node in nodes}

        rank = {node: i for i, node in enumerate(nodes)}
        visited = [False] * len(nodes)
        clusters: list[list[int]] = []

        for root in nodes:
            if visited[rank[root]]:
                continue
            visited[rank[root]] = True
            component: list[int] = []
            stack = [root]
            while stack:
                current = stack.pop()
                component.append(current)
                for neighbour in adjacency[current]:
                    if not visited[rank[neighbour]]:
                        visited[rank[neighbour]] = True
                        stack.append(neighbour)
            component.sort()
            clusters.append(component)

        clusters.sort(key=lambda c: (-len(c), c[0]))

        result = TransitionClusterAnalysis(
            min_edge_weight=min_edge_weight,
            adjacency=adjacency,
            clusters=clusters,
        )
        logger.debug(
            f"Clusters at weight >= {min_edge_weight}: "
            f"{result.cluster_count} clusters, largest {result.largest_cluster_size}"
        )
        return result

    # ------------------------------------------------------------------ #
    #  NetworkX export & topology
    # ------------------------------------------------------------------ #

    @staticmethod
    def to_digraph(graph: Mapping[int, Mapping[int, int]]) -> nx.DiGraph:
        """Export a transition graph as a weighted ``networkx.DiGraph``."""
        digraph = nx.DiGraph()
        for src, edges in graph.items():
            digraph.add_node(src)
            for dst, weight in edges.items():
                digraph.add_edge(src, dst, weight=weight)
        return digraph

    def topology(self, analysis: TransitionGraphAnalysis) -> dict[str, Optional[float]]:
        """Global shape metrics of an analysed graph.

        Metrics:
        - density: distinct edges over n(n-1) possible directed edges.
        - reciprocity: fraction of edges whose reverse edge also exists.
        - weak_components: weakly connected component count.
        - avg_clustering: mean clustering coefficient, undirected view.
        """
        digraph = self.to_digraph(analysis.graph)
        digraph.add_nodes_from(analysis.nodes)

        metrics: dict[str, Optional[float]] = {
            "density": None,
            "reciprocity": None,
            "weak_components": None,
            "avg_clustering": None,
        }
        if digraph.number_of_nodes() == 0:
            return metrics

        metrics["density"] = float(nx.density(digraph))
        metrics["weak_components"] = float(
            nx.number_weakly_connected_components(digraph)
        )
        metrics["avg_clustering"] = float(nx.average_clustering(digraph.to_undirected()))
        if digraph.number_of_edges() > 0:
            metrics["reciprocity"] = float(nx.overall_reciprocity(digraph))
        return metrics


# ---------------------------------------------------------------------- #
#  Strongly Connected Components
# ---------------------------------------------------------------------- #


def strongly_connected_components(
    nodes: Iterable[int],
    graph: Mapping[int, Mapping[int, Any]],
) -> list[list[int]]:
    """Kosaraju SCCs with explicit stacks.

    Pass 1 records DFS finishing order on the graph, starting roots and
    successors in ascending order. Pass 2 walks the reversed graph in
    reverse finishing order; each tree is one component. A node with no
    edges forms its own singleton component.

    Returns:
        Components with ascending members, ordered by descending size
        then ascending smallest member.
    """
    ordered = sorted(set(nodes) | set(graph) | {d for e in graph.values() for d in e})
    if not ordered:
        return []

    rank = {node: i for i, node in enumerate(ordered)}
    successors = {node: sorted(graph.get(node, {})) for node in ordered}

    # -- Pass 1: finishing order --
    visited = [False] * len(ordered)
    finish: list[int] = []
    for root in ordered:
        if visited[rank[root]]:
            continue
        visited[rank[root]] = True
        stack = [(root, iter(successors[root]))]
        while stack:
            node, pending = stack[-1]
            for nxt in pending:
                if not visited[rank[nxt]]:
                    visited[rank[nxt]] = True
                    stack.append((nxt, iter(successors[nxt])))
                    break
            else:
                stack.pop()
                finish.append(node)

    # -- Pass 2: reversed graph --
    predecessors: dict[int, list[int]] = {node: [] for node in ordered}
    for src in ordered:
        for dst in successors[src]:
            predecessors[dst].append(src)

    visited = [False] * len(ordered)
    components: list[list[int]] = []
    for root in reversed(finish):
        if visited[rank[root]]:
            continue
        visited[rank[root]] = True
        component: list[int] = []
        stack_nodes = [root]
        while stack_nodes:
            node = stack_nodes.pop()
            component.append(node)
            for prev in predecessors[node]:
                if not visited[rank[prev]]:
                    visited[rank[prev]] = True
                    stack_nodes.append(prev)
        component.sort()
        components.append(component)

    components.sort(key=lambda c: (-len(c), c[0]))
    return components


# ---------------------------------------------------------------------- #
#  Module-level query functions
# ---------------------------------------------------------------------- #


def build_transition_graph(stream: Iterable[TokenLike]) -> Graph:
    return GraphAnalyzer.build_graph(stream)


def analyze_transition_graph(
    stream: Iterable[TokenLike],
    hub_threshold: int = 10,
) -> TransitionGraphAnalysis:
    return GraphAnalyzer(hub_threshold=hub_threshold).analyze(stream)


def analyze_transition_clusters(
    stream: Iterable[TokenLike],
    min_edge_weight: int = 2,
) -> TransitionClusterAnalysis:
    return GraphAnalyzer().clusters(stream, min_edge_weight=min_edge_weight)
