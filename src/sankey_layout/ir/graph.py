"""Graph IR: the flat node/edge arena the layout pipeline operates on.

Nodes and edges live in two indexable lists. Edges refer to their endpoints by
node index and nodes refer to their incident edges by edge index, so the
structure carries no reference cycles and serialises trivially. Insertion
order of both lists is stable and is used as the tie-break by every layout
phase.

Each node and edge also carries a fixed set of layout fields. They are scratch
state: the pipeline resets and recomputes all of them on every run.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

import networkx as nx


@dataclass
class SankeyNode:
    id: str
    label: str
    in_edges: list[int] = field(default_factory=list)
    out_edges: list[int] = field(default_factory=list)
    # Layout fields
    value: float = 0.0
    level: int = 0
    primary_coord: float = 0.0
    primary_size: float = 0.0
    secondary_coord: float = 0.0
    secondary_size: float = 0.0

    @property
    def center(self) -> float:
        """Midpoint of the node bar along the secondary axis."""
        return self.secondary_coord + self.secondary_size / 2

    def reset_layout(self) -> None:
        self.value = 0.0
        self.level = 0
        self.primary_coord = 0.0
        self.primary_size = 0.0
        self.secondary_coord = 0.0
        self.secondary_size = 0.0


@dataclass
class SankeyEdge:
    source: int
    target: int
    weight: object = 0.0
    label: str | None = None
    # Layout fields
    thickness: float = 0.0
    source_offset: float = 0.0
    target_offset: float = 0.0

    def reset_layout(self) -> None:
        self.thickness = 0.0
        self.source_offset = 0.0
        self.target_offset = 0.0


class SankeyGraph:
    """A weighted directed graph stored as node and edge arenas.

    Parallel edges and self-loops are kept as given; the layout treats every
    edge as an independent ribbon.
    """

    def __init__(self) -> None:
        self.nodes: list[SankeyNode] = []
        self.edges: list[SankeyEdge] = []
        self._index: dict[str, int] = {}

    @classmethod
    def from_edges(
        cls,
        edges: Iterable[tuple[str, str, object]],
        nodes: Iterable[str] = (),
    ) -> SankeyGraph:
        """Build a graph from (source_id, target_id, weight) triples.

        Nodes listed in ``nodes`` are added first, in order; any other endpoint
        is added the first time an edge mentions it.
        """
        graph = cls()
        for node_id in nodes:
            graph.add_node(node_id)
        for src, tgt, weight in edges:
            graph.add_edge(src, tgt, weight)
        return graph

    @classmethod
    def from_networkx(cls, digraph: nx.DiGraph, weight: str = "weight") -> SankeyGraph:
        """Build a graph from a networkx (Multi)DiGraph.

        Node labels come from the ``label`` node attribute when present. Edge
        weights are read from the ``weight`` attribute; missing weights are 0.
        """
        graph = cls()
        for node_id, attrs in digraph.nodes(data=True):
            graph.add_node(str(node_id), attrs.get("label"))
        for src, tgt, attrs in digraph.edges(data=True):
            graph.add_edge(str(src), str(tgt), attrs.get(weight, 0.0), attrs.get("label"))
        return graph

    def add_node(self, node_id: str, label: str | None = None) -> int:
        """Add a node if absent and return its index."""
        if node_id in self._index:
            idx = self._index[node_id]
            if label is not None:
                self.nodes[idx].label = label
            return idx
        idx = len(self.nodes)
        self.nodes.append(SankeyNode(id=node_id, label=label if label is not None else node_id))
        self._index[node_id] = idx
        return idx

    def add_edge(self, source_id: str, target_id: str, weight: object, label: str | None = None) -> int:
        """Add an edge (creating missing endpoints) and return its index."""
        src = self.add_node(source_id)
        tgt = self.add_node(target_id)
        idx = len(self.edges)
        self.edges.append(SankeyEdge(source=src, target=tgt, weight=weight, label=label))
        self.nodes[src].out_edges.append(idx)
        self.nodes[tgt].in_edges.append(idx)
        return idx

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def index_of(self, node_id: str) -> int:
        return self._index[node_id]

    def node(self, node_id: str) -> SankeyNode:
        return self.nodes[self._index[node_id]]

    def edge_between(self, source_id: str, target_id: str) -> SankeyEdge:
        """Return the first edge from source_id to target_id."""
        src = self._index[source_id]
        tgt = self._index[target_id]
        for eidx in self.nodes[src].out_edges:
            if self.edges[eidx].target == tgt:
                return self.edges[eidx]
        raise KeyError(f"No edge {source_id} -> {target_id}")

    def source_of(self, edge: SankeyEdge) -> SankeyNode:
        return self.nodes[edge.source]

    def target_of(self, edge: SankeyEdge) -> SankeyNode:
        return self.nodes[edge.target]

    def node_count(self) -> int:
        return len(self.nodes)

    def edge_count(self) -> int:
        return len(self.edges)

    def in_degree(self, node_id: str) -> int:
        if node_id not in self._index:
            return 0
        return len(self.node(node_id).in_edges)

    def out_degree(self, node_id: str) -> int:
        if node_id not in self._index:
            return 0
        return len(self.node(node_id).out_edges)

    def to_networkx(self) -> nx.MultiDiGraph:
        """Export the topology (ids, labels, weights) as a networkx MultiDiGraph."""
        digraph: nx.MultiDiGraph = nx.MultiDiGraph()
        for node in self.nodes:
            digraph.add_node(node.id, label=node.label)
        for edge in self.edges:
            digraph.add_edge(self.nodes[edge.source].id, self.nodes[edge.target].id, weight=edge.weight)
        return digraph

    def is_dag(self) -> bool:
        return nx.is_directed_acyclic_graph(self.to_networkx())

    def reset_layout(self) -> None:
        """Clear every layout field on every node and edge."""
        for node in self.nodes:
            node.reset_layout()
        for edge in self.edges:
            edge.reset_layout()
