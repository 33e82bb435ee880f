"""
Graph model for the Knowledge Explorer.

Immutable snapshot of the nodes and edges returned by the knowledge-graph
visualization endpoint. A new snapshot replaces the previous one wholesale on
every refresh; nothing here is mutated in place.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

# Node type colors (kept in sync with the backend palette)
NODE_COLORS = {
    "person": "#4CAF50",
    "agent": "#2196F3",
    "team": "#9C27B0",
    "project": "#FF9800",
    "task": "#FFEB3B",
    "document": "#795548",
    "goal": "#E91E63",
    "workflow": "#00BCD4",
}
DEFAULT_NODE_COLOR = "#9E9E9E"

NODE_LABELS = {
    "person": "People",
    "agent": "Agents",
    "team": "Teams",
    "project": "Projects",
    "task": "Tasks",
    "document": "Documents",
    "goal": "Goals",
    "workflow": "Workflows",
}

DEFAULT_NODE_RADIUS = 15.0


def node_color(group: str) -> str:
    """Palette lookup by node group; unknown groups get the neutral grey."""
    return NODE_COLORS.get(group, DEFAULT_NODE_COLOR)


@dataclass(frozen=True)
class Node:
    """One graph entity."""

    id: str
    label: str
    group: str
    size: Optional[float] = None
    title: Optional[str] = None

    def radius(self, default: float = DEFAULT_NODE_RADIUS) -> float:
        return self.size or default

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Node":
        """Build a node from a visualization or related-node payload entry.

        The visualization endpoint uses ``group``; the related endpoint uses
        ``type``. Both are accepted.
        """
        node_id = d.get("id")
        if node_id is None:
            raise ValueError(f"Node payload missing 'id': {d!r}")
        size = d.get("size")
        return cls(
            id=str(node_id),
            label=str(d.get("label") or node_id),
            group=str(d.get("group") or d.get("type") or "unknown"),
            size=float(size) if size else None,
            title=d.get("title"),
        )

    def to_dict(self) -> dict:
        d = {"id": self.id, "label": self.label, "group": self.group}
        if self.size is not None:
            d["size"] = self.size
        if self.title is not None:
            d["title"] = self.title
        return d


@dataclass(frozen=True)
class Edge:
    """A directed relation between two node ids."""

    id: str
    source: str
    target: str
    label: Optional[str] = None
    kind: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Edge":
        """Build an edge from a payload entry (``from``/``to`` or ``source``/``target``)."""
        source = d.get("from", d.get("source"))
        target = d.get("to", d.get("target"))
        if source is None or target is None:
            raise ValueError(f"Edge payload missing endpoints: {d!r}")
        edge_id = d.get("id") or f"{source}->{target}"
        return cls(
            id=str(edge_id),
            source=str(source),
            target=str(target),
            label=d.get("label"),
            kind=d.get("kind") or d.get("type"),
        )

    def to_dict(self) -> dict:
        d = {"id": self.id, "from": self.source, "to": self.target}
        if self.label is not None:
            d["label"] = self.label
        if self.kind is not None:
            d["kind"] = self.kind
        return d


@dataclass(frozen=True)
class RelatedNode:
    """An entry of the related-entity panel for the selected node."""

    node: Node
    edge: Optional[Edge]
    edge_kind: str
    weight: float = 1.0
    depth: int = 1

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "RelatedNode":
        edge_data = d.get("edge") or {}
        edge = None
        if edge_data.get("source") is not None and edge_data.get("target") is not None:
            edge = Edge.from_dict(edge_data)
        return cls(
            node=Node.from_dict(d["node"]),
            edge=edge,
            edge_kind=str(edge_data.get("type") or edge_data.get("kind") or ""),
            weight=float(edge_data.get("weight") or 1.0),
            depth=int(d.get("depth") or 1),
        )


@dataclass(frozen=True)
class GraphStats:
    """Summary figures shown above the graph."""

    node_count: int
    edge_count: int
    density: float
    average_degree: float
    nodes_by_type: Dict[str, int] = field(default_factory=dict)
    edges_by_type: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class GraphModel:
    """Ordered nodes and edges to visualize, treated as a value."""

    nodes: Tuple[Node, ...] = ()
    edges: Tuple[Edge, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphModel":
        """Parse a ``{"nodes": [...], "edges": [...]}`` payload.

        Duplicate node ids keep their first occurrence.
        """
        nodes: List[Node] = []
        seen = set()
        for raw in data.get("nodes") or []:
            node = Node.from_dict(raw)
            if node.id in seen:
                logger.debug(f"Skipping duplicate node id {node.id}")
                continue
            seen.add(node.id)
            nodes.append(node)
        edges = [Edge.from_dict(raw) for raw in data.get("edges") or []]
        return cls(nodes=tuple(nodes), edges=tuple(edges))

    @classmethod
    def build(cls, nodes: Iterable[Node], edges: Iterable[Edge] = ()) -> "GraphModel":
        return cls(nodes=tuple(nodes), edges=tuple(edges))

    def to_dict(self) -> dict:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }

    def __len__(self) -> int:
        return len(self.nodes)

    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    def get(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def contains(self, node_id: Optional[str]) -> bool:
        if node_id is None:
            return False
        return any(n.id == node_id for n in self.nodes)

    def valid_edges(self) -> List[Edge]:
        """Edges whose endpoints both resolve to nodes in this snapshot."""
        ids = set(self.node_ids())
        valid = []
        for edge in self.edges:
            if edge.source in ids and edge.target in ids:
                valid.append(edge)
            else:
                logger.debug(f"Dropping edge {edge.id}: endpoint not in graph")
        return valid

    def filter_groups(self, groups: Optional[Iterable[str]]) -> "GraphModel":
        """Keep only nodes in ``groups`` and the edges between them.

        An empty or missing selection keeps everything, matching the
        unfiltered endpoint.
        """
        wanted = set(groups or ())
        if not wanted:
            return self
        nodes = tuple(n for n in self.nodes if n.group in wanted)
        ids = {n.id for n in nodes}
        edges = tuple(e for e in self.edges if e.source in ids and e.target in ids)
        return GraphModel(nodes=nodes, edges=edges)

    def merge_related(self, related: Iterable[RelatedNode]) -> "GraphModel":
        """Return a new model with related nodes and their edges appended.

        Existing node and edge ids win over incoming ones.
        """
        nodes = list(self.nodes)
        edges = list(self.edges)
        node_ids = {n.id for n in nodes}
        edge_ids = {e.id for e in edges}
        for item in related:
            if item.node.id not in node_ids:
                nodes.append(item.node)
                node_ids.add(item.node.id)
            if item.edge is not None and item.edge.id not in edge_ids:
                edges.append(item.edge)
                edge_ids.add(item.edge.id)
        return GraphModel(nodes=tuple(nodes), edges=tuple(edges))

    def to_networkx(self):
        """Directed networkx multigraph over nodes and valid edges."""
        import networkx as nx

        G = nx.MultiDiGraph()
        for node in self.nodes:
            G.add_node(node.id, label=node.label, group=node.group)
        for edge in self.valid_edges():
            G.add_edge(edge.source, edge.target, id=edge.id, kind=edge.kind)
        return G

    def stats(self) -> GraphStats:
        """Node/edge counts, density and average degree for the stats cards."""
        import networkx as nx

        G = self.to_networkx().to_undirected()
        n = G.number_of_nodes()
        m = G.number_of_edges()
        density = nx.density(G) if n > 1 else 0.0
        average_degree = (2.0 * m / n) if n else 0.0
        return GraphStats(
            node_count=n,
            edge_count=m,
            density=density,
            average_degree=average_degree,
            nodes_by_type=dict(Counter(node.group for node in self.nodes)),
            edges_by_type=dict(
                Counter((e.kind or e.label or "related") for e in self.valid_edges())
            ),
        )
