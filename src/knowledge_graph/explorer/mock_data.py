"""
Mock data for Knowledge Explorer development.

Provides a small hardcoded organisation graph that exercises all visual
features: every node group, varied node sizes, long labels, and a few
relation kinds. ``MockGraphSource`` serves it through the same interface
as the API client, so the explorer can run without a backend.
"""

from collections import deque
from typing import Iterable, List, Optional

from knowledge_graph.explorer.model import Edge, GraphModel, Node, RelatedNode


def get_mock_graph_model() -> GraphModel:
    """Return a GraphModel with mock organisation data."""
    nodes = [
        # ── People ───────────────────────────────────────────
        Node("person:ada", "Ada Lovelace", "person"),
        Node("person:grace", "Grace Hopper", "person"),
        Node("person:alan", "Alan Turing", "person"),
        # ── Agents ───────────────────────────────────────────
        Node("agent:triage", "Support Triage Agent", "agent", size=18),
        Node("agent:billing", "Billing Reconciliation Agent", "agent"),
        # ── Teams / projects ─────────────────────────────────
        Node("team:platform", "Platform", "team", size=22),
        Node("team:support", "Customer Support", "team", size=20),
        Node("project:migration", "Postgres 16 Migration", "project"),
        Node("project:onboarding", "Self-serve Onboarding", "project"),
        # ── Work items ───────────────────────────────────────
        Node("task:schema", "Freeze schema changes", "task", size=10),
        Node("task:runbook", "Write rollback runbook", "task", size=10),
        Node("document:rfc", "RFC-042 Storage Tiering", "document", size=12),
        Node("goal:uptime", "99.95% uptime", "goal", size=16),
        Node("workflow:escalation", "Escalation workflow", "workflow"),
    ]
    edges = [
        Edge("e1", "person:ada", "team:platform", kind="member_of"),
        Edge("e2", "person:grace", "team:platform", kind="member_of"),
        Edge("e3", "person:alan", "team:support", kind="member_of"),
        Edge("e4", "agent:triage", "team:support", kind="assigned_to"),
        Edge("e5", "agent:billing", "team:support", kind="assigned_to"),
        Edge("e6", "team:platform", "project:migration", kind="owns"),
        Edge("e7", "team:support", "project:onboarding", kind="owns"),
        Edge("e8", "project:migration", "task:schema", kind="contains"),
        Edge("e9", "project:migration", "task:runbook", kind="contains"),
        Edge("e10", "person:grace", "task:runbook", kind="assigned_to"),
        Edge("e11", "document:rfc", "project:migration", kind="references"),
        Edge("e12", "project:migration", "goal:uptime", kind="contributes_to"),
        Edge("e13", "agent:triage", "workflow:escalation", kind="executes"),
        Edge("e14", "workflow:escalation", "person:alan", kind="notifies"),
    ]
    return GraphModel.build(nodes, edges)


class MockGraphSource:
    """Serves a fixed GraphModel like the knowledge-graph API would."""

    def __init__(self, model: Optional[GraphModel] = None):
        self.model = model or get_mock_graph_model()

    async def fetch_visualization(self, groups: Optional[Iterable[str]] = None) -> GraphModel:
        return self.model.filter_groups(groups)

    async def fetch_related(
        self, node_id: str, depth: int = 2, limit: int = 20
    ) -> List[RelatedNode]:
        """Breadth-first neighbours of ``node_id``, ignoring edge direction."""
        if not self.model.contains(node_id):
            return []

        adjacency = {}
        for edge in self.model.valid_edges():
            adjacency.setdefault(edge.source, []).append((edge.target, edge))
            adjacency.setdefault(edge.target, []).append((edge.source, edge))

        related: List[RelatedNode] = []
        visited = {node_id}
        queue = deque([(node_id, 0)])
        while queue and len(related) < limit:
            current, current_depth = queue.popleft()
            if current_depth >= depth:
                continue
            for neighbour, edge in adjacency.get(current, []):
                if neighbour in visited:
                    continue
                visited.add(neighbour)
                related.append(
                    RelatedNode(
                        node=self.model.get(neighbour),
                        edge=edge,
                        edge_kind=edge.kind or "",
                        depth=current_depth + 1,
                    )
                )
                queue.append((neighbour, current_depth + 1))
        return related[:limit]
