"""Reusable test data factories for knowledge graph explorer tests.

Factory functions return plain dicts shaped like the backend payloads, so
callers can use them either as:
    Node.from_dict(make_node_payload()): model parsing
    make_node_payload(label="Custom"): dict-based usage / direct assertions

Payload shapes match the dashboard API:
    visualization nodes: id, label, group, title, color, size, shape
    visualization edges: id, from, to, label
    related entries: node {id, type, label, properties}, edge {...}, depth
"""

from typing import Any, List, Optional


def make_node_payload(**overrides: Any) -> dict:
    """Create a visualization node dict with sensible defaults."""
    defaults = {
        "id": "person:test",
        "label": "Test Person",
        "group": "person",
        "title": "Test Person (person)",
        "color": "#4CAF50",
        "size": 20,
        "shape": "dot",
    }
    defaults.update(overrides)
    return defaults


def make_edge_payload(**overrides: Any) -> dict:
    """Create a visualization edge dict with sensible defaults."""
    defaults = {
        "id": "edge-1",
        "from": "person:test",
        "to": "team:test",
        "label": "member_of",
        "arrows": "to",
    }
    defaults.update(overrides)
    return defaults


def make_visualization_payload(
    nodes: Optional[List[dict]] = None, edges: Optional[List[dict]] = None
) -> dict:
    """Create a ``{"nodes": [...], "edges": [...]}`` visualization response."""
    if nodes is None:
        nodes = [
            make_node_payload(),
            make_node_payload(id="team:test", label="Test Team", group="team", size=None),
        ]
    if edges is None:
        edges = [make_edge_payload()]
    return {"nodes": nodes, "edges": edges}


def make_related_entry(**overrides: Any) -> dict:
    """Create one entry of the ``related`` list returned for a selected node."""
    defaults = {
        "node": {
            "id": "project:test",
            "type": "project",
            "label": "Test Project",
            "properties": {"status": "active"},
        },
        "edge": {
            "id": "edge-2",
            "source": "team:test",
            "target": "project:test",
            "type": "owns",
            "weight": 0.5,
        },
        "depth": 1,
    }
    defaults.update(overrides)
    return defaults
