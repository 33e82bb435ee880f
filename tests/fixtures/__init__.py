"""Shared test fixtures and factory functions for knowledge graph explorer tests."""

from tests.fixtures.data import (
    make_node_payload,
    make_edge_payload,
    make_visualization_payload,
    make_related_entry,
)
from tests.fixtures.surface import RecordingSurface

__all__ = [
    "make_node_payload",
    "make_edge_payload",
    "make_visualization_payload",
    "make_related_entry",
    "RecordingSurface",
]
