"""Backend access for the knowledge graph explorer."""

from .graph_api import (
    KnowledgeGraphClient,
    KnowledgeGraphError,
    GraphFetchError,
    GraphUnavailableError,
    GraphPayloadError,
)

__all__ = [
    "KnowledgeGraphClient",
    "KnowledgeGraphError",
    "GraphFetchError",
    "GraphUnavailableError",
    "GraphPayloadError",
]
