"""Knowledge Explorer - force-directed graph view with click selection."""

from knowledge_graph.explorer.model import (
    NODE_COLORS,
    NODE_LABELS,
    Edge,
    GraphModel,
    GraphStats,
    Node,
    RelatedNode,
)
from knowledge_graph.explorer.layout import ForceSimulation, Layout, LayoutParams, NodeState
from knowledge_graph.explorer.renderer import (
    GraphRenderer,
    MatplotlibSurface,
    RenderStyle,
    to_plotly_figure,
)
from knowledge_graph.explorer.hit_test import HitOrder, hit_test
from knowledge_graph.explorer.controller import ViewController, ViewState
from knowledge_graph.explorer.mock_data import MockGraphSource, get_mock_graph_model

__all__ = [
    "NODE_COLORS",
    "NODE_LABELS",
    "Edge",
    "GraphModel",
    "GraphStats",
    "Node",
    "RelatedNode",
    "ForceSimulation",
    "Layout",
    "LayoutParams",
    "NodeState",
    "GraphRenderer",
    "MatplotlibSurface",
    "RenderStyle",
    "to_plotly_figure",
    "HitOrder",
    "hit_test",
    "ViewController",
    "ViewState",
    "MockGraphSource",
    "get_mock_graph_model",
]
