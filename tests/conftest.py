"""
Pytest configuration and fixtures for Knowledge Graph Explorer tests.
"""

import pytest
from unittest.mock import AsyncMock

from knowledge_graph.explorer.controller import ViewController
from knowledge_graph.explorer.layout import Layout, NodeState
from knowledge_graph.explorer.mock_data import MockGraphSource, get_mock_graph_model
from knowledge_graph.explorer.model import Edge, GraphModel, Node

from tests.fixtures.surface import RecordingSurface


# ============================================
# Graph Data Fixtures
# ============================================

@pytest.fixture
def mock_model():
    """The built-in sample organisation graph."""
    return get_mock_graph_model()


@pytest.fixture
def two_node_model():
    """A -> B, the smallest connected graph."""
    return GraphModel.build(
        [Node("A", "Alpha", "person"), Node("B", "Beta", "team")],
        [Edge("A->B", "A", "B", kind="member_of")],
    )


@pytest.fixture
def chain_model():
    """a -> b -> c plus one edge pointing at a node that does not exist."""
    return GraphModel.build(
        [
            Node("a", "Node A", "person"),
            Node("b", "Node B", "team"),
            Node("c", "Node C", "project"),
        ],
        [
            Edge("e1", "a", "b", kind="member_of"),
            Edge("e2", "b", "c", kind="owns"),
            Edge("e3", "c", "ghost", kind="references"),
        ],
    )


def make_layout(width=800, height=600, **positions):
    """Build a Layout from ``node_id=(x, y)`` keyword arguments."""
    states = {nid: NodeState(x=float(x), y=float(y)) for nid, (x, y) in positions.items()}
    return Layout(width=width, height=height, states=states)


@pytest.fixture
def layout_factory():
    return make_layout


# ============================================
# Controller Fixtures
# ============================================

@pytest.fixture
def surfaces():
    """Surfaces created by the controller's surface factory, in order."""
    return []


@pytest.fixture
def surface_factory(surfaces):
    def factory(width, height):
        surface = RecordingSurface(width, height)
        surfaces.append(surface)
        return surface

    return factory


@pytest.fixture
def mock_source(mock_model):
    return MockGraphSource(mock_model)


@pytest.fixture
def stub_source(mock_model):
    """Graph source with AsyncMock methods, for asserting calls and failures."""
    source = AsyncMock()
    source.fetch_visualization.return_value = mock_model
    source.fetch_related.return_value = []
    return source


@pytest.fixture
def controller_factory(surface_factory):
    def factory(source, **kwargs):
        kwargs.setdefault("width", 800)
        kwargs.setdefault("height", 600)
        kwargs.setdefault("seed", 42)
        return ViewController(source, surface_factory=surface_factory, **kwargs)

    return factory


# ============================================
# Markers
# ============================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
    config.addinivalue_line(
        "markers", "ui: mark test as UI component test"
    )
