"""Tests for the built-in sample graph and its in-process source."""

import pytest

from knowledge_graph.explorer.mock_data import MockGraphSource


class TestMockGraphSource:
    @pytest.mark.asyncio
    async def test_fetch_visualization_unfiltered(self, mock_model):
        source = MockGraphSource(mock_model)
        assert await source.fetch_visualization() is mock_model

    @pytest.mark.asyncio
    async def test_fetch_visualization_filtered(self):
        model = await MockGraphSource().fetch_visualization(["team"])
        assert model.node_ids() == ["team:platform", "team:support"]
        assert model.edges == ()

    @pytest.mark.asyncio
    async def test_fetch_related_breadth_first(self):
        related = await MockGraphSource().fetch_related("person:ada", depth=2)
        assert [(r.node.id, r.depth) for r in related] == [
            ("team:platform", 1),
            ("person:grace", 2),
            ("project:migration", 2),
        ]
        assert related[0].edge_kind == "member_of"

    @pytest.mark.asyncio
    async def test_fetch_related_depth_one(self):
        related = await MockGraphSource().fetch_related("person:ada", depth=1)
        assert [r.node.id for r in related] == ["team:platform"]

    @pytest.mark.asyncio
    async def test_fetch_related_limit(self):
        related = await MockGraphSource().fetch_related("person:ada", depth=2, limit=2)
        assert len(related) == 2

    @pytest.mark.asyncio
    async def test_fetch_related_unknown_node(self):
        assert await MockGraphSource().fetch_related("nope") == []
