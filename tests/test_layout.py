"""Tests for the force-directed layout."""

import math

import numpy as np
import pytest

from knowledge_graph.explorer.layout import ForceSimulation, Layout, LayoutParams
from knowledge_graph.explorer.model import Edge, GraphModel, Node


def assert_contained(layout, width, height, padding=50.0):
    for nid, (x, y) in layout.positions().items():
        assert padding <= x <= width - padding, f"{nid} x={x}"
        assert padding <= y <= height - padding, f"{nid} y={y}"


def reference_positions(model, width, height, seed, params=LayoutParams()):
    """Plain per-node loop over the force rules, one pair and one edge at a time."""
    ids = model.node_ids()
    start = np.random.default_rng(seed).random((len(ids), 2)) * [width, height]
    x = [float(v) for v in start[:, 0]]
    y = [float(v) for v in start[:, 1]]
    vx = [0.0] * len(ids)
    vy = [0.0] * len(ids)
    index = {nid: i for i, nid in enumerate(ids)}
    edges = [(index[e.source], index[e.target]) for e in model.valid_edges()]

    for _ in range(params.iterations):
        # Repulsion between every unordered pair
        for j in range(len(ids)):
            for k in range(j + 1, len(ids)):
                dx, dy = x[k] - x[j], y[k] - y[j]
                dist = max(math.hypot(dx, dy), params.min_distance)
                force = params.repulsion / (dist * dist)
                fx, fy = force * dx / dist, force * dy / dist
                vx[k] += fx
                vy[k] += fy
                vx[j] -= fx
                vy[j] -= fy
        # Springs along edges
        for src, dst in edges:
            dx, dy = x[dst] - x[src], y[dst] - y[src]
            dist = max(math.hypot(dx, dy), params.min_distance)
            force = dist * params.attraction
            fx, fy = force * dx / dist, force * dy / dist
            vx[src] += fx
            vy[src] += fy
            vx[dst] -= fx
            vy[dst] -= fy
        for i in range(len(ids)):
            vx[i] += (width / 2 - x[i]) * params.gravity
            vy[i] += (height / 2 - y[i]) * params.gravity
            x[i] += vx[i] * params.time_step
            y[i] += vy[i] * params.time_step
            vx[i] *= params.damping
            vy[i] *= params.damping
            x[i] = min(max(x[i], params.padding), width - params.padding)
            y[i] = min(max(y[i], params.padding), height - params.padding)

    return {nid: (x[i], y[i]) for i, nid in enumerate(ids)}


class TestUpdateRules:
    def test_matches_scalar_loop_on_sample_graph(self, mock_model):
        layout = ForceSimulation().run(mock_model, 800, 600, seed=3)
        expected = reference_positions(mock_model, 800, 600, seed=3)
        for nid, (x, y) in layout.positions().items():
            assert (x, y) == pytest.approx(expected[nid], abs=1e-9), nid

    def test_matches_scalar_loop_with_dangling_edge(self, chain_model):
        params = LayoutParams(iterations=40)
        layout = ForceSimulation(params).run(chain_model, 400, 300, seed=11)
        expected = reference_positions(chain_model, 400, 300, seed=11, params=params)
        for nid, (x, y) in layout.positions().items():
            assert (x, y) == pytest.approx(expected[nid], abs=1e-9), nid


class TestLayoutParams:
    def test_defaults(self):
        p = LayoutParams()
        assert p.iterations == 100
        assert p.repulsion == 1000.0
        assert p.attraction == 0.01
        assert p.gravity == 0.001
        assert p.time_step == 0.1
        assert p.damping == 0.9
        assert p.padding == 50.0

    def test_from_dict_casts_and_ignores_unknown(self):
        p = LayoutParams.from_dict({"iterations": "20", "padding": 10, "bogus": 1})
        assert p.iterations == 20
        assert isinstance(p.padding, float)
        assert p.padding == 10.0

    def test_from_dict_none(self):
        assert LayoutParams.from_dict(None) == LayoutParams()


class TestDeterminism:
    def test_same_seed_same_layout(self, mock_model):
        sim = ForceSimulation()
        first = sim.run(mock_model, 800, 600, seed=7)
        second = sim.run(mock_model, 800, 600, seed=7)
        assert first.positions() == second.positions()

    def test_explicit_rng_matches_seed(self, mock_model):
        sim = ForceSimulation()
        by_seed = sim.run(mock_model, 800, 600, seed=11)
        by_rng = sim.run(mock_model, 800, 600, rng=np.random.default_rng(11))
        assert by_seed.positions() == by_rng.positions()

    def test_different_seeds_differ(self, mock_model):
        sim = ForceSimulation()
        assert sim.run(mock_model, 800, 600, seed=1).positions() != sim.run(
            mock_model, 800, 600, seed=2
        ).positions()


class TestContainment:
    def test_positions_inside_padded_viewport(self, mock_model):
        layout = ForceSimulation().run(mock_model, 800, 600, seed=3)
        assert len(layout) == len(mock_model)
        assert_contained(layout, 800, 600)

    def test_custom_padding(self, mock_model):
        sim = ForceSimulation(LayoutParams(padding=120.0))
        layout = sim.run(mock_model, 640, 480, seed=3)
        assert_contained(layout, 640, 480, padding=120.0)

    def test_viewport_smaller_than_padding_pins_to_centre(self, two_node_model):
        layout = ForceSimulation().run(two_node_model, 60, 40, seed=0)
        for x, y in layout.positions().values():
            assert (x, y) == (30.0, 20.0)

    def test_layout_records_viewport(self, two_node_model):
        layout = ForceSimulation().run(two_node_model, 320, 240, seed=0)
        assert (layout.width, layout.height) == (320, 240)


class TestDegenerateGraphs:
    def test_zero_nodes(self):
        layout = ForceSimulation().run(GraphModel(), 800, 600, seed=0)
        assert isinstance(layout, Layout)
        assert len(layout) == 0

    @pytest.mark.slow
    def test_single_node_converges_to_centre(self):
        model = GraphModel.build([Node("solo", "Solo", "person")])
        sim = ForceSimulation(LayoutParams(iterations=20000))
        layout = sim.run(model, 800, 600, seed=5)
        x, y = layout.position("solo")
        assert x == pytest.approx(400.0, abs=1e-3)
        assert y == pytest.approx(300.0, abs=1e-3)

    def test_single_node_moves_toward_centre(self):
        model = GraphModel.build([Node("solo", "Solo", "person")])
        sim = ForceSimulation()
        start = sim.start(model, 800, 600, seed=5).layout().position("solo")
        end = sim.run(model, 800, 600, seed=5).position("solo")
        assert math.dist(end, (400, 300)) < math.dist(start, (400, 300))

    def test_coincident_nodes_stay_finite(self):
        model = GraphModel.build([Node("a", "A", "person"), Node("b", "B", "person")])
        layout_pass = ForceSimulation().start(model, 800, 600, seed=0)
        layout_pass._pos[:] = (400.0, 300.0)
        layout_pass.advance()
        for x, y in layout_pass.layout().positions().values():
            assert math.isfinite(x) and math.isfinite(y)

    def test_dangling_edges_are_ignored(self, chain_model):
        layout = ForceSimulation().run(chain_model, 800, 600, seed=0)
        assert set(layout.positions()) == {"a", "b", "c"}
        assert "ghost" not in layout


class TestTwoNodeScenario:
    def test_connected_pair(self, two_node_model):
        layout = ForceSimulation().run(two_node_model, 800, 600, seed=42)
        assert_contained(layout, 800, 600)
        distance = math.dist(layout.position("A"), layout.position("B"))
        assert math.isfinite(distance)
        assert distance > 0

    def test_edge_pulls_nodes_closer_than_unconnected(self):
        nodes = [Node("A", "A", "person"), Node("B", "B", "person")]
        sim = ForceSimulation(LayoutParams(iterations=2000))
        linked = sim.run(GraphModel.build(nodes, [Edge("e", "A", "B")]), 800, 600, seed=4)
        unlinked = sim.run(GraphModel.build(nodes), 800, 600, seed=4)
        assert math.dist(linked.position("A"), linked.position("B")) < math.dist(
            unlinked.position("A"), unlinked.position("B")
        )


class TestChunkedPass:
    def test_chunks_match_full_run(self, mock_model):
        sim = ForceSimulation()
        full = sim.run(mock_model, 800, 600, seed=9)

        layout_pass = sim.start(mock_model, 800, 600, seed=9)
        reached = list(layout_pass.chunks(30))
        assert reached == [30, 60, 90, 100]
        assert layout_pass.done
        assert layout_pass.layout().positions() == full.positions()

    def test_advance_counts(self, two_node_model):
        layout_pass = ForceSimulation().start(two_node_model, 800, 600, seed=0)
        assert layout_pass.total == 100
        assert layout_pass.advance(40) == 40
        assert layout_pass.advance(100) == 60
        assert layout_pass.advance(10) == 0
        assert layout_pass.iteration == 100

    def test_invalid_chunk_size(self, two_node_model):
        layout_pass = ForceSimulation().start(two_node_model, 800, 600, seed=0)
        with pytest.raises(ValueError):
            next(layout_pass.chunks(0))

    def test_start_runs_nothing(self, two_node_model):
        layout_pass = ForceSimulation().start(two_node_model, 800, 600, seed=0)
        assert layout_pass.iteration == 0
        assert not layout_pass.done
        for state in layout_pass.layout().states.values():
            assert (state.vx, state.vy) == (0.0, 0.0)


class TestWarmStart:
    def test_initial_positions_reused(self, two_node_model):
        initial = ForceSimulation().run(two_node_model, 800, 600, seed=1)
        layout_pass = ForceSimulation().start(
            two_node_model, 800, 600, seed=99, initial=initial
        )
        assert layout_pass.layout().position("A") == initial.position("A")
