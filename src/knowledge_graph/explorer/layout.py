"""
Force-directed layout for the Knowledge Explorer.

Simplified spring-electrical model over one GraphModel snapshot:

- inverse-square repulsion between every pair of nodes
- linear spring attraction along every edge
- weak gravity toward the viewport centre
- velocity damping, then clamping into a padded rectangle

The pass runs a fixed number of iterations rather than iterating to
convergence. Pairwise terms are computed as N x N numpy arrays, which is
fine for dashboard-sized graphs (a few hundred nodes).

Simulation state lives in a Layout (node id -> NodeState), never on the
Node entities themselves.
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from knowledge_graph.explorer.model import GraphModel
from knowledge_graph.utils.observability import timed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutParams:
    """Constants of the force model."""

    iterations: int = 100
    repulsion: float = 1000.0
    attraction: float = 0.01
    gravity: float = 0.001
    time_step: float = 0.1
    damping: float = 0.9
    padding: float = 50.0
    min_distance: float = 1.0

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> "LayoutParams":
        """Build params from a config section, ignoring unknown keys."""
        d = d or {}
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in d.items():
            if key not in known:
                logger.warning(f"Ignoring unknown layout setting '{key}'")
                continue
            kwargs[key] = int(value) if key == "iterations" else float(value)
        return cls(**kwargs)


@dataclass
class NodeState:
    """Position and velocity of one node during a pass."""

    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0


@dataclass(frozen=True)
class Layout:
    """Result of a layout pass: node id -> state, plus the viewport it was computed for."""

    width: float
    height: float
    states: Dict[str, NodeState] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.states)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self.states

    def position(self, node_id: str) -> Optional[Tuple[float, float]]:
        state = self.states.get(node_id)
        if state is None:
            return None
        return state.x, state.y

    def positions(self) -> Dict[str, Tuple[float, float]]:
        return {nid: (s.x, s.y) for nid, s in self.states.items()}


def _clamp_range(extent: float, pad: float) -> Tuple[float, float]:
    lo, hi = pad, extent - pad
    if lo > hi:
        # Viewport smaller than twice the padding: pin to the centre line
        mid = extent / 2.0
        return mid, mid
    return lo, hi


class LayoutPass:
    """One in-progress layout pass that can be advanced in chunks.

    Running every iteration in one ``advance`` call or in several smaller
    ones produces identical positions.
    """

    def __init__(
        self,
        model: GraphModel,
        width: float,
        height: float,
        params: LayoutParams,
        rng: np.random.Generator,
        initial: Optional[Layout] = None,
    ):
        self.model = model
        self.width = float(width)
        self.height = float(height)
        self.params = params
        self.iteration = 0

        self._ids: List[str] = model.node_ids()
        n = len(self._ids)
        index = {nid: i for i, nid in enumerate(self._ids)}

        self._pos = rng.random((n, 2)) * np.array([self.width, self.height])
        self._vel = np.zeros((n, 2))
        if initial is not None:
            for nid, i in index.items():
                state = initial.states.get(nid)
                if state is not None:
                    self._pos[i] = (state.x, state.y)

        edges = model.valid_edges()
        self._src = np.array([index[e.source] for e in edges], dtype=np.intp)
        self._dst = np.array([index[e.target] for e in edges], dtype=np.intp)

        x_lo, x_hi = _clamp_range(self.width, params.padding)
        y_lo, y_hi = _clamp_range(self.height, params.padding)
        self._lo = np.array([x_lo, y_lo])
        self._hi = np.array([x_hi, y_hi])
        self._center = np.array([self.width / 2.0, self.height / 2.0])

    @property
    def total(self) -> int:
        return self.params.iterations

    @property
    def edge_count(self) -> int:
        return len(self._src)

    @property
    def done(self) -> bool:
        return self.iteration >= self.params.iterations

    def _repel(self) -> None:
        p = self.params
        # delta[j, k] = pos_k - pos_j
        delta = self._pos[np.newaxis, :, :] - self._pos[:, np.newaxis, :]
        dist = np.maximum(np.sqrt((delta ** 2).sum(axis=2)), p.min_distance)
        force = p.repulsion / (dist * dist)
        push = delta * (force / dist)[:, :, np.newaxis]
        # Each pair pushes k along +delta and j along -delta; the diagonal is zero
        self._vel += push.sum(axis=0)

    def _attract(self) -> None:
        if len(self._src) == 0:
            return
        p = self.params
        delta = self._pos[self._dst] - self._pos[self._src]
        dist = np.maximum(np.sqrt((delta ** 2).sum(axis=1)), p.min_distance)
        pull = delta * ((dist * p.attraction) / dist)[:, np.newaxis]
        np.add.at(self._vel, self._src, pull)
        np.subtract.at(self._vel, self._dst, pull)

    def step(self) -> None:
        """Run a single iteration."""
        p = self.params
        if len(self._ids) > 1:
            self._repel()
        self._attract()
        self._vel += (self._center - self._pos) * p.gravity
        self._pos += self._vel * p.time_step
        self._vel *= p.damping
        np.clip(self._pos, self._lo, self._hi, out=self._pos)
        self.iteration += 1

    def advance(self, count: Optional[int] = None) -> int:
        """Run up to ``count`` iterations (all remaining when None).

        Returns the number of iterations actually run.
        """
        remaining = self.params.iterations - self.iteration
        todo = remaining if count is None else max(0, min(count, remaining))
        for _ in range(todo):
            self.step()
        return todo

    def chunks(self, size: int) -> Iterator[int]:
        """Advance ``size`` iterations at a time, yielding the iteration reached."""
        if size <= 0:
            raise ValueError("chunk size must be positive")
        while not self.done:
            self.advance(size)
            yield self.iteration

    def layout(self) -> Layout:
        states = {
            nid: NodeState(
                x=float(self._pos[i, 0]),
                y=float(self._pos[i, 1]),
                vx=float(self._vel[i, 0]),
                vy=float(self._vel[i, 1]),
            )
            for i, nid in enumerate(self._ids)
        }
        return Layout(width=self.width, height=self.height, states=states)


class ForceSimulation:
    """
    Computes node positions for a GraphModel inside a W x H viewport.

    Example:
        sim = ForceSimulation()
        layout = sim.run(model, 800, 600, seed=42)
        x, y = layout.position("node-1")
    """

    def __init__(self, params: Optional[LayoutParams] = None):
        self.params = params or LayoutParams()

    def start(
        self,
        model: GraphModel,
        width: float,
        height: float,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        initial: Optional[Layout] = None,
    ) -> LayoutPass:
        """Initialise a pass without running any iterations.

        Args:
            model: Graph snapshot to lay out
            width: Viewport width in pixels
            height: Viewport height in pixels
            seed: Seed for the initial random placement (ignored if rng given)
            rng: Explicit random source, for reproducible layouts
            initial: Previous layout whose positions seed matching node ids
        """
        if rng is None:
            rng = np.random.default_rng(seed)
        return LayoutPass(model, width, height, self.params, rng, initial=initial)

    @timed
    def run(
        self,
        model: GraphModel,
        width: float,
        height: float,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        initial: Optional[Layout] = None,
    ) -> Layout:
        """Run a full pass and return the resulting layout."""
        layout_pass = self.start(model, width, height, seed=seed, rng=rng, initial=initial)
        layout_pass.advance()
        logger.debug(
            f"Layout pass: {len(model.nodes)} nodes, {layout_pass.edge_count} edges, "
            f"{layout_pass.iteration} iterations in {width:.0f}x{height:.0f}"
        )
        return layout_pass.layout()
