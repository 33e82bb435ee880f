"""
View controller for the Knowledge Explorer.

Owns the current GraphModel, its Layout, the drawing surface and the
selection, and moves between states in response to three kinds of events:

- a new graph snapshot (initial load, retry, filter change, expansion)
- a pointer click on the surface
- a viewport resize

Everything runs on one asyncio loop. A layout pass either runs as one
blocking unit, or (with ``chunk_size``) in chunks that yield to the loop
between them; a newer snapshot or resize supersedes a chunked pass still
in flight and its result is thrown away.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, FrozenSet, Iterable, List, Optional, Protocol

import numpy as np

from knowledge_graph.explorer.hit_test import HitOrder, hit_test
from knowledge_graph.explorer.layout import ForceSimulation, Layout
from knowledge_graph.explorer.model import GraphModel, GraphStats, Node, RelatedNode
from knowledge_graph.explorer.renderer import (
    GraphRenderer,
    MatplotlibSurface,
    RenderStats,
    Surface,
)
from knowledge_graph.tools.graph_api import GraphFetchError, GraphUnavailableError
from knowledge_graph.utils.observability import new_event_id, timed

logger = logging.getLogger(__name__)


class ViewState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"
    UNAVAILABLE = "unavailable"


class GraphSource(Protocol):
    """Supplies graph snapshots and related-node expansions."""

    async def fetch_visualization(self, groups: Optional[Iterable[str]] = None) -> GraphModel: ...

    async def fetch_related(
        self, node_id: str, depth: int = 2, limit: int = 20
    ) -> List[RelatedNode]: ...


SurfaceFactory = Callable[[int, int], Surface]


class ViewController:
    """
    State machine gluing data supply, layout, rendering and selection.

    Example:
        controller = ViewController(KnowledgeGraphClient(base_url), width=800, height=600)
        await controller.load()
        await controller.click(412, 230)
        controller.selected_id, controller.related
    """

    def __init__(
        self,
        source: GraphSource,
        simulation: Optional[ForceSimulation] = None,
        renderer: Optional[GraphRenderer] = None,
        surface_factory: Optional[SurfaceFactory] = None,
        width: int = 960,
        height: int = 640,
        seed: Optional[int] = None,
        related_depth: int = 2,
        related_limit: int = 20,
        chunk_size: Optional[int] = None,
        hit_order: HitOrder = HitOrder.TOPMOST,
    ):
        """
        Args:
            source: Graph data collaborator (usually KnowledgeGraphClient)
            simulation: Force simulation; defaults to the standard constants
            renderer: Graph renderer; defaults to the standard style
            surface_factory: Builds a surface for (width, height)
            width: Initial viewport width in pixels
            height: Initial viewport height in pixels
            seed: Fixed seed for reproducible layouts (each pass reseeds)
            related_depth: Hop depth requested for the related panel
            related_limit: Max entries requested for the related panel
            chunk_size: Iterations per chunk; None runs each pass in one block
            hit_order: Tie-break when circles overlap under the pointer
        """
        self.source = source
        self.simulation = simulation or ForceSimulation()
        self.renderer = renderer or GraphRenderer()
        self.surface_factory = surface_factory or (
            lambda w, h: MatplotlibSurface(w, h, dpi=self.renderer.style.dpi)
        )
        self.width = int(width)
        self.height = int(height)
        self.seed = seed
        self.related_depth = related_depth
        self.related_limit = related_limit
        self.chunk_size = chunk_size
        self.hit_order = hit_order

        self.state = ViewState.IDLE
        self.error: Optional[str] = None
        self.model: Optional[GraphModel] = None
        self.layout: Optional[Layout] = None
        self.surface: Optional[Surface] = None
        self.last_render: Optional[RenderStats] = None
        self.filters: FrozenSet[str] = frozenset()

        self.selected_id: Optional[str] = None
        self.selected_node: Optional[Node] = None
        self.related: List[RelatedNode] = []

        self._load_token = 0
        self._generation = 0

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def stats(self) -> Optional[GraphStats]:
        if self.model is None:
            return None
        return self.model.stats()

    @property
    def is_empty(self) -> bool:
        return self.state == ViewState.READY and (self.model is None or len(self.model) == 0)

    # ------------------------------------------------------------------
    # Graph snapshots
    # ------------------------------------------------------------------

    @timed(level=logging.INFO)
    async def load(self, groups: Optional[Iterable[str]] = None) -> bool:
        """
        Fetch a snapshot (filtered by ``groups`` when given) and show it.

        ``groups=None`` keeps the current filters. Returns True when the
        new snapshot was laid out and rendered.
        """
        new_event_id()
        if groups is not None:
            self.filters = frozenset(groups)
        self._load_token += 1
        token = self._load_token
        # A chunked pass for an older snapshot must not finish after this request
        self._generation += 1

        self.state = ViewState.LOADING
        self.error = None
        try:
            model = await self.source.fetch_visualization(sorted(self.filters) or None)
        except GraphUnavailableError as e:
            if token == self._load_token:
                self.state = ViewState.UNAVAILABLE
                self.error = str(e)
            return False
        except GraphFetchError as e:
            logger.warning(f"Failed to load knowledge graph: {e}")
            if token == self._load_token:
                self.state = ViewState.ERROR
                self.error = str(e)
            return False
        except Exception as e:
            logger.exception("Unexpected error loading knowledge graph")
            if token == self._load_token:
                self.state = ViewState.ERROR
                self.error = str(e) or type(e).__name__
            return False

        if token != self._load_token:
            logger.debug("Discarding superseded graph snapshot")
            return False
        return await self.show(model)

    async def retry(self) -> bool:
        """Re-request the snapshot with the current filters."""
        return await self.load()

    async def set_filters(self, groups: Iterable[str]) -> bool:
        return await self.load(groups)

    async def toggle_filter(self, group: str) -> bool:
        return await self.load(self.filters ^ {group})

    async def clear_filters(self) -> bool:
        return await self.load(())

    async def show(self, model: GraphModel) -> bool:
        """Lay out and render a snapshot, replacing the current one.

        The selection survives only if its node is still in ``model``.
        Returns False if a newer snapshot or resize superseded this pass.
        """
        self._generation += 1
        generation = self._generation

        layout = await self._run_layout(model, generation)
        if layout is None:
            return False

        self.model = model
        self.layout = layout
        if self.selected_id is not None and not model.contains(self.selected_id):
            logger.debug(f"Selected node {self.selected_id} left the graph, clearing selection")
            self._clear_selection_state()
        elif self.selected_id is not None:
            self.selected_node = model.get(self.selected_id)
        self._render()
        self.state = ViewState.READY
        self.error = None
        return True

    async def expand_selection(self) -> bool:
        """Merge the related panel into the current snapshot and show it."""
        if self.model is None or not self.related:
            return False
        return await self.show(self.model.merge_related(self.related))

    async def resize(self, width: int, height: int) -> bool:
        """Change the viewport; re-lays out from scratch when a graph is shown."""
        self.width = int(width)
        self.height = int(height)
        if self.model is None or self.state in (ViewState.ERROR, ViewState.UNAVAILABLE):
            return False
        return await self.show(self.model)

    def _new_rng(self) -> np.random.Generator:
        return np.random.default_rng(self.seed)

    async def _run_layout(self, model: GraphModel, generation: int) -> Optional[Layout]:
        if not self.chunk_size:
            return self.simulation.run(model, self.width, self.height, rng=self._new_rng())

        layout_pass = self.simulation.start(model, self.width, self.height, rng=self._new_rng())
        for _ in layout_pass.chunks(self.chunk_size):
            await asyncio.sleep(0)
            if generation != self._generation:
                logger.debug(
                    f"Discarding layout pass at iteration {layout_pass.iteration}/{layout_pass.total}"
                )
                return None
        return layout_pass.layout()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    async def click(self, px: float, py: float) -> Optional[str]:
        """Resolve a click on the surface to a node and update the selection."""
        if self.model is None or self.layout is None or self.state != ViewState.READY:
            return None
        new_event_id()
        node_id = hit_test(
            self.model,
            self.layout,
            px,
            py,
            default_radius=self.renderer.style.node_radius,
            order=self.hit_order,
        )
        if node_id is None:
            self.clear_selection()
            return None
        await self.select(node_id)
        return node_id

    async def select(self, node_id: str) -> None:
        """Select a node and fetch its related entities.

        Also used for picks from the related panel, whose nodes may not be
        part of the drawn snapshot.
        """
        node = self.model.get(node_id) if self.model is not None else None
        if node is None:
            node = next((r.node for r in self.related if r.node.id == node_id), None)

        self.selected_id = node_id
        self.selected_node = node
        self.related = []
        self._render()

        try:
            related = await self.source.fetch_related(
                node_id, depth=self.related_depth, limit=self.related_limit
            )
        except Exception as e:
            logger.warning(f"Could not fetch related nodes for {node_id}: {e}")
            return

        if self.selected_id == node_id:
            self.related = related

    def clear_selection(self) -> None:
        self._clear_selection_state()
        self._render()

    def _clear_selection_state(self) -> None:
        self.selected_id = None
        self.selected_node = None
        self.related = []

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render(self) -> None:
        if self.model is None or self.layout is None:
            return
        if self.surface is None or (self.surface.width, self.surface.height) != (
            self.width,
            self.height,
        ):
            self.surface = self.surface_factory(self.width, self.height)
        self.last_render = self.renderer.render(
            self.surface, self.model, self.layout, self.selected_id
        )

    def image(self) -> Optional[np.ndarray]:
        """Latest rendered frame as an RGB array (None before the first render)."""
        if self.surface is None or not hasattr(self.surface, "to_array"):
            return None
        return self.surface.to_array()
