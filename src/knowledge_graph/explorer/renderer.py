"""
Explorer renderer.

Paints a GraphModel + Layout onto a pixel surface: background, then every
edge, then every node with its label. Edges always go down first so node
circles cover the lines passing under them.

Two targets:
- any ``Surface`` implementation (``MatplotlibSurface`` gives an RGB pixel
  buffer via the Agg backend, with a top-left origin like a canvas)
- ``to_plotly_figure`` for an interactive Plotly view of the same layout
"""

import logging
from dataclasses import dataclass, fields
from typing import Any, List, Optional, Protocol

import numpy as np
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.patches import Circle

from knowledge_graph.explorer.layout import Layout
from knowledge_graph.explorer.model import GraphModel, Node, node_color
from knowledge_graph.utils.observability import timed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderStyle:
    """Colors and sizes used when painting the graph."""

    background: str = "#1a1a2e"
    edge_color: str = "#4a4a6a"
    edge_width: float = 1.0
    node_radius: float = 15.0
    stroke_color: str = "#000000"
    stroke_width: float = 1.0
    selected_stroke_color: str = "#ffffff"
    selected_stroke_width: float = 3.0
    label_color: str = "#ffffff"
    label_size: float = 11.0
    label_max_length: int = 15
    label_offset: float = 12.0
    dpi: int = 100

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> "RenderStyle":
        d = d or {}
        defaults = cls()
        kwargs = {}
        for f in fields(cls):
            if f.name in d:
                # Coerce to the default's type (YAML may give ints for floats)
                kwargs[f.name] = type(getattr(defaults, f.name))(d[f.name])
        unknown = set(d) - {f.name for f in fields(cls)}
        if unknown:
            logger.warning(f"Ignoring unknown render settings: {sorted(unknown)}")
        return cls(**kwargs)


@dataclass(frozen=True)
class RenderStats:
    """What a render call actually drew."""

    nodes_drawn: int
    edges_drawn: int


class Surface(Protocol):
    """Minimal 2D drawing surface, pixel coordinates with a top-left origin."""

    width: int
    height: int

    def clear(self, color: str) -> None: ...

    def line(self, x0: float, y0: float, x1: float, y1: float, color: str, width: float) -> None: ...

    def circle(
        self, x: float, y: float, radius: float, fill: str, stroke: str, stroke_width: float
    ) -> None: ...

    def text(self, x: float, y: float, text: str, color: str, size: float) -> None: ...


class MatplotlibSurface:
    """
    Pixel surface backed by a matplotlib Agg canvas.

    The axes fill the whole figure and use pixel units, with y growing
    downward, so (0, 0) is the top-left pixel.

    Example:
        surface = MatplotlibSurface(800, 600)
        GraphRenderer().render(surface, model, layout)
        pixels = surface.to_array()   # (600, 800, 3) uint8
    """

    def __init__(self, width: int, height: int, dpi: int = 100):
        self.width = int(width)
        self.height = int(height)
        self.dpi = dpi
        self._figure = Figure(figsize=(self.width / dpi, self.height / dpi), dpi=dpi)
        self._canvas = FigureCanvasAgg(self._figure)
        self._ax = self._figure.add_axes([0, 0, 1, 1])
        self._z = 0
        self._reset_axes()

    def _reset_axes(self) -> None:
        self._ax.set_xlim(0, self.width)
        self._ax.set_ylim(self.height, 0)
        self._ax.set_axis_off()
        self._z = 0

    def _next_z(self) -> int:
        # Later draw calls paint on top, regardless of artist type
        self._z += 1
        return self._z

    def _points(self, pixels: float) -> float:
        return pixels * 72.0 / self.dpi

    def clear(self, color: str) -> None:
        self._ax.cla()
        self._reset_axes()
        self._figure.patch.set_facecolor(color)
        self._ax.set_facecolor(color)

    def line(self, x0, y0, x1, y1, color, width) -> None:
        self._ax.plot(
            [x0, x1], [y0, y1],
            color=color,
            linewidth=self._points(width),
            solid_capstyle="round",
            zorder=self._next_z(),
        )

    def circle(self, x, y, radius, fill, stroke, stroke_width) -> None:
        self._ax.add_patch(
            Circle(
                (x, y), radius,
                facecolor=fill,
                edgecolor=stroke,
                linewidth=self._points(stroke_width),
                zorder=self._next_z(),
            )
        )

    def text(self, x, y, text, color, size) -> None:
        self._ax.text(
            x, y, text,
            color=color,
            fontsize=self._points(size),
            ha="center",
            va="baseline",
            family="sans-serif",
            zorder=self._next_z(),
        )

    def to_array(self) -> np.ndarray:
        """Rasterise and return an (height, width, 3) uint8 RGB array."""
        self._canvas.draw()
        rgba = np.asarray(self._canvas.buffer_rgba())
        return rgba[..., :3].copy()


def truncate_label(label: str, max_len: int) -> str:
    """Cut a label to at most ``max_len`` characters."""
    return (label or "")[:max_len]


class GraphRenderer:
    """Draws a laid-out graph onto a Surface."""

    def __init__(self, style: Optional[RenderStyle] = None):
        self.style = style or RenderStyle()

    def stroke_for(self, node: Node, selected_id: Optional[str]):
        if node.id == selected_id:
            return self.style.selected_stroke_color, self.style.selected_stroke_width
        return self.style.stroke_color, self.style.stroke_width

    @timed
    def render(
        self,
        surface: Surface,
        model: GraphModel,
        layout: Layout,
        selected_id: Optional[str] = None,
    ) -> RenderStats:
        """Paint the graph. Touches nothing but the surface."""
        s = self.style
        surface.clear(s.background)

        edges_drawn = 0
        for edge in model.valid_edges():
            start = layout.position(edge.source)
            end = layout.position(edge.target)
            if start is None or end is None:
                continue
            surface.line(start[0], start[1], end[0], end[1], s.edge_color, s.edge_width)
            edges_drawn += 1

        nodes_drawn = 0
        for node in model.nodes:
            pos = layout.position(node.id)
            if pos is None:
                logger.debug(f"Node {node.id} has no position, not drawn")
                continue
            x, y = pos
            radius = node.radius(s.node_radius)
            stroke, stroke_width = self.stroke_for(node, selected_id)
            surface.circle(x, y, radius, node_color(node.group), stroke, stroke_width)
            surface.text(
                x, y + radius + s.label_offset,
                truncate_label(node.label, s.label_max_length),
                s.label_color, s.label_size,
            )
            nodes_drawn += 1

        return RenderStats(nodes_drawn=nodes_drawn, edges_drawn=edges_drawn)


def to_plotly_figure(
    model: GraphModel,
    layout: Layout,
    selected_id: Optional[str] = None,
    style: Optional[RenderStyle] = None,
    title: str = "",
) -> Any:
    """Build an interactive Plotly figure for the same layout.

    Uses the pixel coordinate system of the layout (y axis reversed) so
    positions match the raster view.
    """
    import plotly.graph_objects as go

    s = style or RenderStyle()

    edge_x: List[Optional[float]] = []
    edge_y: List[Optional[float]] = []
    for edge in model.valid_edges():
        start = layout.position(edge.source)
        end = layout.position(edge.target)
        if start is None or end is None:
            continue
        edge_x += [start[0], end[0], None]
        edge_y += [start[1], end[1], None]

    edge_trace = go.Scatter(
        x=edge_x,
        y=edge_y,
        mode="lines",
        line=dict(width=s.edge_width, color=s.edge_color),
        hoverinfo="none",
        showlegend=False,
    )

    nodes = [n for n in model.nodes if n.id in layout]
    renderer = GraphRenderer(s)
    strokes = [renderer.stroke_for(n, selected_id) for n in nodes]
    node_trace = go.Scatter(
        x=[layout.position(n.id)[0] for n in nodes],
        y=[layout.position(n.id)[1] for n in nodes],
        mode="markers+text",
        customdata=[n.id for n in nodes],
        hovertext=[n.title or n.label for n in nodes],
        hoverinfo="text",
        text=[truncate_label(n.label, s.label_max_length) for n in nodes],
        textposition="bottom center",
        textfont=dict(size=s.label_size, color=s.label_color, family="sans-serif"),
        marker=dict(
            size=[2 * n.radius(s.node_radius) for n in nodes],
            color=[node_color(n.group) for n in nodes],
            line=dict(
                width=[w for _, w in strokes],
                color=[c for c, _ in strokes],
            ),
            opacity=1.0,
        ),
        showlegend=False,
    )

    fig = go.Figure(data=[edge_trace, node_trace])
    fig.update_layout(
        title=dict(text=title, x=0.5, xanchor="center"),
        width=int(layout.width),
        height=int(layout.height),
        xaxis=dict(range=[0, layout.width], showgrid=False, zeroline=False, showticklabels=False),
        yaxis=dict(
            range=[layout.height, 0], showgrid=False, zeroline=False, showticklabels=False
        ),
        hovermode="closest",
        margin=dict(l=0, r=0, t=40 if title else 0, b=0),
        plot_bgcolor=s.background,
        paper_bgcolor=s.background,
    )
    return fig
