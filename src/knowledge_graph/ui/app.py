"""
Knowledge Graph UI

Gradio page hosting the explorer: the rendered graph image (clicks select
nodes), type filters, stats, the selected-node panel with related entities,
retry/resize controls and an interactive Plotly view. All state lives in one
ViewController.
"""

import logging
from typing import List, Optional

import gradio as gr

from knowledge_graph.explorer.controller import ViewController, ViewState
from knowledge_graph.explorer.model import NODE_COLORS, NODE_LABELS, GraphStats, RelatedNode
from knowledge_graph.explorer.renderer import to_plotly_figure

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = (
    "### Knowledge Graph\n"
    "The knowledge graph is currently being set up. This feature will visualize "
    "entity relationships once the backend service is activated."
)

RELATED_HEADERS = ["Label", "Type", "Relation", "Depth", "Node ID"]


# ---------------------------------------------------------------------------
# View formatting
# ---------------------------------------------------------------------------


def format_status(controller: ViewController) -> str:
    """Markdown shown above the graph for the current view state."""
    state = controller.state
    if state == ViewState.LOADING:
        return "Loading graph..."
    if state == ViewState.ERROR:
        return f"**Error loading graph**\n\n{controller.error or 'Unknown error'}"
    if state == ViewState.UNAVAILABLE:
        return UNAVAILABLE_MESSAGE
    if controller.is_empty:
        return "**No graph data**\n\nBuild the graph to visualize entity relationships."
    if state == ViewState.IDLE:
        return ""
    stats = controller.last_render
    if stats is None:
        return ""
    return f"{stats.nodes_drawn} nodes · {stats.edges_drawn} edges"


def format_stats(stats: Optional[GraphStats]) -> str:
    if stats is None:
        return ""
    lines = [
        "### Statistics",
        f"- **Nodes:** {stats.node_count}",
        f"- **Edges:** {stats.edge_count}",
        f"- **Density:** {stats.density:.3f}",
        f"- **Avg Degree:** {stats.average_degree:.1f}",
    ]
    return "\n".join(lines)


def format_selection(controller: ViewController) -> str:
    if controller.selected_id is None:
        return ""
    node = controller.selected_node
    label = node.label if node else controller.selected_id
    group = node.group if node else "unknown"
    text = f"### Selected Node\n**{label}**\n\nType: {NODE_LABELS.get(group, group)}"
    if controller.related:
        text += f"\n\nRelated ({len(controller.related)})"
    return text


def related_rows(related: List[RelatedNode]) -> List[list]:
    """Rows for the related-entities table."""
    return [
        [r.node.label, NODE_LABELS.get(r.node.group, r.node.group), r.edge_kind, r.depth, r.node.id]
        for r in related
    ]


def legend_markdown() -> str:
    items = [
        f'<span style="color:{NODE_COLORS[group]}">●</span> {label}'
        for group, label in NODE_LABELS.items()
    ]
    return "### Legend\n" + " &nbsp; ".join(items)


def view_outputs(controller: ViewController):
    """Values for every output component, in ``create_app`` order."""
    showing = controller.state == ViewState.READY
    return (
        controller.image() if showing else None,
        format_status(controller),
        format_stats(controller.stats if showing else None),
        format_selection(controller),
        related_rows(controller.related),
        gr.update(visible=controller.state in (ViewState.ERROR, ViewState.UNAVAILABLE)),
    )


def interactive_figure(controller: ViewController):
    """Plotly figure of the shown snapshot, or None when nothing is laid out."""
    if controller.state != ViewState.READY or controller.model is None or controller.layout is None:
        return None
    return to_plotly_figure(
        controller.model,
        controller.layout,
        selected_id=controller.selected_id,
        style=controller.renderer.style,
    )


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------


def create_app(controller: ViewController):
    """
    Create the Gradio application.

    Args:
        controller: ViewController wired to a graph source

    Returns:
        Gradio Blocks app
    """
    with gr.Blocks(title="Knowledge Graph") as app:
        gr.Markdown(
            "# Knowledge Graph\n"
            "Explore relationships between entities in your organization"
        )

        with gr.Row():
            with gr.Column(scale=1, min_width=280):
                stats_output = gr.Markdown()
                type_filter = gr.CheckboxGroup(
                    choices=[(label, group) for group, label in NODE_LABELS.items()],
                    value=[],
                    label="Filter by Type",
                )
                clear_filters_btn = gr.Button("Clear filters", size="sm")
                selection_output = gr.Markdown()
                related_output = gr.DataFrame(
                    headers=RELATED_HEADERS,
                    datatype=["str", "str", "str", "number", "str"],
                    interactive=False,
                )
                expand_btn = gr.Button("Add related to graph", size="sm")
                gr.Markdown(legend_markdown())

            with gr.Column(scale=3):
                status_output = gr.Markdown()
                graph_image = gr.Image(
                    type="numpy",
                    interactive=False,
                    show_label=False,
                    height=controller.height,
                )
                retry_btn = gr.Button("Retry", visible=False)
                with gr.Accordion("Canvas size", open=False):
                    width_slider = gr.Slider(
                        minimum=320, maximum=2560, step=10,
                        value=controller.width, label="Width",
                    )
                    height_slider = gr.Slider(
                        minimum=240, maximum=1600, step=10,
                        value=controller.height, label="Height",
                    )
                    resize_btn = gr.Button("Apply size")
                with gr.Accordion("Interactive view", open=False):
                    interactive_plot = gr.Plot(label="Interactive Graph")
                    plot_btn = gr.Button("Show interactive view")

        outputs = [
            graph_image,
            status_output,
            stats_output,
            selection_output,
            related_output,
            retry_btn,
        ]

        async def on_load():
            await controller.load()
            return view_outputs(controller)

        async def on_filter(groups):
            await controller.set_filters(groups or [])
            return view_outputs(controller)

        async def on_clear_filters():
            await controller.clear_filters()
            return (*view_outputs(controller), [])

        async def on_click(evt: gr.SelectData):
            px, py = evt.index
            logger.debug(f"Graph image clicked at ({px}, {py})")
            await controller.click(px, py)
            return view_outputs(controller)

        async def on_related_pick(evt: gr.SelectData):
            row = evt.index[0]
            if 0 <= row < len(controller.related):
                await controller.select(controller.related[row].node.id)
            return view_outputs(controller)

        async def on_expand():
            await controller.expand_selection()
            return view_outputs(controller)

        async def on_retry():
            await controller.retry()
            return view_outputs(controller)

        async def on_resize(width, height):
            await controller.resize(int(width), int(height))
            return view_outputs(controller)

        def on_show_plot():
            return interactive_figure(controller)

        app.load(fn=on_load, outputs=outputs)
        type_filter.input(fn=on_filter, inputs=[type_filter], outputs=outputs)
        clear_filters_btn.click(fn=on_clear_filters, outputs=outputs + [type_filter])
        graph_image.select(fn=on_click, outputs=outputs)
        related_output.select(fn=on_related_pick, outputs=outputs)
        expand_btn.click(fn=on_expand, outputs=outputs)
        retry_btn.click(fn=on_retry, outputs=outputs)
        resize_btn.click(fn=on_resize, inputs=[width_slider, height_slider], outputs=outputs)
        plot_btn.click(fn=on_show_plot, outputs=[interactive_plot])

    return app


def launch_app(controller: ViewController, port: int = 7860, share: bool = False):
    """
    Launch the Gradio app.

    Args:
        controller: ViewController wired to a graph source
        port: Port to run on
        share: Create public link
    """
    app = create_app(controller)
    app.launch(server_port=port, share=share, show_error=True)
