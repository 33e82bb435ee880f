"""
Knowledge Graph Explorer - Main Entry Point

Run with: python -m knowledge_graph.main
"""

import argparse
import logging
import os
from typing import Optional

from dotenv import load_dotenv

from knowledge_graph.utils.config import (
    get_section,
    layout_params_from_config,
    load_config,
    render_style_from_config,
    viewport_from_config,
)

logger = logging.getLogger(__name__)

API_BASE_URL_ENV = "KNOWLEDGE_GRAPH_API_URL"


def main(argv: Optional[list] = None):
    load_dotenv()

    parser = argparse.ArgumentParser(description="Knowledge Graph Explorer")

    parser.add_argument(
        "--config", type=str, default=None, help="Path to config file"
    )
    parser.add_argument(
        "--mode",
        choices=["ui", "check", "demo"],
        default="ui",
        help="Run mode: ui (Gradio, live API), demo (Gradio, built-in sample graph), check (verify setup)",
    )
    parser.add_argument("--port", type=int, default=None, help="Port for UI mode")
    parser.add_argument(
        "--share", action="store_true", help="Create public Gradio link"
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Fixed seed for reproducible layouts"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    config = load_config(args.config)

    if args.mode == "check":
        run_checks(config)
        return

    ui_cfg = get_section(config, "ui")
    port = args.port or int(ui_cfg.get("port", 7860))
    share = args.share or bool(ui_cfg.get("share", False))
    controller = build_controller(config, demo=args.mode == "demo", seed=args.seed)
    run_ui(controller, port, share)


def build_controller(config: dict, demo: bool = False, seed: Optional[int] = None):
    """Create a ViewController from config.

    ``demo`` swaps the HTTP client for the built-in sample graph. The
    ``KNOWLEDGE_GRAPH_API_URL`` environment variable overrides ``api.base_url``.
    """
    from knowledge_graph.explorer.controller import ViewController
    from knowledge_graph.explorer.layout import ForceSimulation
    from knowledge_graph.explorer.mock_data import MockGraphSource
    from knowledge_graph.explorer.renderer import GraphRenderer
    from knowledge_graph.tools.graph_api import KnowledgeGraphClient

    if demo:
        source = MockGraphSource()
    else:
        api_cfg = dict(get_section(config, "api"))
        env_url = os.getenv(API_BASE_URL_ENV)
        if env_url:
            api_cfg["base_url"] = env_url
        source = KnowledgeGraphClient.from_config({"api": api_cfg})

    sim_cfg = get_section(config, "simulation")
    related_cfg = get_section(config, "related")
    width, height = viewport_from_config(config)
    if seed is None:
        seed = sim_cfg.get("seed")

    return ViewController(
        source,
        simulation=ForceSimulation(layout_params_from_config(config)),
        renderer=GraphRenderer(render_style_from_config(config)),
        width=width,
        height=height,
        seed=seed,
        related_depth=int(related_cfg.get("depth", 2)),
        related_limit=int(related_cfg.get("limit", 20)),
        chunk_size=sim_cfg.get("chunk_size"),
    )


def run_checks(config: Optional[dict] = None):
    """Verify the setup is working."""
    print("=" * 50)
    print("Knowledge Graph Explorer - Setup Check")
    print("=" * 50)

    print("\n1. Checking numerics...")
    for module, name in {"numpy": "numpy", "networkx": "networkx"}.items():
        try:
            mod = __import__(module)
            print(f"   ✓ {name} {mod.__version__} available")
        except ImportError:
            print(f"   ⚠️  {name} not installed")
            print(f"   Run: pip install {name}")

    print("\n2. Checking rendering...")
    for module, name in {"matplotlib": "matplotlib", "plotly": "plotly"}.items():
        try:
            mod = __import__(module)
            print(f"   ✓ {name} {mod.__version__} available")
        except ImportError:
            print(f"   ⚠️  {name} not installed")
            print(f"   Run: pip install {name}")

    print("\n3. Checking UI framework...")
    try:
        import gradio

        print(f"   ✓ gradio {gradio.__version__} available")
    except ImportError:
        print("   ⚠️  gradio not installed")
        print("   Run: pip install gradio")

    print("\n4. Checking configuration...")
    config = config or {}
    api_cfg = get_section(config, "api")
    base_url = os.getenv(API_BASE_URL_ENV) or api_cfg.get("base_url", "(default)")
    print(f"   API base URL: {base_url}")
    width, height = viewport_from_config(config)
    print(f"   Viewport: {width}x{height}")
    params = layout_params_from_config(config)
    print(f"   Layout: {params.iterations} iterations, padding {params.padding}")

    print("\n" + "=" * 50)
    print("Setup check complete!")
    print("=" * 50)


def run_ui(controller, port: int, share: bool):
    """Launch the Gradio UI."""
    logger.info(f"Starting Knowledge Graph Explorer UI on port {port}")

    from knowledge_graph.ui import launch_app

    launch_app(controller, port=port, share=share)


if __name__ == "__main__":
    main()
