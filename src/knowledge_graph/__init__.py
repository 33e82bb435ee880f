"""Knowledge Graph Explorer package.

This module intentionally avoids importing heavy dependencies at import time
(gradio in particular). Symbols are loaded lazily via ``__getattr__`` so the
explorer core can be imported without pulling in the UI stack.
"""

from importlib import import_module
from typing import Any

__version__ = "0.1.0"

__all__ = [
    "GraphModel",
    "Node",
    "Edge",
    "ForceSimulation",
    "LayoutParams",
    "GraphRenderer",
    "hit_test",
    "ViewController",
    "KnowledgeGraphClient",
    "create_app",
]

_EXPORT_MAP = {
    "GraphModel": ("knowledge_graph.explorer.model", "GraphModel"),
    "Node": ("knowledge_graph.explorer.model", "Node"),
    "Edge": ("knowledge_graph.explorer.model", "Edge"),
    "ForceSimulation": ("knowledge_graph.explorer.layout", "ForceSimulation"),
    "LayoutParams": ("knowledge_graph.explorer.layout", "LayoutParams"),
    "GraphRenderer": ("knowledge_graph.explorer.renderer", "GraphRenderer"),
    "hit_test": ("knowledge_graph.explorer.hit_test", "hit_test"),
    "ViewController": ("knowledge_graph.explorer.controller", "ViewController"),
    "KnowledgeGraphClient": ("knowledge_graph.tools.graph_api", "KnowledgeGraphClient"),
    "create_app": ("knowledge_graph.ui.app", "create_app"),
}


def __getattr__(name: str) -> Any:
    """Lazy-load exported package symbols on first access."""
    if name not in _EXPORT_MAP:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_name, attr_name = _EXPORT_MAP[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
