"""Utility modules for the knowledge graph explorer."""

from knowledge_graph.utils.config import (
    load_config,
    clear_config_cache,
    get_section,
    layout_params_from_config,
    render_style_from_config,
    viewport_from_config,
)
from knowledge_graph.utils.retry import retry_with_backoff
from knowledge_graph.utils.observability import new_event_id, get_event_id, timed

__all__ = [
    "load_config",
    "clear_config_cache",
    "get_section",
    "layout_params_from_config",
    "render_style_from_config",
    "viewport_from_config",
    "retry_with_backoff",
    "new_event_id",
    "get_event_id",
    "timed",
]
