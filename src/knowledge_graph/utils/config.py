"""Centralized configuration loading."""

import logging
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

_config_cache: Optional[dict] = None
_CONFIG_FILENAME = "configs/config.yaml"

DEFAULT_API_BASE_URL = "http://localhost:3000/api"
DEFAULT_VIEWPORT = (960, 640)


def _find_project_root() -> Path:
    """Walk up from this file to find the directory containing configs/."""
    current = Path(__file__).resolve().parent
    for _ in range(10):  # safety limit
        if (current / "configs").is_dir():
            return current
        current = current.parent
    # Fallback: assume CWD
    return Path.cwd()


def load_config(config_path: Optional[str] = None, *, use_cache: bool = True) -> dict:
    """Load and cache the YAML configuration.

    Args:
        config_path: Override path. If None, auto-discovers configs/config.yaml.
        use_cache: If True (default), returns cached result on subsequent calls.
    """
    global _config_cache
    if use_cache and _config_cache is not None and config_path is None:
        return _config_cache

    if config_path:
        path = Path(config_path)
    else:
        path = _find_project_root() / _CONFIG_FILENAME

    if not path.exists():
        logger.debug(f"Config file not found: {path}")
        result = {}
    else:
        try:
            with path.open("r", encoding="utf-8") as f:
                result = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            result = {}

    if not isinstance(result, dict):
        logger.warning(f"Ignoring config at {path}: top level is not a mapping")
        result = {}

    if config_path is None:
        _config_cache = result
    return result


def clear_config_cache():
    """Clear the cached config (useful for testing)."""
    global _config_cache
    _config_cache = None


def get_section(config: Optional[dict], name: str) -> dict:
    """Return a config section as a dict (empty if missing or malformed)."""
    section = (config or {}).get(name) or {}
    if not isinstance(section, dict):
        logger.warning(f"Config section '{name}' is not a mapping, ignoring")
        return {}
    return section


def layout_params_from_config(config: Optional[dict] = None):
    """Build LayoutParams from the ``layout`` section."""
    from knowledge_graph.explorer.layout import LayoutParams

    if config is None:
        config = load_config()
    return LayoutParams.from_dict(get_section(config, "layout"))


def render_style_from_config(config: Optional[dict] = None):
    """Build RenderStyle from the ``render`` section."""
    from knowledge_graph.explorer.renderer import RenderStyle

    if config is None:
        config = load_config()
    return RenderStyle.from_dict(get_section(config, "render"))


def viewport_from_config(config: Optional[dict] = None) -> tuple:
    """Initial viewport (width, height) in pixels."""
    if config is None:
        config = load_config()
    viewport = get_section(config, "viewport")
    return (
        int(viewport.get("width", DEFAULT_VIEWPORT[0])),
        int(viewport.get("height", DEFAULT_VIEWPORT[1])),
    )
