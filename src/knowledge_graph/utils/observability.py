"""Lightweight observability: event correlation IDs and timing spans."""

import contextvars
import functools
import inspect
import logging
import time
import uuid

logger = logging.getLogger(__name__)

# Correlates the log lines of one view transition (load, click, resize)
_event_id: contextvars.ContextVar[str] = contextvars.ContextVar(
    "event_id", default=""
)


def new_event_id() -> str:
    """Generate and set a new event ID for the current context."""
    eid = uuid.uuid4().hex[:12]
    _event_id.set(eid)
    return eid


def get_event_id() -> str:
    """Get the current event ID (empty string if none set)."""
    return _event_id.get()


def _log_elapsed(level: int, name: str, start: float) -> None:
    eid = _event_id.get()
    prefix = f"[{eid}] " if eid else ""
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.log(level, f"{prefix}{name} took {elapsed_ms:.1f}ms")


def timed(func=None, *, level=logging.DEBUG):
    """Decorator that logs function execution time.

    Usage:
        @timed
        def run(...): ...

        @timed(level=logging.INFO)
        async def load(...): ...

    Logs: [event_id] module.function took X.Xms
    """
    def decorator(fn):
        name = f"{fn.__module__}.{fn.__qualname__}"

        if inspect.iscoroutinefunction(fn):
            @functools.wraps(fn)
            async def async_wrapper(*args, **kwargs):
                start = time.perf_counter()
                try:
                    return await fn(*args, **kwargs)
                finally:
                    _log_elapsed(level, name, start)
            return async_wrapper

        @functools.wraps(fn)
        def sync_wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                _log_elapsed(level, name, start)
        return sync_wrapper

    if func is not None:
        return decorator(func)
    return decorator
