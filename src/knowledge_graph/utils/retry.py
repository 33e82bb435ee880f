"""
Async retry utilities with exponential backoff.

Used by the knowledge-graph API client for the visualization and
related-node requests.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional

import httpx

logger = logging.getLogger(__name__)


def _backoff_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    exponential_base: float,
    jitter: bool,
) -> float:
    delay = min(base_delay * (exponential_base ** attempt), max_delay)
    if jitter:
        delay = delay * (0.5 + random.random())
    return delay


def _retry_after(response: httpx.Response) -> Optional[float]:
    value = response.headers.get("Retry-After")
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


async def retry_with_backoff(
    func: Callable[[], Awaitable[httpx.Response]],
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    retry_on: tuple = (429, 503, 504),
) -> httpx.Response:
    """
    Execute an async request function with exponential backoff retry.

    Responses with a status in ``retry_on`` and transport errors (timeouts,
    refused connections) are retried. The last response is returned as-is
    once retries are exhausted, so the caller decides how to treat the
    status code.

    Args:
        func: Async function returning an httpx.Response
        max_retries: Maximum number of retry attempts
        base_delay: Initial delay in seconds
        max_delay: Maximum delay in seconds
        exponential_base: Base for exponential backoff
        jitter: Add random jitter to prevent thundering herd
        retry_on: HTTP status codes to retry on

    Raises:
        httpx.TransportError: If the final attempt fails at the transport level
    """
    for attempt in range(max_retries + 1):
        try:
            response = await func()
        except httpx.TransportError as e:
            if attempt >= max_retries:
                raise
            delay = _backoff_delay(attempt, base_delay, max_delay, exponential_base, jitter)
            logger.warning(
                f"Request error: {e!r}, retrying in {delay:.1f}s "
                f"(attempt {attempt + 1}/{max_retries})"
            )
            await asyncio.sleep(delay)
            continue

        if response.status_code in retry_on and attempt < max_retries:
            delay = _backoff_delay(attempt, base_delay, max_delay, exponential_base, jitter)
            retry_after = _retry_after(response)
            if retry_after is not None:
                delay = max(delay, retry_after)
            logger.warning(
                f"Request failed with {response.status_code}, "
                f"retrying in {delay:.1f}s (attempt {attempt + 1}/{max_retries})"
            )
            await asyncio.sleep(delay)
            continue

        return response

    raise RuntimeError("Unexpected retry loop exit")
