"""
Knowledge graph API client.

Thin async wrapper over the dashboard backend endpoints the explorer needs:
- visualization data (optionally filtered by node type)
- related nodes of a selected node

Everything else about the backend (auth, graph building, persistence) is
the server's concern.
"""

import logging
from typing import Iterable, List, Optional
from urllib.parse import quote

import httpx

from knowledge_graph.explorer.model import GraphModel, RelatedNode
from knowledge_graph.utils.retry import retry_with_backoff

logger = logging.getLogger(__name__)

# Statuses meaning "the knowledge graph feature is not enabled on this backend"
NOT_AVAILABLE_STATUSES = (404, 501, 503)


class KnowledgeGraphError(Exception):
    """Base error for the knowledge graph explorer."""


class GraphFetchError(KnowledgeGraphError):
    """The backend could not supply the requested data."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GraphUnavailableError(GraphFetchError):
    """The knowledge graph service is not available (not set up yet)."""


class GraphPayloadError(GraphFetchError):
    """The backend answered with a payload that could not be parsed."""


class KnowledgeGraphClient:
    """
    Client for the knowledge-graph endpoints of the dashboard API.

    Example:
        client = KnowledgeGraphClient("http://localhost:3000/api")
        model = await client.fetch_visualization(groups={"person", "team"})
        related = await client.fetch_related(model.nodes[0].id)
        await client.close()
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        max_retries: int = 3,
        headers: Optional[dict] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: API root, e.g. ``http://localhost:3000/api``
            timeout: Request timeout in seconds
            max_retries: Retries for 429/503/504 and transport errors
            headers: Extra headers (e.g. a session cookie) sent on every request
            client: Pre-built httpx client (tests, shared connection pools)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self._headers = headers or {}
        self._client = client

    @classmethod
    def from_config(cls, config: dict) -> "KnowledgeGraphClient":
        api = (config or {}).get("api") or {}
        return cls(
            base_url=api.get("base_url", "http://localhost:3000/api"),
            timeout=float(api.get("timeout", 30.0)),
            max_retries=int(api.get("max_retries", 3)),
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            headers = {"Accept": "application/json", **self._headers}
            self._client = httpx.AsyncClient(timeout=self.timeout, headers=headers)
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _get_json(self, path: str, params: Optional[dict] = None) -> dict:
        client = await self._get_client()
        url = f"{self.base_url}{path}"
        try:
            response = await retry_with_backoff(
                lambda: client.get(url, params=params),
                max_retries=self.max_retries,
            )
        except httpx.HTTPError as e:
            logger.error(f"Knowledge graph request failed: {url}: {e!r}")
            raise GraphFetchError(f"Request to {path} failed: {e}") from e

        if response.status_code in NOT_AVAILABLE_STATUSES:
            logger.info(f"Knowledge graph not available ({response.status_code}) at {url}")
            raise GraphUnavailableError(
                "Knowledge graph service is not available", response.status_code
            )
        if response.status_code >= 400:
            logger.error(f"Knowledge graph API error {response.status_code} at {url}")
            raise GraphFetchError(
                f"{path} returned HTTP {response.status_code}", response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise GraphPayloadError(f"{path} returned invalid JSON") from e
        if not isinstance(data, dict):
            raise GraphPayloadError(f"{path} returned {type(data).__name__}, expected object")
        return data

    async def fetch_visualization(self, groups: Optional[Iterable[str]] = None) -> GraphModel:
        """
        Fetch the graph snapshot to visualize.

        Args:
            groups: Node types to keep; None or empty means the whole graph

        Returns:
            GraphModel with the backend's node and edge order preserved
        """
        wanted = sorted(set(groups or ()))
        if wanted:
            data = await self._get_json(
                "/knowledge-graph/visualization/filtered",
                params={"nodeTypes": ",".join(wanted)},
            )
        else:
            data = await self._get_json("/knowledge-graph/visualization")

        try:
            model = GraphModel.from_dict(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise GraphPayloadError(f"Malformed visualization payload: {e}") from e

        logger.info(f"Fetched graph: {len(model.nodes)} nodes, {len(model.edges)} edges")
        return model

    async def fetch_related(
        self, node_id: str, depth: int = 2, limit: int = 20
    ) -> List[RelatedNode]:
        """
        Fetch nodes related to ``node_id`` within ``depth`` hops.

        Returns:
            Related entries in the backend's BFS order
        """
        data = await self._get_json(
            f"/knowledge-graph/related/{quote(node_id, safe='')}",
            params={"depth": depth, "limit": limit},
        )
        try:
            related = [RelatedNode.from_dict(item) for item in data.get("related") or []]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise GraphPayloadError(f"Malformed related-nodes payload: {e}") from e

        logger.debug(f"Fetched {len(related)} related nodes for {node_id}")
        return related
