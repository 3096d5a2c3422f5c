"""HTTP client for the canvas bridge (discovery and mutation tools)."""

import logging
from typing import Any

import httpx

from arranger.engine.errors import CanvasError, MutationError

logger = logging.getLogger(__name__)


class CanvasClient:
    """Async client for a canvas bridge that exposes tools over HTTP.

    Every tool is a POST to ``{base_url}/tools/{tool}`` with the arguments as
    the JSON body; the JSON answer is returned unparsed. Tool names can be
    remapped per bridge (``{"set_position": "move_node"}``).
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:3055",
        timeout: float = 30.0,
        tool_aliases: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize canvas client.

        Args:
            base_url: Bridge root URL.
            timeout: Per-request timeout in seconds.
            tool_aliases: Tool name remapping for bridges with other names.
            transport: Optional httpx transport (tests use httpx.MockTransport).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.tool_aliases = dict(tool_aliases or {})
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "CanvasClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    async def _post(self, tool: str, args: dict[str, Any]) -> Any:
        name = self.tool_aliases.get(tool, tool)
        response = await self.client.post(f"/tools/{name}", json=args)
        response.raise_for_status()
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def call_tool(self, tool: str, args: dict[str, Any]) -> Any:
        """Run a mutation tool.

        Raises:
            MutationError: on transport failure or a non-2xx answer.
        """
        element_id = str(args.get("nodeId", "?"))
        try:
            return await self._post(tool, args)
        except httpx.HTTPStatusError as e:
            detail = e.response.text[:200] or e.response.reason_phrase
            raise MutationError(tool, element_id, f"HTTP {e.response.status_code}: {detail}") from e
        except httpx.HTTPError as e:
            raise MutationError(tool, element_id, str(e) or type(e).__name__) from e

    async def _discover(self, tool: str, args: dict[str, Any]) -> Any:
        try:
            return await self._post(tool, args)
        except httpx.HTTPError as e:
            raise CanvasError(f"{tool} failed: {e}") from e

    # =========================================================================
    # DISCOVERY
    # =========================================================================

    async def get_node_info(self, node_id: str) -> Any:
        """Node payload including its children."""
        return await self._discover("get_node_info", {"nodeId": node_id})

    async def get_nodes_info(self, node_ids: list[str]) -> Any:
        return await self._discover("get_nodes_info", {"nodeIds": list(node_ids)})

    async def find_nodes(self, within: str | None = None) -> Any:
        """Flat node list, optionally restricted to one container."""
        args = {"within": within} if within else {}
        return await self._discover("find_nodes", args)
