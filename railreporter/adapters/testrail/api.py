"""Low-level TestRail API v2 client.

Wraps an httpx.AsyncClient with TestRail's URL scheme, basic
authentication, error mapping and pagination. The catalog and
submission adapters build on it.

TestRail routes every API call through ``index.php?/api/v2/<endpoint>``,
with extra parameters appended using ``&``.
"""

import logging
from typing import Any

import httpx

from railreporter.core.errors import RemoteError

logger = logging.getLogger(__name__)


class RailAPIError(RemoteError):
    """A TestRail request failed.

    status_code is None when no response was received.
    """

    def __init__(self, status_code: int | None, message: str, endpoint: str = ""):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        if status_code is None:
            super().__init__(f"{endpoint}: {message}")
        else:
            super().__init__(f"{endpoint}: HTTP {status_code}: {message}")


class RailAPI:
    """Authenticated access to one TestRail instance."""

    def __init__(
        self,
        hostname: str,
        username: str,
        secret: str,
        port: int = 443,
        scheme: str = "https",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the API client.

        Args:
            hostname: TestRail host name, e.g. example.testrail.io.
            username: Email of the API user.
            secret: Password or API key of the API user.
            port: TCP port.
            scheme: http or https.
            transport: Optional httpx transport, used by tests.
        """
        self.hostname = hostname
        self.username = username
        self.secret = secret
        self.port = port
        self.scheme = scheme
        self.base_url = f"{scheme}://{hostname}:{port}/"
        self.transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "RailAPI":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client.

        The client is bound to the running event loop, so it is created
        lazily and dropped again by close().
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                auth=(self.username, self.secret),
                headers={"Content-Type": "application/json"},
                timeout=None,
                transport=self.transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self, method: str, endpoint: str, payload: dict[str, Any] | None = None
    ) -> Any:
        client = await self._get_client()
        url = f"index.php?/api/v2/{endpoint.lstrip('/')}"
        try:
            response = await client.request(method, url, json=payload)
        except httpx.RequestError as e:
            logger.error(f"TestRail request {method} {endpoint} failed: {e}")
            raise RailAPIError(None, str(e), endpoint) from e

        if response.status_code >= 400:
            raise RailAPIError(response.status_code, self._error_message(response), endpoint)

        if not response.content:
            return None
        return response.json()

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text
        if isinstance(data, dict) and data.get("error"):
            return str(data["error"])
        return response.text

    async def get(self, endpoint: str) -> Any:
        return await self._request("GET", endpoint)

    async def post(self, endpoint: str, payload: dict[str, Any]) -> Any:
        return await self._request("POST", endpoint, payload)

    async def get_all(self, endpoint: str, key: str) -> list[dict[str, Any]]:
        """GET a collection, following pagination links.

        Newer TestRail versions wrap bulk responses in an object holding
        the items under ``key`` and a ``_links.next`` path; older ones
        return a plain list.
        """
        items: list[dict[str, Any]] = []
        next_endpoint: str | None = endpoint
        while next_endpoint:
            data = await self.get(next_endpoint)
            if isinstance(data, list):
                items.extend(data)
                break
            items.extend(data.get(key, []))
            next_link = (data.get("_links") or {}).get("next")
            next_endpoint = next_link.removeprefix("/api/v2/") if next_link else None
        return items
