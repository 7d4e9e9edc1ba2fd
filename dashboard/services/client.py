"""
ApiClient - async HTTP client for the upstream user/role REST API.

Every call returns the decoded JSON body or raises a ServiceError subclass.
Retries and caching live in the access layers, not here.
"""

from typing import Any

import httpx
from loguru import logger

from dashboard.services.errors import RequestTimeoutError, ServiceError, UpstreamError

SERVICE_ID = "dashboard-api"


class ApiClient:
    """
    Thin wrapper around ``httpx.AsyncClient``.

    Usage:
        async with ApiClient("http://localhost:3002") as client:
            role = await client.request("GET", "/roles/r1")
            await client.request("PATCH", "/roles/r1", json_data={"name": "Ops"})
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
        service_id: str = SERVICE_ID,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._service_id = service_id

        # Lazily created unless injected
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def service_id(self) -> str:
        return self._service_id

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout),
                headers={"Accept": "application/json"},
                follow_redirects=True,
            )
            logger.debug(f"Created HTTP client for {self._base_url}")
        return self._http_client

    def url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make an HTTP request against the upstream API.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE)
            path: Path relative to the base URL, e.g. ``/roles/r1``
            params: Query parameters
            json_data: JSON body for POST/PATCH requests

        Returns:
            Decoded JSON body, or None when the response has no body

        Raises:
            RequestTimeoutError: If the request times out
            UpstreamError: On a non-2xx status
            ServiceError: For transport errors or an undecodable body
        """
        client = await self._get_http_client()

        try:
            response = await client.request(
                method=method,
                url=self.url(path),
                params=params,
                json=json_data,
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(self._service_id, self._timeout) from e
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                self._service_id,
                e.response.status_code,
                e.response.text,
            ) from e
        except httpx.RequestError as e:
            raise ServiceError(str(e), service_id=self._service_id) from e

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise ServiceError(
                f"Invalid JSON from {method} {path}", service_id=self._service_id
            ) from e

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None
        logger.debug("ApiClient closed")

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
