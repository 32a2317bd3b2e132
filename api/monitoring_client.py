"""
api/monitoring_client.py
------------------------
Async client for the Monitoring API.

Endpoints (relative to MONITORING_API_URL):
    GET  /servers/by-key/{key}/sources   -> {server_id, server_key, sources[]}
    POST /servers/by-key/{key}/sources   {source} -> {server_id, source, message}
    GET  /servers/by-key/{key}/metrics   -> {metrics: {...}}

Every failure is translated into the error taxonomy in utils/errors.py:
404 becomes NotFoundError, any other non-2xx or transport problem becomes
ExternalServiceError, and a body that cannot be decoded becomes InternalError.
"""

from typing import Any, Optional
from urllib.parse import quote

import httpx

from config import MONITORING_API_TIMEOUT, MONITORING_API_URL
from models.metrics import ServerMetrics
from utils.errors import ExternalServiceError, InternalError, NotFoundError
from utils.logger import get_logger

logger = get_logger(__name__)

SERVICE_NAME = "Monitoring API"


class MonitoringClient:
    """Thin wrapper around httpx.AsyncClient for the Monitoring API."""

    def __init__(
        self,
        base_url: str = MONITORING_API_URL,
        timeout: float = MONITORING_API_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            headers={"Accept": "application/json"},
        )

    @staticmethod
    def _sources_path(server_key: str) -> str:
        return f"/servers/by-key/{quote(server_key, safe='')}/sources"

    @staticmethod
    def _metrics_path(server_key: str) -> str:
        return f"/servers/by-key/{quote(server_key, safe='')}/metrics"

    async def _request(self, method: str, path: str, operation: str, server_key: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"{operation} timed out for {server_key}: {e!r}")
            raise ExternalServiceError(SERVICE_NAME, f"{operation} timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"{operation} failed for {server_key}: {e!r}")
            raise ExternalServiceError(SERVICE_NAME, f"{operation} failed") from e

        if response.status_code == 404:
            logger.warning(f"{operation}: server {server_key} not found upstream")
            raise NotFoundError(f"server with key '{server_key}'", {"server_key": server_key})

        if not response.is_success:
            logger.error(f"{operation}: unexpected status {response.status_code} for {server_key}")
            raise ExternalServiceError(
                SERVICE_NAME,
                f"unexpected status code: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"{operation}: undecodable response for {server_key}: {e}")
            raise InternalError("failed to decode response", {"operation": operation}) from e

    async def get_server_sources(self, server_key: str) -> list[str]:
        """
        Return the source tags registered on a server.

        Raises:
            NotFoundError: The key is unknown upstream.
            ExternalServiceError: Timeout, transport failure or non-2xx.
            InternalError: The body is not the expected JSON object.
        """
        logger.debug(f"Getting sources for {server_key}")
        data = await self._request("GET", self._sources_path(server_key), "get server sources", server_key)
        if not isinstance(data, dict):
            raise InternalError("sources response is not an object", {"server_key": server_key})
        sources = data.get("sources") or []
        if not isinstance(sources, list):
            raise InternalError("sources field is not a list", {"server_key": server_key})
        logger.info(f"Server {server_key} has {len(sources)} source(s)")
        return [str(s) for s in sources]

    async def add_server_source(self, server_key: str, source: str) -> dict:
        """
        Register ``source`` on a server.

        Returns:
            The decoded response ({server_id, source, message}).
        """
        logger.debug(f"Adding source {source} to {server_key}")
        data = await self._request(
            "POST",
            self._sources_path(server_key),
            "add server source",
            server_key,
            json={"source": source},
        )
        if not isinstance(data, dict):
            raise InternalError("add source response is not an object", {"server_key": server_key})
        logger.info(f"Source {source} added to {server_key}: {data.get('message', '')}")
        return data

    async def get_server_metrics(self, server_key: str) -> ServerMetrics:
        """Fetch the current metrics snapshot for a server."""
        logger.debug(f"Getting metrics for {server_key}")
        data = await self._request("GET", self._metrics_path(server_key), "get server metrics", server_key)
        payload = data.get("metrics") if isinstance(data, dict) else None
        try:
            return ServerMetrics.from_dict(payload, server_key=server_key)
        except TypeError as e:
            logger.error(f"Malformed metrics payload for {server_key}: {e}")
            raise InternalError("malformed metrics payload", {"server_key": server_key}) from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
