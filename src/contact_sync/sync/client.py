"""Async HTTP client for the remote users service.

Provides RemoteUserClient with the two calls the sync needs:
- fetch_user: GET {base}/users/{id}
- create_or_update_user: POST {base}/users/add with a JSON payload

Responses are returned as RemoteResponse whatever their status code; only
network-level failures raise (as TransportError). Each call is a single
attempt: there is no retry.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from src.contact_sync.config import get_settings
from src.contact_sync.sync.errors import TransportError
from src.contact_sync.sync.schemas import RemoteResponse

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://dummyjson.com"


class RemoteUserClient:
    """Async client for the remote users REST API.

    Args:
        base_url: Service root. Defaults to ``REMOTE_API_BASE_URL`` from settings.
        timeout: Per-request timeout in seconds. Defaults to ``REMOTE_API_TIMEOUT``.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self._base_url = (base_url or settings.REMOTE_API_BASE_URL or DEFAULT_BASE_URL).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.REMOTE_API_TIMEOUT
        self._transport = transport
        self._headers = {"Content-Type": "application/json"}

    def _client(self) -> httpx.AsyncClient:
        """Create a new httpx client for one call."""
        return httpx.AsyncClient(
            headers=self._headers,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def fetch_user(self, external_id: str) -> RemoteResponse:
        """GET /users/{external_id}.

        Raises:
            TransportError: The request could not be completed.
        """
        url = f"{self._base_url}/users/{external_id}"
        try:
            async with self._client() as client:
                response = await client.get(url)
        except httpx.HTTPError as exc:
            raise TransportError(f"GET {url} failed: {exc!r}") from exc

        logger.debug(
            "remote.user_fetched",
            external_id=external_id,
            status_code=response.status_code,
        )
        return RemoteResponse(status_code=response.status_code, body=response.text)

    async def create_or_update_user(self, payload: dict[str, Any]) -> RemoteResponse:
        """POST /users/add with the push payload as JSON.

        Raises:
            TransportError: The request could not be completed.
        """
        url = f"{self._base_url}/users/add"
        try:
            async with self._client() as client:
                response = await client.post(url, json=payload)
        except httpx.HTTPError as exc:
            raise TransportError(f"POST {url} failed: {exc!r}") from exc

        logger.debug(
            "remote.user_posted",
            status_code=response.status_code,
        )
        return RemoteResponse(status_code=response.status_code, body=response.text)
