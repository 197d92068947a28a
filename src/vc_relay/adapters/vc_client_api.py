"""VC Client API client."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from vc_relay.errors import ExternalApiError

_logger = logging.getLogger(__name__)


class VcClientApi(Protocol):
    """Interface for VC Client API interactions."""

    async def create_request(self, payload: dict[str, object]) -> dict[str, object]:
        """Submit an issuance or presentation request and return raw API data."""

    async def get_manifest(self, url: str) -> dict[str, object]:
        """Download a credential manifest."""


@dataclass
class HttpxVcClientApi(VcClientApi):
    """HTTPX-backed VC Client API client."""

    endpoint: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15

    @classmethod
    def create(cls, endpoint: str, timeout_seconds: float = 15) -> "HttpxVcClientApi":
        """Create a client with a managed httpx session."""
        return cls(
            endpoint=endpoint,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def create_request(self, payload: dict[str, object]) -> dict[str, object]:
        """POST a request payload to the VC Client API."""
        response = await self._send("POST", self.endpoint, json=payload)
        return response.json()

    async def get_manifest(self, url: str) -> dict[str, object]:
        """GET a credential manifest."""
        response = await self._send("GET", url)
        return response.json()

    async def _send(self, method: str, url: str, **kwargs: object) -> httpx.Response:
        try:
            response = await self.http_client.request(
                method, url, timeout=self.timeout_seconds, **kwargs
            )
        except httpx.HTTPError as exc:
            _logger.exception("VC Client API %s %s failed", method, url)
            raise ExternalApiError(504, str(exc) or type(exc).__name__) from exc
        if response.is_error:
            _logger.error(
                "VC Client API error response: status=%s body=%s",
                response.status_code,
                response.text,
            )
            raise ExternalApiError(response.status_code, response.text)
        return response

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
