"""
HTTPS transport for Google Play API calls.

Returns status code and raw body; interpreting the status is the caller's job.
"""

from dataclasses import dataclass
from typing import Any, Protocol

import httpx
from structlog import get_logger

from play_iap.exceptions import TransportError

logger = get_logger(__name__)


@dataclass(frozen=True)
class HttpResponse:
    """Status code and body text of an HTTP response."""

    status_code: int
    body: str


class Transport(Protocol):
    """Transport protocol used by GooglePlayProvider."""

    async def get(self, url: str, headers: dict[str, str] | None = None) -> HttpResponse:
        """Issue a GET request."""
        ...

    async def post(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        json_body: Any = None,
    ) -> HttpResponse:
        """Issue a POST request."""
        ...


class HttpxTransport:
    """Transport backed by httpx.AsyncClient."""

    def __init__(
        self,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.timeout = timeout
        self._http_client = http_client

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Get HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
        return self._http_client

    async def get(self, url: str, headers: dict[str, str] | None = None) -> HttpResponse:
        return await self._request("GET", url, headers=headers)

    async def post(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        json_body: Any = None,
    ) -> HttpResponse:
        return await self._request("POST", url, headers=headers, json_body=json_body)

    async def _request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        json_body: Any = None,
    ) -> HttpResponse:
        try:
            response = await self.http_client.request(
                method,
                url,
                headers=headers,
                json=json_body,
            )
        except httpx.HTTPError as exc:
            # Never log the full URL: it carries the access token
            logger.error(
                "google_play_transport_failed",
                method=method,
                host=httpx.URL(url).host,
                error=str(exc),
            )
            raise TransportError(f"{method} request failed: {exc}") from exc

        return HttpResponse(status_code=response.status_code, body=response.text)

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
