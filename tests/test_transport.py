"""
Tests for the httpx transport.
"""

import json

import httpx
import pytest

from play_iap.exceptions import TransportError
from play_iap.services.transport import HttpResponse, HttpxTransport


def make_transport(handler) -> HttpxTransport:
    """HttpxTransport backed by an httpx.MockTransport handler."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpxTransport(http_client=client)


class TestHttpxTransport:
    """Tests for HttpxTransport."""

    @pytest.mark.asyncio
    async def test_get_returns_status_and_body(self):
        """GET returns status code and body text."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text='{"orderId": "GPA.1"}')

        transport = make_transport(handler)
        response = await transport.get("https://play.example.test/purchase?access_token=t")

        assert response == HttpResponse(status_code=200, body='{"orderId": "GPA.1"}')
        assert seen[0].method == "GET"
        await transport.aclose()

    @pytest.mark.asyncio
    async def test_post_sends_json_body(self):
        """POST serializes the JSON body."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"newExpiryTimeMillis": "2"})

        transport = make_transport(handler)
        response = await transport.post(
            "https://play.example.test/defer", json_body={"deferralInfo": {"a": "1"}}
        )

        assert response.status_code == 200
        assert json.loads(seen[0].content) == {"deferralInfo": {"a": "1"}}
        await transport.aclose()

    @pytest.mark.asyncio
    async def test_post_without_body(self):
        """POST without a body sends nothing."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        transport = make_transport(handler)
        response = await transport.post("https://play.example.test/cancel")

        assert response == HttpResponse(status_code=204, body="")
        assert seen[0].content == b""
        await transport.aclose()

    @pytest.mark.asyncio
    async def test_non_success_status_is_returned_not_raised(self):
        """Status interpretation belongs to the caller."""
        transport = make_transport(lambda request: httpx.Response(500, text="boom"))

        response = await transport.get("https://play.example.test/purchase")

        assert response.status_code == 500
        assert response.body == "boom"
        await transport.aclose()

    @pytest.mark.asyncio
    async def test_network_failure_raises_transport_error(self):
        """httpx errors become TransportError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transport = make_transport(handler)

        with pytest.raises(TransportError, match="connection refused"):
            await transport.get("https://play.example.test/purchase")
        await transport.aclose()

    @pytest.mark.asyncio
    async def test_lazy_client_creation(self):
        """The default client is created on first use and closed by aclose."""
        transport = HttpxTransport(timeout=5.0)

        client = transport.http_client
        assert isinstance(client, httpx.AsyncClient)
        assert transport.http_client is client

        await transport.aclose()
        assert transport._http_client is None
