"""
Unit tests for the Clash of Clans API client.
"""

import json

import httpx
import pytest
from unittest.mock import AsyncMock, patch

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_coc_proxy.app.adapters.coc_client import CocApiClient
from service_coc_proxy.app.credentials.rotator import CredentialRotator
from service_coc_proxy.app.domain.envelope import Failure, Origin, Success
from shared.metrics import MetricsCollector
from shared.test_helpers import FakeUpstream


BASE = "https://api.clashofclans.com/v1"


class TestCocApiClient:
    """Test cases for CocApiClient."""

    @pytest.fixture
    def upstream(self):
        return FakeUpstream()

    @pytest.fixture
    def client(self, upstream):
        return CocApiClient(CredentialRotator(["key-a", "key-b"]), BASE, transport=upstream.transport)

    @pytest.mark.asyncio
    async def test_success_returns_raw_body(self, client, upstream):
        upstream.add("/v1/clans/%23ABC123", 200, {"tag": "#ABC123", "name": "Mugiwara"})

        result = await client.call("/clans/%23ABC123")

        assert isinstance(result, Success)
        assert result.origin is Origin.UPSTREAM
        assert json.loads(result.payload) == {"tag": "#ABC123", "name": "Mugiwara"}

    @pytest.mark.asyncio
    async def test_sends_bearer_and_accept_headers(self):
        client = CocApiClient(CredentialRotator(["secret-key"]), BASE)

        with patch('httpx.AsyncClient') as mock_client:
            mock_get = AsyncMock(
                return_value=httpx.Response(
                    status_code=200,
                    content=b"{}",
                    request=httpx.Request("GET", f"{BASE}/players/%23P1")
                )
            )
            mock_client.return_value.__aenter__.return_value.get = mock_get

            await client.call("/players/%23P1")

            mock_client.assert_called_once_with(timeout=10.0, transport=None)
            args, kwargs = mock_get.call_args
            assert args[0] == f"{BASE}/players/%23P1"
            assert kwargs["headers"] == {
                "Authorization": "Bearer secret-key",
                "Accept": "application/json",
            }

    @pytest.mark.asyncio
    async def test_rotates_credentials_per_call(self, client, upstream):
        upstream.add("/v1/players/%23P1", 200, {})

        for _ in range(3):
            await client.call("/players/%23P1")

        auth = [request.headers["Authorization"] for request in upstream.requests]
        assert auth == ["Bearer key-a", "Bearer key-b", "Bearer key-a"]

    @pytest.mark.asyncio
    async def test_forwards_query_params(self, client, upstream):
        upstream.add("/v1/clans/%23ABC/capitalraidseasons", 200, {"items": []})

        await client.call("/clans/%23ABC/capitalraidseasons", {"limit": 5})

        assert upstream.requests[0].url.params["limit"] == "5"

    @pytest.mark.asyncio
    async def test_forbidden_carries_hint(self, client, upstream):
        upstream.add("/v1/clans/%23ABC", 403, {"reason": "accessDenied.invalidIp", "message": "Invalid authorization: API key does not allow access from IP 1.2.3.4"})

        result = await client.call("/clans/%23ABC")

        assert isinstance(result, Failure)
        assert result.status == 403
        assert "whitelisted" in result.error
        assert result.details.startswith("Invalid authorization")
        assert result.hint == "Visit /myip endpoint to get your current IP"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code, error",
        [
            (404, "Resource not found"),
            (429, "Rate limit exceeded. Please try again later."),
            (500, "Clash of Clans API is temporarily unavailable"),
            (503, "Clash of Clans API is temporarily unavailable"),
            (400, "API request failed"),
        ],
    )
    async def test_status_classification(self, client, upstream, status_code, error):
        upstream.add("/v1/clans/%23ABC", status_code, {"reason": "someReason"})

        result = await client.call("/clans/%23ABC")

        assert result == Failure(status=status_code, error=error, details="someReason")

    @pytest.mark.asyncio
    async def test_non_json_error_body(self, client):
        def handler(request):
            return httpx.Response(502, content=b"<html>Bad gateway</html>")

        client._transport = httpx.MockTransport(handler)
        result = await client.call("/clans/%23ABC")

        assert result.status == 502
        assert result.details == "Unknown error"

    @pytest.mark.asyncio
    async def test_timeout_maps_to_status_zero(self, client, upstream):
        upstream.fail_with(httpx.ReadTimeout("timed out"))

        result = await client.call("/clans/%23ABC")

        assert isinstance(result, Failure)
        assert result.status == 0
        assert result.http_status == 500
        assert result.error == "Network error or timeout"
        assert result.details == "timed out"

    @pytest.mark.asyncio
    async def test_connect_error_maps_to_status_zero(self, client, upstream):
        upstream.fail_with(httpx.ConnectError("connection refused"))

        result = await client.call("/players/%23P1")

        assert result.status == 0
        assert len(upstream.requests) == 1

    @pytest.mark.asyncio
    async def test_records_upstream_metrics(self, upstream):
        metrics = MetricsCollector("coc-proxy")
        client = CocApiClient(CredentialRotator(["k"]), BASE, metrics=metrics, transport=upstream.transport)
        upstream.add("/v1/players/%23P1", 200, {})

        await client.call("/players/%23P1")
        await client.call("/players/%23MISSING")

        registry = metrics.registry
        assert registry.get_sample_value("upstream_requests_total", {"status": "200"}) == 1
        assert registry.get_sample_value("upstream_requests_total", {"status": "404"}) == 1
