"""
Unit tests for public IP detection.
"""

import httpx
import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_coc_proxy.app.adapters.ip_probe import IPProbe


SERVICES = ("https://first.example/ip", "https://second.example/ip", "https://third.example/ip")


def make_probe(responses):
    """Build a probe whose services answer from ``responses`` (host -> response or exception)."""
    visited = []

    def handler(request: httpx.Request) -> httpx.Response:
        visited.append(request.url.host)
        outcome = responses[request.url.host]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    return IPProbe(SERVICES, timeout=1.0, transport=httpx.MockTransport(handler)), visited


class TestIPProbe:
    """Test cases for IPProbe."""

    @pytest.mark.asyncio
    async def test_first_success_wins(self):
        probe, visited = make_probe({
            "first.example": httpx.Response(200, json={"ip": "203.0.113.7"}),
            "second.example": httpx.Response(200, json={"ip": "198.51.100.1"}),
        })

        assert await probe.detect() == "203.0.113.7"
        assert visited == ["first.example"]

    @pytest.mark.asyncio
    async def test_falls_through_in_order(self):
        probe, visited = make_probe({
            "first.example": httpx.ConnectTimeout("slow"),
            "second.example": httpx.Response(503),
            "third.example": httpx.Response(200, json={"IP": "192.0.2.10"}),
        })

        assert await probe.detect() == "192.0.2.10"
        assert visited == ["first.example", "second.example", "third.example"]

    @pytest.mark.asyncio
    async def test_plain_text_answer(self):
        probe, _ = make_probe({"first.example": httpx.Response(200, text="192.0.2.55\n")})
        assert await probe.detect() == "192.0.2.55"

    @pytest.mark.asyncio
    async def test_all_services_failing(self):
        probe, visited = make_probe({
            "first.example": httpx.ConnectError("down"),
            "second.example": httpx.ConnectError("down"),
            "third.example": httpx.Response(200, json={"unexpected": True}),
        })

        assert await probe.detect() is None
        assert len(visited) == 3

    def test_instructions_mention_ip(self):
        body = IPProbe.instructions("203.0.113.7")
        assert body["ip"] == "203.0.113.7"
        assert body["url"].startswith("https://developer.clashofclans.com")
        assert "3. Add this IP: 203.0.113.7" in body["instructions"]
