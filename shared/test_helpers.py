"""
Test helper functions and factory methods for the Clash of Clans access proxy.
"""

import json
from typing import Any, Dict, List, Optional, Tuple

import httpx


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUpstream:
    """Scripted Clash of Clans API behind an ``httpx.MockTransport``.

    Responses are keyed by the raw request path (``/v1/clans/%23ABC``);
    unscripted paths answer 404 like the real API.
    """

    def __init__(self):
        self.routes: Dict[str, Tuple[int, Any]] = {}
        self.requests: List[httpx.Request] = []
        self.error: Optional[Exception] = None
        self.transport = httpx.MockTransport(self._handle)

    def add(self, path: str, status_code: int = 200, body: Any = None) -> None:
        self.routes[path] = (status_code, body if body is not None else {})

    def fail_with(self, error: Exception) -> None:
        self.error = error

    def calls_to(self, path: str) -> int:
        return sum(1 for request in self.requests if request.url.raw_path.decode().split("?")[0] == path)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        path = request.url.raw_path.decode().split("?")[0]
        status_code, body = self.routes.get(
            path, (404, {"reason": "notFound", "message": "Not found"})
        )
        return httpx.Response(status_code, content=json.dumps(body).encode(), request=request)


class CocDataFactory:
    """Factory for creating upstream payloads."""

    @staticmethod
    def create_clan(tag: str = "#ABC123") -> Dict[str, Any]:
        return {
            "tag": tag,
            "name": "The Mugiwara Clan",
            "clanLevel": 12,
            "members": 2,
            "memberList": CocDataFactory.create_members()["items"],
        }

    @staticmethod
    def create_members() -> Dict[str, Any]:
        return {
            "items": [
                {"tag": "#P1", "name": "Luffy", "role": "leader", "expLevel": 220},
                {"tag": "#P2", "name": "Zoro", "role": "coLeader", "expLevel": 210},
            ]
        }

    @staticmethod
    def create_war(state: str = "inWar") -> Dict[str, Any]:
        return {"state": state, "teamSize": 15, "clan": {"tag": "#ABC123", "stars": 30}}

    @staticmethod
    def create_raid_seasons(count: int) -> Dict[str, Any]:
        return {"items": [{"state": "ended", "capitalTotalLoot": 1000 * (i + 1)} for i in range(count)]}

    @staticmethod
    def create_player(tag: str = "#P1") -> Dict[str, Any]:
        return {"tag": tag, "name": "Luffy", "townHallLevel": 15, "trophies": 5000}
