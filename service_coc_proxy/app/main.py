"""
Clash of Clans access proxy service.
"""

import asyncio
import contextlib
import sys
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import httpx
from fastapi import Query, Response
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from shared.base_service import BaseService
from shared.config import ProxyConfig, get_config
from shared.errors import ErrorResponse, InternalHandlerFault, StartupConfigError
from shared.logging import get_logger

from .adapters.coc_client import CocApiClient
from .adapters.ip_probe import IPProbe
from .caching.cache_manager import CacheManager
from .caching.response_cache import ResponseCache
from .credentials.rotator import CredentialRotator
from .domain.envelope import Success
from .domain.resources import RESOURCES


ENDPOINTS = {
    "health": "/health",
    "myip": "/myip",
    "clan": "/clan/:clanTag",
    "members": "/clan/:clanTag/members",
    "currentWar": "/clan/:clanTag/currentwar",
    "cwl": "/clan/:clanTag/currentwar/leaguegroup",
    "raids": "/clan/:clanTag/capitalraidseasons",
    "player": "/player/:playerTag",
}


class ProxyService(BaseService):
    """Caching proxy in front of the Clash of Clans API."""

    def __init__(
        self,
        config: Optional[ProxyConfig] = None,
        *,
        upstream_transport: Optional[httpx.AsyncBaseTransport] = None,
        probe_transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__("coc-proxy", config)

        self.rotator = CredentialRotator(
            self.config.require_credentials(),
            rotate=self.config.key_rotation,
        )
        self.cache = (
            ResponseCache(self.config.cache_ttl, clock=clock)
            if self.config.cache_enabled
            else None
        )
        self.coc_client = CocApiClient(
            self.rotator,
            self.config.coc_api_base,
            self.config.upstream_timeout,
            metrics=self.metrics,
            transport=upstream_transport,
        )
        self.cache_manager = CacheManager(
            self.coc_client,
            self.cache,
            war_ttl=self.config.war_cache_ttl,
            metrics=self.metrics,
        )
        self.ip_probe = IPProbe(timeout=self.config.ip_probe_timeout, transport=probe_transport)
        self._sweep_task: Optional[asyncio.Task] = None

        @self.app.on_event("startup")
        async def _startup():
            if self.cache is not None and self.config.cache_check_period > 0:
                self._sweep_task = asyncio.create_task(self._sweep_expired())
            self.logger.info(
                "Proxy ready",
                host=self.config.host,
                port=self.config.port,
                credentials=len(self.rotator),
                cache_enabled=self.cache_manager.enabled,
                endpoints=list(ENDPOINTS.values()),
            )

        @self.app.on_event("shutdown")
        async def _shutdown():
            if self._sweep_task is not None:
                self._sweep_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self._sweep_task
                self._sweep_task = None

        self._setup_proxy_routes()
        self._mount_static()

        # Expose service instance via app state for introspection/testing
        self.app.state.proxy_service = self

    async def _sweep_expired(self) -> None:
        """Periodically drop expired cache entries."""
        while True:
            await asyncio.sleep(self.config.cache_check_period)
            self.cache.purge_expired()

    def _health_details(self) -> Dict[str, Any]:
        return {
            "apiKeyConfigured": True,
            "credentials": len(self.rotator),
            "keyRotation": self.rotator.rotating,
            "cacheEnabled": self.cache_manager.enabled,
            "cache": self.cache_manager.get_cache_stats(),
        }

    def _endpoint_listing(self) -> Dict[str, str]:
        return {"root": "/", **ENDPOINTS}

    async def _serve(self, resource: str, tag: str, limit: Optional[int] = None) -> Response:
        """Resolve a resource and render the envelope as an HTTP response."""
        try:
            result = await self.cache_manager.fetch(RESOURCES[resource], tag, limit)
            if isinstance(result, Success):
                return Response(
                    content=result.payload,
                    media_type="application/json",
                    headers={"X-Cache": "HIT" if result.from_cache else "MISS"},
                )
            return JSONResponse(status_code=result.http_status, content=result.to_body())
        except Exception as exc:
            fault = InternalHandlerFault(str(exc))
            self.logger.error("Error handling resource", resource=resource, tag=tag, error=str(exc), exc_info=True)
            self.metrics.record_error(fault.code)
            return self.error_response(fault.status_code, fault.to_response())

    def _setup_proxy_routes(self):
        """Set up proxy-specific routes."""

        @self.app.get("/")
        async def root():
            """Service metadata and endpoint listing."""
            return {
                "message": "Clash of Clans Access Proxy",
                "version": self.version,
                "status": "running",
                "endpoints": ENDPOINTS,
                "documentation": "Visit /health for server status",
            }

        @self.app.get("/myip")
        async def my_ip():
            """Detect the public IP to whitelist on the developer portal."""
            try:
                ip = await self.ip_probe.detect()
            except Exception as exc:
                self.logger.error("IP detection failed", error=str(exc), exc_info=True)
                return self.error_response(500, ErrorResponse(error="IP detection failed"))
            if ip is None:
                return self.error_response(500, ErrorResponse(error="Could not detect IP"))
            return IPProbe.instructions(ip)

        @self.app.post("/cache/clear")
        async def clear_cache():
            """Flush every cached response."""
            removed = self.cache_manager.clear()
            return {"message": "Cache cleared", "keysCleared": removed}

        @self.app.get("/clan/{tag}")
        async def get_clan(tag: str):
            """Clan information."""
            return await self._serve("clan", tag)

        @self.app.get("/clan/{tag}/members")
        async def get_clan_members(tag: str):
            """Clan member list."""
            return await self._serve("members", tag)

        @self.app.get("/clan/{tag}/currentwar")
        async def get_current_war(tag: str):
            """Current clan war, cached for a shorter time."""
            return await self._serve("current_war", tag)

        @self.app.get("/clan/{tag}/currentwar/leaguegroup")
        async def get_war_league_group(tag: str):
            """Clan war league group."""
            return await self._serve("war_league_group", tag)

        @self.app.get("/clan/{tag}/capitalraidseasons")
        async def get_capital_raid_seasons(tag: str, limit: Optional[int] = Query(None, ge=1)):
            """Capital raid seasons, cached per limit."""
            return await self._serve("capital_raid_seasons", tag, limit)

        @self.app.get("/player/{tag}")
        async def get_player(tag: str):
            """Player information."""
            return await self._serve("player", tag)

    def _mount_static(self):
        """Serve a frontend bundle when one is configured."""
        if not self.config.static_dir:
            return
        directory = Path(self.config.static_dir)
        if not directory.is_dir():
            self.logger.warning("Static directory not found, skipping mount", static_dir=str(directory))
            return
        self.app.mount("/static", StaticFiles(directory=str(directory), html=True), name="static")
        self.logger.info("Serving static assets", static_dir=str(directory))


def create_app(config: Optional[ProxyConfig] = None, **kwargs):
    """Create FastAPI application."""
    service = ProxyService(config, **kwargs)
    return service.app


def main():
    """Console entrypoint; exits before listening when misconfigured."""
    try:
        service = ProxyService(get_config())
    except StartupConfigError as exc:
        logger = get_logger("coc-proxy")
        logger.critical("Startup failed", error=exc.message, details=exc.details)
        sys.exit(1)
    service.run()


if __name__ == "__main__":
    main()
