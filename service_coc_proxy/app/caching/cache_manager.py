"""
Cache-aware call path between the routes and the upstream client.
"""

from typing import Any, Dict, Optional, TYPE_CHECKING

from shared.logging import get_logger

from ..adapters.coc_client import CocApiClient
from ..domain.envelope import Origin, ResultEnvelope, Success
from ..domain.resources import ResourcePolicy
from .response_cache import ResponseCache

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


DEFAULT_WAR_TTL = 120


class CacheManager:
    """Looks up the cache, falls through to the upstream API and stores successes."""

    def __init__(
        self,
        client: CocApiClient,
        cache: Optional[ResponseCache] = None,
        *,
        war_ttl: int = DEFAULT_WAR_TTL,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.client = client
        self.cache = cache
        self.war_ttl = war_ttl
        self.metrics = metrics
        self.logger = get_logger("coc-proxy.cache_manager")

    @property
    def enabled(self) -> bool:
        return self.cache is not None

    async def fetch(self, policy: ResourcePolicy, tag: str, limit: Optional[int] = None) -> ResultEnvelope:
        """Resolve one resource for a caller-supplied tag."""
        path, params, cache_key = policy.build(tag, limit)
        ttl = self.war_ttl if policy.short_ttl else None
        return await self.cached_call(path, cache_key, params=params or None, ttl=ttl, resource=policy.name)

    async def cached_call(
        self,
        path: str,
        cache_key: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        ttl: Optional[int] = None,
        resource: str = "unknown",
    ) -> ResultEnvelope:
        """Serve from cache when possible; only successful payloads are cached."""
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            self._record_access(resource, hit=cached is not None)
            if cached is not None:
                self.logger.info("Cache hit", cache_key=cache_key)
                return Success(payload=cached, origin=Origin.CACHE)
            self.logger.info("Cache miss", cache_key=cache_key)

        result = await self.client.call(path, params)

        if self.cache is not None and isinstance(result, Success):
            self.cache.set(cache_key, result.payload, ttl=ttl)
            self.logger.info("Cached", cache_key=cache_key, ttl=ttl or self.cache.default_ttl)

        return result

    def clear(self) -> int:
        """Flush every cached payload."""
        if not self.enabled:
            return 0
        return self.cache.flush_all()

    def get_cache_stats(self) -> Dict[str, Any]:
        """Cache statistics for the health endpoint."""
        if not self.enabled:
            return {"enabled": False, "keys": 0, "stats": {"hits": 0, "misses": 0, "keys": 0}}
        stats = self.cache.stats()
        return {"enabled": True, "keys": stats["keys"], "stats": stats}

    def _record_access(self, resource: str, hit: bool) -> None:
        if self.metrics:
            self.metrics.record_cache_access(resource, hit)
