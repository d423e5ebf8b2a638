"""
Proxy caching package.

Provides the in-memory TTL cache and the cache-aware call path used by
the routes. Only successful upstream payloads are ever stored.
"""

from .response_cache import ResponseCache
from .cache_manager import CacheManager

__all__ = ["ResponseCache", "CacheManager"]
