"""
Per-resource upstream paths, cache keys and TTL policies.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .tags import normalize_tag


DEFAULT_RAID_LIMIT = 10


@dataclass(frozen=True)
class ResourcePolicy:
    """How one proxied resource maps onto the upstream API and the cache."""

    name: str
    path_template: str
    key_prefix: str
    short_ttl: bool = False
    takes_limit: bool = False

    def build(self, tag: str, limit: Optional[int] = None) -> Tuple[str, Dict[str, int], str]:
        """Return ``(upstream_path, query_params, cache_key)`` for a caller tag."""
        normalized = normalize_tag(tag)
        path = self.path_template.format(tag=normalized)
        params: Dict[str, int] = {}
        cache_key = f"{self.key_prefix}_{normalized}"
        if self.takes_limit:
            effective = DEFAULT_RAID_LIMIT if limit is None else limit
            params["limit"] = effective
            cache_key = f"{cache_key}_{effective}"
        return path, params, cache_key


RESOURCES: Dict[str, ResourcePolicy] = {
    policy.name: policy
    for policy in (
        ResourcePolicy("clan", "/clans/{tag}", "clan"),
        ResourcePolicy("members", "/clans/{tag}/members", "members"),
        ResourcePolicy("current_war", "/clans/{tag}/currentwar", "war", short_ttl=True),
        ResourcePolicy("war_league_group", "/clans/{tag}/currentwar/leaguegroup", "cwl"),
        ResourcePolicy("capital_raid_seasons", "/clans/{tag}/capitalraidseasons", "raids", takes_limit=True),
        ResourcePolicy("player", "/players/{tag}", "player"),
    )
}
