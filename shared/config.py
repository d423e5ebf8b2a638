"""
Shared configuration management for the Clash of Clans access proxy.
"""

from typing import List, Optional

from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.errors import StartupConfigError


COC_API_BASE = "https://api.clashofclans.com/v1"


def _split_csv(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    env: str = Field(default="local", validation_alias=AliasChoices("PROXY_ENV", "env"))
    log_level: str = Field(default="info", validation_alias=AliasChoices("PROXY_LOG_LEVEL", "log_level"))

    # HTTP surface
    host: str = Field(default="0.0.0.0", validation_alias=AliasChoices("HOST", "host"))
    port: int = Field(default=5000, gt=0, le=65535, validation_alias=AliasChoices("PORT", "port"))
    cors_origins: str = Field(default="*", validation_alias=AliasChoices("COC_CORS_ORIGINS", "cors_origins"))
    static_dir: Optional[str] = Field(default=None, validation_alias=AliasChoices("COC_STATIC_DIR", "static_dir"))

    def cors_origin_list(self) -> List[str]:
        """Allowed CORS origins, ``*`` meaning any."""
        return _split_csv(self.cors_origins) or ["*"]


class ProxyConfig(BaseConfig):
    """Upstream, credential and cache settings for the proxy."""

    # Upstream
    coc_api_base: str = Field(default=COC_API_BASE, validation_alias=AliasChoices("COC_API_BASE", "coc_api_base"))
    coc_api_key: Optional[str] = Field(default=None, validation_alias=AliasChoices("COC_API_KEY", "coc_api_key"))
    coc_api_keys: Optional[str] = Field(default=None, validation_alias=AliasChoices("COC_API_KEYS", "coc_api_keys"))
    key_rotation: bool = Field(default=True, validation_alias=AliasChoices("COC_KEY_ROTATION", "key_rotation"))
    upstream_timeout: float = Field(default=10.0, gt=0, validation_alias=AliasChoices("COC_UPSTREAM_TIMEOUT", "upstream_timeout"))
    ip_probe_timeout: float = Field(default=5.0, gt=0, validation_alias=AliasChoices("COC_IP_PROBE_TIMEOUT", "ip_probe_timeout"))

    # Cache
    cache_enabled: bool = Field(default=True, validation_alias=AliasChoices("COC_CACHE_ENABLED", "cache_enabled"))
    cache_ttl: int = Field(default=300, gt=0, validation_alias=AliasChoices("COC_CACHE_TTL", "cache_ttl"))
    war_cache_ttl: int = Field(default=120, gt=0, validation_alias=AliasChoices("COC_WAR_CACHE_TTL", "war_cache_ttl"))
    cache_check_period: int = Field(default=60, ge=0, validation_alias=AliasChoices("COC_CACHE_CHECK_PERIOD", "cache_check_period"))

    def credentials(self) -> List[str]:
        """All configured API keys, first occurrence wins."""
        keys: List[str] = []
        for key in _split_csv(self.coc_api_keys) + _split_csv(self.coc_api_key):
            if key not in keys:
                keys.append(key)
        return keys

    def require_credentials(self) -> List[str]:
        """Return configured credentials or fail startup."""
        keys = self.credentials()
        if not keys:
            raise StartupConfigError(
                "COC_API_KEY is not set in environment variables",
                details="Set COC_API_KEY or COC_API_KEYS before starting the proxy",
            )
        return keys


def get_config(**overrides) -> ProxyConfig:
    """Get proxy configuration from the environment."""
    try:
        return ProxyConfig(**overrides)
    except ValidationError as exc:
        raise StartupConfigError("Invalid proxy configuration", details=str(exc)) from exc
