"""Escape from Tarkov wiki (MediaWiki) configuration values."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from .env import env_float, optional_env
from .http_resilience import (
    CacheConfig,
    RateLimit,
    ResilienceConfig,
    RetryPolicy,
    user_agent_headers,
)
from .storage import StorageConfig, get_storage_config

DEFAULT_WIKI_API_URL = "https://escapefromtarkov.fandom.com/api.php"
DEFAULT_WIKI_REQUEST_INTERVAL_SECONDS = 0.5
# one day
DEFAULT_WIKI_CACHE_TTL_SECONDS = 24 * 60 * 60.0


@dataclass(frozen=True, slots=True)
class WikiConfig:
    resilience: ResilienceConfig
    endpoint: str = DEFAULT_WIKI_API_URL


def _should_cache_payload(payload: object) -> bool:
    return not (isinstance(payload, Mapping) and "error" in payload)


def get_wiki_config(*, storage: StorageConfig | None = None) -> WikiConfig:
    storage_config = storage or get_storage_config()
    endpoint = optional_env("TASKRECON_WIKI_API_URL") or DEFAULT_WIKI_API_URL
    interval = env_float(
        "TASKRECON_WIKI_REQUEST_INTERVAL", DEFAULT_WIKI_REQUEST_INTERVAL_SECONDS
    )
    resilience = ResilienceConfig(
        name="wiki",
        timeout_seconds=30.0,
        ratelimit=RateLimit(max_calls=1, per_seconds=interval),
        retry=RetryPolicy(total=4),
        cache=CacheConfig(
            sqlite_path=str(storage_config.http_cache_path()),
            ttl_seconds=DEFAULT_WIKI_CACHE_TTL_SECONDS,
            should_cache=_should_cache_payload,
        ),
        default_headers=user_agent_headers(optional_env("TASKRECON_USER_AGENT")),
    )
    return WikiConfig(resilience=resilience, endpoint=endpoint)
