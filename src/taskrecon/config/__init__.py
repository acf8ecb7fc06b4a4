"""Application configuration helpers."""

from __future__ import annotations

from .env import env_datetime, env_float, env_int, optional_env
from .errors import ConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .reconcile import ReconcileConfig, get_reconcile_config
from .storage import StorageConfig, get_storage_config
from .tarkov import TarkovConfig, get_tarkov_config
from .wiki import WikiConfig, get_wiki_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "RateLimit",
    "ReconcileConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "TarkovConfig",
    "WikiConfig",
    "configure_logging",
    "env_datetime",
    "env_float",
    "env_int",
    "get_reconcile_config",
    "get_storage_config",
    "get_tarkov_config",
    "get_wiki_config",
    "optional_env",
]
