"""tarkov.dev GraphQL configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env
from .http_resilience import ResilienceConfig, RetryPolicy, user_agent_headers

DEFAULT_TARKOV_API_URL = "https://api.tarkov.dev/graphql"


@dataclass(frozen=True, slots=True)
class TarkovConfig:
    resilience: ResilienceConfig
    endpoint: str = DEFAULT_TARKOV_API_URL


def get_tarkov_config() -> TarkovConfig:
    endpoint = optional_env("TASKRECON_TARKOV_API_URL") or DEFAULT_TARKOV_API_URL
    resilience = ResilienceConfig(
        name="tarkov",
        timeout_seconds=60.0,
        retry=RetryPolicy(total=3),
        cache=None,
        default_headers=user_agent_headers(optional_env("TASKRECON_USER_AGENT")),
    )
    return TarkovConfig(resilience=resilience, endpoint=endpoint)
