"""Rate-limited, retrying HTTP session shared by the task feed and wiki clients."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as HishelCacheResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from taskrecon.config.http_resilience import (
        CacheConfig,
        ResilienceConfig,
        RetryPolicy,
        ShouldCacheHook,
    )


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        respect_retry_after_header=True,
        allowed_methods=tuple(policy.allowed_methods),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
    )


class ResilientClient:
    """One ``httpx`` session per run: every request waits for the rate limiter.

    Wiki GETs additionally go through a hishel sqlite cache when ``config.cache`` is set,
    so reruns within the cache lifetime never touch the network.
    """

    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        self._limiter = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )
        transport = RetryTransport(retry=build_retry(config.retry))
        headers = dict(config.default_headers or {})
        if config.cache is None:
            self._client = httpx.AsyncClient(
                timeout=config.timeout_seconds, transport=transport, headers=headers
            )
        else:
            storage, policy = _build_cache_components(config.cache)
            self._client = AsyncCacheClient(
                timeout=config.timeout_seconds,
                transport=transport,
                headers=headers,
                storage=storage,
                policy=policy,
            )

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, url: str, *, params: Mapping[str, str] | None = None) -> httpx.Response:
        if self._limiter is None:
            return await self._client.get(url, params=params)
        async with self._limiter:
            return await self._client.get(url, params=params)

    async def post(self, url: str, *, json: object) -> httpx.Response:
        if self._limiter is None:
            return await self._client.post(url, json=json)
        async with self._limiter:
            return await self._client.post(url, json=json)


class _ShouldCacheResponseFilter(BaseFilter[HishelCacheResponse]):
    """Only JSON bodies accepted by ``predicate`` are stored."""

    def __init__(self, predicate: ShouldCacheHook) -> None:
        self._predicate = predicate

    def needs_body(self) -> bool:
        return True

    def apply(self, item: HishelCacheResponse, body: bytes | None) -> bool:  # noqa: ARG002
        if body is None:
            return False
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return False
        return bool(self._predicate(payload))


def _build_cache_components(config: CacheConfig) -> tuple[AsyncSqliteStorage, FilterPolicy | None]:
    storage = AsyncSqliteStorage(
        database_path=config.sqlite_path,
        default_ttl=config.ttl_seconds,
        refresh_ttl_on_access=True,
    )
    policy: FilterPolicy | None = None
    if config.should_cache is not None:
        policy = FilterPolicy(response_filters=[_ShouldCacheResponseFilter(config.should_cache)])
    return storage, policy
