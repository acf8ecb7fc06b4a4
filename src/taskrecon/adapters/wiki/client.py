"""MediaWiki action API client for task pages."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from taskrecon.adapters.http_resilience import ResilientClient
from taskrecon.domain.model import FreeTextPage, Revision

from .schema import ParseResponse, RevisionResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from taskrecon.config.http_resilience import ResilienceConfig
    from taskrecon.config.wiki import WikiConfig

log = getLogger(__name__)


class WikiAPIError(RuntimeError):
    """Raised when the wiki cannot deliver the markup of a page."""


@dataclass(slots=True)
class PageFetchResult:
    pages: dict[str, FreeTextPage] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)


class WikiClient:
    """Low-level HTTP client for the wiki's ``api.php`` endpoint."""

    def __init__(
        self,
        *,
        config: WikiConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def fetch_page(self, *, title: str) -> FreeTextPage:
        return asyncio.run(self._fetch_page_async(title=title))

    def fetch_pages(self, *, titles: Sequence[str]) -> PageFetchResult:
        """Fetch ``titles`` one at a time in a single session; failures are collected."""

        return asyncio.run(self._fetch_pages_async(titles=titles))

    async def _fetch_page_async(self, *, title: str) -> FreeTextPage:
        async with self._client_factory(self._resilience) as client:
            return await self._perform_page_request(client=client, title=title)

    async def _fetch_pages_async(self, *, titles: Sequence[str]) -> PageFetchResult:
        result = PageFetchResult()
        async with self._client_factory(self._resilience) as client:
            for title in titles:
                try:
                    result.pages[title] = await self._perform_page_request(
                        client=client, title=title
                    )
                except (WikiAPIError, httpx.HTTPError) as exc:
                    log.warning("Wiki fetch failed for %r: %s", title, exc)
                    result.errors[title] = str(exc)
        return result

    async def _perform_page_request(self, *, client: ResilientClient, title: str) -> FreeTextPage:
        params = {"action": "parse", "page": title, "prop": "wikitext", "format": "json"}
        response = await client.get(self._config.endpoint, params=params)
        response.raise_for_status()

        try:
            parsed = ParseResponse.model_validate(response.json())
        except ValueError as exc:
            msg = f"Malformed wiki response for {title!r}"
            raise WikiAPIError(msg) from exc
        if parsed.error is not None and parsed.error.info:
            raise WikiAPIError(f"Wiki error: {parsed.error.info}")
        if parsed.parse is None or parsed.parse.wikitext is None:
            raise WikiAPIError("Wiki response missing wikitext")
        markup = parsed.parse.wikitext.content
        if not markup:
            raise WikiAPIError("Wiki response missing wikitext")

        page_title = parsed.parse.title or title
        revision = await self._perform_revision_request(client=client, title=page_title)
        return FreeTextPage(title=page_title, markup=markup, last_revision=revision)

    async def _perform_revision_request(
        self,
        *,
        client: ResilientClient,
        title: str,
    ) -> Revision | None:
        params = {
            "action": "query",
            "titles": title,
            "prop": "revisions",
            "rvprop": "timestamp|user|comment",
            "rvlimit": "1",
            "format": "json",
        }
        try:
            response = await client.get(self._config.endpoint, params=params)
            response.raise_for_status()
            latest = RevisionResponse.model_validate(response.json()).latest_revision()
        except (httpx.HTTPError, ValueError) as exc:
            log.info("Revision lookup failed for %r, continuing without it: %s", title, exc)
            return None

        if latest is None or latest.timestamp is None:
            return None
        return Revision(
            timestamp=latest.timestamp,
            editor=latest.user or "unknown",
            comment=latest.comment or "",
        )
