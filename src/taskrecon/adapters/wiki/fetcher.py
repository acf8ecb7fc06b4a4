"""Free-text page entry points."""

from __future__ import annotations

import re
from logging import getLogger
from typing import TYPE_CHECKING, Protocol
from urllib.parse import unquote

from .client import PageFetchResult, WikiClient

if TYPE_CHECKING:
    from collections.abc import Sequence

    from taskrecon.config.wiki import WikiConfig
    from taskrecon.domain.model import FreeTextPage, StructuredTask

log = getLogger(__name__)

_WIKI_PATH_PATTERN = re.compile(r"/wiki/(.+)$")


class PageClient(Protocol):
    def fetch_page(self, *, title: str) -> FreeTextPage: ...

    def fetch_pages(self, *, titles: Sequence[str]) -> PageFetchResult: ...


def resolve_page_title(task: StructuredTask, override: str | None = None) -> str:
    """Page title for a task: explicit override, then its wiki link, then its name."""

    if override and override.strip():
        return override.strip()
    if task.wiki_link:
        match = _WIKI_PATH_PATTERN.search(task.wiki_link)
        if match:
            return unquote(match.group(1))
    return task.name


def fetch_free_text_page(
    *,
    config: WikiConfig,
    title: str,
    client: PageClient | None = None,
) -> FreeTextPage:
    active_client = client or WikiClient(config=config)
    return active_client.fetch_page(title=title)


def fetch_free_text_pages(
    *,
    config: WikiConfig,
    titles: Sequence[str],
    client: PageClient | None = None,
) -> PageFetchResult:
    """Fetch pages in order; a failing title lands in ``errors`` and the rest carry on."""

    active_client = client or WikiClient(config=config)
    unique_titles = list(dict.fromkeys(titles))
    result = active_client.fetch_pages(titles=unique_titles)
    log.info(
        "Fetched %d wiki page(s), %d failure(s)", len(result.pages), len(result.errors)
    )
    return result
