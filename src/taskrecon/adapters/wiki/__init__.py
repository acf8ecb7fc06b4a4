"""Escape from Tarkov wiki (MediaWiki) adapter."""

from __future__ import annotations

from .client import PageFetchResult, WikiAPIError, WikiClient
from .fetcher import fetch_free_text_page, fetch_free_text_pages, resolve_page_title

__all__ = [
    "PageFetchResult",
    "WikiAPIError",
    "WikiClient",
    "fetch_free_text_page",
    "fetch_free_text_pages",
    "resolve_page_title",
]
