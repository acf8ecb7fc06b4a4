from __future__ import annotations

import json

from taskrecon.adapters.http_resilience import _ShouldCacheResponseFilter
from taskrecon.config.wiki import get_wiki_config


def _cache_filter() -> _ShouldCacheResponseFilter:
    cache = get_wiki_config().resilience.cache
    assert cache is not None
    assert cache.should_cache is not None
    return _ShouldCacheResponseFilter(cache.should_cache)


def test_cache_filter_stores_good_wiki_payloads() -> None:
    body = json.dumps({"parse": {"title": "Shortage", "wikitext": {"*": "x"}}}).encode()

    assert _cache_filter().apply(None, body) is True  # type: ignore[arg-type]


def test_cache_filter_rejects_errors_and_non_json_bodies() -> None:
    cache_filter = _cache_filter()
    error = json.dumps({"error": {"code": "missingtitle"}}).encode()

    assert cache_filter.apply(None, error) is False  # type: ignore[arg-type]
    assert cache_filter.apply(None, b"<html>rate limited</html>") is False  # type: ignore[arg-type]
    assert cache_filter.apply(None, b"\xff\xfe") is False  # type: ignore[arg-type]
    assert cache_filter.apply(None, None) is False  # type: ignore[arg-type]
