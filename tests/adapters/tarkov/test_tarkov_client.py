"""tarkov.dev client behaviour against a mocked transport."""

from __future__ import annotations

import json

import httpx
import pytest

from taskrecon.adapters.tarkov.client import TarkovAPIError, TarkovClient, merge_mode_tasks
from taskrecon.adapters.tarkov.schema import TarkovTask
from taskrecon.config.tarkov import TarkovConfig
from taskrecon.domain.model import GameMode
from tests.helpers.http import make_client_factory, uncached_resilience

ENDPOINT = "https://api.tarkov.test/graphql"


def _config() -> TarkovConfig:
    return TarkovConfig(resilience=uncached_resilience("tarkov"), endpoint=ENDPOINT)


def test_fetch_tasks_posts_query_and_tags_mode(tasks_response_payload: dict[str, object]) -> None:
    seen: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        seen.append(body)
        return httpx.Response(200, json=tasks_response_payload, request=request)

    client = TarkovClient(config=_config(), client_factory=make_client_factory(handler))
    tasks = client.fetch_tasks(game_modes=[GameMode.PVE])

    assert len(seen) == 1
    assert seen[0]["variables"] == {"gameMode": "pve"}
    assert "tasks(lang: en, gameMode: $gameMode)" in str(seen[0]["query"])
    assert [task.name for task in tasks] == ["Debut", "Shortage", "Bad rep evidence"]
    assert all(task.game_modes == ["pve"] for task in tasks)


def test_fetch_tasks_merges_both_modes(tasks_response_payload: dict[str, object]) -> None:
    data = tasks_response_payload["data"]
    assert isinstance(data, dict)
    pve_only = {"data": {"tasks": [data["tasks"][1]]}}

    def handler(request: httpx.Request) -> httpx.Response:
        mode = json.loads(request.content)["variables"]["gameMode"]
        payload = tasks_response_payload if mode == "regular" else pve_only
        return httpx.Response(200, json=payload, request=request)

    client = TarkovClient(config=_config(), client_factory=make_client_factory(handler))
    tasks = client.fetch_tasks(game_modes=[GameMode.REGULAR, GameMode.PVE])

    assert sorted((task.name, task.game_modes[0]) for task in tasks) == [
        ("Bad rep evidence", "regular"),
        ("Debut", "regular"),
        ("Shortage", "pve"),
        ("Shortage", "regular"),
    ]


def test_graphql_errors_raise() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"data": None, "errors": [{"message": "Cannot query field"}]},
            request=request,
        )

    client = TarkovClient(config=_config(), client_factory=make_client_factory(handler))

    with pytest.raises(TarkovAPIError, match="Cannot query field"):
        client.fetch_tasks(game_modes=[GameMode.REGULAR])


def test_unexpected_payload_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=["not", "an", "object"], request=request)

    client = TarkovClient(config=_config(), client_factory=make_client_factory(handler))

    with pytest.raises(TarkovAPIError):
        client.fetch_tasks(game_modes=[GameMode.REGULAR])


def test_http_errors_propagate() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"message": "maintenance"}, request=request)

    client = TarkovClient(config=_config(), client_factory=make_client_factory(handler))

    with pytest.raises(httpx.HTTPStatusError):
        client.fetch_tasks(game_modes=[GameMode.REGULAR])


def test_merge_mode_tasks_keys_on_link_and_mode() -> None:
    first = TarkovTask(id="a", name="Shortage", wikiLink="/wiki/Shortage", gameModes=["regular"])
    replacement = first.model_copy(update={"name": "Shortage (updated)"})
    unlinked = TarkovTask(id="b", name="Unlinked", gameModes=["regular"])

    merged = merge_mode_tasks([[first, unlinked], [replacement]])

    assert [task.name for task in merged] == ["Shortage (updated)", "Unlinked"]
