"""Fetcher checks for the structured task feed."""

from __future__ import annotations

from typing import TYPE_CHECKING

from taskrecon.adapters.tarkov.fetcher import fetch_structured_tasks, translate_tasks
from taskrecon.config.tarkov import TarkovConfig
from taskrecon.domain.model import GameMode
from tests.helpers.clients import FakeTaskFeedClient, payload_tasks
from tests.helpers.http import uncached_resilience

if TYPE_CHECKING:
    import pytest


def test_fetch_structured_tasks_uses_injected_client(
    tasks_response_payload: dict[str, object],
) -> None:
    fake = FakeTaskFeedClient(payload_tasks(tasks_response_payload))
    config = TarkovConfig(resilience=uncached_resilience("tarkov"))

    tasks = fetch_structured_tasks(
        config=config,
        game_modes=(GameMode.REGULAR, GameMode.PVE),
        client=fake,
    )

    assert fake.requested_modes == (GameMode.REGULAR, GameMode.PVE)
    assert [task.name for task in tasks] == ["Debut", "Shortage", "Bad rep evidence"]


def test_translate_tasks_logs_tasks_without_links(
    tasks_response_payload: dict[str, object],
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level("INFO", logger="taskrecon.adapters.tarkov.fetcher")

    tasks = translate_tasks(payload_tasks(tasks_response_payload))

    assert [task.wiki_link is None for task in tasks] == [False, False, True]
    assert "1 of 3 task(s) have no wiki link" in caplog.text
