"""Structured task feed entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from .client import TarkovClient
from .translator import translate_task

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from taskrecon.config.tarkov import TarkovConfig
    from taskrecon.domain.model import GameMode, StructuredTask

    from .schema import TarkovTask

log = getLogger(__name__)


class TaskFeedClient(Protocol):
    def fetch_tasks(self, *, game_modes: Sequence[GameMode]) -> list[TarkovTask]: ...


def fetch_task_payloads(
    *,
    config: TarkovConfig,
    game_modes: Sequence[GameMode],
    client: TaskFeedClient | None = None,
) -> list[TarkovTask]:
    """Fetch raw task payloads for ``game_modes``; failures propagate."""

    active_client = client or TarkovClient(config=config)
    return active_client.fetch_tasks(game_modes=game_modes)


def translate_tasks(payloads: Iterable[TarkovTask]) -> list[StructuredTask]:
    tasks = [translate_task(payload) for payload in payloads]
    without_link = sum(1 for task in tasks if not task.wiki_link)
    if without_link:
        log.info("%d of %d task(s) have no wiki link", without_link, len(tasks))
    return tasks


def fetch_structured_tasks(
    *,
    config: TarkovConfig,
    game_modes: Sequence[GameMode],
    client: TaskFeedClient | None = None,
) -> list[StructuredTask]:
    """Fetch the structured feed and translate it into domain records."""

    return translate_tasks(
        fetch_task_payloads(config=config, game_modes=game_modes, client=client)
    )
