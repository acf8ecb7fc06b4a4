"""tarkov.dev GraphQL client."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from taskrecon.adapters.http_resilience import ResilientClient
from taskrecon.domain.model import GameMode

from .schema import TarkovTask, TasksResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from taskrecon.config.http_resilience import ResilienceConfig
    from taskrecon.config.tarkov import TarkovConfig

log = getLogger(__name__)

_ITEM_FIELDS = "id name shortName"

TASKS_QUERY = f"""
query($gameMode: GameMode) {{
  tasks(lang: en, gameMode: $gameMode) {{
    id
    name
    minPlayerLevel
    wikiLink
    map {{ id name }}
    experience
    taskRequirements {{
      task {{ id name }}
      status
    }}
    objectives {{
      id
      type
      description
      maps {{ id name }}
      ... on TaskObjectiveBasic {{
        requiredKeys {{ {_ITEM_FIELDS} }}
      }}
      ... on TaskObjectiveMark {{
        markerItem {{ {_ITEM_FIELDS} }}
        requiredKeys {{ {_ITEM_FIELDS} }}
      }}
      ... on TaskObjectiveExtract {{
        requiredKeys {{ {_ITEM_FIELDS} }}
      }}
      ... on TaskObjectiveShoot {{
        count
        usingWeapon {{ {_ITEM_FIELDS} }}
        usingWeaponMods {{ {_ITEM_FIELDS} }}
        wearing {{ {_ITEM_FIELDS} }}
        notWearing {{ {_ITEM_FIELDS} }}
        requiredKeys {{ {_ITEM_FIELDS} }}
      }}
      ... on TaskObjectiveItem {{
        count
        items {{ {_ITEM_FIELDS} }}
        foundInRaid
        requiredKeys {{ {_ITEM_FIELDS} }}
      }}
      ... on TaskObjectiveQuestItem {{
        count
        questItem {{ {_ITEM_FIELDS} }}
        requiredKeys {{ {_ITEM_FIELDS} }}
      }}
      ... on TaskObjectiveUseItem {{
        count
        useAny {{ {_ITEM_FIELDS} }}
        requiredKeys {{ {_ITEM_FIELDS} }}
      }}
      ... on TaskObjectiveBuildItem {{
        item {{ {_ITEM_FIELDS} }}
        containsAll {{ {_ITEM_FIELDS} }}
      }}
    }}
    finishRewards {{
      traderStanding {{ trader {{ name }} standing }}
      items {{ item {{ id name }} count }}
    }}
  }}
}}
"""


class TarkovAPIError(RuntimeError):
    """Raised when the tarkov.dev API returns an unexpected or failed response."""


def merge_mode_tasks(batches: Sequence[Sequence[TarkovTask]]) -> list[TarkovTask]:
    """Keyed union of per-mode task lists; later entries win on ``(wikiLink or id, mode)``."""

    merged: dict[str, TarkovTask] = {}
    for batch in batches:
        for task in batch:
            mode = task.game_modes[0] if task.game_modes else GameMode.REGULAR
            link = task.wiki_link or f"id:{task.id}"
            merged[f"{link}|{mode}"] = task
    return list(merged.values())


class TarkovClient:
    """Low-level HTTP client for the tarkov.dev GraphQL endpoint."""

    def __init__(
        self,
        *,
        config: TarkovConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def fetch_tasks(self, *, game_modes: Sequence[GameMode]) -> list[TarkovTask]:
        return asyncio.run(self._fetch_tasks_async(game_modes=game_modes))

    async def _fetch_tasks_async(self, *, game_modes: Sequence[GameMode]) -> list[TarkovTask]:
        async with self._client_factory(self._resilience) as client:
            batches = await asyncio.gather(
                *(self._perform_request(client=client, game_mode=mode) for mode in game_modes)
            )
        if len(batches) == 1:
            return batches[0]
        return merge_mode_tasks(batches)

    async def _perform_request(
        self,
        *,
        client: ResilientClient,
        game_mode: GameMode,
    ) -> list[TarkovTask]:
        response = await client.post(
            self._config.endpoint,
            json={"query": TASKS_QUERY, "variables": {"gameMode": str(game_mode)}},
        )
        response.raise_for_status()

        payload = response.json()
        if not isinstance(payload, dict):
            raise TarkovAPIError("Unexpected tarkov.dev response payload")

        result = TasksResponse.model_validate(payload)
        if result.errors:
            messages = ", ".join(error.message for error in result.errors)
            log.error(f"tarkov.dev GraphQL errors ({game_mode}): {messages}")
            raise TarkovAPIError(f"GraphQL errors: {messages}")
        if result.data is None:
            raise TarkovAPIError("tarkov.dev response missing data")

        tasks = result.data.tasks
        log.info("Fetched %d task(s) for game mode %s", len(tasks), game_mode)
        return [task.model_copy(update={"game_modes": [str(game_mode)]}) for task in tasks]
