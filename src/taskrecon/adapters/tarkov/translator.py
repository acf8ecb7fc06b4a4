"""Translate tarkov.dev payloads into structured task records."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from taskrecon.domain.model import (
    GameMode,
    ItemRef,
    ItemReward,
    ObjectiveType,
    ReputationReward,
    StructuredObjective,
    StructuredTask,
    TaskRef,
    TaskRewards,
)
from taskrecon.domain.reconciliation.normalize import normalize_item_name

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .schema import TarkovItem, TarkovObjective, TarkovTask


def _item_ref(item: TarkovItem) -> ItemRef:
    return ItemRef(name=item.name, short_name=item.short_name, id=item.id)


def collect_objective_items(objective: TarkovObjective) -> tuple[ItemRef, ...]:
    """Every item an objective references, deduplicated by id (or normalized name).

    A duplicate without a short name picks one up from a later occurrence.
    """

    sources: list[TarkovItem] = [
        *objective.items,
        *objective.use_any,
        *objective.using_weapon,
        *objective.using_weapon_mods,
        *objective.contains_all,
    ]
    sources.extend(
        item
        for item in (objective.marker_item, objective.quest_item, objective.item)
        if item is not None
    )
    sources.extend(objective.required_keys)

    collected: dict[str, ItemRef] = {}
    for item in sources:
        if not item.name.strip():
            continue
        key = item.id or normalize_item_name(item.name)
        existing = collected.get(key)
        if existing is None:
            collected[key] = _item_ref(item)
        elif existing.short_name is None and item.short_name:
            collected[key] = replace(existing, short_name=item.short_name)
    return tuple(collected.values())


def translate_objective(objective: TarkovObjective) -> StructuredObjective:
    return StructuredObjective(
        id=objective.id,
        description=objective.description,
        type=ObjectiveType.parse(objective.type),
        count=objective.count,
        maps=tuple(dict.fromkeys(entry.name for entry in objective.maps)),
        items=collect_objective_items(objective),
        found_in_raid=objective.found_in_raid,
        required_keys=tuple(_item_ref(key) for key in objective.required_keys),
        quest_item=_item_ref(objective.quest_item) if objective.quest_item else None,
    )


def _game_modes(values: Iterable[str]) -> tuple[GameMode, ...]:
    modes: list[GameMode] = []
    for value in values:
        try:
            mode = GameMode(value)
        except ValueError:
            continue
        if mode not in modes:
            modes.append(mode)
    return tuple(modes)


def translate_task(task: TarkovTask) -> StructuredTask:
    rewards = task.finish_rewards
    return StructuredTask(
        id=task.id,
        name=task.name,
        min_player_level=task.min_player_level,
        map=task.map.name if task.map else None,
        objectives=tuple(translate_objective(objective) for objective in task.objectives),
        requirements=tuple(
            TaskRef(id=requirement.task.id, name=requirement.task.name)
            for requirement in task.task_requirements
            if requirement.task is not None and requirement.task.id
        ),
        rewards=TaskRewards(
            experience=task.experience,
            reputation=tuple(
                ReputationReward(trader=entry.trader.name, standing=entry.standing)
                for entry in (rewards.trader_standing if rewards else ())
            ),
            items=tuple(
                ItemReward(name=entry.item.name, count=entry.count, id=entry.item.id)
                for entry in (rewards.items if rewards else ())
            ),
        ),
        wiki_link=task.wiki_link,
        game_modes=_game_modes(task.game_modes),
    )
