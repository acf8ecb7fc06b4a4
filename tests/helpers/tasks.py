"""Builders for structured tasks, free-text pages and canned page markup."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from taskrecon.domain.model import (
    Discrepancy,
    FreeTextObjective,
    FreeTextPage,
    ItemRef,
    ItemReward,
    ObjectiveType,
    ReputationReward,
    Revision,
    StructuredObjective,
    StructuredTask,
    TaskRef,
    TaskRewards,
    priority_for,
)
from taskrecon.domain.model.tasks import ROUBLES_ITEM_ID, ROUBLES_ITEM_NAME

if TYPE_CHECKING:
    from collections.abc import Iterable

    from taskrecon.domain.model import FieldValue, GameMode, RevisionFreshness

FIXED_NOW = datetime(2025, 12, 11, 12, 0, tzinfo=UTC)

SHORTAGE_MARKUP = """{{Infobox quest
|image = Shortage.png
|given by = [[Therapist]]
|location = [[Customs]]
|previous = [[Debut]]
|next = [[Shootout picnic]], [[Delivery from the past]]
|type = Pickup
}}
'''Shortage''' is a quest given by [[Therapist]].

==Requirements==
* Must be level 10 to start this quest.
* Must complete [[Debut]]

==Objectives==
* Find 5 [[Bronze lion figurine]]s in raid
'''Note:''' In PvE mode you only need to find 3 figurines.
* Eliminate 5 [[Scavs]] on [[Customs]]

==Rewards==
* +1,700 EXP
* [[Therapist]] Rep +0.03
* 15,000 [[Roubles]]
* 2 × [[Salewa first aid kit]]

==Related Quest Items==
{| class="wikitable"
|+ Related Quest Items
! Icon !! Item !! Amount !! Requirement
|-
| [[File:Bronze lion icon.png]] || [[Bronze lion figurine]] || 5 || Handover (found in raid)
|}
"""


def make_item(name: str, *, short_name: str | None = None, item_id: str | None = None) -> ItemRef:
    return ItemRef(name=name, short_name=short_name, id=item_id)


def make_objective(
    description: str,
    *,
    objective_id: str = "obj-1",
    objective_type: ObjectiveType = ObjectiveType.BASIC,
    count: int | None = None,
    maps: Iterable[str] = (),
    items: Iterable[ItemRef] = (),
    found_in_raid: bool | None = None,
    required_keys: Iterable[ItemRef] = (),
    quest_item: ItemRef | None = None,
) -> StructuredObjective:
    return StructuredObjective(
        id=objective_id,
        description=description,
        type=objective_type,
        count=count,
        maps=tuple(maps),
        items=tuple(items),
        found_in_raid=found_in_raid,
        required_keys=tuple(required_keys),
        quest_item=quest_item,
    )


def make_task(
    name: str = "Example task",
    *,
    task_id: str | None = None,
    min_player_level: int | None = None,
    task_map: str | None = None,
    objectives: Iterable[StructuredObjective] = (),
    requirements: Iterable[TaskRef] = (),
    rewards: TaskRewards | None = None,
    wiki_link: str | None = None,
    game_modes: Iterable[GameMode] = (),
) -> StructuredTask:
    return StructuredTask(
        id=task_id or f"task-{name.lower().replace(' ', '-')}",
        name=name,
        min_player_level=min_player_level,
        map=task_map,
        objectives=tuple(objectives),
        requirements=tuple(requirements),
        rewards=rewards or TaskRewards(),
        wiki_link=wiki_link,
        game_modes=tuple(game_modes),
    )


def make_free_text_objective(
    text: str,
    *,
    count: int | None = None,
    alternate_count: int | None = None,
    maps: Iterable[str] = (),
    items: Iterable[str] = (),
) -> FreeTextObjective:
    return FreeTextObjective(
        text=text,
        count=count,
        alternate_count=alternate_count,
        maps=tuple(maps),
        items=tuple(items),
    )


def roubles(count: int) -> ItemReward:
    return ItemReward(name=ROUBLES_ITEM_NAME, count=count, id=ROUBLES_ITEM_ID)


def shortage_task(**overrides: object) -> StructuredTask:
    """Structured twin of ``SHORTAGE_MARKUP``; every field agrees with the page."""

    fields: dict[str, object] = {
        "task_id": "task-shortage",
        "min_player_level": 10,
        "task_map": "Customs",
        "objectives": (
            make_objective(
                "Hand over 5 Bronze lion figurines, found in raid",
                objective_id="obj-lion",
                objective_type=ObjectiveType.GIVE_ITEM,
                count=5,
                items=(make_item("Bronze lion figurine", short_name="Lion", item_id="lion"),),
                found_in_raid=True,
            ),
            make_objective(
                "Eliminate 5 Scavs on Customs",
                objective_id="obj-scavs",
                objective_type=ObjectiveType.SHOOT,
                count=5,
                maps=("Customs",),
            ),
        ),
        "requirements": (TaskRef(id="task-debut", name="Debut"),),
        "rewards": TaskRewards(
            experience=1700,
            reputation=(ReputationReward(trader="Therapist", standing=0.03),),
            items=(roubles(15000), ItemReward(name="Salewa first aid kit", count=2)),
        ),
        "wiki_link": "https://escapefromtarkov.fandom.com/wiki/Shortage",
    }
    fields.update(overrides)
    return make_task("Shortage", **fields)  # type: ignore[arg-type]


def shortage_followups() -> tuple[StructuredTask, ...]:
    """Tasks unlocked by Shortage, so the next-task index agrees with the page."""

    unlock = (TaskRef(id="task-shortage", name="Shortage"),)
    return (
        make_task("Shootout picnic", requirements=unlock),
        make_task("Delivery from the past", requirements=unlock),
    )


def shortage_page(
    markup: str = SHORTAGE_MARKUP,
    *,
    edited_at: datetime | None = None,
) -> FreeTextPage:
    revision = Revision(timestamp=edited_at, editor="Curator") if edited_at else None
    return FreeTextPage(title="Shortage", markup=markup, last_revision=revision)


def make_discrepancy(
    task_id: str,
    field: str,
    *,
    structured_value: FieldValue = "api",
    free_text_value: FieldValue = "wiki",
    freshness: RevisionFreshness | None = None,
) -> Discrepancy:
    return Discrepancy(
        task_id=task_id,
        task_name=task_id.removeprefix("task-").title(),
        field=field,
        structured_value=structured_value,
        free_text_value=free_text_value,
        priority=priority_for(field),
        freshness=freshness,
    )
