"""Translation of tarkov.dev payloads into structured task records."""

from __future__ import annotations

from taskrecon.adapters.tarkov.schema import TarkovObjective, TasksResponse
from taskrecon.adapters.tarkov.translator import (
    collect_objective_items,
    translate_objective,
    translate_task,
)
from taskrecon.domain.model import GameMode, ObjectiveType, StructuredTask, TaskRef


def _tasks(payload: dict[str, object]) -> dict[str, StructuredTask]:
    response = TasksResponse.model_validate(payload)
    assert response.data is not None
    return {task.name: translate_task(task) for task in response.data.tasks}


def test_translate_task_maps_core_fields(tasks_response_payload: dict[str, object]) -> None:
    shortage = _tasks(tasks_response_payload)["Shortage"]

    assert shortage.id == "5936da9e86f7742d65037edf"
    assert shortage.min_player_level == 10
    assert shortage.map == "Customs"
    assert shortage.wiki_link == "https://escapefromtarkov.fandom.com/wiki/Shortage"
    assert shortage.requirements == (TaskRef(id="5936d90786f7742b1420ba5b", name="Debut"),)
    assert shortage.rewards.experience == 1700
    assert shortage.rewards.money == 15000
    assert [(r.trader, r.standing) for r in shortage.rewards.reputation] == [("Therapist", 0.03)]


def test_translate_objective_merges_duplicate_items(
    tasks_response_payload: dict[str, object],
) -> None:
    shortage = _tasks(tasks_response_payload)["Shortage"]
    handover, use_key = shortage.objectives

    assert handover.type is ObjectiveType.GIVE_ITEM
    assert handover.found_in_raid is True
    assert len(handover.items) == 1
    assert handover.items[0].name == "Bronze lion figurine"
    assert handover.items[0].short_name == "Lion"

    assert use_key.type is ObjectiveType.USE_ITEM
    assert use_key.maps == ("Shoreline",)
    assert [item.short_name for item in use_key.items] == ["W216", "E226"]
    assert [key.short_name for key in use_key.required_keys] == ["W216"]


def test_translate_task_tolerates_missing_sections(
    tasks_response_payload: dict[str, object],
) -> None:
    evidence = _tasks(tasks_response_payload)["Bad rep evidence"]

    assert evidence.wiki_link is None
    assert evidence.requirements == ()
    assert evidence.rewards.experience is None
    assert evidence.rewards.money is None
    objective = evidence.objectives[0]
    assert objective.type is ObjectiveType.FIND_QUEST_ITEM
    assert objective.quest_item is not None
    assert objective.quest_item.name == "Secure folder 0031"
    assert evidence.quest_item_names == ("Secure folder 0031",)


def test_unknown_objective_type_falls_back_to_basic() -> None:
    objective = TarkovObjective.model_validate(
        {"id": "o", "type": "somethingNew", "description": "Survive the raid"}
    )

    assert translate_objective(objective).type is ObjectiveType.BASIC
    assert collect_objective_items(objective) == ()


def test_game_modes_are_translated_and_unknown_values_dropped(
    tasks_response_payload: dict[str, object],
) -> None:
    response = TasksResponse.model_validate(tasks_response_payload)
    assert response.data is not None
    payload = response.data.tasks[0].model_copy(update={"game_modes": ["pve", "arena", "pve"]})

    assert translate_task(payload).game_modes == (GameMode.PVE,)
