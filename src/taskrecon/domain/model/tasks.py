"""Structured-source task records (read-only inputs to reconciliation)."""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import GameMode, ObjectiveType

ROUBLES_ITEM_NAME = "Roubles"
ROUBLES_ITEM_ID = "5449016a4bdc2d6f028b456f"


@dataclass(slots=True, frozen=True, kw_only=True)
class ItemRef:
    name: str
    short_name: str | None = None
    id: str | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class TaskRef:
    id: str
    name: str


@dataclass(slots=True, frozen=True, kw_only=True)
class StructuredObjective:
    id: str
    description: str
    type: ObjectiveType = ObjectiveType.BASIC
    count: int | None = None
    maps: tuple[str, ...] = ()
    items: tuple[ItemRef, ...] = ()
    found_in_raid: bool | None = None
    required_keys: tuple[ItemRef, ...] = ()
    quest_item: ItemRef | None = None

    @property
    def item_names(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(item.name for item in self.items))

    @property
    def is_found_in_raid(self) -> bool:
        return self.found_in_raid is True or "found in raid" in self.description.lower()


@dataclass(slots=True, frozen=True, kw_only=True)
class ReputationReward:
    trader: str
    standing: float


@dataclass(slots=True, frozen=True, kw_only=True)
class ItemReward:
    name: str
    count: int
    id: str | None = None

    @property
    def is_roubles(self) -> bool:
        return self.name == ROUBLES_ITEM_NAME or self.id == ROUBLES_ITEM_ID


@dataclass(slots=True, frozen=True, kw_only=True)
class TaskRewards:
    experience: int | None = None
    reputation: tuple[ReputationReward, ...] = ()
    items: tuple[ItemReward, ...] = ()

    @property
    def money(self) -> int | None:
        return next((item.count for item in self.items if item.is_roubles), None)


@dataclass(slots=True, frozen=True, kw_only=True)
class StructuredTask:
    id: str
    name: str
    min_player_level: int | None = None
    map: str | None = None
    objectives: tuple[StructuredObjective, ...] = ()
    requirements: tuple[TaskRef, ...] = ()
    rewards: TaskRewards = field(default_factory=TaskRewards)
    wiki_link: str | None = None
    game_modes: tuple[GameMode, ...] = ()

    @property
    def is_pve_only(self) -> bool:
        return self.game_modes == (GameMode.PVE,)

    @property
    def quest_item_names(self) -> tuple[str, ...]:
        return tuple(
            objective.quest_item.name
            for objective in self.objectives
            if objective.quest_item is not None
        )

    def map_names(self) -> tuple[str, ...]:
        """Every map referenced by the task, task-level first."""

        names: dict[str, None] = {}
        if self.map:
            names[self.map] = None
        for objective in self.objectives:
            for name in objective.maps:
                names[name] = None
        return tuple(names)
