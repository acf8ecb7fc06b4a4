"""Pydantic models describing the tarkov.dev GraphQL task payloads."""

from __future__ import annotations

import logging
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

log = logging.getLogger(__name__)


def _flatten_items(value: object) -> object:
    """Item groups arrive as a list, a list of lists, a single item, or null."""

    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    if isinstance(value, list):
        flat: list[object] = []
        for entry in value:
            if entry is None:
                continue
            if isinstance(entry, list):
                flat.extend(item for item in entry if item is not None)
            else:
                flat.append(entry)
        return flat
    return value


class TarkovBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.warning(
            "tarkov.dev %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class TarkovItem(TarkovBaseModel):
    id: str | None = None
    name: str
    short_name: str | None = Field(default=None, alias="shortName")


class TarkovMap(TarkovBaseModel):
    id: str | None = None
    name: str


class TarkovTaskLink(TarkovBaseModel):
    id: str | None = None
    name: str


class TarkovTaskRequirement(TarkovBaseModel):
    task: TarkovTaskLink | None = None
    status: list[str] = Field(default_factory=list)


class TarkovObjective(TarkovBaseModel):
    id: str
    type: str | None = None
    description: str = ""
    maps: list[TarkovMap] = Field(default_factory=list)
    count: int | None = None
    found_in_raid: bool | None = Field(default=None, alias="foundInRaid")
    items: list[TarkovItem] = Field(default_factory=list)
    use_any: list[TarkovItem] = Field(default_factory=list, alias="useAny")
    using_weapon: list[TarkovItem] = Field(default_factory=list, alias="usingWeapon")
    using_weapon_mods: list[TarkovItem] = Field(default_factory=list, alias="usingWeaponMods")
    wearing: list[TarkovItem] = Field(default_factory=list)
    not_wearing: list[TarkovItem] = Field(default_factory=list, alias="notWearing")
    contains_all: list[TarkovItem] = Field(default_factory=list, alias="containsAll")
    marker_item: TarkovItem | None = Field(default=None, alias="markerItem")
    quest_item: TarkovItem | None = Field(default=None, alias="questItem")
    item: TarkovItem | None = None
    required_keys: list[TarkovItem] = Field(default_factory=list, alias="requiredKeys")

    _flatten = field_validator(
        "maps",
        "items",
        "use_any",
        "using_weapon",
        "using_weapon_mods",
        "wearing",
        "not_wearing",
        "contains_all",
        "required_keys",
        mode="before",
    )(_flatten_items)


class TarkovTrader(TarkovBaseModel):
    name: str


class TarkovTraderStanding(TarkovBaseModel):
    trader: TarkovTrader
    standing: float


class TarkovRewardItem(TarkovBaseModel):
    item: TarkovItem
    count: int = 1


class TarkovFinishRewards(TarkovBaseModel):
    trader_standing: list[TarkovTraderStanding] = Field(
        default_factory=list, alias="traderStanding"
    )
    items: list[TarkovRewardItem] = Field(default_factory=list)

    @field_validator("trader_standing", "items", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return [] if value is None else value


class TarkovTask(TarkovBaseModel):
    id: str
    name: str
    min_player_level: int | None = Field(default=None, alias="minPlayerLevel")
    wiki_link: str | None = Field(default=None, alias="wikiLink")
    map: TarkovMap | None = None
    experience: int | None = None
    task_requirements: list[TarkovTaskRequirement] = Field(
        default_factory=list, alias="taskRequirements"
    )
    objectives: list[TarkovObjective] = Field(default_factory=list)
    finish_rewards: TarkovFinishRewards | None = Field(default=None, alias="finishRewards")
    game_modes: list[str] = Field(default_factory=list, alias="gameModes")

    @field_validator("task_requirements", "objectives", "game_modes", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return [] if value is None else value


class GraphQLError(TarkovBaseModel):
    message: str


class TasksData(TarkovBaseModel):
    tasks: list[TarkovTask] = Field(default_factory=list)


class TasksResponse(TarkovBaseModel):
    data: TasksData | None = None
    errors: list[GraphQLError] | None = None
