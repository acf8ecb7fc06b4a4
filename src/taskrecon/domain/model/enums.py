"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class GameMode(StrEnum):
    REGULAR = "regular"
    PVE = "pve"


class ObjectiveType(StrEnum):
    """Objective tags emitted by the structured feed.

    Unknown tags fall back to ``BASIC`` so new feed values never break ingestion.
    """

    BASIC = "basic"
    MARK = "mark"
    EXTRACT = "extract"
    SHOOT = "shoot"
    VISIT = "visit"
    GIVE_ITEM = "giveItem"
    FIND_ITEM = "findItem"
    GIVE_QUEST_ITEM = "giveQuestItem"
    FIND_QUEST_ITEM = "findQuestItem"
    PLANT_ITEM = "plantItem"
    PLANT_QUEST_ITEM = "plantQuestItem"
    USE_ITEM = "useItem"
    BUILD_WEAPON = "buildWeapon"
    SELL_ITEM = "sellItem"
    SKILL = "skill"
    EXPERIENCE = "experience"
    PLAYER_LEVEL = "playerLevel"
    TASK_STATUS = "taskStatus"
    TRADER_LEVEL = "traderLevel"
    TRADER_STANDING = "traderStanding"

    @classmethod
    def parse(cls, value: str | None) -> ObjectiveType:
        if value is None:
            return cls.BASIC
        try:
            return cls(value)
        except ValueError:
            return cls.BASIC

    @property
    def is_item_handover(self) -> bool:
        return self in {ObjectiveType.GIVE_ITEM, ObjectiveType.FIND_ITEM}

    @property
    def is_quest_item(self) -> bool:
        return self in {ObjectiveType.GIVE_QUEST_ITEM, ObjectiveType.FIND_QUEST_ITEM}


class Priority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


class FieldKey(StrEnum):
    """Closed set of comparable fields; ``reputation.<trader>`` extends ``REPUTATION``."""

    MIN_PLAYER_LEVEL = "minPlayerLevel"
    TASK_REQUIREMENTS = "taskRequirements"
    NEXT_TASKS = "nextTasks"
    MAP = "map"
    OBJECTIVE_DESCRIPTION = "objectives.description"
    OBJECTIVE_COUNT = "objectives.count"
    OBJECTIVE_MAPS = "objectives.maps"
    OBJECTIVE_ITEMS = "objectives.items"
    EXPERIENCE = "experience"
    MONEY = "money"
    REPUTATION = "reputation"


class MatchKind(StrEnum):
    """Which matching pass paired two objectives."""

    EXACT_TEXT = "exact_text"
    SUBSTRING = "substring"
    VERB_ITEM = "verb_item"
    SINGLETON = "singleton"

    @property
    def is_text_match(self) -> bool:
        return self is not MatchKind.VERB_ITEM


class ObjectiveIntent(StrEnum):
    """Coarse verb intent shared by both sources' objective phrasing."""

    HAND_OVER = "hand_over"
    LOCATE = "locate"
    MARK = "mark"
    USE = "use"
    ELIMINATE = "eliminate"
    EXTRACT = "extract"


class SuppressionSource(StrEnum):
    CORRECTION = "correction"
    FREE_TEXT_INCORRECT = "free_text_incorrect"


class GroupBy(StrEnum):
    PRIORITY = "priority"
    CATEGORY = "category"
