"""Free-text (wiki) task records parsed from page markup."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

_REQUIRED_PATTERN = re.compile(r"required", re.IGNORECASE)
_HANDOVER_PATTERN = re.compile(r"handover", re.IGNORECASE)


@dataclass(slots=True, frozen=True, kw_only=True)
class WikiLink:
    target: str
    display: str | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class Revision:
    timestamp: datetime
    editor: str = "unknown"
    comment: str = ""


@dataclass(slots=True, frozen=True, kw_only=True)
class FreeTextPage:
    """Raw page as returned by the free-text source."""

    title: str
    markup: str
    last_revision: Revision | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class FreeTextObjective:
    text: str
    count: int | None = None
    alternate_count: int | None = None
    maps: tuple[str, ...] = ()
    items: tuple[str, ...] = ()
    links: tuple[WikiLink, ...] = ()


@dataclass(slots=True, frozen=True, kw_only=True)
class TraderReputation:
    trader: str
    value: float


@dataclass(slots=True, frozen=True, kw_only=True)
class RewardItem:
    name: str
    count: int


@dataclass(slots=True, frozen=True, kw_only=True)
class FreeTextRewards:
    experience: int | None = None
    reputations: tuple[TraderReputation, ...] = ()
    money: int | None = None
    items: tuple[RewardItem, ...] = ()
    raw: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True, kw_only=True)
class RelatedItem:
    name: str
    requirement: str = ""


@dataclass(slots=True, frozen=True, kw_only=True)
class FreeTextTask:
    title: str
    requirements: tuple[str, ...] = ()
    objectives: tuple[FreeTextObjective, ...] = ()
    rewards: FreeTextRewards = field(default_factory=FreeTextRewards)
    min_player_level: int | None = None
    previous_tasks: tuple[str, ...] = ()
    next_tasks: tuple[str, ...] = ()
    maps: tuple[str, ...] = ()
    related_items: tuple[RelatedItem, ...] = ()
    last_revision: Revision | None = None

    @property
    def related_required_items(self) -> tuple[str, ...]:
        return tuple(
            dict.fromkeys(
                item.name
                for item in self.related_items
                if _REQUIRED_PATTERN.search(item.requirement)
            )
        )

    @property
    def related_handover_items(self) -> tuple[str, ...]:
        return tuple(
            dict.fromkeys(
                item.name
                for item in self.related_items
                if _HANDOVER_PATTERN.search(item.requirement)
            )
        )

    @property
    def objective_maps(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(name for obj in self.objectives for name in obj.maps))
