"""Field-level comparison of one structured task against its free-text page."""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING

from taskrecon.domain.model import (
    Discrepancy,
    FieldKey,
    ObjectiveIntent,
    RevisionFreshness,
    priority_for,
    reputation_field,
)

from .aliases import (
    build_alias_set,
    canonical_map_set,
    extract_maps_from_text,
    free_text_item_aliases,
    has_category_item_requirement,
    items_match,
    objective_mentions_item,
    text_covers_items,
)
from .normalize import (
    classify_intent,
    extract_count,
    normalize,
    normalize_item_name,
    normalize_task_name,
    strip_markup_only,
)
from .policy import DEFAULT_POLICY
from .vocabulary import (
    ANY_ITEM_PATTERN,
    DEFAULT_VOCABULARY,
    SKILL_OBJECTIVE_PATTERN,
    TRANSIT_PATTERN,
    Vocabulary,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from taskrecon.domain.model import (
        FieldValue,
        FreeTextObjective,
        FreeTextTask,
        Revision,
        StructuredObjective,
        StructuredTask,
        TaskRef,
    )

    from .aliases import AliasTable
    from .matching import MatchResult, ObjectiveMatch
    from .policy import ReconciliationPolicy

log = getLogger(__name__)

type Clock = Callable[[], datetime]
type NextTaskIndex = Mapping[str, tuple[str, ...]]

NOT_FOUND = "not found"
NONE_VALUE = "none"


def utc_now() -> datetime:
    return datetime.now(UTC)


def build_next_task_index(
    tasks: Iterable[StructuredTask],
    requirement_overrides: Mapping[str, Sequence[TaskRef]] | None = None,
) -> NextTaskIndex:
    """Invert prerequisites into ``task id -> names of tasks it unlocks``.

    ``requirement_overrides`` replaces a task's prerequisite list wholesale.
    """

    overrides = requirement_overrides or {}
    dependents: dict[str, list[str]] = {}
    for task in tasks:
        requirements = overrides.get(task.id, task.requirements)
        for requirement in requirements:
            dependents.setdefault(requirement.id, []).append(task.name)
    return MappingProxyType(
        {task_id: tuple(dict.fromkeys(names)) for task_id, names in dependents.items()}
    )


def revision_freshness(
    revision: Revision | None,
    *,
    cutover: datetime,
    now: datetime,
) -> RevisionFreshness | None:
    if revision is None:
        return None
    timestamp = revision.timestamp
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return RevisionFreshness(
        last_edit=timestamp.astimezone(UTC).date(),
        days_since_edit=math.floor((now - timestamp) / timedelta(days=1)),
        edited_after_cutover=timestamp >= cutover,
    )


def _join(values: Iterable[str]) -> str:
    return ", ".join(values) or NONE_VALUE


def _task_name_set(names: Iterable[str]) -> frozenset[str]:
    return frozenset(key for key in map(normalize_task_name, names) if key)


@dataclass(slots=True)
class _TaskComparison:
    task: StructuredTask
    page: FreeTextTask
    map_aliases: AliasTable
    policy: ReconciliationPolicy
    vocabulary: Vocabulary
    freshness: RevisionFreshness | None
    discrepancies: list[Discrepancy] = field(default_factory=list)

    def emit(self, field_key: str, structured: FieldValue, free_text: FieldValue) -> None:
        self.discrepancies.append(
            Discrepancy(
                task_id=self.task.id,
                task_name=self.task.name,
                field=field_key,
                structured_value=structured,
                free_text_value=free_text,
                priority=priority_for(field_key),
                trusts_free_text=self.policy.trust(self.task.id, field_key),
                freshness=self.freshness,
            )
        )

    def level(self) -> None:
        asserted = self.page.min_player_level
        if asserted is not None and asserted != self.task.min_player_level:
            self.emit(FieldKey.MIN_PLAYER_LEVEL, self.task.min_player_level, asserted)

    def task_map(self) -> None:
        structured = [self.task.map] if self.task.map else []
        free_text = list(dict.fromkeys((*self.page.maps, *self.page.objective_maps)))
        structured_set = canonical_map_set(structured, self.map_aliases)
        free_text_set = canonical_map_set(free_text, self.map_aliases)
        if structured_set != free_text_set:
            self.emit(FieldKey.MAP, self.task.map or NONE_VALUE, _join(free_text))

    def task_links(self, next_task_index: NextTaskIndex) -> None:
        prerequisites = [requirement.name for requirement in self.task.requirements]
        self._name_sets(FieldKey.TASK_REQUIREMENTS, prerequisites, self.page.previous_tasks)
        unlocks = next_task_index.get(self.task.id, ())
        self._name_sets(FieldKey.NEXT_TASKS, unlocks, self.page.next_tasks)

    def _name_sets(
        self, field_key: str, structured: Sequence[str], free_text: Sequence[str]
    ) -> None:
        structured_set = _task_name_set(structured)
        free_text_set = _task_name_set(free_text)
        if (structured_set or free_text_set) and structured_set != free_text_set:
            self.emit(field_key, _join(structured), _join(free_text))

    def missing_objectives(self, match: MatchResult) -> None:
        for objective in match.unmatched_structured:
            self.emit(
                FieldKey.OBJECTIVE_DESCRIPTION,
                objective.description or objective.id,
                NOT_FOUND,
            )
        for free_text in match.unmatched_free_text:
            self.emit(FieldKey.OBJECTIVE_DESCRIPTION, NOT_FOUND, free_text.text)

    def objective(self, pair: ObjectiveMatch) -> None:
        _ObjectiveComparison(self, pair).run()

    def rewards(self) -> None:
        structured = self.task.rewards
        free_text = self.page.rewards

        if free_text.experience is not None and structured.experience is not None:
            if free_text.experience != structured.experience:
                self.emit(FieldKey.EXPERIENCE, structured.experience, free_text.experience)

        for reputation in free_text.reputations:
            trader = reputation.trader.lower()
            standing = next(
                (r.standing for r in structured.reputation if r.trader.lower() == trader),
                None,
            )
            if standing is None:
                log.debug("%s: %s reputation not in structured rewards", self.task.name, trader)
                continue
            if abs(standing - reputation.value) > self.policy.reputation_tolerance:
                self.emit(reputation_field(reputation.trader), standing, reputation.value)

        money = structured.money
        if free_text.money is not None and money is not None and money != free_text.money:
            self.emit(FieldKey.MONEY, money, free_text.money)


class _ObjectiveComparison:
    """Count, map, text and item checks for one matched objective pair."""

    def __init__(self, parent: _TaskComparison, pair: ObjectiveMatch) -> None:
        self.parent = parent
        self.pair = pair
        self.structured: StructuredObjective = pair.structured
        self.free_text: FreeTextObjective = pair.free_text
        self.task_name = parent.task.name
        self.intent = classify_intent(self.structured.description, vocabulary=parent.vocabulary)
        self.label = self.structured.description or self.free_text.text or self.structured.id

        page = parent.page
        free_items = list(dict.fromkeys(self.free_text.items))
        key_aliases = build_alias_set(self.structured.required_keys, self.task_name)
        self.related_required = [
            name
            for name in page.related_required_items
            if key_aliases
            and any(alias in key_aliases for alias in free_text_item_aliases(name, self.task_name))
        ]
        self.hands_over = (
            self.structured.quest_item is not None or self.intent is ObjectiveIntent.HAND_OVER
        )
        related_handover = (
            list(page.related_handover_items) if not free_items and self.hands_over else []
        )
        self.free_items = free_items
        self.compare_items = list(
            dict.fromkeys((*free_items, *self.related_required, *related_handover))
        )
        self.uses_related_items = bool(self.related_required) or bool(related_handover)

    def run(self) -> None:
        self.text()
        self.count()
        self.maps()
        self.items()

    def _items_agree(self) -> bool:
        return (
            bool(self.structured.items)
            and bool(self.compare_items)
            and items_match(self.structured.items, self.compare_items, self.task_name)
        )

    def text(self) -> None:
        if not self.pair.kind.is_text_match:
            return
        structured_text = strip_markup_only(self.structured.description)
        free_text = self.free_text.text
        if not structured_text or not free_text:
            return
        aliases = self.parent.map_aliases
        vocabulary = self.parent.vocabulary
        if normalize(structured_text, map_aliases=aliases, vocabulary=vocabulary) == normalize(
            free_text, map_aliases=aliases, vocabulary=vocabulary
        ):
            return
        if self._items_agree():
            return
        self.parent.emit(FieldKey.OBJECTIVE_DESCRIPTION, structured_text, free_text)

    def count(self) -> None:
        structured_count = self.structured.count
        if structured_count is None:
            structured_count = extract_count(
                self.structured.description,
                self.structured.item_names,
                vocabulary=self.parent.vocabulary,
            )
        alternate = self.free_text.alternate_count
        free_count = self.free_text.count
        if self.parent.task.is_pve_only and alternate is not None:
            free_count = alternate
        if structured_count is None or free_count is None:
            return
        if alternate is not None and structured_count in {self.free_text.count, alternate}:
            return
        if structured_count != free_count:
            self.parent.emit(
                FieldKey.OBJECTIVE_COUNT,
                f"{structured_count} ({self.label})",
                f"{free_count} ({self.free_text.text})",
            )

    def maps(self) -> None:
        aliases = self.parent.map_aliases
        structured_maps = list(dict.fromkeys(self.structured.maps))
        if not structured_maps:
            structured_maps = extract_maps_from_text(self.structured.description, aliases)
        free_maps = list(dict.fromkeys(self.free_text.maps))
        if not free_maps:
            return

        structured_set = canonical_map_set(structured_maps, aliases)
        free_set = canonical_map_set(free_maps, aliases)
        if structured_set == free_set:
            return
        transit = TRANSIT_PATTERN.search(f"{self.structured.description} {self.free_text.text}")
        if transit and structured_set and structured_set <= free_set:
            return
        if self.intent is ObjectiveIntent.HAND_OVER and not structured_set:
            return
        self.parent.emit(
            FieldKey.OBJECTIVE_MAPS,
            f"{_join(structured_maps)} ({self.label})",
            f"{_join(free_maps)} ({self.free_text.text})",
        )

    def items(self) -> None:
        structured_items = self.structured.items
        if not structured_items and not self.compare_items:
            return
        description = self.structured.description
        text = self.free_text.text
        if SKILL_OBJECTIVE_PATTERN.search(description) or SKILL_OBJECTIVE_PATTERN.search(text):
            return

        reason = self._exemption()
        if reason is not None:
            log.debug("%s: item compare skipped (%s) for %r", self.task_name, reason, self.label)
            return
        if not items_match(structured_items, self.compare_items, self.task_name):
            names = list(dict.fromkeys(item.name for item in structured_items))
            self.parent.emit(
                FieldKey.OBJECTIVE_ITEMS,
                f"{_join(names)} ({self.label})",
                f"{_join(self.compare_items)} ({text})",
            )

    def _exemption(self) -> str | None:
        parent = self.parent
        aliases = parent.map_aliases
        vocabulary = parent.vocabulary
        structured_items = self.structured.items
        description = self.structured.description
        text = self.free_text.text

        if (
            not structured_items
            and not self.uses_related_items
            and self.intent is not ObjectiveIntent.HAND_OVER
            and self.free_items
            and all(
                objective_mentions_item(item, description, aliases, vocabulary=vocabulary)
                or objective_mentions_item(item, text, aliases, vocabulary=vocabulary)
                for item in self.free_items
            )
        ):
            return "items mentioned in text"
        if not self.compare_items and (
            has_category_item_requirement(description, vocabulary=vocabulary)
            or has_category_item_requirement(text, vocabulary=vocabulary)
        ):
            return "category requirement"
        if (
            structured_items
            and not self.compare_items
            and text_covers_items(
                structured_items,
                f"{description} {text}",
                aliases,
                ratio=parent.policy.coverage_ratio,
                vocabulary=vocabulary,
            )
        ):
            return "text covers items"
        if (
            ANY_ITEM_PATTERN.search(description)
            and len(structured_items) >= parent.policy.any_item_pool_min
            and not self.compare_items
        ):
            return "any item from a pool"
        quest_items = {normalize_item_name(name) for name in parent.task.quest_item_names}
        if (
            not structured_items
            and self.intent is ObjectiveIntent.HAND_OVER
            and self.compare_items
            and all(normalize_item_name(name) in quest_items for name in self.compare_items)
        ):
            return "hand-over of a quest item"
        return None


def compare_task(
    task: StructuredTask,
    page: FreeTextTask,
    match: MatchResult,
    *,
    map_aliases: AliasTable,
    next_task_index: NextTaskIndex,
    policy: ReconciliationPolicy = DEFAULT_POLICY,
    clock: Clock = utc_now,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> list[Discrepancy]:
    """All field-level disagreements between ``task`` and ``page``.

    Objective-level checks only look at pairs in ``match``; objectives it left
    unmatched are reported as missing on the other side.
    """

    comparison = _TaskComparison(
        task=task,
        page=page,
        map_aliases=map_aliases,
        policy=policy,
        vocabulary=vocabulary,
        freshness=revision_freshness(page.last_revision, cutover=policy.cutover, now=clock()),
    )
    comparison.level()
    comparison.task_map()
    comparison.missing_objectives(match)
    for pair in match.matched:
        comparison.objective(pair)
    comparison.task_links(next_task_index)
    comparison.rewards()
    return comparison.discrepancies
