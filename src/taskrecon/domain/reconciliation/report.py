"""Group, order and summarize surviving discrepancies."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from taskrecon.domain.model import FieldKey, GroupBy, Priority
from taskrecon.domain.model.discrepancy import REPUTATION_PREFIX

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import datetime

    from taskrecon.domain.model import Discrepancy, TaskFailure

    from .suppression import SuppressionResult

CATEGORY_ORDER: tuple[str, ...] = (
    FieldKey.MIN_PLAYER_LEVEL,
    FieldKey.TASK_REQUIREMENTS,
    FieldKey.NEXT_TASKS,
    FieldKey.MAP,
    FieldKey.OBJECTIVE_DESCRIPTION,
    FieldKey.OBJECTIVE_COUNT,
    FieldKey.OBJECTIVE_MAPS,
    FieldKey.OBJECTIVE_ITEMS,
    FieldKey.EXPERIENCE,
    FieldKey.MONEY,
)

CATEGORY_LABELS: dict[str, str] = {
    FieldKey.MIN_PLAYER_LEVEL: "Level Requirements",
    FieldKey.TASK_REQUIREMENTS: "Task Prerequisites",
    FieldKey.NEXT_TASKS: "Task Next / Unlocks",
    FieldKey.MAP: "Task Map / Location",
    FieldKey.OBJECTIVE_DESCRIPTION: "Objective Descriptions",
    FieldKey.OBJECTIVE_COUNT: "Objective Counts",
    FieldKey.OBJECTIVE_MAPS: "Objective Maps / Locations",
    FieldKey.OBJECTIVE_ITEMS: "Objective Required Items",
    FieldKey.EXPERIENCE: "Reward: Experience (XP)",
    FieldKey.MONEY: "Reward: Money (Roubles)",
}

PRIORITY_ORDER: tuple[Priority, ...] = (Priority.HIGH, Priority.MEDIUM, Priority.LOW)

FRESHNESS_NOTE = "Tarkov 1.0 launched Nov 15, 2025. Post-1.0 wiki edits are high confidence."


def category_label(field_key: str) -> str:
    if field_key.startswith(REPUTATION_PREFIX):
        return f"Reward: Reputation ({field_key.removeprefix(REPUTATION_PREFIX)})"
    return CATEGORY_LABELS.get(field_key, field_key)


def _category_sort_key(field_key: str) -> tuple[int, str]:
    try:
        return (CATEGORY_ORDER.index(field_key), "")
    except ValueError:
        return (len(CATEGORY_ORDER), field_key)


def group_by_priority(discrepancies: Iterable[Discrepancy]) -> dict[Priority, list[Discrepancy]]:
    """Every priority tier, highest first, even when empty."""

    groups: dict[Priority, list[Discrepancy]] = {priority: [] for priority in PRIORITY_ORDER}
    for discrepancy in discrepancies:
        groups[discrepancy.priority].append(discrepancy)
    return groups


def group_by_category(discrepancies: Iterable[Discrepancy]) -> dict[str, list[Discrepancy]]:
    """Non-empty field groups in display order; reputation fields alphabetically last."""

    groups: dict[str, list[Discrepancy]] = {}
    for discrepancy in discrepancies:
        groups.setdefault(str(discrepancy.field), []).append(discrepancy)
    return {key: groups[key] for key in sorted(groups, key=_category_sort_key)}


@dataclass(frozen=True, slots=True, kw_only=True)
class FreshnessSummary:
    after_cutover: int = 0
    before_cutover: int = 0
    unknown: int = 0


def summarize_freshness(discrepancies: Iterable[Discrepancy]) -> FreshnessSummary:
    after = before = unknown = 0
    for discrepancy in discrepancies:
        if discrepancy.freshness is None:
            unknown += 1
        elif discrepancy.freshness.edited_after_cutover:
            after += 1
        else:
            before += 1
    return FreshnessSummary(after_cutover=after, before_cutover=before, unknown=unknown)


@dataclass(frozen=True, slots=True, kw_only=True)
class DiscrepancyReport:
    discrepancies: tuple[Discrepancy, ...]
    total_discrepancies: int
    suppressed_count: int
    stale_keys: tuple[tuple[str, str], ...]
    freshness: FreshnessSummary
    tasks_checked: int = 0
    cache_hits: int = 0
    failures: tuple[TaskFailure, ...] = ()
    by_priority: dict[Priority, int] = field(default_factory=dict)
    by_category: dict[str, int] = field(default_factory=dict)

    def grouped(self, group_by: GroupBy) -> dict[str, list[Discrepancy]]:
        if group_by is GroupBy.PRIORITY:
            return {str(p): items for p, items in group_by_priority(self.discrepancies).items()}
        return group_by_category(self.discrepancies)


def build_report(
    suppression: SuppressionResult,
    *,
    tasks_checked: int = 0,
    cache_hits: int = 0,
    failures: Sequence[TaskFailure] = (),
) -> DiscrepancyReport:
    surviving = suppression.surviving
    return DiscrepancyReport(
        discrepancies=surviving,
        total_discrepancies=len(surviving) + suppression.suppressed_count,
        suppressed_count=suppression.suppressed_count,
        stale_keys=suppression.stale_keys,
        freshness=summarize_freshness(surviving),
        tasks_checked=tasks_checked,
        cache_hits=cache_hits,
        failures=tuple(failures),
        by_priority={p: len(items) for p, items in group_by_priority(surviving).items()},
        by_category={k: len(items) for k, items in group_by_category(surviving).items()},
    )


def discrepancy_document(discrepancy: Discrepancy) -> dict[str, Any]:
    document: dict[str, Any] = {
        "taskId": discrepancy.task_id,
        "taskName": discrepancy.task_name,
        "field": str(discrepancy.field),
        "apiValue": discrepancy.structured_value,
        "wikiValue": discrepancy.free_text_value,
        "priority": str(discrepancy.priority),
        "trustsWiki": discrepancy.trusts_free_text,
    }
    freshness = discrepancy.freshness
    if freshness is not None:
        document["wikiLastEdit"] = freshness.last_edit.isoformat()
        document["wikiEditDaysAgo"] = freshness.days_since_edit
        document["wikiEditedPost1_0"] = freshness.edited_after_cutover
    return document


def report_document(
    report: DiscrepancyReport,
    *,
    group_by: GroupBy,
    generated_at: datetime,
) -> dict[str, Any]:
    """JSON-ready export of a report, grouped by ``group_by``."""

    return {
        "meta": {
            "generatedAt": generated_at.isoformat(),
            "tasksChecked": report.tasks_checked,
            "cacheHits": report.cache_hits,
            "errors": len(report.failures),
            "totalDiscrepancies": report.total_discrepancies,
            "alreadyAddressed": report.suppressed_count,
            "newDiscrepancies": len(report.discrepancies),
            "groupBy": str(group_by),
        },
        "wikiDataFreshness": {
            "post1_0": report.freshness.after_cutover,
            "pre1_0": report.freshness.before_cutover,
            "unknown": report.freshness.unknown,
            "note": FRESHNESS_NOTE,
        },
        "summary": {
            "byPriority": {str(p): count for p, count in report.by_priority.items()},
            "byCategory": dict(report.by_category),
        },
        "staleSuppressions": [
            {"taskId": task_id, "field": field_key} for task_id, field_key in report.stale_keys
        ],
        "failures": [
            {"taskId": f.task_id, "taskName": f.task_name, "reason": f.reason}
            for f in report.failures
        ],
        "discrepancies": {
            group: [discrepancy_document(d) for d in items]
            for group, items in report.grouped(group_by).items()
        },
    }
