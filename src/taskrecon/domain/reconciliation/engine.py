"""Compose parsing, matching, comparison and suppression for one task or a batch."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from taskrecon.domain.model import TaskFailure

from .aliases import build_map_alias_table
from .compare import build_next_task_index, compare_task, utc_now
from .matching import match_objectives
from .policy import DEFAULT_POLICY
from .report import build_report
from .suppression import filter_discrepancies
from .vocabulary import DEFAULT_VOCABULARY, Vocabulary
from .wikitext import parse_free_text_task

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from taskrecon.domain.model import (
        Discrepancy,
        FreeTextPage,
        FreeTextTask,
        StructuredTask,
        SuppressionEntry,
        TaskRef,
    )

    from .aliases import AliasTable
    from .compare import Clock, NextTaskIndex
    from .matching import MatchResult
    from .policy import ReconciliationPolicy
    from .report import DiscrepancyReport
    from .suppression import SuppressionResult

log = getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationContext:
    """Read-only lookups shared by every task in one run."""

    map_aliases: AliasTable
    next_task_index: NextTaskIndex
    policy: ReconciliationPolicy = DEFAULT_POLICY
    vocabulary: Vocabulary = DEFAULT_VOCABULARY
    clock: Clock = utc_now


def build_context(
    tasks: Sequence[StructuredTask],
    requirement_overrides: Mapping[str, Sequence[TaskRef]] | None = None,
    *,
    policy: ReconciliationPolicy = DEFAULT_POLICY,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
    clock: Clock = utc_now,
) -> ReconciliationContext:
    return ReconciliationContext(
        map_aliases=build_map_alias_table(tasks),
        next_task_index=build_next_task_index(tasks, requirement_overrides),
        policy=policy,
        vocabulary=vocabulary,
        clock=clock,
    )


@dataclass(frozen=True, slots=True, kw_only=True)
class TaskReconciliation:
    task: StructuredTask
    free_text: FreeTextTask
    match: MatchResult
    discrepancies: tuple[Discrepancy, ...]


def reconcile_task(
    task: StructuredTask,
    page: FreeTextPage,
    context: ReconciliationContext,
) -> TaskReconciliation:
    free_text = parse_free_text_task(
        page.title,
        page.markup,
        context.map_aliases,
        page.last_revision,
        vocabulary=context.vocabulary,
    )
    match = match_objectives(
        task.objectives,
        free_text.objectives,
        task.name,
        map_aliases=context.map_aliases,
        policy=context.policy,
        vocabulary=context.vocabulary,
    )
    discrepancies = compare_task(
        task,
        free_text,
        match,
        map_aliases=context.map_aliases,
        next_task_index=context.next_task_index,
        policy=context.policy,
        clock=context.clock,
        vocabulary=context.vocabulary,
    )
    return TaskReconciliation(
        task=task,
        free_text=free_text,
        match=match,
        discrepancies=tuple(discrepancies),
    )


@dataclass(frozen=True, slots=True, kw_only=True)
class BatchOutcome:
    discrepancies: tuple[Discrepancy, ...]
    suppression: SuppressionResult
    failures: tuple[TaskFailure, ...]
    tasks_checked: int

    def report(self, *, cache_hits: int = 0) -> DiscrepancyReport:
        return build_report(
            self.suppression,
            tasks_checked=self.tasks_checked,
            cache_hits=cache_hits,
            failures=self.failures,
        )


def reconcile_batch(
    tasks: Iterable[StructuredTask],
    pages: Mapping[str, FreeTextPage],
    suppressions: Iterable[SuppressionEntry],
    context: ReconciliationContext,
    *,
    failures: Sequence[TaskFailure] = (),
) -> BatchOutcome:
    """Reconcile every task that has a page in ``pages`` (keyed by task id).

    A task that raises is recorded as a :class:`TaskFailure` and the batch
    carries on. ``failures`` carries fetch failures recorded by the caller.
    """

    collected: list[Discrepancy] = []
    failed = list(failures)
    checked = 0
    for task in tasks:
        page = pages.get(task.id)
        if page is None:
            continue
        try:
            result = reconcile_task(task, page, context)
        except Exception as exc:  # noqa: BLE001
            log.warning("Failed to reconcile %s (%s): %s", task.name, task.id, exc)
            failed.append(TaskFailure(task_id=task.id, task_name=task.name, reason=str(exc)))
            continue
        checked += 1
        collected.extend(result.discrepancies)

    suppression = filter_discrepancies(collected, suppressions)
    log.info(
        "Checked %d task(s): %d discrepancies, %d suppressed, %d failure(s)",
        checked,
        len(collected),
        suppression.suppressed_count,
        len(failed),
    )
    return BatchOutcome(
        discrepancies=tuple(collected),
        suppression=suppression,
        failures=tuple(failed),
        tasks_checked=checked,
    )
