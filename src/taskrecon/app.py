"""Application orchestration entry points."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from taskrecon.adapters.snapshot_cache import SnapshotStore
from taskrecon.adapters.suppressions import (
    OverlayData,
    SuppressionFileError,
    load_free_text_incorrect,
    load_overlay,
)
from taskrecon.adapters.tarkov import fetch_task_payloads, translate_tasks
from taskrecon.adapters.wiki import (
    fetch_free_text_page,
    fetch_free_text_pages,
    resolve_page_title,
)
from taskrecon.config import (
    get_reconcile_config,
    get_storage_config,
    get_tarkov_config,
    get_wiki_config,
)
from taskrecon.domain.model import GameMode, GroupBy, TaskFailure
from taskrecon.domain.reconciliation import (
    ReconciliationPolicy,
    build_context,
    reconcile_batch,
    reconcile_task,
    report_document,
)
from taskrecon.domain.reconciliation.normalize import normalize_whitespace

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from taskrecon.adapters.tarkov.fetcher import TaskFeedClient
    from taskrecon.adapters.wiki.fetcher import PageClient
    from taskrecon.config.storage import StorageConfig
    from taskrecon.domain.model import FreeTextPage, StructuredTask, SuppressionEntry
    from taskrecon.domain.reconciliation import (
        DiscrepancyReport,
        ReconciliationContext,
        TaskReconciliation,
    )

log = getLogger(__name__)

DEFAULT_TASK_NAME = "Grenadier"


class GameModeSelection(StrEnum):
    REGULAR = "regular"
    PVE = "pve"
    BOTH = "both"

    @property
    def modes(self) -> tuple[GameMode, ...]:
        if self is GameModeSelection.BOTH:
            return (GameMode.REGULAR, GameMode.PVE)
        return (GameMode(self.value),)


class TaskNotFoundError(LookupError):
    """Raised when no structured task matches the requested id or name."""


def _utcnow() -> datetime:
    return datetime.now(UTC)


def load_structured_tasks(
    *,
    selection: GameModeSelection,
    snapshots: SnapshotStore,
    use_cache: bool = False,
    refresh: bool = False,
    client: TaskFeedClient | None = None,
) -> list[StructuredTask]:
    """Tasks for ``selection``, from the snapshot when allowed and matching, else fetched."""

    snapshot = snapshots.load_tasks(str(selection)) if use_cache and not refresh else None
    if snapshot is not None:
        log.info(
            "Loaded %d task(s) from snapshot [%s] (%s)",
            len(snapshot.tasks),
            selection,
            snapshot.meta.fetched_at.isoformat(),
        )
        return translate_tasks(snapshot.tasks)

    log.info("Fetching tasks from tarkov.dev [%s]", selection)
    payloads = fetch_task_payloads(
        config=get_tarkov_config(),
        game_modes=selection.modes,
        client=client,
    )
    snapshots.save_tasks(payloads, str(selection))
    return translate_tasks(payloads)


def load_suppressions(storage: StorageConfig) -> tuple[list[SuppressionEntry], OverlayData]:
    """Both suppression files; an unreadable file is logged and skipped."""

    overlay = OverlayData()
    entries: list[SuppressionEntry] = []
    try:
        overlay = load_overlay(storage.overlay_path())
    except SuppressionFileError:
        log.warning("Continuing without the correction overlay", exc_info=True)
    entries.extend(overlay.entries)
    try:
        entries.extend(load_free_text_incorrect(storage.free_text_incorrect_path()))
    except SuppressionFileError:
        log.warning("Continuing without wiki-incorrect suppressions", exc_info=True)
    return entries, overlay


def _build_context(tasks: Sequence[StructuredTask], overlay: OverlayData) -> ReconciliationContext:
    policy = ReconciliationPolicy.from_config(get_reconcile_config())
    return build_context(tasks, overlay.requirement_overrides, policy=policy)


def find_task(
    tasks: Sequence[StructuredTask],
    *,
    task_id: str | None = None,
    name: str | None = None,
) -> StructuredTask:
    if task_id:
        found = next((task for task in tasks if task.id == task_id), None)
    else:
        wanted = normalize_whitespace((name or DEFAULT_TASK_NAME).lower())
        found = next(
            (task for task in tasks if normalize_whitespace(task.name.lower()) == wanted), None
        )
    if found is None:
        raise TaskNotFoundError(f"Task not found (id={task_id or 'n/a'}, name={name or 'n/a'})")
    return found


def reconcile_single_task(
    *,
    task_id: str | None = None,
    name: str | None = None,
    wiki_title: str | None = None,
    selection: GameModeSelection = GameModeSelection.BOTH,
    use_cache: bool = False,
    refresh: bool = False,
    storage: StorageConfig | None = None,
    feed_client: TaskFeedClient | None = None,
    page_client: PageClient | None = None,
) -> TaskReconciliation:
    """Reconcile one task against its wiki page; suppressions are not applied."""

    storage_config = storage or get_storage_config()
    snapshots = SnapshotStore(storage_config)
    tasks = load_structured_tasks(
        selection=selection,
        snapshots=snapshots,
        use_cache=use_cache,
        refresh=refresh,
        client=feed_client,
    )
    task = find_task(tasks, task_id=task_id, name=name)

    snapshot = snapshots.load_page(task.id) if use_cache and not refresh else None
    page: FreeTextPage
    if snapshot is not None:
        log.info("Loaded wiki page %r from snapshot", snapshot.title)
        page = snapshot.to_page()
    else:
        title = resolve_page_title(task, wiki_title)
        log.info("Fetching wiki page %r", title)
        page = fetch_free_text_page(
            config=get_wiki_config(storage=storage_config),
            title=title,
            client=page_client,
        )
        snapshots.save_page(task.id, page)

    _, overlay = load_suppressions(storage_config)
    return reconcile_task(task, page, _build_context(tasks, overlay))


def reconcile_all_tasks(
    *,
    selection: GameModeSelection = GameModeSelection.BOTH,
    use_cache: bool = False,
    refresh: bool = False,
    storage: StorageConfig | None = None,
    feed_client: TaskFeedClient | None = None,
    page_client: PageClient | None = None,
) -> DiscrepancyReport:
    """Reconcile every task with a wiki link and build the filtered report."""

    storage_config = storage or get_storage_config()
    snapshots = SnapshotStore(storage_config)
    tasks = load_structured_tasks(
        selection=selection,
        snapshots=snapshots,
        use_cache=use_cache,
        refresh=refresh,
        client=feed_client,
    )
    linked = [task for task in tasks if task.wiki_link]
    log.info("Found %d/%d task(s) with wiki links", len(linked), len(tasks))

    suppressions, overlay = load_suppressions(storage_config)
    context = _build_context(tasks, overlay)

    pages: dict[str, FreeTextPage] = {}
    pending: dict[str, str] = {}
    cache_hits = 0
    for task in linked:
        if task.id in pages or task.id in pending:
            continue
        snapshot = snapshots.load_page(task.id) if use_cache and not refresh else None
        if snapshot is not None:
            pages[task.id] = snapshot.to_page()
            cache_hits += 1
        else:
            pending[task.id] = resolve_page_title(task)

    failures: list[TaskFailure] = []
    if pending:
        fetched = fetch_free_text_pages(
            config=get_wiki_config(storage=storage_config),
            titles=list(pending.values()),
            client=page_client,
        )
        names = {task.id: task.name for task in linked}
        for pending_id, title in pending.items():
            page = fetched.pages.get(title)
            if page is None:
                reason = fetched.errors.get(title, "page not fetched")
                failures.append(
                    TaskFailure(task_id=pending_id, task_name=names[pending_id], reason=reason)
                )
                continue
            snapshots.save_page(pending_id, page)
            pages[pending_id] = page

    outcome = reconcile_batch(linked, pages, suppressions, context, failures=failures)
    return outcome.report(cache_hits=cache_hits)


def default_report_path(results_dir: Path, *, now: datetime | None = None) -> Path:
    moment = now or _utcnow()
    return results_dir / f"comparison-{moment.strftime('%Y-%m-%dT%H-%M-%S')}.json"


def write_report(
    report: DiscrepancyReport,
    *,
    path: Path,
    group_by: GroupBy = GroupBy.CATEGORY,
    generated_at: datetime | None = None,
) -> Path:
    document = report_document(report, group_by=group_by, generated_at=generated_at or _utcnow())
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document, indent=2), encoding="utf-8")
    log.info("Results saved to %s", path)
    return path
