"""On-disk snapshot round trips and tolerance of stale or broken files."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from taskrecon.adapters.snapshot_cache import SnapshotStore
from taskrecon.domain.model import FreeTextPage, Revision
from tests.helpers.clients import payload_tasks

if TYPE_CHECKING:
    from taskrecon.config.storage import StorageConfig

FETCHED_AT = datetime(2025, 12, 10, 8, 30, tzinfo=UTC)


def _store(storage_config: StorageConfig) -> SnapshotStore:
    return SnapshotStore(storage_config, clock=lambda: FETCHED_AT)


def test_task_snapshot_round_trip(
    storage_config: StorageConfig,
    tasks_response_payload: dict[str, object],
) -> None:
    store = _store(storage_config)
    tasks = payload_tasks(tasks_response_payload)

    store.save_tasks(tasks, "both")
    loaded = store.load_tasks("both")

    assert loaded is not None
    assert loaded.meta.fetched_at == FETCHED_AT
    assert loaded.meta.task_count == 3
    assert [task.name for task in loaded.tasks] == ["Debut", "Shortage", "Bad rep evidence"]
    assert loaded.tasks[1].objectives[0].found_in_raid is True

    document = json.loads(storage_config.task_snapshot_path().read_text())
    assert document["meta"]["gameMode"] == "both"
    assert document["tasks"][1]["minPlayerLevel"] == 10


def test_task_snapshot_for_other_mode_is_ignored(
    storage_config: StorageConfig,
    tasks_response_payload: dict[str, object],
) -> None:
    store = _store(storage_config)
    store.save_tasks(payload_tasks(tasks_response_payload), "regular")

    assert store.load_tasks("pve") is None


def test_missing_or_corrupt_snapshots_read_as_absent(storage_config: StorageConfig) -> None:
    store = _store(storage_config)

    assert store.load_tasks("both") is None
    assert store.load_page("task-shortage") is None

    path = store.page_path("task-shortage")
    path.parent.mkdir(parents=True)
    path.write_text("{not json")

    assert store.load_page("task-shortage") is None


def test_page_snapshot_round_trip(storage_config: StorageConfig) -> None:
    store = _store(storage_config)
    revision = Revision(
        timestamp=datetime(2025, 12, 1, 10, tzinfo=UTC),
        editor="Curator",
        comment="Updated rewards",
    )
    page = FreeTextPage(title="Shortage", markup="==Objectives==", last_revision=revision)

    store.save_page("task-shortage", page)
    snapshot = store.load_page("task-shortage")

    assert snapshot is not None
    assert snapshot.fetched_at == FETCHED_AT
    assert snapshot.to_page() == page


def test_page_snapshot_without_revision(storage_config: StorageConfig) -> None:
    store = _store(storage_config)
    page = FreeTextPage(title="Debut", markup="==Objectives==")

    store.save_page("task-debut", page)
    document = json.loads(store.page_path("task-debut").read_text())
    snapshot = store.load_page("task-debut")

    assert "lastRevision" not in document
    assert snapshot is not None
    assert snapshot.to_page().last_revision is None
