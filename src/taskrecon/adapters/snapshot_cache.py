"""On-disk snapshots of fetched source data so reruns can skip the network."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from taskrecon.adapters.tarkov.schema import TarkovTask
from taskrecon.domain.model import FreeTextPage, Revision

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from taskrecon.config.storage import StorageConfig

log = getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class SnapshotModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TaskSnapshotMeta(SnapshotModel):
    fetched_at: datetime = Field(alias="fetchedAt")
    task_count: int = Field(alias="taskCount")
    game_mode: str = Field(alias="gameMode")


class TaskSnapshot(SnapshotModel):
    meta: TaskSnapshotMeta
    tasks: list[TarkovTask] = Field(default_factory=list)


class RevisionSnapshot(SnapshotModel):
    timestamp: datetime
    user: str = "unknown"
    comment: str = ""


class PageSnapshot(SnapshotModel):
    fetched_at: datetime = Field(alias="fetchedAt")
    title: str
    wikitext: str
    last_revision: RevisionSnapshot | None = Field(default=None, alias="lastRevision")

    def to_page(self) -> FreeTextPage:
        revision = self.last_revision
        return FreeTextPage(
            title=self.title,
            markup=self.wikitext,
            last_revision=(
                Revision(
                    timestamp=revision.timestamp,
                    editor=revision.user,
                    comment=revision.comment,
                )
                if revision is not None
                else None
            ),
        )


class SnapshotStore:
    """Task feed snapshot (one per game-mode selection) plus one page snapshot per task id."""

    def __init__(
        self,
        storage: StorageConfig,
        *,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._task_path = storage.task_snapshot_path()
        self._page_dir = storage.page_snapshot_dir()
        self._clock = clock

    def page_path(self, task_id: str) -> Path:
        return self._page_dir / f"{task_id}.json"

    def load_tasks(self, game_mode: str) -> TaskSnapshot | None:
        snapshot = _read_model(self._task_path, TaskSnapshot)
        if snapshot is None:
            return None
        if snapshot.meta.game_mode != game_mode:
            log.info(
                "Ignoring task snapshot for game mode %s (wanted %s)",
                snapshot.meta.game_mode,
                game_mode,
            )
            return None
        return snapshot

    def save_tasks(self, tasks: Sequence[TarkovTask], game_mode: str) -> TaskSnapshot:
        snapshot = TaskSnapshot(
            meta=TaskSnapshotMeta(
                fetched_at=self._clock(),
                task_count=len(tasks),
                game_mode=game_mode,
            ),
            tasks=list(tasks),
        )
        _write_model(self._task_path, snapshot)
        return snapshot

    def load_page(self, task_id: str) -> PageSnapshot | None:
        return _read_model(self.page_path(task_id), PageSnapshot)

    def save_page(self, task_id: str, page: FreeTextPage) -> PageSnapshot:
        revision = page.last_revision
        snapshot = PageSnapshot(
            fetched_at=self._clock(),
            title=page.title,
            wikitext=page.markup,
            last_revision=(
                RevisionSnapshot(
                    timestamp=revision.timestamp,
                    user=revision.editor,
                    comment=revision.comment,
                )
                if revision is not None
                else None
            ),
        )
        _write_model(self.page_path(task_id), snapshot)
        return snapshot


def _read_model[M: SnapshotModel](path: Path, model: type[M]) -> M | None:
    if not path.exists():
        return None
    try:
        return model.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        log.warning("Ignoring unreadable snapshot %s: %s", path, exc)
        return None


def _write_model(path: Path, snapshot: SnapshotModel) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    document = snapshot.model_dump(mode="json", by_alias=True, exclude_none=True)
    path.write_text(json.dumps(document, indent=2), encoding="utf-8")
