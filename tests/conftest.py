"""Shared fixtures for taskrecon tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from taskrecon.config.storage import StorageConfig
from taskrecon.domain.reconciliation import build_context
from tests.helpers.tasks import FIXED_NOW, shortage_followups, shortage_task

if TYPE_CHECKING:
    from taskrecon.domain.model import StructuredTask
    from taskrecon.domain.reconciliation import ReconciliationContext

DATA_DIR = Path(__file__).resolve().parent / "data"


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASKRECON_DATA_DIR", str(tmp_path / "data"))
    for name in (
        "TASKRECON_OVERLAY_FILE",
        "TASKRECON_WIKI_INCORRECT_FILE",
        "TASKRECON_TARKOV_API_URL",
        "TASKRECON_WIKI_API_URL",
        "TASKRECON_WIKI_REQUEST_INTERVAL",
        "TASKRECON_USER_AGENT",
        "TASKRECON_SUBSTRING_MIN_TOKENS",
        "TASKRECON_COVERAGE_RATIO",
        "TASKRECON_REPUTATION_TOLERANCE",
        "TASKRECON_ANY_ITEM_POOL_MIN",
        "TASKRECON_CUTOVER",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="session")
def tasks_response_payload() -> dict[str, object]:
    return json.loads((DATA_DIR / "tarkov" / "tasks_response.json").read_text())


@pytest.fixture
def storage_config(tmp_path: Path) -> StorageConfig:
    return StorageConfig(data_dir=tmp_path / "store")


@pytest.fixture
def shortage_tasks() -> tuple[StructuredTask, ...]:
    return (shortage_task(), *shortage_followups())


@pytest.fixture
def shortage_context(shortage_tasks: tuple[StructuredTask, ...]) -> ReconciliationContext:
    return build_context(shortage_tasks, clock=lambda: FIXED_NOW)
