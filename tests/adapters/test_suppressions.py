"""Loading of the correction overlay and the wiki-incorrect list."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from taskrecon.adapters.suppressions import (
    SuppressionFileError,
    load_free_text_incorrect,
    load_overlay,
    overlay_suppression_fields,
)
from taskrecon.domain.model import SuppressionSource, TaskRef

if TYPE_CHECKING:
    from pathlib import Path

OVERLAY = {
    "task-shortage": {
        "minPlayerLevel": 12,
        "objectives": {"obj-lion": {"count": 3, "items": [{"name": "Bronze lion figurine"}]}},
        "finishRewards": {
            "items": [{"item": {"name": "Roubles"}, "count": 20000}],
            "traderStanding": [{"trader": {"name": "Therapist"}, "standing": 0.04}],
        },
    },
    "task-picnic": {
        "taskRequirements": [
            {"task": {"id": "task-shortage", "name": "Shortage"}},
            {"task": {"name": "No id"}},
        ]
    },
}


def _write(path: Path, document: object) -> Path:
    path.write_text(json.dumps(document))
    return path


def test_overlay_fields_cover_derived_keys() -> None:
    fields = overlay_suppression_fields(OVERLAY["task-shortage"])

    assert fields == [
        "minPlayerLevel",
        "objectives.count",
        "objectives.items",
        "objectives",
        "money",
        "reputation.Therapist",
        "finishRewards",
    ]


def test_objective_override_without_detail_silences_counts() -> None:
    assert overlay_suppression_fields({"objectives": 4}) == ["objectives.count", "objectives"]


def test_load_overlay_builds_entries_and_requirement_overrides(tmp_path: Path) -> None:
    overlay = load_overlay(_write(tmp_path / "overlay.json", OVERLAY))

    keys = {entry.key for entry in overlay.entries}
    assert ("task-shortage", "money") in keys
    assert ("task-picnic", "taskRequirements") in keys
    assert all(entry.source is SuppressionSource.CORRECTION for entry in overlay.entries)
    assert overlay.requirement_overrides == {
        "task-picnic": (TaskRef(id="task-shortage", name="Shortage"),)
    }


def test_load_free_text_incorrect(tmp_path: Path) -> None:
    path = _write(tmp_path / "incorrect.json", {"task-debut": ["experience", "map"]})

    entries = load_free_text_incorrect(path)

    assert [entry.key for entry in entries] == [
        ("task-debut", "experience"),
        ("task-debut", "map"),
    ]
    assert {entry.source for entry in entries} == {SuppressionSource.FREE_TEXT_INCORRECT}


def test_missing_files_yield_nothing(tmp_path: Path) -> None:
    overlay = load_overlay(tmp_path / "absent.json")

    assert overlay.entries == ()
    assert dict(overlay.requirement_overrides) == {}
    assert load_free_text_incorrect(tmp_path / "absent.json") == ()


def test_malformed_files_raise(tmp_path: Path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{ trailing, }")

    with pytest.raises(SuppressionFileError):
        load_overlay(broken)
    with pytest.raises(SuppressionFileError):
        load_free_text_incorrect(_write(tmp_path / "wrong.json", {"task": "experience"}))


def test_files_accept_comments_and_trailing_commas(tmp_path: Path) -> None:
    incorrect = tmp_path / "wiki-incorrect.json5"
    incorrect.write_text('{ // wiki is stale\n  "abc": ["map"],\n}\n')
    overlay_path = tmp_path / "tasks.json5"
    overlay_path.write_text(
        "{\n"
        "  // level raised in 1.0\n"
        '  "task-shortage": { minPlayerLevel: 12, },\n'
        "  /* prerequisites fixed upstream */\n"
        '  "task-picnic": { "taskRequirements": [{ "task": { "id": "task-shortage" } },], },\n'
        "}\n"
    )

    entries = load_free_text_incorrect(incorrect)
    overlay = load_overlay(overlay_path)

    assert [entry.key for entry in entries] == [("abc", "map")]
    assert {entry.key for entry in overlay.entries} == {
        ("task-shortage", "minPlayerLevel"),
        ("task-picnic", "taskRequirements"),
    }
    assert overlay.requirement_overrides == {"task-picnic": (TaskRef(id="task-shortage", name=""),)}
