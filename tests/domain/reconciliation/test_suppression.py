from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from taskrecon.domain.model import FieldKey, SuppressionEntry, SuppressionSource
from taskrecon.domain.reconciliation import filter_discrepancies
from tests.helpers.tasks import make_discrepancy

if TYPE_CHECKING:
    import pytest


def _entry(task_id: str, field: str, source: SuppressionSource) -> SuppressionEntry:
    return SuppressionEntry(task_id=task_id, field=field, source=source)


def test_suppressed_keys_are_removed_and_stale_ones_flagged(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO)
    discrepancies = [
        make_discrepancy("task-x", FieldKey.MAP),
        make_discrepancy("task-y", FieldKey.EXPERIENCE),
    ]
    suppressions = [
        _entry("task-x", FieldKey.MAP, SuppressionSource.CORRECTION),
        _entry("task-z", FieldKey.EXPERIENCE, SuppressionSource.FREE_TEXT_INCORRECT),
    ]

    result = filter_discrepancies(discrepancies, suppressions)

    assert result.surviving == (discrepancies[1],)
    assert result.suppressed_count == 1
    assert result.stale_keys == (("task-z", "experience"),)
    assert "1 free-text-incorrect suppression(s) no longer reproduce" in caplog.text


def test_reproduced_free_text_incorrect_entry_is_not_stale() -> None:
    discrepancies = [make_discrepancy("task-x", FieldKey.MAP)]
    suppressions = [_entry("task-x", FieldKey.MAP, SuppressionSource.FREE_TEXT_INCORRECT)]

    result = filter_discrepancies(discrepancies, suppressions)

    assert result.surviving == ()
    assert result.suppressed_count == 1
    assert result.stale_keys == ()


def test_corrections_are_never_stale() -> None:
    suppressions = [_entry("task-x", "reputation.Prapor", SuppressionSource.CORRECTION)]

    result = filter_discrepancies([], suppressions)

    assert result.stale_keys == ()
    assert result.suppressed_count == 0


def test_one_entry_suppresses_every_discrepancy_on_its_key() -> None:
    discrepancies = [
        make_discrepancy("task-x", FieldKey.OBJECTIVE_COUNT, structured_value="3 (a)"),
        make_discrepancy("task-x", FieldKey.OBJECTIVE_COUNT, structured_value="5 (b)"),
        make_discrepancy("task-x", FieldKey.OBJECTIVE_MAPS),
    ]
    suppressions = [_entry("task-x", FieldKey.OBJECTIVE_COUNT, SuppressionSource.CORRECTION)]

    result = filter_discrepancies(discrepancies, suppressions)

    assert [d.field for d in result.surviving] == [FieldKey.OBJECTIVE_MAPS]
    assert result.suppressed_count == 2
