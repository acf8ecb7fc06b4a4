from __future__ import annotations

import json
import signal
import sys
from typing import TYPE_CHECKING

import pytest

from taskrecon.app import GameModeSelection
from taskrecon.domain.reconciliation import SuppressionResult, build_report, reconcile_task
from taskrecon.ui import cli as cli_module
from tests.helpers.tasks import make_discrepancy, shortage_page, shortage_task

if TYPE_CHECKING:
    from pathlib import Path

    from taskrecon.domain.reconciliation import (
        DiscrepancyReport,
        ReconciliationContext,
        TaskReconciliation,
    )


def _report() -> DiscrepancyReport:
    surviving = (make_discrepancy("task-a", "minPlayerLevel"),)
    return build_report(
        SuppressionResult(surviving=surviving, suppressed_count=0, stale_keys=()),
        tasks_checked=1,
    )


def test_task_command_defaults(
    monkeypatch: pytest.MonkeyPatch,
    shortage_context: ReconciliationContext,
) -> None:
    captured: dict[str, object] = {}

    def fake_single(**kwargs: object) -> TaskReconciliation:
        captured.update(kwargs)
        return reconcile_task(shortage_task(), shortage_page(), shortage_context)

    monkeypatch.setattr(cli_module, "reconcile_single_task", fake_single)

    cli_module.main(["task"])

    assert captured == {
        "task_id": None,
        "name": None,
        "wiki_title": None,
        "selection": GameModeSelection.BOTH,
        "use_cache": False,
        "refresh": False,
    }


def test_task_command_with_flags(
    monkeypatch: pytest.MonkeyPatch,
    shortage_context: ReconciliationContext,
) -> None:
    captured: dict[str, object] = {}

    def fake_single(**kwargs: object) -> TaskReconciliation:
        captured.update(kwargs)
        return reconcile_task(shortage_task(), shortage_page(), shortage_context)

    monkeypatch.setattr(cli_module, "reconcile_single_task", fake_single)

    cli_module.main(["task", "Shortage", "--cache", "-g", "pve", "--wiki", "Shortage (quest)"])

    assert captured["name"] == "Shortage"
    assert captured["wiki_title"] == "Shortage (quest)"
    assert captured["selection"] is GameModeSelection.PVE
    assert captured["use_cache"] is True


@pytest.mark.parametrize(
    "argv",
    [
        ["task", "--cache", "--refresh"],
        ["all", "-c", "-r"],
        ["task", "--id", "abc", "Shortage"],
    ],
)
def test_invalid_flag_combinations_exit_with_usage_error(
    monkeypatch: pytest.MonkeyPatch, argv: list[str]
) -> None:
    def fake_single(**_: object) -> None:
        raise AssertionError("should not run")

    monkeypatch.setattr(cli_module, "reconcile_single_task", fake_single)
    monkeypatch.setattr(cli_module, "reconcile_all_tasks", fake_single)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(argv)

    assert excinfo.value.code == 2


def test_all_command_writes_grouped_report(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    captured: dict[str, object] = {}

    def fake_all(**kwargs: object) -> DiscrepancyReport:
        captured.update(kwargs)
        return _report()

    monkeypatch.setattr(cli_module, "reconcile_all_tasks", fake_all)
    output = tmp_path / "out.json"

    cli_module.main(["all", "--group-by", "priority", "-r", "-o", str(output)])

    assert captured == {
        "selection": GameModeSelection.BOTH,
        "use_cache": False,
        "refresh": True,
    }
    document = json.loads(output.read_text())
    assert document["meta"]["groupBy"] == "priority"
    assert document["meta"]["tasksChecked"] == 1
    assert document["summary"]["byPriority"] == {"high": 1, "medium": 0, "low": 0}


def test_all_command_bare_output_uses_results_directory(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.setattr(cli_module, "reconcile_all_tasks", lambda **_: _report())

    cli_module.main(["all", "-o"])

    written = list((tmp_path / "data" / "results").glob("comparison-*.json"))
    assert len(written) == 1
    assert json.loads(written[0].read_text())["meta"]["groupBy"] == "category"


def test_all_command_without_output_writes_nothing(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.setattr(cli_module, "reconcile_all_tasks", lambda **_: _report())

    cli_module.main(["all"])

    assert not (tmp_path / "data" / "results").exists()


def test_runtime_failure_exits_with_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_all(**_: object) -> DiscrepancyReport:
        raise RuntimeError("feed unavailable")

    monkeypatch.setattr(cli_module, "reconcile_all_tasks", fake_all)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["all"])

    assert excinfo.value.code == 1


def test_main_reads_settings_from_dotenv(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    data_dir = tmp_path / "from-dotenv"
    (tmp_path / ".env").write_text(f"TASKRECON_DATA_DIR={data_dir}\n")
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TASKRECON_DATA_DIR")
    monkeypatch.setattr(cli_module, "reconcile_all_tasks", lambda **_: _report())

    cli_module.main(["all", "-o"])

    assert len(list((data_dir / "results").glob("comparison-*.json"))) == 1


def test_console_entry_point_installs_interrupt_handler(monkeypatch: pytest.MonkeyPatch) -> None:
    installed: dict[object, object] = {}
    captured: dict[str, object] = {}

    def fake_all(**kwargs: object) -> DiscrepancyReport:
        captured.update(kwargs)
        return _report()

    monkeypatch.setattr(cli_module, "signal", lambda sig, handler: installed.update({sig: handler}))
    monkeypatch.setattr(cli_module, "reconcile_all_tasks", fake_all)
    monkeypatch.setattr(sys, "argv", ["taskrecon", "all", "-g", "regular"])

    cli_module.run()

    assert installed == {signal.SIGINT: cli_module.sigint_handler}
    assert captured["selection"] is GameModeSelection.REGULAR
