from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import find_dotenv, load_dotenv

from taskrecon.app import (
    GameModeSelection,
    default_report_path,
    reconcile_all_tasks,
    reconcile_single_task,
    write_report,
)
from taskrecon.config import configure_logging, get_storage_config
from taskrecon.domain.model import GroupBy
from taskrecon.domain.reconciliation import category_label

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from taskrecon.domain.model import Discrepancy
    from taskrecon.domain.reconciliation import DiscrepancyReport, TaskReconciliation

log = logging.getLogger(__name__)

_MAX_LOGGED_FAILURES = 10


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--cache",
        "-c",
        action="store_true",
        help="Use snapshot data when available",
    )
    parser.add_argument(
        "--refresh",
        "-r",
        action="store_true",
        help="Ignore snapshots and fetch fresh data",
    )
    parser.add_argument(
        "--game-mode",
        "-g",
        choices=[str(selection) for selection in GameModeSelection],
        default=str(GameModeSelection.BOTH),
        help="Game mode to compare: regular (PvP), pve, or both (default: %(default)s)",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compare tarkov.dev task data against the Escape from Tarkov wiki"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    task = subparsers.add_parser("task", help="Compare a single task")
    task.add_argument("task_name", nargs="?", help="Task name (default: Grenadier)")
    task.add_argument("--id", dest="task_id", type=str, help="Find the task by id")
    task.add_argument("--name", type=str, help="Find the task by name")
    task.add_argument("--wiki", type=str, help="Override the wiki page title")
    _add_source_arguments(task)

    bulk = subparsers.add_parser("all", help="Compare every task with a wiki link")
    bulk.add_argument(
        "--group-by",
        choices=[str(group) for group in GroupBy],
        default=str(GroupBy.CATEGORY),
        help="Group the report by priority or category (default: %(default)s)",
    )
    bulk.add_argument(
        "--output",
        "-o",
        nargs="?",
        const="",
        default=None,
        help="Save results as JSON (no path: timestamped file in the results directory)",
    )
    _add_source_arguments(bulk)

    return parser.parse_args(list(argv))


def _validate(args: argparse.Namespace) -> None:
    if args.cache and args.refresh:
        raise ValueError("--cache and --refresh are mutually exclusive")
    if args.command == "task" and args.task_id and (args.name or args.task_name):
        raise ValueError("Pass either --id or a task name, not both")


def _format_discrepancy(discrepancy: Discrepancy) -> str:
    line = (
        f"[{discrepancy.priority}] {discrepancy.task_name} ({discrepancy.task_id}) "
        f"{discrepancy.field}: api={discrepancy.structured_value!r} "
        f"wiki={discrepancy.free_text_value!r}"
    )
    if discrepancy.freshness is not None:
        marker = "post-1.0" if discrepancy.freshness.edited_after_cutover else "pre-1.0"
        line += f" (wiki edited {discrepancy.freshness.days_since_edit}d ago, {marker})"
    return line


def _log_task(result: TaskReconciliation) -> None:
    free_text = result.free_text
    log.info("Wiki page: %s", free_text.title)
    log.info("  Level: %s", free_text.min_player_level or "-")
    log.info("  Maps: %s", ", ".join(free_text.maps) or "-")
    log.info("  Objectives: %d", len(free_text.objectives))
    for objective in free_text.objectives:
        log.info("    - %s", objective.text)
    log.info(
        "Matched %d objective(s); %d API-only, %d wiki-only",
        len(result.match.matched),
        len(result.match.unmatched_structured),
        len(result.match.unmatched_free_text),
    )
    if not result.discrepancies:
        log.info("No discrepancies for %s", result.task.name)
        return
    log.info("%d discrepancies for %s:", len(result.discrepancies), result.task.name)
    for discrepancy in result.discrepancies:
        log.info("  %s", _format_discrepancy(discrepancy))


def _log_report(report: DiscrepancyReport, *, group_by: GroupBy) -> None:
    log.info("Tasks checked: %d", report.tasks_checked)
    log.info("Wiki cache hits: %d", report.cache_hits)
    log.info("Failures: %d", len(report.failures))
    for failure in report.failures[:_MAX_LOGGED_FAILURES]:
        log.warning("  %s (%s): %s", failure.task_name, failure.task_id, failure.reason)
    if len(report.failures) > _MAX_LOGGED_FAILURES:
        log.warning("  ...and %d more", len(report.failures) - _MAX_LOGGED_FAILURES)
    log.info("Total discrepancies found: %d", report.total_discrepancies)
    log.info("Suppressed (overlay + wiki-incorrect): %d", report.suppressed_count)
    log.info("New discrepancies to review: %d", len(report.discrepancies))
    log.info(
        "Wiki freshness: %d post-1.0, %d pre-1.0, %d unknown",
        report.freshness.after_cutover,
        report.freshness.before_cutover,
        report.freshness.unknown,
    )
    for task_id, field_key in report.stale_keys:
        log.warning("Stale wiki-incorrect suppression: %s %s", task_id, field_key)

    for group, items in report.grouped(group_by).items():
        if not items:
            continue
        heading = category_label(group) if group_by is GroupBy.CATEGORY else group.upper()
        log.info("%s (%d)", heading, len(items))
        for discrepancy in items:
            log.info("  %s", _format_discrepancy(discrepancy))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv(find_dotenv(usecwd=True))
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        _validate(parsed_args)
        selection = GameModeSelection(parsed_args.game_mode)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "task":
            result = reconcile_single_task(
                task_id=parsed_args.task_id,
                name=parsed_args.name or parsed_args.task_name,
                wiki_title=parsed_args.wiki,
                selection=selection,
                use_cache=parsed_args.cache,
                refresh=parsed_args.refresh,
            )
            _log_task(result)
        elif parsed_args.command == "all":
            group_by = GroupBy(parsed_args.group_by)
            report = reconcile_all_tasks(
                selection=selection,
                use_cache=parsed_args.cache,
                refresh=parsed_args.refresh,
            )
            _log_report(report, group_by=group_by)
            if parsed_args.output is not None:
                output = parsed_args.output.strip()
                path = (
                    Path(output)
                    if output
                    else default_report_path(get_storage_config().results_dir())
                )
                write_report(report, path=path, group_by=group_by)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
