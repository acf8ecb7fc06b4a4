"""Drop discrepancies a curator already handled and flag vestigial suppressions."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from taskrecon.domain.model import SuppressionSource

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from taskrecon.domain.model import Discrepancy, SuppressionEntry

log = getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class SuppressionResult:
    surviving: tuple[Discrepancy, ...]
    suppressed_count: int
    stale_keys: tuple[tuple[str, str], ...]


def suppression_keys(
    entries: Iterable[SuppressionEntry],
    source: SuppressionSource | None = None,
) -> frozenset[tuple[str, str]]:
    return frozenset(entry.key for entry in entries if source is None or entry.source is source)


def filter_discrepancies(
    discrepancies: Sequence[Discrepancy],
    suppressions: Iterable[SuppressionEntry],
) -> SuppressionResult:
    """Set subtraction on ``(task_id, field)``.

    A ``free_text_incorrect`` entry is stale when its key no longer shows up in
    the unfiltered ``discrepancies``; corrections are never reported stale.
    """

    entries = tuple(suppressions)
    suppressed = suppression_keys(entries)
    surviving = tuple(d for d in discrepancies if d.key not in suppressed)

    reproduced = {d.key for d in discrepancies}
    stale = sorted(
        suppression_keys(entries, SuppressionSource.FREE_TEXT_INCORRECT) - reproduced
    )
    if stale:
        log.info("%d free-text-incorrect suppression(s) no longer reproduce", len(stale))
    return SuppressionResult(
        surviving=surviving,
        suppressed_count=len(discrepancies) - len(surviving),
        stale_keys=tuple(stale),
    )
