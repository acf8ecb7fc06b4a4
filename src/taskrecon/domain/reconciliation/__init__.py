"""Reconciliation core: structured task records against free-text wiki pages.

Layered flow, leaves first:
1) normalize objective text into comparison keys
2) resolve map and item aliases
3) parse page markup into free-text task records
4) match objectives in four ordered passes
5) compare fields into discrepancies
6) drop suppressed discrepancies, flag stale suppressions
7) group and summarize what survives

Everything here is pure and synchronous; fetching lives in the adapters.
"""

from __future__ import annotations

from .aliases import AliasConflictError, AliasTable, build_map_alias_table
from .compare import NextTaskIndex, build_next_task_index, compare_task
from .engine import (
    BatchOutcome,
    ReconciliationContext,
    TaskReconciliation,
    build_context,
    reconcile_batch,
    reconcile_task,
)
from .matching import MatchResult, ObjectiveMatch, match_objectives
from .normalize import extract_count, normalize, strip_markup_only
from .policy import DEFAULT_POLICY, ReconciliationPolicy, TrustPolicy
from .report import (
    DiscrepancyReport,
    FreshnessSummary,
    build_report,
    category_label,
    group_by_category,
    group_by_priority,
    report_document,
    summarize_freshness,
)
from .suppression import SuppressionResult, filter_discrepancies
from .vocabulary import DEFAULT_VOCABULARY, Vocabulary
from .wikitext import parse_free_text_task

__all__ = [
    "DEFAULT_POLICY",
    "DEFAULT_VOCABULARY",
    "AliasConflictError",
    "AliasTable",
    "BatchOutcome",
    "DiscrepancyReport",
    "FreshnessSummary",
    "MatchResult",
    "NextTaskIndex",
    "ObjectiveMatch",
    "ReconciliationContext",
    "ReconciliationPolicy",
    "SuppressionResult",
    "TaskReconciliation",
    "TrustPolicy",
    "Vocabulary",
    "build_context",
    "build_map_alias_table",
    "build_next_task_index",
    "build_report",
    "category_label",
    "compare_task",
    "extract_count",
    "filter_discrepancies",
    "group_by_category",
    "group_by_priority",
    "match_objectives",
    "normalize",
    "parse_free_text_task",
    "reconcile_batch",
    "reconcile_task",
    "report_document",
    "strip_markup_only",
    "summarize_freshness",
]
