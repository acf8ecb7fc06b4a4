"""Heuristic thresholds and the trust decision, bundled per run."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from taskrecon.config.reconcile import (
    DEFAULT_ANY_ITEM_POOL_MIN,
    DEFAULT_COVERAGE_RATIO,
    DEFAULT_CUTOVER,
    DEFAULT_REPUTATION_TOLERANCE,
    DEFAULT_SUBSTRING_MIN_TOKENS,
)

if TYPE_CHECKING:
    from datetime import datetime

    from taskrecon.config.reconcile import ReconcileConfig

type TrustPolicy = Callable[[str, str], bool]
"""``(task_id, field) -> True`` when the free-text side should be trusted."""


def trust_free_text(task_id: str, field: str) -> bool:  # noqa: ARG001
    return True


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationPolicy:
    substring_min_tokens: int = DEFAULT_SUBSTRING_MIN_TOKENS
    coverage_ratio: float = DEFAULT_COVERAGE_RATIO
    reputation_tolerance: float = DEFAULT_REPUTATION_TOLERANCE
    any_item_pool_min: int = DEFAULT_ANY_ITEM_POOL_MIN
    cutover: datetime = DEFAULT_CUTOVER
    trust: TrustPolicy = trust_free_text

    @classmethod
    def from_config(
        cls,
        config: ReconcileConfig,
        *,
        trust: TrustPolicy = trust_free_text,
    ) -> ReconciliationPolicy:
        return cls(
            substring_min_tokens=config.substring_min_tokens,
            coverage_ratio=config.coverage_ratio,
            reputation_tolerance=config.reputation_tolerance,
            any_item_pool_min=config.any_item_pool_min,
            cutover=config.cutover,
            trust=trust,
        )


DEFAULT_POLICY = ReconciliationPolicy()
