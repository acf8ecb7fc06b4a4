"""Tunable thresholds for the reconciliation heuristics."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from .env import env_datetime, env_float, env_int
from .errors import ConfigurationError

DEFAULT_SUBSTRING_MIN_TOKENS = 4
DEFAULT_COVERAGE_RATIO = 0.5
DEFAULT_REPUTATION_TOLERANCE = 0.001
DEFAULT_ANY_ITEM_POOL_MIN = 8
# Escape from Tarkov 1.0 release.
DEFAULT_CUTOVER = datetime(2025, 11, 15, tzinfo=UTC)


@dataclass(frozen=True, slots=True)
class ReconcileConfig:
    substring_min_tokens: int = DEFAULT_SUBSTRING_MIN_TOKENS
    coverage_ratio: float = DEFAULT_COVERAGE_RATIO
    reputation_tolerance: float = DEFAULT_REPUTATION_TOLERANCE
    any_item_pool_min: int = DEFAULT_ANY_ITEM_POOL_MIN
    cutover: datetime = DEFAULT_CUTOVER


def get_reconcile_config() -> ReconcileConfig:
    config = ReconcileConfig(
        substring_min_tokens=env_int(
            "TASKRECON_SUBSTRING_MIN_TOKENS", DEFAULT_SUBSTRING_MIN_TOKENS
        ),
        coverage_ratio=env_float("TASKRECON_COVERAGE_RATIO", DEFAULT_COVERAGE_RATIO),
        reputation_tolerance=env_float(
            "TASKRECON_REPUTATION_TOLERANCE", DEFAULT_REPUTATION_TOLERANCE
        ),
        any_item_pool_min=env_int("TASKRECON_ANY_ITEM_POOL_MIN", DEFAULT_ANY_ITEM_POOL_MIN),
        cutover=env_datetime("TASKRECON_CUTOVER", DEFAULT_CUTOVER),
    )
    if config.substring_min_tokens < 1:
        raise ConfigurationError("TASKRECON_SUBSTRING_MIN_TOKENS must be at least 1")
    if not 0 < config.coverage_ratio <= 1:
        raise ConfigurationError("TASKRECON_COVERAGE_RATIO must be in (0, 1]")
    if config.reputation_tolerance < 0:
        raise ConfigurationError("TASKRECON_REPUTATION_TOLERANCE must be non-negative")
    if config.any_item_pool_min < 1:
        raise ConfigurationError("TASKRECON_ANY_ITEM_POOL_MIN must be at least 1")
    return config
