"""Domain model for task reconciliation."""

from __future__ import annotations

from .discrepancy import (
    Discrepancy,
    FieldValue,
    RevisionFreshness,
    TaskFailure,
    UnknownFieldKeyError,
    is_known_field,
    priority_for,
    reputation_field,
)
from .enums import (
    FieldKey,
    GameMode,
    GroupBy,
    MatchKind,
    ObjectiveIntent,
    ObjectiveType,
    Priority,
    SuppressionSource,
)
from .suppression import SuppressionEntry
from .tasks import (
    ItemRef,
    ItemReward,
    ReputationReward,
    StructuredObjective,
    StructuredTask,
    TaskRef,
    TaskRewards,
)
from .wiki import (
    FreeTextObjective,
    FreeTextPage,
    FreeTextRewards,
    FreeTextTask,
    RelatedItem,
    Revision,
    RewardItem,
    TraderReputation,
    WikiLink,
)

__all__ = [
    "Discrepancy",
    "FieldKey",
    "FieldValue",
    "FreeTextObjective",
    "FreeTextPage",
    "FreeTextRewards",
    "FreeTextTask",
    "GameMode",
    "GroupBy",
    "ItemRef",
    "ItemReward",
    "MatchKind",
    "ObjectiveIntent",
    "ObjectiveType",
    "Priority",
    "RelatedItem",
    "ReputationReward",
    "Revision",
    "RevisionFreshness",
    "RewardItem",
    "StructuredObjective",
    "StructuredTask",
    "SuppressionEntry",
    "SuppressionSource",
    "TaskFailure",
    "TaskRef",
    "TaskRewards",
    "TraderReputation",
    "UnknownFieldKeyError",
    "WikiLink",
    "is_known_field",
    "priority_for",
    "reputation_field",
]
