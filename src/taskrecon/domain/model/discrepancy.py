"""Discrepancy records and the field-key priority table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .enums import FieldKey, Priority

if TYPE_CHECKING:
    from datetime import date

type FieldValue = str | int | float | None

REPUTATION_PREFIX = f"{FieldKey.REPUTATION}."

_KNOWN_FIELDS = frozenset(str(key) for key in FieldKey)

_PRIORITY_BY_FIELD: dict[str, Priority] = {
    FieldKey.MIN_PLAYER_LEVEL: Priority.HIGH,
    FieldKey.TASK_REQUIREMENTS: Priority.HIGH,
    FieldKey.NEXT_TASKS: Priority.HIGH,
    FieldKey.OBJECTIVE_DESCRIPTION: Priority.HIGH,
    FieldKey.EXPERIENCE: Priority.LOW,
    FieldKey.MONEY: Priority.LOW,
}


class UnknownFieldKeyError(ValueError):
    """Raised when a discrepancy names a field outside the known set."""


def is_known_field(field: str) -> bool:
    if field.startswith(REPUTATION_PREFIX):
        return len(field) > len(REPUTATION_PREFIX)
    return field in _KNOWN_FIELDS


def reputation_field(trader: str) -> str:
    return f"{REPUTATION_PREFIX}{trader}"


def priority_for(field: str) -> Priority:
    """Importance tier of a field; depends on the field key alone."""

    if field.startswith(REPUTATION_PREFIX):
        return Priority.MEDIUM
    return _PRIORITY_BY_FIELD.get(field, Priority.MEDIUM)


@dataclass(slots=True, frozen=True, kw_only=True)
class RevisionFreshness:
    last_edit: date
    days_since_edit: int
    edited_after_cutover: bool


@dataclass(slots=True, frozen=True, kw_only=True)
class Discrepancy:
    task_id: str
    task_name: str
    field: str
    structured_value: FieldValue
    free_text_value: FieldValue
    priority: Priority
    trusts_free_text: bool = True
    freshness: RevisionFreshness | None = None

    def __post_init__(self) -> None:
        if not is_known_field(self.field):
            raise UnknownFieldKeyError(f"Unknown discrepancy field: {self.field!r}")

    @property
    def key(self) -> tuple[str, str]:
        return (self.task_id, self.field)


@dataclass(slots=True, frozen=True, kw_only=True)
class TaskFailure:
    """A task whose fetch or reconciliation failed; the batch carries on without it."""

    task_id: str
    task_name: str
    reason: str
