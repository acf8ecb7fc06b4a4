"""Load curator suppression files: the correction overlay and the wiki-incorrect list."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

import json5
from pydantic import TypeAdapter, ValidationError

from taskrecon.domain.model import (
    FieldKey,
    SuppressionEntry,
    SuppressionSource,
    TaskRef,
    reputation_field,
)
from taskrecon.domain.model.tasks import ROUBLES_ITEM_ID, ROUBLES_ITEM_NAME

if TYPE_CHECKING:
    from pathlib import Path

log = getLogger(__name__)

_OVERLAY_ADAPTER = TypeAdapter(dict[str, dict[str, Any]])
_INCORRECT_ADAPTER = TypeAdapter(dict[str, list[str]])

_ITEM_OVERRIDE_KEYS = frozenset(
    {
        "items",
        "usingWeapon",
        "usingWeaponMods",
        "useAny",
        "containsAll",
        "markerItem",
        "questItem",
        "item",
        "requiredKeys",
    }
)
_OBJECTIVE_OVERRIDE_FIELDS: dict[str, str] = {
    "count": FieldKey.OBJECTIVE_COUNT,
    "description": FieldKey.OBJECTIVE_DESCRIPTION,
    "maps": FieldKey.OBJECTIVE_MAPS,
}


class SuppressionFileError(RuntimeError):
    """Raised when a suppression file exists but cannot be read or parsed."""


@dataclass(frozen=True, slots=True, kw_only=True)
class OverlayData:
    entries: tuple[SuppressionEntry, ...] = ()
    requirement_overrides: Mapping[str, tuple[TaskRef, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )


def _objective_override_fields(overrides: object) -> list[str]:
    if isinstance(overrides, Mapping):
        values = list(overrides.values())
    elif isinstance(overrides, list):
        values = overrides
    else:
        return [FieldKey.OBJECTIVE_COUNT]

    fields: list[str] = []
    for override in values:
        if not isinstance(override, Mapping):
            continue
        fields.extend(
            field_key for key, field_key in _OBJECTIVE_OVERRIDE_FIELDS.items() if key in override
        )
        if _ITEM_OVERRIDE_KEYS.intersection(override):
            fields.append(FieldKey.OBJECTIVE_ITEMS)
    return fields


def _is_roubles(entry: object) -> bool:
    if not isinstance(entry, Mapping):
        return False
    item = entry.get("item")
    if not isinstance(item, Mapping):
        return False
    return item.get("name") == ROUBLES_ITEM_NAME or item.get("id") == ROUBLES_ITEM_ID


def _finish_reward_fields(rewards: object) -> list[str]:
    if not isinstance(rewards, Mapping):
        return []
    fields: list[str] = []
    items = rewards.get("items")
    if isinstance(items, list) and any(_is_roubles(entry) for entry in items):
        fields.append(FieldKey.MONEY)
    standings = rewards.get("traderStanding")
    for entry in standings if isinstance(standings, list) else ():
        trader = entry.get("trader") if isinstance(entry, Mapping) else None
        name = trader.get("name") if isinstance(trader, Mapping) else None
        if isinstance(name, str) and name:
            fields.append(reputation_field(name))
    return fields


def overlay_suppression_fields(fields: Mapping[str, object]) -> list[str]:
    """Discrepancy field keys silenced by one task's overlay corrections.

    Objective overrides map onto the ``objectives.*`` keys they touch; a reward override
    also silences money (when it carries roubles) and each trader's reputation. The raw
    overlay key is always included.
    """

    suppressed: dict[str, None] = {}
    for key, value in fields.items():
        if key == "objectives":
            suppressed.update(dict.fromkeys(_objective_override_fields(value)))
        elif key == "finishRewards":
            suppressed.update(dict.fromkeys(_finish_reward_fields(value)))
        suppressed[key] = None
    return list(suppressed)


def _requirement_overrides(reqs: object) -> tuple[TaskRef, ...] | None:
    if not isinstance(reqs, list):
        return None
    refs: list[TaskRef] = []
    for requirement in reqs:
        task = requirement.get("task") if isinstance(requirement, Mapping) else None
        task_id = task.get("id") if isinstance(task, Mapping) else None
        if not isinstance(task_id, str) or not task_id:
            continue
        name = task.get("name") if isinstance(task, Mapping) else None
        refs.append(TaskRef(id=task_id, name=name if isinstance(name, str) else ""))
    return tuple(refs)


def _read_document[T](path: Path, adapter: TypeAdapter[T]) -> T | None:
    if not path.exists():
        return None
    try:
        document = json5.loads(path.read_text(encoding="utf-8"))
        return adapter.validate_python(document)
    except (OSError, ValueError, ValidationError) as exc:
        raise SuppressionFileError(f"Could not load {path}: {exc}") from exc


def load_overlay(path: Path) -> OverlayData:
    """Suppression entries and task-requirement overrides from the correction overlay."""

    overlay = _read_document(path, _OVERLAY_ADAPTER)
    if overlay is None:
        return OverlayData()

    entries: list[SuppressionEntry] = []
    overrides: dict[str, tuple[TaskRef, ...]] = {}
    for task_id, fields in overlay.items():
        entries.extend(
            SuppressionEntry(task_id=task_id, field=field_key, source=SuppressionSource.CORRECTION)
            for field_key in overlay_suppression_fields(fields)
        )
        requirements = _requirement_overrides(fields.get("taskRequirements"))
        if requirements is not None:
            overrides[task_id] = requirements

    log.info("Loaded %d overlay correction(s) from %s", len(entries), path)
    return OverlayData(entries=tuple(entries), requirement_overrides=MappingProxyType(overrides))


def load_free_text_incorrect(path: Path) -> tuple[SuppressionEntry, ...]:
    """Entries for disagreements where the wiki is known to be wrong."""

    document = _read_document(path, _INCORRECT_ADAPTER)
    if document is None:
        return ()
    entries = tuple(
        SuppressionEntry(
            task_id=task_id,
            field=field_key,
            source=SuppressionSource.FREE_TEXT_INCORRECT,
        )
        for task_id, fields in document.items()
        for field_key in fields
    )
    log.info("Loaded %d wiki-incorrect suppression(s) from %s", len(entries), path)
    return entries
