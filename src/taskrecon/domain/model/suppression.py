"""Suppression entries recorded by human curators."""

from __future__ import annotations

from dataclasses import dataclass

from .enums import SuppressionSource


@dataclass(slots=True, frozen=True, kw_only=True)
class SuppressionEntry:
    task_id: str
    field: str
    source: SuppressionSource

    @property
    def key(self) -> tuple[str, str]:
        return (self.task_id, self.field)
