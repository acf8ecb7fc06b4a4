"""tarkov.dev structured task feed adapter."""

from __future__ import annotations

from .client import TarkovAPIError, TarkovClient
from .fetcher import fetch_structured_tasks, fetch_task_payloads, translate_tasks
from .schema import TarkovTask

__all__ = [
    "TarkovAPIError",
    "TarkovClient",
    "TarkovTask",
    "fetch_structured_tasks",
    "fetch_task_payloads",
    "translate_tasks",
]
