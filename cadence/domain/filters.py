from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .enums import TaskStatus


@dataclass(frozen=True)
class InstanceFilters:
    status: TaskStatus | None = None
    template_id: str | None = None
    owner_id: str | None = None
    search: str | None = None
    due_on: Optional[date] = None
    include_skipped: bool = False
