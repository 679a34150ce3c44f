from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Optional

from .enums import EndCondition, Frequency, TaskStatus

OVERRIDABLE_FIELDS = frozenset(
    {"status", "title", "description", "priority", "assignee_ids", "project_id", "skipped"}
)


def instance_key(template_id: str, day: date) -> str:
    return f"{template_id}_{day.isoformat()}"


@dataclass(frozen=True)
class RecurrenceRule:
    frequency: Frequency
    start_date: date
    interval: int = 1
    end_condition: EndCondition = EndCondition.NEVER
    end_value: int | date | str | None = None


@dataclass(frozen=True)
class TaskTemplate:
    id: str
    title: str
    description: str = ""
    priority: int = 5
    status: TaskStatus = TaskStatus.TODO
    assignee_ids: tuple[str, ...] = ()
    project_id: Optional[str] = None
    owner_id: Optional[str] = None
    is_recurring: bool = False
    rule: Optional[RecurrenceRule] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class VirtualInstance:
    id: str
    parent_template_id: str
    due_date: date
    status: TaskStatus
    title: str
    description: str
    priority: int
    assignee_ids: tuple[str, ...]
    project_id: Optional[str]
    owner_id: Optional[str]
    is_recurring: bool = True
    skipped: bool = False
    overrides: Mapping[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class Override:
    template_id: str
    date: date
    fields: Mapping[str, Any]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def id(self) -> str:
        return instance_key(self.template_id, self.date)
