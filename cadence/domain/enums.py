from __future__ import annotations

from enum import IntEnum, StrEnum


class TaskStatus(StrEnum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Frequency(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class EndCondition(StrEnum):
    NEVER = "never"
    AFTER = "after"
    UNTIL = "until"


class PriorityLevel(IntEnum):
    LOWEST = 1
    LOW = 3
    MEDIUM = 5
    HIGH = 7
    CRITICAL = 10
