"""Status transitions for a single task occurrence.

The status is derived per instance (template status, then any override), so
nothing here is persisted. The table only decides which edits the service
accepts.
"""
from __future__ import annotations

from .enums import TaskStatus
from .errors import InvalidTransitionError

TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.TODO: frozenset({TaskStatus.IN_PROGRESS, TaskStatus.CANCELLED}),
    TaskStatus.IN_PROGRESS: frozenset(
        {TaskStatus.TODO, TaskStatus.COMPLETED, TaskStatus.CANCELLED}
    ),
    TaskStatus.COMPLETED: frozenset({TaskStatus.IN_PROGRESS, TaskStatus.CANCELLED}),
    TaskStatus.CANCELLED: frozenset({TaskStatus.TODO}),
}


def can_transition(current: TaskStatus | str, target: TaskStatus | str) -> bool:
    current = TaskStatus(current)
    target = TaskStatus(target)
    if current == target:
        return True
    return target in TRANSITIONS[current]


def ensure_transition(current: TaskStatus | str, target: TaskStatus | str) -> TaskStatus:
    if not can_transition(current, target):
        raise InvalidTransitionError(str(current), str(target))
    return TaskStatus(target)
