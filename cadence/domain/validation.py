"""Input checks for templates and recurrence configuration.

These run when a template is created or edited. The generator does its own
minimal validation at expansion time so that stored data which never went
through here still fails per template instead of per batch.
"""
from __future__ import annotations

from typing import Any

from .dates import to_date
from .entities import RecurrenceRule
from .enums import EndCondition, Frequency, PriorityLevel, TaskStatus

TITLE_MAX = 500
DESCRIPTION_MAX = 2000
PRIORITY_MIN = PriorityLevel.LOWEST
PRIORITY_MAX = PriorityLevel.CRITICAL
DEFAULT_PRIORITY = PriorityLevel.MEDIUM


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_rule_config(
    rule: RecurrenceRule,
    max_interval: int = 365,
    max_occurrences: int = 1000,
) -> list[str]:
    errors: list[str] = []

    if rule.frequency not in set(Frequency):
        errors.append(
            f"Invalid frequency: {rule.frequency}. Must be one of: daily, weekly, monthly, yearly"
        )

    if not _is_int(rule.interval):
        errors.append("Interval must be an integer")
    elif rule.interval < 1:
        errors.append("Interval must be at least 1")
    elif rule.interval > max_interval:
        errors.append(f"Interval cannot exceed {max_interval}")

    try:
        start = to_date(rule.start_date)
    except ValueError:
        start = None
        errors.append("Start date must be a valid date")

    if rule.end_condition not in set(EndCondition):
        errors.append(
            f"Invalid end condition: {rule.end_condition}. Must be one of: never, after, until"
        )
    elif rule.end_condition == EndCondition.AFTER:
        if rule.end_value is None:
            errors.append('End value is required for "after" condition')
        elif not _is_int(rule.end_value) or rule.end_value < 1:
            errors.append('End value must be a positive integer for "after" condition')
        elif rule.end_value > max_occurrences:
            errors.append(f'End value cannot exceed {max_occurrences} for "after" condition')
    elif rule.end_condition == EndCondition.UNTIL:
        if rule.end_value is None:
            errors.append('End value is required for "until" condition')
        else:
            try:
                until = to_date(rule.end_value)
            except ValueError:
                errors.append('End value must be a valid date for "until" condition')
            else:
                if start is not None and until <= start:
                    errors.append("End date must be after start date")

    return errors


def validate_template_data(data: dict) -> list[str]:
    errors: list[str] = []

    title = data.get("title")
    if not isinstance(title, str):
        errors.append("Title must be a string")
    elif not title.strip():
        errors.append("Title is required and cannot be empty")
    elif len(title) > TITLE_MAX:
        errors.append(f"Title cannot exceed {TITLE_MAX} characters")

    description = data.get("description")
    if description is not None:
        if not isinstance(description, str):
            errors.append("Description must be a string")
        elif len(description) > DESCRIPTION_MAX:
            errors.append(f"Description cannot exceed {DESCRIPTION_MAX} characters")

    priority = data.get("priority", DEFAULT_PRIORITY)
    if not _is_int(priority):
        errors.append("Priority must be an integer")
    elif not PRIORITY_MIN <= priority <= PRIORITY_MAX:
        errors.append(f"Priority must be between {PRIORITY_MIN} and {PRIORITY_MAX}")

    status = data.get("status")
    if status and status not in set(TaskStatus):
        errors.append(
            f"Invalid status: {status}. Must be one of: todo, in_progress, completed, cancelled"
        )

    assignee_ids = data.get("assignee_ids")
    if assignee_ids is not None:
        if not isinstance(assignee_ids, (list, tuple)):
            errors.append("Assignee IDs must be a list")
        elif any(not isinstance(item, str) or not item.strip() for item in assignee_ids):
            errors.append("All assignee IDs must be non-empty strings")

    if data.get("is_recurring") and data.get("rule") is None:
        errors.append("Recurring tasks need a recurrence rule")

    return errors


def validate_override_fields(fields: dict) -> list[str]:
    """Check the values of a per-occurrence edit.

    Only the fields present are checked, against the same limits as a
    template. ``None`` is rejected for priority, status and assignees since
    an override has no default to fall back on.
    """
    errors: list[str] = []

    if "title" in fields:
        title = fields["title"]
        if not isinstance(title, str):
            errors.append("Title must be a string")
        elif not title.strip():
            errors.append("Title is required and cannot be empty")
        elif len(title) > TITLE_MAX:
            errors.append(f"Title cannot exceed {TITLE_MAX} characters")

    description = fields.get("description")
    if description is not None:
        if not isinstance(description, str):
            errors.append("Description must be a string")
        elif len(description) > DESCRIPTION_MAX:
            errors.append(f"Description cannot exceed {DESCRIPTION_MAX} characters")

    if "priority" in fields:
        priority = fields["priority"]
        if not _is_int(priority):
            errors.append("Priority must be an integer")
        elif not PRIORITY_MIN <= priority <= PRIORITY_MAX:
            errors.append(f"Priority must be between {PRIORITY_MIN} and {PRIORITY_MAX}")

    if "status" in fields and fields["status"] not in set(TaskStatus):
        errors.append(
            f"Invalid status: {fields['status']}. Must be one of: todo, in_progress, completed, cancelled"
        )

    if "assignee_ids" in fields:
        assignee_ids = fields["assignee_ids"]
        if not isinstance(assignee_ids, (list, tuple)):
            errors.append("Assignee IDs must be a list")
        elif any(not isinstance(item, str) or not item.strip() for item in assignee_ids):
            errors.append("All assignee IDs must be non-empty strings")

    project_id = fields.get("project_id")
    if project_id is not None and not isinstance(project_id, str):
        errors.append("Project ID must be a string")

    if "skipped" in fields and not isinstance(fields["skipped"], bool):
        errors.append("Skipped must be true or false")

    return errors


def sanitize_template_data(data: dict) -> dict:
    sanitized = dict(data)
    sanitized["title"] = (data.get("title") or "").strip()
    description = (data.get("description") or "").strip()
    sanitized["description"] = description
    sanitized["status"] = TaskStatus(data.get("status") or TaskStatus.TODO)
    sanitized["priority"] = int(data.get("priority") or DEFAULT_PRIORITY)
    sanitized["assignee_ids"] = tuple(data.get("assignee_ids") or ())
    sanitized["is_recurring"] = bool(data.get("is_recurring", False))
    return sanitized
