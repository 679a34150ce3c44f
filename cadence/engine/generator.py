"""Expand recurring task templates into virtual instances.

Generation is a pure function of ``(template, range_start, range_end)``.
Nothing is cached between calls: rules bounded by an occurrence count are
re-counted from the anchor every time, so two queries over disjoint windows
can never hand out more than ``end_value`` occurrences between them.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, Iterator

from cadence.domain.dates import to_date
from cadence.domain.entities import RecurrenceRule, TaskTemplate, VirtualInstance, instance_key
from cadence.domain.enums import EndCondition, Frequency
from cadence.domain.errors import InvalidRuleError, RangeError

from .matcher import matches

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


@dataclass
class BatchResult:
    instances: list[VirtualInstance] = field(default_factory=list)
    failures: dict[str, InvalidRuleError] = field(default_factory=dict)


def validate_rule(rule: RecurrenceRule, template_id: str | None = None) -> date | int | None:
    """Check the parts of a rule the generator relies on.

    Returns the end bound: a ``date`` for ``until``, an occurrence count for
    ``after`` and ``None`` for ``never``.
    """
    if rule.frequency not in set(Frequency):
        raise InvalidRuleError(f"unknown frequency {rule.frequency!r}", template_id)
    if isinstance(rule.interval, bool) or not isinstance(rule.interval, int) or rule.interval < 1:
        raise InvalidRuleError(f"interval must be >= 1, got {rule.interval!r}", template_id)
    try:
        to_date(rule.start_date)
    except ValueError as exc:
        raise InvalidRuleError(f"invalid start date {rule.start_date!r}", template_id) from exc

    condition = rule.end_condition
    if condition == EndCondition.NEVER:
        return None
    if condition == EndCondition.AFTER:
        count = rule.end_value
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise InvalidRuleError(
                f"'after' needs a positive occurrence count, got {count!r}", template_id
            )
        return count
    if condition == EndCondition.UNTIL:
        if rule.end_value is None or isinstance(rule.end_value, (bool, int)):
            raise InvalidRuleError(
                f"'until' needs an end date, got {rule.end_value!r}", template_id
            )
        try:
            return to_date(rule.end_value)
        except ValueError as exc:
            raise InvalidRuleError(
                f"'until' end date is not a date: {rule.end_value!r}", template_id
            ) from exc
    raise InvalidRuleError(f"unknown end condition {condition!r}", template_id)


def _check_range(range_start: date, range_end: date) -> None:
    if range_end < range_start:
        raise RangeError(f"range ends ({range_end}) before it starts ({range_start})")


def _build_instance(template: TaskTemplate, day: date) -> VirtualInstance:
    return VirtualInstance(
        id=instance_key(template.id, day),
        parent_template_id=template.id,
        due_date=day,
        status=template.status,
        title=template.title,
        description=template.description,
        priority=template.priority,
        assignee_ids=tuple(template.assignee_ids),
        project_id=template.project_id,
        owner_id=template.owner_id,
    )


def _walk(start: date, end: date) -> Iterator[date]:
    day = start
    while day <= end:
        yield day
        day += ONE_DAY


def generate(
    template: TaskTemplate,
    range_start: date | datetime,
    range_end: date | datetime,
) -> Iterator[VirtualInstance]:
    """Yield the occurrences of ``template`` between both range ends, inclusive.

    Raises ``InvalidRuleError`` on first iteration when the rule is malformed.
    An inverted range produces nothing.
    """
    if not template.is_recurring or template.rule is None:
        return

    rule = template.rule
    bound = validate_rule(rule, template.id)
    window_start = to_date(range_start)
    window_end = to_date(range_end)
    try:
        _check_range(window_start, window_end)
    except RangeError as exc:
        logger.warning("Skipping generation for template %s: %s", template.id, exc)
        return

    anchor = to_date(rule.start_date)
    scan_end = window_end
    if isinstance(bound, date):
        scan_end = min(scan_end, bound)

    if rule.end_condition == EndCondition.AFTER:
        remaining = bound
        for day in _walk(anchor, scan_end):
            if not matches(day, rule):
                continue
            if day >= window_start:
                yield _build_instance(template, day)
            remaining -= 1
            if remaining == 0:
                return
        return

    for day in _walk(max(window_start, anchor), scan_end):
        if matches(day, rule):
            yield _build_instance(template, day)


def generate_many(
    templates: Iterable[TaskTemplate],
    range_start: date | datetime,
    range_end: date | datetime,
) -> BatchResult:
    """Generate instances for every template, isolating broken rules.

    A template whose rule fails validation contributes no instances and is
    reported in ``failures``; its siblings are unaffected.
    """
    result = BatchResult()
    for template in templates:
        try:
            result.instances.extend(generate(template, range_start, range_end))
        except InvalidRuleError as exc:
            logger.warning("Recurrence rule for template %s is invalid: %s", template.id, exc)
            result.failures[template.id] = exc
    result.instances.sort(key=lambda instance: (instance.due_date, instance.parent_template_id))
    logger.debug(
        "Generated %d instances (%d failed templates)",
        len(result.instances),
        len(result.failures),
    )
    return result


def preview_dates(
    rule: RecurrenceRule,
    limit: int = 100,
    horizon_days: int = 3650,
) -> list[date]:
    """First ``limit`` occurrence dates of ``rule``, looking at most ``horizon_days`` ahead."""
    bound = validate_rule(rule)
    anchor = to_date(rule.start_date)
    end = anchor + timedelta(days=horizon_days)
    if isinstance(bound, date):
        end = min(end, bound)
    if isinstance(bound, int):
        limit = min(limit, bound)

    dates: list[date] = []
    for day in _walk(anchor, end):
        if len(dates) >= limit:
            break
        if matches(day, rule):
            dates.append(day)
    return dates
