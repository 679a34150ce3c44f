"""Decide whether a calendar day is an occurrence of a recurrence rule.

Periods are counted from the rule's anchor (``start_date``):

* daily   -- every ``interval`` days.
* weekly  -- same weekday as the anchor, in a week bucket
  (``elapsed_days // 7``) that is a multiple of ``interval``.
* monthly -- same day of month, every ``interval`` months. Months that do
  not have that day are skipped, not clamped (a Jan 31 anchor never fires
  in February).
* yearly  -- same month and day, every ``interval`` years. Feb 29 anchors
  only fire in leap years.
"""
from __future__ import annotations

from datetime import date

from cadence.domain.dates import to_date
from cadence.domain.entities import RecurrenceRule
from cadence.domain.enums import Frequency


def _months_between(start: date, check: date) -> int:
    return (check.year * 12 + check.month) - (start.year * 12 + start.month)


def matches(check_date: date, rule: RecurrenceRule) -> bool:
    check = to_date(check_date)
    start = to_date(rule.start_date)
    interval = rule.interval
    if check < start or interval < 1:
        return False

    elapsed = (check - start).days

    if rule.frequency == Frequency.DAILY:
        return elapsed % interval == 0
    if rule.frequency == Frequency.WEEKLY:
        return elapsed % 7 == 0 and (elapsed // 7) % interval == 0
    if rule.frequency == Frequency.MONTHLY:
        return _months_between(start, check) % interval == 0 and check.day == start.day
    if rule.frequency == Frequency.YEARLY:
        return (
            (check.year - start.year) % interval == 0
            and check.month == start.month
            and check.day == start.day
        )
    return False
