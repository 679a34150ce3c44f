from __future__ import annotations

from datetime import date, datetime


def to_date(value: date | datetime | str) -> date:
    """Truncate a date-like value to a calendar day.

    Accepts ``date``, ``datetime`` and ISO strings (``2024-01-08`` or a full
    timestamp). Raises ``ValueError`` for anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("empty date string")
        try:
            return date.fromisoformat(text)
        except ValueError:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    raise ValueError(f"not a date: {value!r}")


def parse_date(value: date | str | None) -> date | None:
    if not value:
        return None
    try:
        return to_date(value)
    except ValueError:
        return None
