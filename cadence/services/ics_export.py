from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable

from cadence.domain.entities import VirtualInstance
from cadence.domain.enums import TaskStatus

ICS_STATUS = {
    TaskStatus.TODO: "CONFIRMED",
    TaskStatus.IN_PROGRESS: "CONFIRMED",
    TaskStatus.COMPLETED: "CONFIRMED",
    TaskStatus.CANCELLED: "CANCELLED",
}


def render_ics(instances: Iterable[VirtualInstance], now: datetime | None = None) -> str:
    stamp = (now or datetime.utcnow()).strftime("%Y%m%dT%H%M%SZ")

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Cadence//Recurring Tasks//EN",
        "CALSCALE:GREGORIAN",
    ]
    for instance in instances:
        if instance.skipped:
            continue
        lines.extend(
            [
                "BEGIN:VEVENT",
                f"UID:{instance.id}@cadence",
                f"DTSTAMP:{stamp}",
                f"DTSTART;VALUE=DATE:{instance.due_date.strftime('%Y%m%d')}",
                f"DTEND;VALUE=DATE:{(instance.due_date + timedelta(days=1)).strftime('%Y%m%d')}",
                f"SUMMARY:{_escape_ics(instance.title)}",
                f"DESCRIPTION:{_escape_ics(instance.description or '')}",
                f"STATUS:{ICS_STATUS[instance.status]}",
                "END:VEVENT",
            ]
        )
    lines.append("END:VCALENDAR")
    return "\r\n".join(lines) + "\r\n"


def write_ics(instances: Iterable[VirtualInstance], path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_ics(instances), encoding="utf-8", newline="")
    return path


def _escape_ics(value: str) -> str:
    return value.replace("\\", "\\\\").replace(";", "\\;").replace(",", "\\,").replace("\n", "\\n")
