from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, timedelta
from pathlib import Path

from cadence.config import load_settings
from cadence.domain.dates import to_date
from cadence.domain.entities import VirtualInstance
from cadence.domain.filters import InstanceFilters
from cadence.infra.db import build_engine, build_session_factory, init_db
from cadence.infra.logging import setup_logging
from cadence.infra.repository import TemplateRepository
from cadence.services.ics_export import write_ics
from cadence.services.recurrence_service import RecurrenceService

logger = logging.getLogger(__name__)


def _date_arg(value: str) -> date:
    try:
        return to_date(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not a date: {value}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cadence", description="Recurring task occurrences")
    subparsers = parser.add_subparsers(dest="command", required=True)

    instances = subparsers.add_parser("instances", help="List occurrences in a date window")
    instances.add_argument("--start", type=_date_arg, default=None, help="First day (YYYY-MM-DD)")
    instances.add_argument("--end", type=_date_arg, default=None, help="Last day (YYYY-MM-DD)")
    instances.add_argument("--owner", default=None, help="Only templates owned by this user")
    instances.add_argument("--template", default=None, help="Only this template id")
    instances.add_argument("--include-skipped", action="store_true")
    instances.add_argument("--ics", type=Path, default=None, help="Also write an ICS file")

    prune = subparsers.add_parser("prune", help="Delete overrides past the retention window")
    prune.add_argument("--today", type=_date_arg, default=None)
    return parser


def format_instance(instance: VirtualInstance) -> str:
    assignees = ", ".join(instance.assignee_ids) or "-"
    marker = " (skipped)" if instance.skipped else ""
    return (
        f"{instance.due_date.isoformat()}  {instance.status.value:<11}  "
        f"{instance.title} [{assignees}]{marker}"
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    setup_logging(settings)

    engine = build_engine(settings)
    try:
        init_db(engine)
    except Exception as exc:  # noqa: BLE001
        logger.error("Database is not reachable: %s", exc)
        print(f"DB error: {exc}", file=sys.stderr)
        return 1

    service = RecurrenceService(TemplateRepository(build_session_factory(engine)), settings)
    today = date.today()

    if args.command == "prune":
        removed = service.prune_overrides(args.today or today)
        print(f"Removed overrides: {removed}")
        return 0

    start = args.start or today
    end = args.end or start + timedelta(days=settings.lookahead_days)
    filters = InstanceFilters(
        owner_id=args.owner,
        template_id=args.template,
        include_skipped=args.include_skipped,
    )
    instances = service.list_instances(start, end, filters)
    for instance in instances:
        print(format_instance(instance))

    ics_path = args.ics or (Path(settings.ics_export_path) if settings.ics_export_path else None)
    if ics_path:
        write_ics(instances, ics_path)
        logger.info("Exported %d instances to %s", len(instances), ics_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
