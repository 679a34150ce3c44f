from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Optional

from cadence.config import Settings
from cadence.domain.dates import to_date
from cadence.domain.entities import OVERRIDABLE_FIELDS, TaskTemplate, VirtualInstance
from cadence.domain.enums import TaskStatus
from cadence.domain.errors import (
    InvalidOverrideError,
    InvalidRuleError,
    NotFoundError,
    TemplateValidationError,
)
from cadence.domain.filters import InstanceFilters
from cadence.domain.status import ensure_transition
from cadence.domain.validation import (
    sanitize_template_data,
    validate_rule_config,
    validate_override_fields,
    validate_template_data,
)
from cadence.engine.generator import generate, generate_many
from cadence.engine.reconciler import reconcile, visible
from cadence.infra.repository import TemplateRepository

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = Settings(database_url="")


@dataclass(frozen=True)
class RecurringSummary:
    next_instance: Optional[VirtualInstance]
    overdue: list[VirtualInstance] = field(default_factory=list)


class RecurrenceService:
    def __init__(self, repo: TemplateRepository, settings: Settings | None = None) -> None:
        self._repo = repo
        self._settings = settings or DEFAULT_SETTINGS

    def list_templates(self, owner_id: str | None = None) -> list[TaskTemplate]:
        return self._repo.list_templates(owner_id)

    def get_template(self, template_id: str) -> TaskTemplate:
        template = self._repo.get_template(template_id)
        if not template:
            raise NotFoundError(f"Template {template_id} not found")
        return template

    def create_template(self, data: dict) -> TaskTemplate:
        return self._repo.create_template(self._validated(data))

    def update_template(self, template_id: str, data: dict) -> TaskTemplate:
        current = self.get_template(template_id)
        merged = {
            "title": current.title,
            "description": current.description,
            "priority": current.priority,
            "status": current.status,
            "assignee_ids": current.assignee_ids,
            "is_recurring": current.is_recurring,
            "rule": current.rule,
        }
        merged.update(data)
        validated = self._validated(merged)
        changes = {key: validated[key] for key in data if key in validated}
        template = self._repo.update_template(template_id, changes)
        if not template:
            raise NotFoundError(f"Template {template_id} not found")
        return template

    def delete_template(self, template_id: str) -> None:
        self._repo.delete_template(template_id)

    def list_instances(
        self,
        range_start: date | datetime,
        range_end: date | datetime,
        filters: InstanceFilters | None = None,
    ) -> list[VirtualInstance]:
        filters = filters or InstanceFilters()
        start, end = to_date(range_start), to_date(range_end)
        templates = [
            template
            for template in self._repo.list_templates(filters.owner_id)
            if template.is_recurring
            and (filters.template_id is None or template.id == filters.template_id)
        ]
        if not templates:
            return []

        batch = generate_many(templates, start, end)
        for template_id, error in batch.failures.items():
            logger.info("No instances for template %s: %s", template_id, error)

        overrides = self._repo.list_overrides(
            [template.id for template in templates], start, end
        )
        instances = reconcile(batch.instances, overrides)
        if not filters.include_skipped:
            instances = visible(instances)
        return [instance for instance in instances if _passes(instance, filters)]

    def instances_for_date(
        self, day: date, filters: InstanceFilters | None = None
    ) -> list[VirtualInstance]:
        return self.list_instances(day, day, filters)

    def instances_for_template(
        self, template_id: str, range_start: date, range_end: date
    ) -> list[VirtualInstance]:
        template = self.get_template(template_id)
        try:
            instances = list(generate(template, range_start, range_end))
        except InvalidRuleError as exc:
            logger.warning("No instances for template %s: %s", template_id, exc)
            return []
        overrides = self._repo.list_overrides([template_id], to_date(range_start), to_date(range_end))
        return visible(reconcile(instances, overrides))

    def get_instance(self, template_id: str, day: date) -> VirtualInstance:
        template = self.get_template(template_id)
        day = to_date(day)
        try:
            instances = list(generate(template, day, day))
        except InvalidRuleError as exc:
            raise NotFoundError(f"Template {template_id} has no valid recurrence rule") from exc
        if not instances:
            raise NotFoundError(f"Template {template_id} has no occurrence on {day.isoformat()}")
        override = self._repo.get_override(template_id, day)
        return reconcile(instances, [override] if override else [])[0]

    def update_instance(self, template_id: str, day: date, changes: dict[str, Any]) -> VirtualInstance:
        unknown = sorted(set(changes) - OVERRIDABLE_FIELDS)
        if unknown:
            raise InvalidOverrideError(f"Cannot override fields: {', '.join(unknown)}")
        errors = validate_override_fields(changes)
        if errors:
            raise InvalidOverrideError("; ".join(errors))
        day = to_date(day)
        self.get_instance(template_id, day)
        fields = dict(changes)
        if "status" in fields:
            fields["status"] = TaskStatus(fields["status"])
        self._repo.save_override(template_id, day, fields)
        logger.info("Saved override for %s on %s: %s", template_id, day, sorted(fields))
        return self.get_instance(template_id, day)

    def set_instance_status(
        self, template_id: str, day: date, status: TaskStatus | str
    ) -> VirtualInstance:
        instance = self.get_instance(template_id, day)
        target = ensure_transition(instance.status, status)
        return self.update_instance(template_id, day, {"status": target})

    def skip_instance(self, template_id: str, day: date) -> VirtualInstance:
        return self.update_instance(template_id, day, {"skipped": True})

    def restore_instance(self, template_id: str, day: date) -> VirtualInstance:
        day = to_date(day)
        self._repo.delete_override(template_id, day)
        return self.get_instance(template_id, day)

    def next_instance(self, template_id: str, today: date) -> Optional[VirtualInstance]:
        today = to_date(today)
        horizon = today + timedelta(days=self._settings.lookahead_days)
        for instance in self.instances_for_template(template_id, today, horizon):
            if instance.status != TaskStatus.COMPLETED:
                return instance
        return None

    def overdue_instances(self, template_id: str, today: date) -> list[VirtualInstance]:
        today = to_date(today)
        since = today - timedelta(days=self._settings.lookback_days)
        return [
            instance
            for instance in self.instances_for_template(template_id, since, today - timedelta(days=1))
            if instance.status != TaskStatus.COMPLETED
        ]

    def summary(self, template_id: str, today: date) -> RecurringSummary:
        return RecurringSummary(
            next_instance=self.next_instance(template_id, today),
            overdue=self.overdue_instances(template_id, today),
        )

    def prune_overrides(self, today: date) -> int:
        cutoff = to_date(today) - timedelta(days=self._settings.override_retention_days)
        removed = self._repo.delete_overrides_before(cutoff)
        if removed:
            logger.info("Pruned %d overrides older than %s", removed, cutoff)
        return removed

    def _validated(self, data: dict) -> dict:
        errors = validate_template_data(data)
        rule = data.get("rule")
        if rule is not None:
            errors.extend(
                validate_rule_config(
                    rule,
                    max_interval=self._settings.max_interval,
                    max_occurrences=self._settings.max_occurrences,
                )
            )
        if errors:
            raise TemplateValidationError(errors)
        return sanitize_template_data(data)


def _passes(instance: VirtualInstance, filters: InstanceFilters) -> bool:
    if filters.status and instance.status != filters.status:
        return False
    if filters.due_on and instance.due_date != filters.due_on:
        return False
    if filters.search:
        needle = filters.search.lower()
        if needle not in instance.title.lower() and needle not in (instance.description or "").lower():
            return False
    return True
