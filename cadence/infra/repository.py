from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import sessionmaker

from cadence.domain.dates import parse_date
from cadence.domain.entities import Override, RecurrenceRule, TaskTemplate, instance_key
from cadence.domain.enums import EndCondition, Frequency, TaskStatus

from .models import OverrideModel, TemplateModel


def _rule_from_model(model: TemplateModel) -> Optional[RecurrenceRule]:
    if not model.frequency or model.start_date is None:
        return None
    condition = model.end_condition or EndCondition.NEVER.value
    end_value: int | date | None = None
    if condition == EndCondition.AFTER.value:
        end_value = model.end_count
    elif condition == EndCondition.UNTIL.value:
        end_value = model.end_date
    return RecurrenceRule(
        frequency=Frequency(model.frequency),
        start_date=model.start_date,
        interval=model.interval,
        end_condition=EndCondition(condition),
        end_value=end_value,
    )


def _to_entity(model: TemplateModel) -> TaskTemplate:
    return TaskTemplate(
        id=model.id,
        title=model.title,
        description=model.description,
        priority=model.priority,
        status=TaskStatus(model.status),
        assignee_ids=tuple(model.assignee_ids or ()),
        project_id=model.project_id,
        owner_id=model.owner_id,
        is_recurring=model.is_recurring,
        rule=_rule_from_model(model),
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _override_to_entity(model: OverrideModel) -> Override:
    return Override(
        template_id=model.template_id,
        date=model.occurrence_date,
        fields=dict(model.fields or {}),
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _rule_columns(rule: Optional[RecurrenceRule]) -> dict[str, Any]:
    if rule is None:
        return {
            "frequency": None,
            "interval": 1,
            "start_date": None,
            "end_condition": EndCondition.NEVER.value,
            "end_count": None,
            "end_date": None,
        }
    condition = EndCondition(rule.end_condition)
    end_value = rule.end_value
    return {
        "frequency": Frequency(rule.frequency).value,
        "interval": rule.interval,
        "start_date": rule.start_date,
        "end_condition": condition.value,
        "end_count": end_value if condition == EndCondition.AFTER else None,
        "end_date": parse_date(end_value) if condition == EndCondition.UNTIL else None,
    }


def _to_columns(data: dict) -> dict[str, Any]:
    columns = {}
    for key, value in data.items():
        if key == "rule":
            columns.update(_rule_columns(value))
        elif key == "assignee_ids":
            columns[key] = list(value or ())
        elif isinstance(value, Enum):
            columns[key] = value.value
        else:
            columns[key] = value
    return columns


def _jsonable(fields: dict[str, Any]) -> dict[str, Any]:
    cleaned = {}
    for key, value in fields.items():
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, tuple):
            value = list(value)
        cleaned[key] = value
    return cleaned


class TemplateRepository:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def list_templates(self, owner_id: str | None = None) -> list[TaskTemplate]:
        with self._session_factory() as session:
            stmt = select(TemplateModel)
            if owner_id is not None:
                stmt = stmt.where(TemplateModel.owner_id == owner_id)
            stmt = stmt.order_by(TemplateModel.created_at.asc(), TemplateModel.id.asc())
            return [_to_entity(template) for template in session.scalars(stmt)]

    def get_template(self, template_id: str) -> Optional[TaskTemplate]:
        with self._session_factory() as session:
            template = session.get(TemplateModel, template_id)
            return _to_entity(template) if template else None

    def create_template(self, data: dict) -> TaskTemplate:
        with self._session_factory() as session:
            template = TemplateModel(**_to_columns(data))
            session.add(template)
            session.commit()
            session.refresh(template)
            return _to_entity(template)

    def update_template(self, template_id: str, data: dict) -> Optional[TaskTemplate]:
        with self._session_factory() as session:
            template = session.get(TemplateModel, template_id)
            if not template:
                return None
            for key, value in _to_columns(data).items():
                setattr(template, key, value)
            session.commit()
            session.refresh(template)
            return _to_entity(template)

    def delete_template(self, template_id: str) -> None:
        with self._session_factory() as session:
            template = session.get(TemplateModel, template_id)
            if not template:
                return
            session.execute(delete(OverrideModel).where(OverrideModel.template_id == template_id))
            session.delete(template)
            session.commit()

    def list_overrides(
        self,
        template_ids: Iterable[str] | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Override]:
        with self._session_factory() as session:
            stmt = select(OverrideModel)
            if template_ids is not None:
                stmt = stmt.where(OverrideModel.template_id.in_(list(template_ids)))
            if start is not None:
                stmt = stmt.where(OverrideModel.occurrence_date >= start)
            if end is not None:
                stmt = stmt.where(OverrideModel.occurrence_date <= end)
            stmt = stmt.order_by(OverrideModel.occurrence_date.asc())
            return [_override_to_entity(override) for override in session.scalars(stmt)]

    def get_override(self, template_id: str, day: date) -> Optional[Override]:
        with self._session_factory() as session:
            override = session.get(OverrideModel, instance_key(template_id, day))
            return _override_to_entity(override) if override else None

    def save_override(self, template_id: str, day: date, fields: dict[str, Any]) -> Override:
        """Merge ``fields`` into the override for this occurrence, creating it if needed."""
        key = instance_key(template_id, day)
        with self._session_factory() as session:
            override = session.get(OverrideModel, key)
            if override is None:
                override = OverrideModel(
                    id=key,
                    template_id=template_id,
                    occurrence_date=day,
                    fields=_jsonable(fields),
                )
                session.add(override)
            else:
                merged = dict(override.fields or {})
                merged.update(_jsonable(fields))
                override.fields = merged
                override.updated_at = datetime.utcnow()
            session.commit()
            session.refresh(override)
            return _override_to_entity(override)

    def delete_override(self, template_id: str, day: date) -> None:
        with self._session_factory() as session:
            override = session.get(OverrideModel, instance_key(template_id, day))
            if not override:
                return
            session.delete(override)
            session.commit()

    def delete_overrides_before(self, day: date) -> int:
        with self._session_factory() as session:
            result = session.execute(
                delete(OverrideModel).where(OverrideModel.occurrence_date < day)
            )
            session.commit()
            return result.rowcount or 0
