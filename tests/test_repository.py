from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from cadence.config import Settings
from cadence.domain.entities import RecurrenceRule
from cadence.domain.enums import EndCondition, Frequency, TaskStatus
from cadence.infra.db import Base, build_session_factory
from cadence.infra.repository import TemplateRepository
from cadence.services.recurrence_service import RecurrenceService


@pytest.fixture
def repo() -> TemplateRepository:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return TemplateRepository(build_session_factory(engine))


def test_template_round_trip_with_count_rule(repo: TemplateRepository) -> None:
    rule = RecurrenceRule(
        Frequency.WEEKLY, date(2024, 1, 1), interval=2, end_condition=EndCondition.AFTER, end_value=6
    )

    created = repo.create_template(
        {
            "title": "Sprint review",
            "status": TaskStatus.IN_PROGRESS,
            "assignee_ids": ("ana", "bo"),
            "owner_id": "ana",
            "is_recurring": True,
            "rule": rule,
        }
    )
    loaded = repo.get_template(created.id)

    assert loaded.title == "Sprint review"
    assert loaded.status == TaskStatus.IN_PROGRESS
    assert loaded.assignee_ids == ("ana", "bo")
    assert loaded.priority == 5
    assert loaded.rule == rule


def test_until_rule_from_iso_string(repo: TemplateRepository) -> None:
    rule = RecurrenceRule(
        Frequency.MONTHLY, date(2024, 1, 15), end_condition=EndCondition.UNTIL, end_value="2024-06-15"
    )

    created = repo.create_template({"title": "Rent", "is_recurring": True, "rule": rule})

    assert repo.get_template(created.id).rule.end_value == date(2024, 6, 15)


def test_update_and_list_by_owner(repo: TemplateRepository) -> None:
    first = repo.create_template({"title": "A", "owner_id": "ana"})
    repo.create_template({"title": "B", "owner_id": "bo"})

    repo.update_template(first.id, {"title": "A2", "rule": RecurrenceRule(Frequency.DAILY, date(2024, 1, 1))})

    owned = repo.list_templates("ana")
    assert [t.title for t in owned] == ["A2"]
    assert owned[0].rule.frequency == Frequency.DAILY
    assert len(repo.list_templates()) == 2
    assert repo.update_template("missing", {"title": "x"}) is None


def test_save_override_merges_fields(repo: TemplateRepository) -> None:
    template = repo.create_template({"title": "Standup"})
    day = date(2024, 1, 8)

    repo.save_override(template.id, day, {"status": TaskStatus.COMPLETED})
    override = repo.save_override(template.id, day, {"assignee_ids": ("bo",)})

    assert override.id == f"{template.id}_2024-01-08"
    assert override.fields == {"status": "completed", "assignee_ids": ["bo"]}
    assert repo.get_override(template.id, day).fields == override.fields


def test_list_overrides_by_window(repo: TemplateRepository) -> None:
    template = repo.create_template({"title": "Standup"})
    for day in (date(2024, 1, 1), date(2024, 1, 8), date(2024, 2, 5)):
        repo.save_override(template.id, day, {"skipped": True})

    in_january = repo.list_overrides([template.id], date(2024, 1, 1), date(2024, 1, 31))

    assert [o.date for o in in_january] == [date(2024, 1, 1), date(2024, 1, 8)]
    assert repo.list_overrides(["other"]) == []


def test_delete_template_removes_overrides(repo: TemplateRepository) -> None:
    template = repo.create_template({"title": "Standup"})
    repo.save_override(template.id, date(2024, 1, 8), {"skipped": True})

    repo.delete_template(template.id)

    assert repo.get_template(template.id) is None
    assert repo.list_overrides() == []


def test_delete_overrides_before(repo: TemplateRepository) -> None:
    template = repo.create_template({"title": "Standup"})
    repo.save_override(template.id, date(2023, 6, 1), {"skipped": True})
    repo.save_override(template.id, date(2024, 6, 1), {"skipped": True})

    assert repo.delete_overrides_before(date(2024, 1, 1)) == 1
    repo.delete_override(template.id, date(2024, 6, 1))
    assert repo.list_overrides() == []


def test_service_against_database(repo: TemplateRepository) -> None:
    service = RecurrenceService(repo, Settings(database_url="sqlite://"))
    template = service.create_template(
        {
            "title": "Water plants",
            "is_recurring": True,
            "rule": RecurrenceRule(
                Frequency.WEEKLY, date(2024, 1, 1), end_condition=EndCondition.AFTER, end_value=3
            ),
        }
    )

    service.update_instance(template.id, date(2024, 1, 8), {"status": "completed"})
    instances = service.list_instances(date(2024, 1, 1), date(2024, 2, 1))

    assert [i.id for i in instances] == [
        f"{template.id}_2024-01-01",
        f"{template.id}_2024-01-08",
        f"{template.id}_2024-01-15",
    ]
    assert [i.status for i in instances] == [
        TaskStatus.TODO,
        TaskStatus.COMPLETED,
        TaskStatus.TODO,
    ]
