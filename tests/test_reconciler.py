from __future__ import annotations

from datetime import date

from cadence.domain.entities import Override, RecurrenceRule, TaskTemplate
from cadence.domain.enums import EndCondition, Frequency, TaskStatus
from cadence.engine.generator import generate
from cadence.engine.reconciler import apply_override, reconcile, visible


def weekly_instances():
    template = TaskTemplate(
        id="T",
        title="Team sync notes",
        is_recurring=True,
        rule=RecurrenceRule(
            frequency=Frequency.WEEKLY,
            start_date=date(2024, 1, 1),
            end_condition=EndCondition.AFTER,
            end_value=3,
        ),
    )
    return list(generate(template, date(2024, 1, 1), date(2024, 2, 1)))


def test_status_override_applies_to_single_occurrence() -> None:
    override = Override("T", date(2024, 1, 8), {"status": "completed"})

    merged = reconcile(weekly_instances(), [override])

    assert [i.status for i in merged] == [
        TaskStatus.TODO,
        TaskStatus.COMPLETED,
        TaskStatus.TODO,
    ]
    assert merged[1].overrides == {"status": TaskStatus.COMPLETED}
    assert merged[0].overrides == {}


def test_unspecified_fields_keep_generated_values() -> None:
    override = Override("T", date(2024, 1, 15), {"title": "Sync notes (moved)", "assignee_ids": ["bo"]})

    merged = reconcile(weekly_instances(), [override])

    edited = merged[2]
    assert edited.title == "Sync notes (moved)"
    assert edited.assignee_ids == ("bo",)
    assert edited.status == TaskStatus.TODO
    assert edited.due_date == date(2024, 1, 15)
    assert edited.id == "T_2024-01-15"


def test_reconcile_is_idempotent() -> None:
    overrides = {
        "T_2024-01-08": Override("T", date(2024, 1, 8), {"status": "completed", "priority": 9}),
    }

    once = reconcile(weekly_instances(), overrides)
    twice = reconcile(once, overrides)

    assert once == twice


def test_override_cannot_add_occurrences() -> None:
    stray = Override("T", date(2024, 1, 9), {"status": "completed"})
    other_template = Override("X", date(2024, 1, 8), {"status": "completed"})

    merged = reconcile(weekly_instances(), [stray, other_template])

    assert len(merged) == 3
    assert all(i.status == TaskStatus.TODO for i in merged)


def test_skipped_occurrences_are_kept_until_filtered() -> None:
    override = Override("T", date(2024, 1, 8), {"skipped": True})

    merged = reconcile(weekly_instances(), [override])

    assert len(merged) == 3
    assert merged[1].skipped
    assert [i.due_date for i in visible(merged)] == [date(2024, 1, 1), date(2024, 1, 15)]


def test_unknown_override_fields_are_ignored() -> None:
    instance = weekly_instances()[0]
    override = Override("T", date(2024, 1, 1), {"due_date": "2030-01-01", "parent_template_id": "Z"})

    assert apply_override(instance, override) is instance


def test_unconvertible_override_values_are_dropped() -> None:
    instance = weekly_instances()[1]
    override = Override("T", date(2024, 1, 8), {"status": "done", "assignee_ids": "bo", "priority": 8})

    merged = apply_override(instance, override)

    assert merged.status == TaskStatus.TODO
    assert merged.assignee_ids == ()
    assert merged.priority == 8
    assert merged.overrides == {"priority": 8}
