"""
Unit tests for task utility functions.
"""

from datetime import date

from zmanit.models.enums import MoveDirection, ScheduleKind, TaskPriority
from zmanit.models.rebalance import TaskMove
from zmanit.models.task import ContainerTask, LeafTask, TaskRecord
from zmanit.services.energy_service import default_energy_profile
from zmanit.services.task_utils import (
    apply_moves,
    get_duration_minutes,
    get_remaining_minutes,
    has_invalid_duration,
    leaf_tasks,
    normalize_tasks,
    schedule_kind_for,
)

MONDAY = date(2026, 10, 19)
TUESDAY = date(2026, 10, 20)


def make_record(**kwargs) -> TaskRecord:
    return TaskRecord.model_validate(kwargs)


def test_normalize_reads_camel_case_records():
    record = make_record(
        id="t1",
        title="Transcribe interview",
        category="transcription",
        priority="URGENT",
        estimatedMinutes=90,
        minutesWorked=15,
        fixedTime="09:30",
        dueDate="2026-10-19",
        timerRunning=True,
    )

    task = normalize_tasks([record])[0]

    assert isinstance(task, LeafTask)
    assert task.priority == TaskPriority.URGENT
    assert task.fixed_time == 570
    assert task.due_date == MONDAY
    assert task.minutes_worked == 15
    assert task.timer_running


def test_normalize_defaults():
    task = normalize_tasks([make_record(id="t1", priority="someday", minutesWorked=None)])[0]

    assert task.category == "other"
    assert task.priority == TaskPriority.NORMAL
    assert task.minutes_worked == 0
    assert task.fixed_time is None


def test_malformed_fixed_time_stays_pinned():
    task = normalize_tasks([make_record(id="t1", fixedTime="25:99")])[0]

    assert task.fixed_time is None
    assert task.invalid_fixed_time
    assert task.is_fixed


def test_blank_fixed_time_is_flexible():
    task = normalize_tasks([make_record(id="t1", fixedTime="")])[0]
    assert not task.invalid_fixed_time
    assert not task.is_fixed


def test_parents_become_containers():
    records = [
        make_record(id="project", estimatedMinutes=600),
        make_record(id="part-1", parentId="project", orderInParent=1, estimatedMinutes=60),
        make_record(id="flagged", isProjectParent=True),
    ]

    tasks = normalize_tasks(records)

    assert [type(task) for task in tasks] == [ContainerTask, LeafTask, ContainerTask]
    assert [task.id for task in leaf_tasks(tasks)] == ["part-1"]
    assert tasks[1].order_in_parent == 1


def test_duration_helpers():
    assert get_duration_minutes(LeafTask(id="a", estimated_minutes=45), 30) == 45
    assert get_duration_minutes(LeafTask(id="a"), 30) == 30
    assert get_duration_minutes(LeafTask(id="a", estimated_minutes=0), 30) == 30
    assert get_remaining_minutes(LeafTask(id="a", estimated_minutes=60, minutes_worked=20), 30) == 40
    assert get_remaining_minutes(LeafTask(id="a", estimated_minutes=60, minutes_worked=90), 30) == 0


def test_invalid_duration():
    assert has_invalid_duration(LeafTask(id="a", estimated_minutes=-1))
    assert has_invalid_duration(LeafTask(id="a", minutes_worked=-5))
    assert not has_invalid_duration(LeafTask(id="a"))


def test_schedule_kind_follows_category():
    profile = default_energy_profile()
    assert schedule_kind_for(LeafTask(id="a", category="family"), profile) == ScheduleKind.HOME
    assert schedule_kind_for(LeafTask(id="a", category="email"), profile) == ScheduleKind.WORK
    assert schedule_kind_for(LeafTask(id="a", category="unknown"), profile) == ScheduleKind.WORK


def test_apply_moves_changes_only_matching_dates():
    tasks = [
        LeafTask(id="a", due_date=MONDAY, start_date=MONDAY),
        LeafTask(id="b", due_date=TUESDAY),
        LeafTask(id="c", due_date=MONDAY),
    ]
    moves = [
        TaskMove(task_id="a", from_date=MONDAY, to_date=TUESDAY, direction=MoveDirection.TO_NEXT_DAY),
        TaskMove(task_id="b", from_date=MONDAY, to_date=TUESDAY, direction=MoveDirection.TO_NEXT_DAY),
    ]

    updated = apply_moves(tasks, moves)

    assert (updated[0].due_date, updated[0].start_date) == (TUESDAY, TUESDAY)
    assert updated[1] is tasks[1]
    assert updated[2] is tasks[2]
    assert tasks[0].due_date == MONDAY
