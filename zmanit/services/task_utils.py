"""
Task utility functions.

Helper functions for task normalization, duration math and applying moves.
"""

from datetime import date
from typing import Iterable, Optional, Sequence

from zmanit.core.logger import setup_logger
from zmanit.models.energy import EnergyProfile
from zmanit.models.enums import ScheduleKind
from zmanit.models.rebalance import TaskMove
from zmanit.models.task import ContainerTask, LeafTask, Task, TaskRecord
from zmanit.utils.time_utils import parse_hhmm

logger = setup_logger(__name__)


def normalize_tasks(records: Sequence[TaskRecord]) -> list[Task]:
    """
    Convert raw task records into the Leaf/Container union.

    A record becomes a container when it is flagged as a project parent or
    when another record points at it through ``parent_id``.
    """
    parent_ids = {record.parent_id for record in records if record.parent_id}
    tasks: list[Task] = []
    for record in records:
        fixed_time = _fixed_minute(record)
        fields = {
            "id": record.id,
            "title": record.title,
            "category": record.category or "other",
            "priority": record.priority,
            "estimated_minutes": record.estimated_minutes,
            "minutes_worked": record.minutes_worked or 0,
            "fixed_time": fixed_time,
            "invalid_fixed_time": bool(record.fixed_time) and fixed_time is None,
            "due_date": record.due_date,
            "start_date": record.start_date,
            "is_completed": record.is_completed,
            "parent_id": record.parent_id,
            "order_in_parent": record.order_in_parent,
            "timer_running": record.timer_running,
            "is_external": record.is_external,
            "created_at": record.created_at,
        }
        if record.is_project_parent or record.id in parent_ids:
            tasks.append(ContainerTask(**fields))
        else:
            tasks.append(LeafTask(**fields))
    return tasks


def _fixed_minute(record: TaskRecord) -> Optional[int]:
    if not record.fixed_time:
        return None
    minute = parse_hhmm(record.fixed_time)
    if minute is None:
        logger.warning(f"Malformed fixed time {record.fixed_time!r} on task {record.id}")
    return minute


def leaf_tasks(tasks: Iterable[Task]) -> list[LeafTask]:
    """Only the schedulable units; containers are never counted."""
    return [task for task in tasks if isinstance(task, LeafTask)]


def has_invalid_duration(task: Task) -> bool:
    if task.estimated_minutes is not None and task.estimated_minutes < 0:
        return True
    return task.minutes_worked < 0


def get_duration_minutes(task: Task, default_minutes: int) -> int:
    """Full estimate, or the default when the task has none."""
    if task.estimated_minutes:
        return max(0, task.estimated_minutes)
    return default_minutes


def get_remaining_minutes(task: Task, default_minutes: int) -> int:
    """
    Remaining work: estimate minus minutes already worked, never negative.

    Over-runs (worked past the estimate) leave nothing to plan.
    """
    return max(0, get_duration_minutes(task, default_minutes) - max(0, task.minutes_worked))


def schedule_kind_for(task: Task, profile: EnergyProfile) -> ScheduleKind:
    return profile.kind_for(task.category)


def apply_moves(tasks: Sequence[Task], moves: Iterable[TaskMove]) -> list[Task]:
    """
    Apply rebalance moves to a task snapshot.

    Idempotent: a move only applies while the task still sits on the move's
    ``from_date``, so re-applying a result (or applying a stale duplicate) is
    a no-op against the task's new date.
    """
    moves_by_task: dict[str, TaskMove] = {}
    for move in moves:
        moves_by_task[move.task_id] = move

    updated: list[Task] = []
    for task in tasks:
        move = moves_by_task.get(task.id)
        changes: dict[str, date] = {}
        if move and task.due_date == move.from_date:
            changes["due_date"] = move.to_date
        if move and task.start_date == move.from_date:
            changes["start_date"] = move.to_date
        updated.append(task.model_copy(update=changes) if changes else task)
    return updated
