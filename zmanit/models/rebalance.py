"""
Models for same-day rebalancing and deadline feasibility results.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from zmanit.models.enums import DeadlineSeverity, MoveDirection, OverflowOption, ScheduleKind
from zmanit.models.schedule import ConflictWarning


class TaskMove(BaseModel):
    """A proposed date change for one task."""

    task_id: str
    title: str = ""
    from_date: date
    to_date: date
    direction: MoveDirection
    minutes: int = 0


def default_overflow_options() -> list[OverflowOption]:
    return [
        OverflowOption.MOVE_TO_TOMORROW,
        OverflowOption.KEEP_AS_OVERTIME,
        OverflowOption.CANCEL,
    ]


class EndOfDayOverflow(BaseModel):
    """A kept task that would finish after the day's end boundary."""

    task_id: str
    title: str = ""
    planned_start: int
    planned_end: int
    overflow_minutes: int = Field(..., ge=0)
    options: list[OverflowOption] = Field(default_factory=default_overflow_options)


class RebalanceResult(BaseModel):
    today: date
    next_working_day: date
    kind: ScheduleKind
    now_minute: int
    net_minutes: int
    elapsed_minutes: int
    remaining_capacity: int
    required_minutes: int
    deficit_minutes: int = 0
    residual_deficit_minutes: int = 0
    free_minutes: int = 0
    moves_to_next_day: list[TaskMove] = Field(default_factory=list)
    moves_to_today: list[TaskMove] = Field(default_factory=list)
    kept_task_ids: list[str] = Field(default_factory=list)
    protected_task_ids: list[str] = Field(default_factory=list)
    skipped_pull_task_ids: list[str] = Field(default_factory=list)
    end_of_day_overflow: list[EndOfDayOverflow] = Field(default_factory=list)
    conflicts: list[ConflictWarning] = Field(default_factory=list)

    @property
    def moves(self) -> list[TaskMove]:
        return self.moves_to_next_day + self.moves_to_today

    @property
    def changed(self) -> bool:
        return bool(self.moves_to_next_day or self.moves_to_today)


class FeasibilityResult(BaseModel):
    """Whether a task's remaining work fits before its deadline."""

    task_id: str
    title: str = ""
    deadline: Optional[date] = None
    required_minutes: int
    available_minutes: int
    feasible: bool
    tight: bool = False
    shortfall_minutes: int = 0
    severity: Optional[DeadlineSeverity] = None
    working_days: int = 0
