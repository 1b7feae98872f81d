"""
Schedule models for planning outputs.

All of these are derived state: recomputed from scratch on every pass.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from zmanit.models.enums import (
    BlockSource,
    DayState,
    DayStatus,
    RecommendationType,
    ScheduleKind,
    UnscheduledReason,
)
from zmanit.utils.time_utils import minutes_to_hhmm


class OccupiedInterval(BaseModel):
    """A busy stretch of the day that slot searches must avoid."""

    model_config = ConfigDict(frozen=True)

    start: int
    end: int
    source_task_id: Optional[str] = None
    is_fixed: bool = False


class ScheduledBlock(BaseModel):
    """Placement of one task on a day."""

    task_id: str
    title: str = ""
    start: int
    end: int
    is_fixed: bool = False
    source: BlockSource
    is_optimal: bool = True
    energy_window: Optional[str] = None

    @property
    def duration(self) -> int:
        return self.end - self.start

    @property
    def start_time(self) -> str:
        return minutes_to_hhmm(self.start)

    @property
    def end_time(self) -> str:
        return minutes_to_hhmm(self.end)


class SuggestedShift(BaseModel):
    """Proposed fix for a conflict: move one task to a new start."""

    task_id: str
    new_start: int

    @property
    def new_start_time(self) -> str:
        return minutes_to_hhmm(self.new_start)


class ConflictWarning(BaseModel):
    """Two fixed-time tasks whose intervals overlap."""

    first_task_id: str
    second_task_id: str
    overlap_minutes: int = Field(..., ge=0)
    suggested_shift: Optional[SuggestedShift] = None

    @property
    def resolvable(self) -> bool:
        return self.suggested_shift is not None


class BoundsWarning(BaseModel):
    """A fixed-time task that spills outside the day's window."""

    task_id: str
    minutes_before_start: int = 0
    minutes_after_end: int = 0


class UnscheduledTask(BaseModel):
    """Task that could not be placed, with reason."""

    task_id: str
    title: str = ""
    reason: UnscheduledReason
    required_minutes: int = 0


class CapacityInfo(BaseModel):
    """Capacity of one day for one schedule kind."""

    kind: ScheduleKind
    enabled: bool
    flexible: bool = False
    window_start: int = 0
    window_end: int = 0
    total_minutes: Optional[int] = Field(None, description="None means flexible (uncapped)")
    buffer_minutes: int = 0
    net_minutes: Optional[int] = Field(None, description="None means flexible (uncapped)")


class DaySchedule(BaseModel):
    date: date
    kind: ScheduleKind
    state: DayState
    status: DayStatus
    capacity: CapacityInfo
    blocks: list[ScheduledBlock] = Field(default_factory=list)
    unscheduled_tasks: list[UnscheduledTask] = Field(default_factory=list)
    deferred_task_ids: list[str] = Field(default_factory=list)
    conflicts: list[ConflictWarning] = Field(default_factory=list)
    bounds_warnings: list[BoundsWarning] = Field(default_factory=list)
    fixed_minutes: int = 0
    flexible_minutes: int = 0
    utilization_percent: int = 0
    free_slots: list[tuple[int, int]] = Field(default_factory=list, description="Gaps left after placement")

    @property
    def scheduled_minutes(self) -> int:
        return self.fixed_minutes + self.flexible_minutes

    @property
    def placed_task_ids(self) -> list[str]:
        return [block.task_id for block in self.blocks]


class Recommendation(BaseModel):
    """Advisory cross-day suggestion; never applied automatically."""

    type: RecommendationType
    message: str
    from_dates: list[date] = Field(default_factory=list)
    to_dates: list[date] = Field(default_factory=list)
    task_ids: list[str] = Field(default_factory=list)


class WeekSummary(BaseModel):
    total_scheduled_minutes: int = 0
    total_available_minutes: int = 0
    total_fixed_minutes: int = 0
    utilization_percent: int = 0
    working_days: int = 0
    tight_days: int = 0
    overloaded_days: int = 0
    unscheduled_count: int = 0


class WeekPlan(BaseModel):
    week_start: date
    status: DayStatus
    days: list[DaySchedule]
    summary: WeekSummary
    recommendations: list[Recommendation] = Field(default_factory=list)
    unscheduled_task_ids: list[str] = Field(default_factory=list)
