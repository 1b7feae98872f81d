"""Pydantic models (schemas) for the scheduling engine."""

from zmanit.models.enums import (
    BlockSource,
    DayState,
    DayStatus,
    DeadlineSeverity,
    MoveDirection,
    OverflowOption,
    RecommendationType,
    ScheduleKind,
    TaskPriority,
    UnscheduledReason,
)
from zmanit.models.task import ContainerTask, LeafTask, Task, TaskRecord
from zmanit.models.energy import CategoryPreference, EnergyProfile, EnergyWindow, TimeOptimality
from zmanit.models.schedule_settings import (
    DayOverride,
    ScheduleConfig,
    ScheduleConfigInput,
    ScheduleContext,
    ScheduleWindow,
    WeeklyHours,
)
from zmanit.models.schedule import (
    CapacityInfo,
    ConflictWarning,
    DaySchedule,
    OccupiedInterval,
    Recommendation,
    ScheduledBlock,
    WeekPlan,
    WeekSummary,
)
from zmanit.models.rebalance import EndOfDayOverflow, FeasibilityResult, RebalanceResult, TaskMove

__all__ = [
    # Enums
    "TaskPriority",
    "ScheduleKind",
    "DayState",
    "DayStatus",
    "BlockSource",
    "UnscheduledReason",
    "RecommendationType",
    "DeadlineSeverity",
    "MoveDirection",
    "OverflowOption",
    # Task
    "Task",
    "LeafTask",
    "ContainerTask",
    "TaskRecord",
    # Energy
    "EnergyWindow",
    "CategoryPreference",
    "EnergyProfile",
    "TimeOptimality",
    # Settings
    "ScheduleWindow",
    "WeeklyHours",
    "ScheduleConfig",
    "ScheduleConfigInput",
    "DayOverride",
    "ScheduleContext",
    # Schedule
    "OccupiedInterval",
    "ScheduledBlock",
    "ConflictWarning",
    "CapacityInfo",
    "DaySchedule",
    "Recommendation",
    "WeekSummary",
    "WeekPlan",
    # Rebalance
    "TaskMove",
    "EndOfDayOverflow",
    "RebalanceResult",
    "FeasibilityResult",
]
