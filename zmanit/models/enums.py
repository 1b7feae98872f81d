"""
Enum definitions for the application.

These enums are used across models and provide type-safe status/priority values.
"""

from enum import Enum


class TaskPriority(str, Enum):
    """Task priority as entered by the user."""

    URGENT = "urgent"
    HIGH = "high"
    NORMAL = "normal"


PRIORITY_RANK = {
    TaskPriority.URGENT: 0,
    TaskPriority.HIGH: 1,
    TaskPriority.NORMAL: 2,
}


class ScheduleKind(str, Enum):
    """Which weekly hours table a day or task belongs to."""

    WORK = "work"
    HOME = "home"


class DayState(str, Enum):
    """
    Terminal state reached by one DayScheduler pass.

    PAST = date is before today, nothing is planned
    DISABLED = non-working day (or a malformed window)
    NO_TASKS = no candidate tasks for the date
    SCHEDULED = tasks were placed; see DayStatus
    """

    PAST = "past"
    DISABLED = "disabled"
    NO_TASKS = "no_tasks"
    SCHEDULED = "scheduled"


class DayStatus(str, Enum):
    """Load status of a day or a week."""

    OK = "ok"
    TIGHT = "tight"
    OVERLOADED = "overloaded"
    EMPTY = "empty"


class BlockSource(str, Enum):
    """Why a block landed on its day."""

    FIXED = "fixed"
    DEADLINE_DRIVEN = "deadline-driven"
    PROACTIVE_FILL = "proactive-fill"
    ROLLED_OVER = "rolled-over"


class UnscheduledReason(str, Enum):
    """Why a task could not be placed."""

    OVER_CAPACITY = "over_capacity"
    NO_SLOT = "no_slot"
    DAY_DISABLED = "day_disabled"
    INVALID_DURATION = "invalid_duration"
    INVALID_FIXED_TIME = "invalid_fixed_time"


class RecommendationType(str, Enum):
    REBALANCE = "rebalance"
    UNSCHEDULED = "unscheduled"


class DeadlineSeverity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class MoveDirection(str, Enum):
    TO_NEXT_DAY = "to_next_day"
    TO_TODAY = "to_today"


class OverflowOption(str, Enum):
    """Choices offered for a task that would run past the end of the day."""

    MOVE_TO_TOMORROW = "move_to_tomorrow"
    KEEP_AS_OVERTIME = "keep_as_overtime"
    CANCEL = "cancel"
