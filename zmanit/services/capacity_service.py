"""
Capacity service.

Computes how many minutes a day offers for planning: the window length, the
share withheld for interruptions, and what is left (net).
"""

from datetime import date, timedelta
from typing import Optional

from zmanit.core.logger import setup_logger
from zmanit.models.enums import ScheduleKind
from zmanit.models.schedule import CapacityInfo
from zmanit.models.schedule_settings import ScheduleContext
from zmanit.utils.datetime_utils import week_dates
from zmanit.utils.time_utils import clamp

logger = setup_logger(__name__)


def net_from_total(total_minutes: int, buffer_percent: int) -> int:
    """
    Plannable minutes after the interruption reserve.

    Rounded down, so the reserve itself rounds up (465 min at 25% -> 348).
    """
    return total_minutes * (100 - buffer_percent) // 100


class CapacityService:
    """
    Service for per-day capacity.

    Provides:
    - Total / buffer / net minutes per day and schedule kind
    - Working-day lookups honoring day overrides
    - Remaining capacity for "today" given the current minute
    """

    def __init__(self, max_lookahead_days: int = 14):
        self.max_lookahead_days = max_lookahead_days

    def capacity_for(self, context: ScheduleContext, day: date, kind: ScheduleKind) -> CapacityInfo:
        window = context.window_for(day, kind)
        if not window.enabled or not window.is_valid:
            return CapacityInfo(
                kind=kind,
                enabled=False,
                window_start=window.start,
                window_end=window.end,
                total_minutes=0,
                buffer_minutes=0,
                net_minutes=0,
            )
        if window.flexible:
            return CapacityInfo(
                kind=kind,
                enabled=True,
                flexible=True,
                window_start=window.start,
                window_end=window.end,
                total_minutes=None,
                buffer_minutes=0,
                net_minutes=None,
            )
        total = window.length
        net = net_from_total(total, context.config.buffer_percent)
        return CapacityInfo(
            kind=kind,
            enabled=True,
            window_start=window.start,
            window_end=window.end,
            total_minutes=total,
            buffer_minutes=total - net,
            net_minutes=net,
        )

    def total_minutes(self, context: ScheduleContext, day: date, kind: ScheduleKind) -> Optional[int]:
        """Window length; 0 for a disabled day, None for a flexible one."""
        return self.capacity_for(context, day, kind).total_minutes

    def net_minutes(self, context: ScheduleContext, day: date, kind: ScheduleKind) -> Optional[int]:
        """Plannable minutes; None means flexible (do not cap)."""
        return self.capacity_for(context, day, kind).net_minutes

    def plannable_minutes(self, context: ScheduleContext, day: date, kind: ScheduleKind) -> int:
        """
        Net minutes as a number.

        Flexible days count their whole window, since summing needs a figure.
        """
        info = self.capacity_for(context, day, kind)
        if not info.enabled:
            return 0
        if info.net_minutes is None:
            return max(0, info.window_end - info.window_start)
        return info.net_minutes

    def is_working_day(self, context: ScheduleContext, day: date, kind: ScheduleKind = ScheduleKind.WORK) -> bool:
        return self.capacity_for(context, day, kind).enabled

    def next_working_day(
        self,
        context: ScheduleContext,
        day: date,
        kind: ScheduleKind = ScheduleKind.WORK,
    ) -> date:
        """
        First enabled day strictly after ``day``.

        Falls back to the next calendar day when nothing is enabled within
        the lookahead.
        """
        for offset in range(1, self.max_lookahead_days + 1):
            candidate = day + timedelta(days=offset)
            if self.is_working_day(context, candidate, kind):
                return candidate
        logger.warning(f"No {kind.value} day enabled within {self.max_lookahead_days} days of {day}")
        return day + timedelta(days=1)

    def remaining_today(
        self,
        context: ScheduleContext,
        day: date,
        kind: ScheduleKind,
        now_minute: int,
    ) -> tuple[int, int, int]:
        """
        Capacity left in the day at ``now_minute``.

        Returns:
            (net_minutes, elapsed_minutes, remaining_minutes); remaining is
            net minus the part of the window already elapsed, never negative.
        """
        info = self.capacity_for(context, day, kind)
        if not info.enabled:
            return 0, 0, 0
        net = self.plannable_minutes(context, day, kind)
        elapsed = clamp(now_minute, info.window_start, info.window_end) - info.window_start
        return net, elapsed, max(0, net - elapsed)

    def week_capacity(
        self,
        context: ScheduleContext,
        week_start: date,
        kind: ScheduleKind = ScheduleKind.WORK,
    ) -> list[CapacityInfo]:
        return [self.capacity_for(context, day, kind) for day in week_dates(week_start)]
