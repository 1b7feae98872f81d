"""
Week scheduler.

Runs the day scheduler over seven consecutive dates, carrying unplaced
required work forward and summarizing the week's load.
"""

from datetime import date
from typing import Optional, Sequence

from zmanit.core.config import get_settings
from zmanit.core.logger import setup_logger
from zmanit.models.enums import DayState, DayStatus, RecommendationType, ScheduleKind, UnscheduledReason
from zmanit.models.schedule import DaySchedule, Recommendation, WeekPlan, WeekSummary
from zmanit.models.schedule_settings import ScheduleContext
from zmanit.models.task import Task
from zmanit.services.day_scheduler import DayScheduler
from zmanit.utils.datetime_utils import week_dates

logger = setup_logger(__name__)

# Reasons that carry a required task on to the next day.
_CARRY_REASONS = {
    UnscheduledReason.OVER_CAPACITY,
    UnscheduledReason.NO_SLOT,
    UnscheduledReason.DAY_DISABLED,
}


class WeekScheduler:
    """
    Service for weekly planning.

    Provides:
    - Seven day schedules with work placed at most once per week
    - Week summary (scheduled vs available minutes, tight/overloaded days)
    - Advisory recommendations; nothing is moved automatically
    """

    def __init__(
        self,
        day_scheduler: Optional[DayScheduler] = None,
        light_percent: Optional[int] = None,
        week_tight_days: Optional[int] = None,
    ):
        settings = get_settings()
        self.day_scheduler = day_scheduler or DayScheduler()
        self.light_percent = light_percent or settings.LIGHT_DAY_PERCENT
        self.week_tight_days = week_tight_days or settings.WEEK_TIGHT_DAYS

    def schedule_week(
        self,
        tasks: Sequence[Task],
        week_start: date,
        context: ScheduleContext,
        kind: ScheduleKind = ScheduleKind.WORK,
    ) -> WeekPlan:
        fixed_ids = {task.id for task in tasks if task.is_fixed}
        placed_ids: set[str] = set()
        carried_ids: list[str] = []
        days: list[DaySchedule] = []

        for day in week_dates(week_start):
            schedule = self.day_scheduler.schedule_day(
                tasks,
                day,
                context,
                kind,
                carried_ids=carried_ids,
                excluded_ids=placed_ids,
            )
            days.append(schedule)
            placed_ids.update(schedule.placed_task_ids)
            if schedule.state == DayState.PAST:
                continue
            carried_ids = [
                item.task_id
                for item in schedule.unscheduled_tasks
                if item.reason in _CARRY_REASONS and item.task_id not in fixed_ids
            ]

        unscheduled_ids = self._never_placed(days, placed_ids)
        summary = self._summarize(days, unscheduled_ids)
        status = self._week_status(days, summary)
        recommendations = self._recommendations(days, unscheduled_ids)

        logger.info(
            f"Week of {week_start} ({kind.value}): {summary.total_scheduled_minutes}/"
            f"{summary.total_available_minutes} min, {summary.overloaded_days} overloaded, "
            f"{summary.tight_days} tight, status {status.value}"
        )
        return WeekPlan(
            week_start=week_start,
            status=status,
            days=days,
            summary=summary,
            recommendations=recommendations,
            unscheduled_task_ids=unscheduled_ids,
        )

    @staticmethod
    def _never_placed(days: list[DaySchedule], placed_ids: set[str]) -> list[str]:
        """
        Every task reported unscheduled this week and not placed on a later day.

        Covers carried work still open at the end of the week, pinned tasks on
        disabled days and tasks whose duration or pinned start is unusable.
        """
        task_ids: list[str] = []
        for schedule in days:
            if schedule.state == DayState.PAST:
                continue
            for item in schedule.unscheduled_tasks:
                if item.task_id not in placed_ids and item.task_id not in task_ids:
                    task_ids.append(item.task_id)
        return task_ids

    def _summarize(self, days: list[DaySchedule], unscheduled_ids: list[str]) -> WeekSummary:
        summary = WeekSummary(unscheduled_count=len(unscheduled_ids))
        for schedule in days:
            if schedule.state == DayState.PAST or not schedule.capacity.enabled:
                continue
            summary.working_days += 1
            summary.total_available_minutes += _plannable(schedule)
            summary.total_scheduled_minutes += schedule.scheduled_minutes
            summary.total_fixed_minutes += schedule.fixed_minutes
            if schedule.status == DayStatus.TIGHT:
                summary.tight_days += 1
            elif schedule.status == DayStatus.OVERLOADED:
                summary.overloaded_days += 1
        if summary.total_available_minutes > 0:
            summary.utilization_percent = (
                summary.total_scheduled_minutes * 100 // summary.total_available_minutes
            )
        return summary

    def _week_status(self, days: list[DaySchedule], summary: WeekSummary) -> DayStatus:
        if summary.overloaded_days > 0:
            return DayStatus.OVERLOADED
        if summary.tight_days >= self.week_tight_days:
            return DayStatus.TIGHT
        if not any(schedule.state == DayState.SCHEDULED for schedule in days):
            return DayStatus.EMPTY
        return DayStatus.OK

    def _recommendations(self, days: list[DaySchedule], unscheduled_ids: list[str]) -> list[Recommendation]:
        recommendations: list[Recommendation] = []

        overloaded = [schedule for schedule in days if schedule.status == DayStatus.OVERLOADED]
        light = [
            schedule
            for schedule in days
            if schedule.state in (DayState.SCHEDULED, DayState.NO_TASKS)
            and schedule.capacity.enabled
            and schedule.status != DayStatus.OVERLOADED
            and schedule.utilization_percent < self.light_percent
        ]
        if overloaded and light:
            task_ids: list[str] = []
            for schedule in overloaded:
                task_ids.extend(
                    item.task_id
                    for item in schedule.unscheduled_tasks
                    if item.reason in _CARRY_REASONS and item.task_id not in task_ids
                )
            recommendations.append(
                Recommendation(
                    type=RecommendationType.REBALANCE,
                    message=(
                        f"{len(overloaded)} overloaded and {len(light)} light days this week; "
                        f"consider moving work from {overloaded[0].date} to {light[0].date}"
                    ),
                    from_dates=[schedule.date for schedule in overloaded],
                    to_dates=[schedule.date for schedule in light],
                    task_ids=task_ids,
                )
            )

        if unscheduled_ids:
            recommendations.append(
                Recommendation(
                    type=RecommendationType.UNSCHEDULED,
                    message=f"{len(unscheduled_ids)} tasks do not fit anywhere this week",
                    task_ids=list(unscheduled_ids),
                )
            )
        return recommendations


def _plannable(schedule: DaySchedule) -> int:
    capacity = schedule.capacity
    if capacity.net_minutes is not None:
        return capacity.net_minutes
    return max(0, capacity.window_end - capacity.window_start)
