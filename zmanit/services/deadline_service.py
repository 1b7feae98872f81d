"""
Deadline feasibility.

Informational check of whether a task's remaining work fits in the net
capacity left before its due date. It never changes the plan.
"""

from datetime import date, timedelta
from typing import Optional, Sequence

from zmanit.core.config import get_settings
from zmanit.core.logger import setup_logger
from zmanit.models.enums import DeadlineSeverity, ScheduleKind
from zmanit.models.rebalance import FeasibilityResult
from zmanit.models.schedule_settings import ScheduleContext
from zmanit.models.task import Task
from zmanit.services.capacity_service import CapacityService
from zmanit.services.task_utils import get_remaining_minutes, leaf_tasks, schedule_kind_for

logger = setup_logger(__name__)


class DeadlineService:
    """
    Service for deadline feasibility checks.

    available = sum of net minutes over enabled days from today through the
    due date inclusive; infeasible when that is less than the remaining work.
    """

    def __init__(
        self,
        capacity_service: Optional[CapacityService] = None,
        default_task_minutes: Optional[int] = None,
        critical_days: Optional[int] = None,
        warning_days: Optional[int] = None,
        tight_ratio: Optional[float] = None,
    ):
        settings = get_settings()
        self.capacity_service = capacity_service or CapacityService()
        self.default_task_minutes = default_task_minutes or settings.DEFAULT_TASK_MINUTES
        self.critical_days = critical_days if critical_days is not None else settings.DEADLINE_CRITICAL_DAYS
        self.warning_days = warning_days if warning_days is not None else settings.DEADLINE_WARNING_DAYS
        self.tight_ratio = tight_ratio or settings.DEADLINE_TIGHT_RATIO

    def available_minutes(
        self,
        context: ScheduleContext,
        deadline: date,
        kind: ScheduleKind,
    ) -> tuple[int, int]:
        """
        Net minutes and enabled-day count from today through ``deadline``.

        Returns (0, 0) when the deadline has already passed.
        """
        total = 0
        working_days = 0
        day = context.today
        while day <= deadline:
            if self.capacity_service.is_working_day(context, day, kind):
                working_days += 1
                total += self.capacity_service.plannable_minutes(context, day, kind)
            day += timedelta(days=1)
        return total, working_days

    def severity_for(self, context: ScheduleContext, deadline: date) -> DeadlineSeverity:
        days_left = (deadline - context.today).days
        if days_left <= self.critical_days:
            return DeadlineSeverity.CRITICAL
        if days_left <= self.warning_days:
            return DeadlineSeverity.WARNING
        return DeadlineSeverity.INFO

    def check(self, task: Task, context: ScheduleContext) -> FeasibilityResult:
        """
        Check one task against its due date.

        Severity is set only for infeasible or tight results.
        """
        required = get_remaining_minutes(task, self.default_task_minutes)
        if task.due_date is None:
            return FeasibilityResult(
                task_id=task.id,
                title=task.title,
                required_minutes=required,
                available_minutes=0,
                feasible=True,
            )

        kind = schedule_kind_for(task, context.energy_profile)
        available, working_days = self.available_minutes(context, task.due_date, kind)
        feasible = available >= required
        tight = feasible and required > 0 and available < required * self.tight_ratio
        severity = self.severity_for(context, task.due_date) if (not feasible or tight) else None

        if not feasible:
            logger.debug(f"Task {task.id} infeasible: needs {required}m, {available}m before {task.due_date}")
        return FeasibilityResult(
            task_id=task.id,
            title=task.title,
            deadline=task.due_date,
            required_minutes=required,
            available_minutes=available,
            feasible=feasible,
            tight=tight,
            shortfall_minutes=max(0, required - available),
            severity=severity,
            working_days=working_days,
        )

    def check_all(self, tasks: Sequence[Task], context: ScheduleContext) -> list[FeasibilityResult]:
        """
        Check every open, dated leaf task.

        Ordered infeasible first, then tight, then by deadline and id.
        """
        results = [
            self.check(task, context)
            for task in leaf_tasks(tasks)
            if not task.is_completed and task.due_date is not None
        ]
        results.sort(key=lambda result: (result.feasible, not result.tight, result.deadline, result.task_id))
        infeasible = sum(1 for result in results if not result.feasible)
        if infeasible:
            logger.info(f"{infeasible} of {len(results)} deadlines cannot be met")
        return results
