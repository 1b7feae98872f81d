"""
Daily overflow rebalancing.

Compares the work left for today against the capacity left at "now" and
proposes moves between today and the next working day. Nothing is applied
here; ``task_utils.apply_moves`` does that on request.
"""

from datetime import date
from typing import Optional, Sequence

from zmanit.core.config import get_settings
from zmanit.core.logger import setup_logger
from zmanit.models.enums import MoveDirection, ScheduleKind
from zmanit.models.rebalance import EndOfDayOverflow, RebalanceResult, TaskMove
from zmanit.models.schedule import OccupiedInterval
from zmanit.models.schedule_settings import ScheduleContext
from zmanit.models.task import LeafTask, Task
from zmanit.services.capacity_service import CapacityService
from zmanit.services.conflict_service import ConflictDetector
from zmanit.services.ordering_service import OrderingPolicy
from zmanit.services.slot_finder import SlotFinder
from zmanit.services.task_utils import get_remaining_minutes, leaf_tasks, schedule_kind_for
from zmanit.utils.time_utils import MINUTES_PER_DAY, format_duration

logger = setup_logger(__name__)


def _on_day(task: Task, day: date) -> bool:
    return task.due_date == day or task.start_date == day


class RebalanceService:
    """
    Service for same-day overflow handling.

    Provides:
    - Moves to the next working day when today's work exceeds what is left
    - Pulls from the next working day when at least a few minutes are free
    - End-of-day overflow report for kept tasks that run past the window
    """

    def __init__(
        self,
        capacity_service: Optional[CapacityService] = None,
        conflict_detector: Optional[ConflictDetector] = None,
        default_task_minutes: Optional[int] = None,
        pull_min_free_minutes: Optional[int] = None,
    ):
        settings = get_settings()
        self.default_task_minutes = default_task_minutes or settings.DEFAULT_TASK_MINUTES
        self.pull_min_free_minutes = (
            pull_min_free_minutes if pull_min_free_minutes is not None else settings.PULL_MIN_FREE_MINUTES
        )
        self.min_slot_minutes = settings.MIN_SLOT_MINUTES
        self.capacity_service = capacity_service or CapacityService()
        self.conflict_detector = conflict_detector or ConflictDetector(self.default_task_minutes)

    def kind_for_today(self, context: ScheduleContext) -> ScheduleKind:
        """Work hours when today has them, otherwise home hours."""
        if self.capacity_service.is_working_day(context, context.today, ScheduleKind.WORK):
            return ScheduleKind.WORK
        return ScheduleKind.HOME

    def is_protected(self, task: LeafTask) -> bool:
        return task.is_urgent or task.timer_running or task.is_fixed

    def rebalance(
        self,
        tasks: Sequence[Task],
        context: ScheduleContext,
        now_minute: int,
        kind: Optional[ScheduleKind] = None,
    ) -> RebalanceResult:
        """
        Propose moves for today at ``now_minute``.

        Args:
            tasks: Task snapshot; containers are never counted
            context: Hours, overrides and energy profile; ``context.today`` is today
            now_minute: Current minute of the day
            kind: Schedule kind; chosen from today's hours when omitted

        Returns:
            RebalanceResult; a deficit that protected tasks keep open is
            reported as ``residual_deficit_minutes``
        """
        today = context.today
        kind = kind or self.kind_for_today(context)
        next_day = self.capacity_service.next_working_day(context, today, kind)
        capacity = self.capacity_service.capacity_for(context, today, kind)
        net, elapsed, remaining = self.capacity_service.remaining_today(context, today, kind, now_minute)

        policy = OrderingPolicy(context.energy_profile)
        manual_order = context.manual_order_for(today)

        candidates = [
            task
            for task in leaf_tasks(tasks)
            if not task.is_completed and schedule_kind_for(task, context.energy_profile) == kind
        ]
        today_tasks = [task for task in candidates if _on_day(task, today)]
        today_ids = {task.id for task in today_tasks}
        tomorrow_tasks = [
            task for task in candidates if _on_day(task, next_day) and task.id not in today_ids
        ]

        required = sum(
            get_remaining_minutes(task, self.default_task_minutes)
            for task in today_tasks
            if not task.timer_running
        )
        deficit = max(0, required - remaining)

        result = RebalanceResult(
            today=today,
            next_working_day=next_day,
            kind=kind,
            now_minute=now_minute,
            net_minutes=net,
            elapsed_minutes=elapsed,
            remaining_capacity=remaining,
            required_minutes=required,
            deficit_minutes=deficit,
            protected_task_ids=[task.id for task in today_tasks if self.is_protected(task)],
        )

        moved_ids: set[str] = set()
        if deficit > 0:
            movable = [task for task in today_tasks if not self.is_protected(task)]
            covered = 0
            # Lowest priority first.
            for task in reversed(policy.order(movable, today, manual_order)):
                if covered >= deficit:
                    break
                minutes = get_remaining_minutes(task, self.default_task_minutes)
                if minutes <= 0:
                    continue
                result.moves_to_next_day.append(
                    TaskMove(
                        task_id=task.id,
                        title=task.title,
                        from_date=today,
                        to_date=next_day,
                        direction=MoveDirection.TO_NEXT_DAY,
                        minutes=minutes,
                    )
                )
                moved_ids.add(task.id)
                covered += minutes
            result.residual_deficit_minutes = max(0, deficit - covered)
            if result.residual_deficit_minutes:
                logger.warning(
                    f"Rebalance {today}: {result.residual_deficit_minutes}m deficit left by protected tasks"
                )

        kept = [task for task in today_tasks if task.id not in moved_ids]
        result.kept_task_ids = [task.id for task in kept]
        kept_required = sum(
            get_remaining_minutes(task, self.default_task_minutes) for task in kept if not task.timer_running
        )
        result.free_minutes = max(0, remaining - kept_required)

        finder = SlotFinder(context.breathing_minutes, self.min_slot_minutes)
        fixed_today = [task for task in kept if task.is_fixed]
        occupied: list[OccupiedInterval] = self.conflict_detector.fixed_intervals(fixed_today)
        result.conflicts = self.conflict_detector.detect(fixed_today)

        if capacity.enabled:
            lower = max(capacity.window_start, now_minute)
            flexible_kept = policy.order(
                [task for task in kept if not task.is_fixed], today, manual_order, running_first=True
            )
            result.end_of_day_overflow = self._lay_out(
                finder, flexible_kept, lower, capacity.window_end, occupied
            )

            if deficit == 0 and result.free_minutes >= self.pull_min_free_minutes:
                self._pull(result, finder, policy, tomorrow_tasks, lower, capacity.window_end, occupied)

        if result.changed:
            moved = (
                f"{len(result.moves)} moves "
                f"({len(result.moves_to_next_day)} out, {len(result.moves_to_today)} in)"
            )
        else:
            moved = "no moves"
        logger.info(
            f"Rebalance {today} ({kind.value}) at {now_minute}: required {format_duration(required)}, "
            f"remaining {format_duration(remaining)}, {moved}, "
            f"{len(result.end_of_day_overflow)} overflowing"
        )
        return result

    def _lay_out(
        self,
        finder: SlotFinder,
        tasks: list[LeafTask],
        lower: int,
        window_end: int,
        occupied: list[OccupiedInterval],
    ) -> list[EndOfDayOverflow]:
        """Place kept tasks from ``lower`` on; report the ones ending past the window."""
        overflow: list[EndOfDayOverflow] = []
        horizon = 2 * MINUTES_PER_DAY
        for task in tasks:
            minutes = get_remaining_minutes(task, self.default_task_minutes)
            if minutes <= 0:
                continue
            start = finder.find_slot(minutes, lower, horizon, occupied)
            if start is None:
                continue
            end = start + minutes
            occupied.append(OccupiedInterval(start=start, end=end, source_task_id=task.id))
            if end > window_end:
                overflow.append(
                    EndOfDayOverflow(
                        task_id=task.id,
                        title=task.title,
                        planned_start=start,
                        planned_end=end,
                        overflow_minutes=min(minutes, end - window_end),
                    )
                )
        return overflow

    def _pull(
        self,
        result: RebalanceResult,
        finder: SlotFinder,
        policy: OrderingPolicy,
        tomorrow_tasks: list[LeafTask],
        lower: int,
        window_end: int,
        occupied: list[OccupiedInterval],
    ) -> None:
        """
        Pull next-day flexible tasks that fit the free time.

        Each pulled task must also find a real slot around today's fixed
        intervals and kept work, so a pull never creates an overlap.
        """
        used = 0
        movable = [task for task in tomorrow_tasks if not task.is_fixed]
        for task in policy.order(movable, result.next_working_day):
            minutes = get_remaining_minutes(task, self.default_task_minutes)
            if minutes <= 0 or used + minutes > result.free_minutes:
                continue
            start = finder.find_slot(minutes, lower, window_end, occupied)
            if start is None:
                result.skipped_pull_task_ids.append(task.id)
                continue
            occupied.append(OccupiedInterval(start=start, end=start + minutes, source_task_id=task.id))
            used += minutes
            result.moves_to_today.append(
                TaskMove(
                    task_id=task.id,
                    title=task.title,
                    from_date=result.next_working_day,
                    to_date=result.today,
                    direction=MoveDirection.TO_TODAY,
                    minutes=minutes,
                )
            )
