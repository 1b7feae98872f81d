"""
Day scheduler.

Places one day's tasks: pinned tasks first, then flexible work in priority
order, greedily and without backtracking. An earlier placement is never
revisited to make room for a later task.
"""

from datetime import date
from typing import Collection, Optional, Sequence

from zmanit.core.config import get_settings
from zmanit.core.logger import setup_logger
from zmanit.models.enums import BlockSource, DayState, DayStatus, ScheduleKind, UnscheduledReason
from zmanit.models.schedule import (
    CapacityInfo,
    DaySchedule,
    OccupiedInterval,
    ScheduledBlock,
    UnscheduledTask,
)
from zmanit.models.schedule_settings import ScheduleContext
from zmanit.models.task import LeafTask, Task
from zmanit.services.capacity_service import CapacityService
from zmanit.services.conflict_service import ConflictDetector
from zmanit.services.energy_service import check_time_optimality
from zmanit.services.ordering_service import OrderingPolicy
from zmanit.services.slot_finder import SlotFinder
from zmanit.services.task_utils import (
    get_remaining_minutes,
    has_invalid_duration,
    leaf_tasks,
    schedule_kind_for,
)
from zmanit.utils.time_utils import format_duration

logger = setup_logger(__name__)


class DayScheduler:
    """
    Service for placing one day's tasks.

    Candidate selection for a date:
    - pinned tasks on their pinned date (due date, else start date, else today);
      an unreadable pinned start is reported there, never placed
    - flexible tasks due that day (deadline-driven)
    - overdue tasks on today, and tasks carried in by the caller (rolled-over)
    - undated tasks on today (required)
    - startable tasks due later, or undated on later days (proactive-fill, optional)
    """

    def __init__(
        self,
        capacity_service: Optional[CapacityService] = None,
        conflict_detector: Optional[ConflictDetector] = None,
        default_task_minutes: Optional[int] = None,
        min_slot_minutes: Optional[int] = None,
        tight_percent: Optional[int] = None,
    ):
        settings = get_settings()
        self.default_task_minutes = default_task_minutes or settings.DEFAULT_TASK_MINUTES
        self.min_slot_minutes = min_slot_minutes or settings.MIN_SLOT_MINUTES
        self.tight_percent = tight_percent or settings.TIGHT_UTILIZATION_PERCENT
        self.capacity_service = capacity_service or CapacityService()
        self.conflict_detector = conflict_detector or ConflictDetector(self.default_task_minutes)

    def pinned_date(self, task: Task, context: ScheduleContext) -> date:
        return task.due_date or task.start_date or context.today

    def _source_for(
        self,
        task: LeafTask,
        day: date,
        context: ScheduleContext,
        carried_ids: Collection[str],
    ) -> Optional[tuple[BlockSource, bool]]:
        """
        Why a flexible task belongs on ``day`` and whether it must be placed.

        Undated work is required on today and optional on later days. Returns
        None when the task does not belong on ``day``.
        """
        if task.start_date and task.start_date > day:
            return None
        if task.id in carried_ids:
            return BlockSource.ROLLED_OVER, True
        if task.due_date == day:
            return BlockSource.DEADLINE_DRIVEN, True
        if task.due_date and task.due_date < day:
            return (BlockSource.ROLLED_OVER, True) if day == context.today else None
        return BlockSource.PROACTIVE_FILL, task.due_date is None and day == context.today

    def schedule_day(
        self,
        tasks: Sequence[Task],
        day: date,
        context: ScheduleContext,
        kind: ScheduleKind = ScheduleKind.WORK,
        carried_ids: Collection[str] = (),
        excluded_ids: Collection[str] = (),
    ) -> DaySchedule:
        """
        Build the schedule for one date and schedule kind.

        Args:
            tasks: Task snapshot; containers and completed tasks are ignored
            day: Date to plan
            context: Hours, overrides, manual order and energy profile
            kind: Work or home hours
            carried_ids: Tasks rolled in from an earlier day (required here)
            excluded_ids: Tasks already placed elsewhere in the same pass

        Returns:
            DaySchedule; capacity shortfalls are reported, never raised
        """
        capacity = self.capacity_service.capacity_for(context, day, kind)

        if day < context.today:
            return DaySchedule(date=day, kind=kind, state=DayState.PAST, status=DayStatus.EMPTY, capacity=capacity)

        pinned: list[LeafTask] = []
        required: list[tuple[LeafTask, BlockSource]] = []
        optional: list[LeafTask] = []
        invalid: list[tuple[LeafTask, UnscheduledReason]] = []

        candidates = [
            task
            for task in leaf_tasks(tasks)
            if not task.is_completed
            and task.id not in excluded_ids
            and schedule_kind_for(task, context.energy_profile) == kind
        ]
        fixed, flexible = OrderingPolicy.split_fixed(candidates)

        for task in fixed:
            if self.pinned_date(task, context) != day:
                continue
            if task.invalid_fixed_time:
                invalid.append((task, UnscheduledReason.INVALID_FIXED_TIME))
            elif has_invalid_duration(task):
                invalid.append((task, UnscheduledReason.INVALID_DURATION))
            else:
                pinned.append(task)

        for task in flexible:
            selected = self._source_for(task, day, context, carried_ids)
            if selected is None:
                continue
            source, is_required = selected
            if has_invalid_duration(task):
                if is_required:
                    invalid.append((task, UnscheduledReason.INVALID_DURATION))
                continue
            if get_remaining_minutes(task, self.default_task_minutes) <= 0:
                continue
            if is_required:
                required.append((task, source))
            else:
                optional.append(task)

        unscheduled = [
            UnscheduledTask(task_id=task.id, title=task.title, reason=reason)
            for task, reason in sorted(invalid, key=lambda item: item[0].id)
        ]

        if not capacity.enabled:
            for task in pinned + [task for task, _ in required]:
                unscheduled.append(
                    UnscheduledTask(
                        task_id=task.id,
                        title=task.title,
                        reason=UnscheduledReason.DAY_DISABLED,
                        required_minutes=get_remaining_minutes(task, self.default_task_minutes),
                    )
                )
            logger.debug(f"{day} ({kind.value}) disabled; {len(unscheduled)} tasks unscheduled")
            return DaySchedule(
                date=day,
                kind=kind,
                state=DayState.DISABLED,
                status=DayStatus.EMPTY,
                capacity=capacity,
                unscheduled_tasks=unscheduled,
            )

        if not (pinned or required or optional or invalid):
            return DaySchedule(date=day, kind=kind, state=DayState.NO_TASKS, status=DayStatus.EMPTY, capacity=capacity)

        return self._place(day, kind, context, capacity, pinned, required, optional, unscheduled)

    def _place(
        self,
        day: date,
        kind: ScheduleKind,
        context: ScheduleContext,
        capacity: CapacityInfo,
        pinned: list[LeafTask],
        required: list[tuple[LeafTask, BlockSource]],
        optional: list[LeafTask],
        unscheduled: list[UnscheduledTask],
    ) -> DaySchedule:
        profile = context.energy_profile
        finder = SlotFinder(context.breathing_minutes, self.min_slot_minutes)
        policy = OrderingPolicy(profile)
        manual_order = context.manual_order_for(day)

        blocks: list[ScheduledBlock] = []
        occupied: list[OccupiedInterval] = []
        fixed_minutes = 0

        for task in pinned:
            interval = self.conflict_detector.interval_for(task)
            occupied.append(interval)
            fixed_minutes += interval.end - interval.start
            optimality = check_time_optimality(profile, task.category, interval.start)
            blocks.append(
                ScheduledBlock(
                    task_id=task.id,
                    title=task.title,
                    start=interval.start,
                    end=interval.end,
                    is_fixed=True,
                    source=BlockSource.FIXED,
                    is_optimal=optimality.is_optimal or not profile.windows,
                    energy_window=optimality.window_id,
                )
            )

        conflicts = self.conflict_detector.detect(pinned)
        bounds = self.conflict_detector.bounds_warnings(pinned, capacity.window_start, capacity.window_end)

        sources = {task.id: source for task, source in required}
        candidates = [task for task, _ in required]
        deferred: list[str] = []
        # Flexible days are never proactively filled.
        if capacity.flexible:
            deferred = [task.id for task in policy.order(optional, day, manual_order)]
        else:
            candidates.extend(optional)

        placed_minutes = 0
        overloaded = False

        # One pass in policy order; the source only decides what a miss means.
        for task in policy.order(candidates, day, manual_order):
            is_required = task.id in sources
            duration = get_remaining_minutes(task, self.default_task_minutes)
            reason: Optional[UnscheduledReason] = None
            placement = None

            if capacity.net_minutes is not None and placed_minutes + duration > capacity.net_minutes:
                reason = UnscheduledReason.OVER_CAPACITY
            else:
                placement = finder.place(
                    duration,
                    capacity.window_start,
                    capacity.window_end,
                    occupied,
                    profile.preferred_windows_for(task.category),
                )
                if placement is None:
                    reason = UnscheduledReason.NO_SLOT

            if placement is None:
                logger.debug(f"{day}: {task.id} not placed ({reason.value}, {duration}m)")
                if is_required:
                    overloaded = True
                    unscheduled.append(
                        UnscheduledTask(task_id=task.id, title=task.title, reason=reason, required_minutes=duration)
                    )
                else:
                    deferred.append(task.id)
                continue

            occupied.append(
                OccupiedInterval(start=placement.start, end=placement.end, source_task_id=task.id)
            )
            placed_minutes += duration
            landed = profile.window_at(placement.start)
            blocks.append(
                ScheduledBlock(
                    task_id=task.id,
                    title=task.title,
                    start=placement.start,
                    end=placement.end,
                    source=sources.get(task.id, BlockSource.PROACTIVE_FILL),
                    is_optimal=placement.is_optimal,
                    energy_window=placement.energy_window or (landed.id if landed else None),
                )
            )
            logger.debug(f"{day}: {task.id} at {blocks[-1].start_time}-{blocks[-1].end_time}")

        blocks.sort(key=lambda block: (block.start, block.end, block.task_id))
        utilization = self._utilization(capacity, fixed_minutes + placed_minutes)

        if overloaded:
            status = DayStatus.OVERLOADED
        elif utilization >= self.tight_percent:
            status = DayStatus.TIGHT
        else:
            status = DayStatus.OK

        logger.info(
            f"Scheduled {day} ({kind.value}): {len(blocks)} blocks, "
            f"{format_duration(fixed_minutes + placed_minutes)} planned, "
            f"{len(unscheduled)} unscheduled, {utilization}% used, {status.value}"
        )
        return DaySchedule(
            date=day,
            kind=kind,
            state=DayState.SCHEDULED,
            status=status,
            capacity=capacity,
            blocks=blocks,
            unscheduled_tasks=unscheduled,
            deferred_task_ids=deferred,
            conflicts=conflicts,
            bounds_warnings=bounds,
            fixed_minutes=fixed_minutes,
            flexible_minutes=placed_minutes,
            utilization_percent=utilization,
            free_slots=finder.free_gaps(capacity.window_start, capacity.window_end, occupied),
        )

    @staticmethod
    def _utilization(capacity: CapacityInfo, scheduled_minutes: int) -> int:
        plannable = capacity.net_minutes
        if plannable is None:
            plannable = capacity.window_end - capacity.window_start
        if plannable <= 0:
            return 100 if scheduled_minutes > 0 else 0
        return scheduled_minutes * 100 // plannable
