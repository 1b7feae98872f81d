"""
Conflict detection for pinned tasks.

Detection only reports; the suggested fix is applied by ``resolve_conflict``
when the user asks for it.
"""

from typing import Optional, Sequence

from zmanit.core.exceptions import ValidationError
from zmanit.core.logger import setup_logger
from zmanit.models.schedule import BoundsWarning, ConflictWarning, OccupiedInterval, SuggestedShift
from zmanit.models.task import LeafTask, Task
from zmanit.services.task_utils import get_duration_minutes, has_invalid_duration
from zmanit.utils.time_utils import MINUTES_PER_DAY, intervals_overlap, overlap_minutes

logger = setup_logger(__name__)


class ConflictDetector:
    """
    Pairwise overlap check over the fixed tasks of one day.

    A fixed task occupies ``[fixed_time, fixed_time + estimate)``.
    """

    def __init__(self, default_task_minutes: int = 30):
        self.default_task_minutes = default_task_minutes

    def interval_for(self, task: Task) -> Optional[OccupiedInterval]:
        if task.fixed_time is None or has_invalid_duration(task):
            return None
        duration = get_duration_minutes(task, self.default_task_minutes)
        return OccupiedInterval(
            start=task.fixed_time,
            end=task.fixed_time + duration,
            source_task_id=task.id,
            is_fixed=True,
        )

    def fixed_intervals(self, tasks: Sequence[LeafTask]) -> list[OccupiedInterval]:
        intervals = [self.interval_for(task) for task in tasks]
        return [interval for interval in intervals if interval is not None]

    def detect(self, tasks: Sequence[LeafTask]) -> list[ConflictWarning]:
        """
        Test every pair of fixed tasks for overlap.

        The later-starting task (later in input order on a tie) is the one the
        fix shifts, unless it is an external calendar block; then the earlier
        task is shifted past it instead. Two overlapping external blocks get
        no suggested fix.
        """
        pinned = [(task, self.interval_for(task)) for task in tasks]
        pinned = [(task, interval) for task, interval in pinned if interval is not None]

        warnings: list[ConflictWarning] = []
        for i in range(len(pinned)):
            for j in range(i + 1, len(pinned)):
                task_a, interval_a = pinned[i]
                task_b, interval_b = pinned[j]
                if not intervals_overlap(interval_a.start, interval_a.end, interval_b.start, interval_b.end):
                    continue
                overlap = overlap_minutes(interval_a.start, interval_a.end, interval_b.start, interval_b.end)

                if interval_b.start >= interval_a.start:
                    earlier, earlier_interval, later, later_interval = task_a, interval_a, task_b, interval_b
                else:
                    earlier, earlier_interval, later, later_interval = task_b, interval_b, task_a, interval_a

                shift: Optional[SuggestedShift] = None
                if not later.is_external:
                    shift = SuggestedShift(task_id=later.id, new_start=earlier_interval.end)
                elif not earlier.is_external:
                    shift = SuggestedShift(task_id=earlier.id, new_start=later_interval.end)

                warnings.append(
                    ConflictWarning(
                        first_task_id=earlier.id,
                        second_task_id=later.id,
                        overlap_minutes=overlap,
                        suggested_shift=shift,
                    )
                )

        if warnings:
            logger.info(f"Detected {len(warnings)} fixed-time conflicts")
        return warnings

    def bounds_warnings(
        self,
        tasks: Sequence[LeafTask],
        window_start: int,
        window_end: int,
    ) -> list[BoundsWarning]:
        """Fixed tasks that start before or end after the day's window."""
        warnings: list[BoundsWarning] = []
        for task in tasks:
            interval = self.interval_for(task)
            if interval is None:
                continue
            before = max(0, window_start - interval.start)
            after = max(0, interval.end - window_end)
            if before or after:
                warnings.append(
                    BoundsWarning(task_id=task.id, minutes_before_start=before, minutes_after_end=after)
                )
        return warnings


def resolve_conflict(tasks: Sequence[Task], warning: ConflictWarning) -> list[Task]:
    """
    Apply a warning's suggested shift and return the new task values.

    Raises:
        ValidationError: If the warning has no fix, names an unknown task, or
            the shift would start past midnight
    """
    shift = warning.suggested_shift
    if shift is None:
        raise ValidationError(
            "Conflict between two external events cannot be resolved automatically",
            details={"first_task_id": warning.first_task_id, "second_task_id": warning.second_task_id},
        )
    if shift.new_start >= MINUTES_PER_DAY:
        raise ValidationError("Suggested shift starts past midnight", details={"task_id": shift.task_id})
    if not any(task.id == shift.task_id for task in tasks):
        raise ValidationError(f"Task not found: {shift.task_id}", details={"task_id": shift.task_id})

    logger.info(f"Shifting task {shift.task_id} to {shift.new_start_time}")
    return [
        task.model_copy(update={"fixed_time": shift.new_start}) if task.id == shift.task_id else task
        for task in tasks
    ]
