"""
Ordering policy for flexible tasks.

Produces a total, deterministic order: the sort key ends in the task id, so
no two distinct tasks ever compare equal.
"""

from datetime import date
from typing import Iterable, Sequence

from zmanit.models.energy import EnergyProfile
from zmanit.models.enums import PRIORITY_RANK
from zmanit.models.task import LeafTask

_FAR = date.max


class OrderingPolicy:
    """
    Sort key, most significant first:

    1. Overdue before not overdue
    2. Priority (urgent > high > normal)
    3. Nearer due date first, undated last
    4. Focus-heavy categories first
    5. Position in the day's manual order, unlisted tasks after listed ones
    6. Category rank (lower first)
    7. Position within the parent project
    8. Creation time, then id
    """

    def __init__(self, profile: EnergyProfile):
        self.profile = profile

    def sort_key(
        self,
        task: LeafTask,
        day: date,
        manual_order: Sequence[str] = (),
        running_first: bool = False,
    ) -> tuple:
        preference = self.profile.preference_for(task.category)
        overdue = task.due_date is not None and task.due_date < day
        manual_index = manual_order.index(task.id) if task.id in manual_order else len(manual_order)
        created = task.created_at.timestamp() if task.created_at else float("inf")
        return (
            0 if (running_first and task.timer_running) else 1,
            0 if overdue else 1,
            PRIORITY_RANK[task.priority],
            task.due_date or _FAR,
            0 if preference.requires_focus else 1,
            manual_index,
            preference.rank,
            task.order_in_parent if task.order_in_parent is not None else float("inf"),
            created,
            task.id,
        )

    def order(
        self,
        tasks: Iterable[LeafTask],
        day: date,
        manual_order: Sequence[str] = (),
        running_first: bool = False,
    ) -> list[LeafTask]:
        return sorted(
            tasks,
            key=lambda task: self.sort_key(task, day, manual_order, running_first),
        )

    @staticmethod
    def split_fixed(tasks: Iterable[LeafTask]) -> tuple[list[LeafTask], list[LeafTask]]:
        """
        Pull pinned tasks out before sorting.

        Returns:
            (fixed, flexible); fixed keeps input order, which breaks conflict ties
        """
        fixed: list[LeafTask] = []
        flexible: list[LeafTask] = []
        for task in tasks:
            (fixed if task.is_fixed else flexible).append(task)
        return fixed, flexible
