"""
Slot finder.

First-fit search for a free gap in a day, keeping a breathing interval
around every occupied stretch.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from zmanit.models.energy import EnergyWindow
from zmanit.models.schedule import OccupiedInterval


@dataclass(frozen=True)
class SlotPlacement:
    start: int
    end: int
    is_optimal: bool
    energy_window: Optional[str] = None


def sort_intervals(occupied: Iterable[OccupiedInterval]) -> list[OccupiedInterval]:
    return sorted(occupied, key=lambda interval: (interval.start, interval.end))


class SlotFinder:
    """
    Earliest-gap search over a day's occupied intervals.

    The cursor after an interval is ``end + breathing_minutes``; a gap must
    also stop ``breathing_minutes`` short of the next interval.
    """

    def __init__(self, breathing_minutes: int = 5, min_slot_minutes: int = 15):
        self.breathing_minutes = breathing_minutes
        self.min_slot_minutes = min_slot_minutes

    def _gaps(
        self,
        lower: int,
        upper: int,
        occupied: Sequence[OccupiedInterval],
    ) -> Iterable[tuple[int, int]]:
        cursor = lower
        for interval in sort_intervals(occupied):
            if interval.end + self.breathing_minutes <= cursor:
                continue
            if interval.start >= upper + self.breathing_minutes:
                break
            gap_end = min(interval.start - self.breathing_minutes, upper)
            if gap_end > cursor:
                yield cursor, gap_end
            cursor = max(cursor, interval.end + self.breathing_minutes)
            if cursor >= upper:
                return
        if upper > cursor:
            yield cursor, upper

    def find_slot(
        self,
        duration: int,
        lower: int,
        upper: int,
        occupied: Sequence[OccupiedInterval],
        window: Optional[EnergyWindow] = None,
    ) -> Optional[int]:
        """
        Start minute of the first gap that holds ``duration``.

        Args:
            duration: Minutes needed
            lower: Earliest allowed start
            upper: Latest allowed end (exclusive bound)
            occupied: Busy intervals, in any order
            window: Optional energy window intersected with the bound first

        Returns:
            The start minute, or None when no gap is long enough
        """
        if window is not None:
            lower = max(lower, window.start)
            upper = min(upper, window.end)
        if upper <= lower or duration > upper - lower:
            return None

        for gap_start, gap_end in self._gaps(lower, upper, occupied):
            if gap_end - gap_start >= duration:
                return gap_start
        return None

    def free_gaps(
        self,
        lower: int,
        upper: int,
        occupied: Sequence[OccupiedInterval],
        min_length: Optional[int] = None,
    ) -> list[tuple[int, int]]:
        """Every usable gap as (start, end), shorter than the minimum slot dropped."""
        minimum = self.min_slot_minutes if min_length is None else min_length
        return [
            (gap_start, gap_end)
            for gap_start, gap_end in self._gaps(lower, upper, occupied)
            if gap_end - gap_start >= minimum
        ]

    def place(
        self,
        duration: int,
        lower: int,
        upper: int,
        occupied: Sequence[OccupiedInterval],
        preferred_windows: Sequence[EnergyWindow] = (),
    ) -> Optional[SlotPlacement]:
        """
        Try each preferred window in order, then the whole bound.

        A placement outside the preferred windows is marked not optimal; with
        no preferences at all any slot counts as optimal.
        """
        for window in preferred_windows:
            start = self.find_slot(duration, lower, upper, occupied, window=window)
            if start is not None:
                return SlotPlacement(start=start, end=start + duration, is_optimal=True, energy_window=window.id)

        start = self.find_slot(duration, lower, upper, occupied)
        if start is None:
            return None
        return SlotPlacement(
            start=start,
            end=start + duration,
            is_optimal=not preferred_windows,
        )
