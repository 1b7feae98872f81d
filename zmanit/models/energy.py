"""
Energy profile models.

An energy profile names time-of-day windows and records, per task category,
which windows suit it, which to avoid, and whether it needs deep focus.
"""

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from zmanit.models.enums import ScheduleKind
from zmanit.utils.time_utils import MINUTES_PER_DAY


class EnergyWindow(BaseModel):
    """A named minute-of-day interval, e.g. early morning 08:30-10:00."""

    id: str = Field(..., min_length=1)
    label: str = ""
    start: int = Field(..., ge=0, le=MINUTES_PER_DAY)
    end: int = Field(..., ge=0, le=MINUTES_PER_DAY)

    @model_validator(mode="after")
    def _check_bounds(self) -> "EnergyWindow":
        if self.end <= self.start:
            raise ValueError(f"energy window {self.id!r} must end after it starts")
        return self

    def contains(self, minute: int) -> bool:
        return self.start <= minute < self.end


class CategoryPreference(BaseModel):
    """Scheduling preferences for one task category."""

    category: str
    label: str = ""
    preferred_windows: list[str] = Field(default_factory=list)
    avoid_windows: list[str] = Field(default_factory=list)
    requires_focus: bool = False
    rank: int = Field(5, description="Tie-break; lower is scheduled earlier in the day")
    kind: ScheduleKind = ScheduleKind.WORK


class EnergyProfile(BaseModel):
    windows: list[EnergyWindow] = Field(default_factory=list)
    preferences: dict[str, CategoryPreference] = Field(default_factory=dict)
    fallback_category: str = "other"

    def window(self, window_id: str) -> Optional[EnergyWindow]:
        for window in self.windows:
            if window.id == window_id:
                return window
        return None

    def window_at(self, minute: int) -> Optional[EnergyWindow]:
        for window in self.windows:
            if window.contains(minute):
                return window
        return None

    def preference_for(self, category: Optional[str]) -> CategoryPreference:
        """Preference for a category, falling back to the catch-all category."""
        if category and category in self.preferences:
            return self.preferences[category]
        fallback = self.preferences.get(self.fallback_category)
        if fallback:
            return fallback
        return CategoryPreference(category=category or self.fallback_category)

    def preferred_windows_for(self, category: Optional[str]) -> list[EnergyWindow]:
        """Preferred windows in preference order, skipping unknown ids."""
        preference = self.preference_for(category)
        windows = [self.window(window_id) for window_id in preference.preferred_windows]
        return [window for window in windows if window is not None]

    def kind_for(self, category: Optional[str]) -> ScheduleKind:
        return self.preference_for(category).kind


class TimeOptimality(BaseModel):
    """How well a minute of the day suits a category."""

    is_optimal: bool
    is_acceptable: bool
    window_id: Optional[str] = None
    reason: str = ""
