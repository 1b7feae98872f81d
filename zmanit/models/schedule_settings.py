"""
Models for weekly working hours, day overrides and the scheduling context.

Hours are stored as integer minutes since midnight. The decimal-hour form used
by the settings screen (8.5 = 08:30) is converted once, in
``ScheduleConfigInput.to_config``.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from zmanit.core.config import get_settings
from zmanit.core.exceptions import ConfigurationError, ValidationError
from zmanit.models.energy import EnergyProfile
from zmanit.models.enums import ScheduleKind
from zmanit.utils.datetime_utils import sunday_index
from zmanit.utils.time_utils import MINUTES_PER_DAY, decimal_hours_to_minutes, parse_hhmm

DAYS_PER_WEEK = 7


class ScheduleWindow(BaseModel):
    """Working window of one weekday for one schedule kind."""

    start: int = Field(0, ge=0, le=MINUTES_PER_DAY)
    end: int = Field(0, ge=0, le=MINUTES_PER_DAY)
    enabled: bool = True
    flexible: bool = False

    @property
    def is_valid(self) -> bool:
        return self.end > self.start

    @property
    def length(self) -> int:
        return max(0, self.end - self.start)


def disabled_window() -> ScheduleWindow:
    return ScheduleWindow(start=0, end=0, enabled=False)


class WeeklyHours(BaseModel):
    """Seven windows, Sunday first."""

    days: list[ScheduleWindow] = Field(default_factory=lambda: [disabled_window() for _ in range(7)])

    @model_validator(mode="after")
    def _seven_days(self) -> "WeeklyHours":
        if len(self.days) != DAYS_PER_WEEK:
            raise ValueError(f"weekly hours need {DAYS_PER_WEEK} entries, got {len(self.days)}")
        return self

    def for_weekday(self, index: int) -> ScheduleWindow:
        return self.days[index % DAYS_PER_WEEK]


class ScheduleConfig(BaseModel):
    work: WeeklyHours = Field(default_factory=WeeklyHours)
    home: WeeklyHours = Field(default_factory=WeeklyHours)
    buffer_percent: int = Field(25, ge=0, le=100)

    def hours(self, kind: ScheduleKind) -> WeeklyHours:
        return self.home if kind == ScheduleKind.HOME else self.work


class DayOverride(BaseModel):
    """Replaces one date's window; absent by default."""

    date: date
    start: int = Field(..., ge=0, le=MINUTES_PER_DAY)
    end: int = Field(..., ge=0, le=MINUTES_PER_DAY)
    kind: ScheduleKind = ScheduleKind.WORK

    @field_validator("start", "end", mode="before")
    @classmethod
    def _clock(cls, value: Any) -> Any:
        if isinstance(value, str):
            minutes = parse_hhmm(value)
            if minutes is None:
                raise ValueError(f"override time must be HH:MM, got {value!r}")
            return minutes
        return value


class ScheduleContext(BaseModel):
    """
    Everything a scheduling pass reads besides the task list.

    Passed explicitly into every entry point; nothing is cached between passes.
    """

    config: ScheduleConfig
    today: date
    overrides: list[DayOverride] = Field(default_factory=list)
    manual_order: dict[date, list[str]] = Field(default_factory=dict)
    energy_profile: EnergyProfile = Field(default_factory=EnergyProfile)
    breathing_minutes: int = Field(default_factory=lambda: get_settings().BREATHING_MINUTES, ge=0)

    def override_for(self, day: date, kind: ScheduleKind) -> Optional[DayOverride]:
        """The override for a date and kind; the last one listed wins."""
        found: Optional[DayOverride] = None
        for override in self.overrides:
            if override.date == day and override.kind == kind:
                found = override
        return found

    def window_for(self, day: date, kind: ScheduleKind) -> ScheduleWindow:
        override = self.override_for(day, kind)
        if override:
            return ScheduleWindow(start=override.start, end=override.end, enabled=True, flexible=False)
        return self.config.hours(kind).for_weekday(sunday_index(day))

    def manual_order_for(self, day: date) -> list[str]:
        return self.manual_order.get(day, [])


class WindowInput(BaseModel):
    """One weekday in decimal-hour form: {startHour: 8.5, endHour: 16.25}."""

    model_config = ConfigDict(populate_by_name=True)

    start_hour: Optional[float] = Field(None, alias="startHour")
    end_hour: Optional[float] = Field(None, alias="endHour")
    enabled: bool = True
    flexible: bool = False

    def to_window(self) -> ScheduleWindow:
        if not self.enabled or self.start_hour is None or self.end_hour is None:
            return ScheduleWindow(start=0, end=0, enabled=False, flexible=self.flexible)
        return ScheduleWindow(
            start=decimal_hours_to_minutes(self.start_hour),
            end=decimal_hours_to_minutes(self.end_hour),
            enabled=True,
            flexible=self.flexible,
        )


class ScheduleConfigInput(BaseModel):
    """Schedule configuration as stored by the settings screen."""

    model_config = ConfigDict(populate_by_name=True)

    work: dict[int, WindowInput] = Field(default_factory=dict)
    home: dict[int, WindowInput] = Field(default_factory=dict)
    buffer_percent: int = Field(25, ge=0, le=100, alias="bufferPercent")

    def to_config(self) -> ScheduleConfig:
        """
        Normalize to integer minutes.

        Raises:
            ConfigurationError: If a weekday index or hour value is out of range
        """
        try:
            return ScheduleConfig(
                work=_weekly_from_input(self.work),
                home=_weekly_from_input(self.home),
                buffer_percent=self.buffer_percent,
            )
        except ValidationError as exc:
            raise ConfigurationError(exc.message, details=exc.details) from exc


def _weekly_from_input(entries: dict[int, WindowInput]) -> WeeklyHours:
    days = [disabled_window() for _ in range(DAYS_PER_WEEK)]
    for index, entry in entries.items():
        if index < 0 or index >= DAYS_PER_WEEK:
            raise ValidationError(f"Weekday index must be 0-6, got {index}", details={"index": index})
        days[index] = entry.to_window()
    return WeeklyHours(days=days)


def default_schedule_config() -> ScheduleConfig:
    """Weekly hours from settings: work Sun-Thu, home evenings, flexible weekend at home."""
    settings = get_settings()
    work_start = decimal_hours_to_minutes(settings.WORK_DAY_START_HOUR)
    work_end = decimal_hours_to_minutes(settings.WORK_DAY_END_HOUR)
    home_start = decimal_hours_to_minutes(settings.HOME_DAY_START_HOUR)
    home_end = decimal_hours_to_minutes(settings.HOME_DAY_END_HOUR)
    flex_start = decimal_hours_to_minutes(settings.HOME_FLEXIBLE_START_HOUR)
    flex_end = decimal_hours_to_minutes(settings.HOME_FLEXIBLE_END_HOUR)

    work_days = [
        ScheduleWindow(start=work_start, end=work_end, enabled=True)
        if index in settings.WORK_DAYS
        else disabled_window()
        for index in range(DAYS_PER_WEEK)
    ]
    home_days = [
        ScheduleWindow(start=flex_start, end=flex_end, enabled=True, flexible=True)
        if index in settings.HOME_FLEXIBLE_DAYS
        else ScheduleWindow(start=home_start, end=home_end, enabled=True)
        for index in range(DAYS_PER_WEEK)
    ]
    return ScheduleConfig(
        work=WeeklyHours(days=work_days),
        home=WeeklyHours(days=home_days),
        buffer_percent=settings.BUFFER_PERCENT,
    )
