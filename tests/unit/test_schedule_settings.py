"""
Unit tests for schedule configuration models.
"""

from datetime import date

import pytest
from pydantic import ValidationError as PydanticValidationError

from zmanit.core.config import get_settings
from zmanit.core.exceptions import ConfigurationError
from zmanit.models.enums import ScheduleKind
from zmanit.models.schedule_settings import (
    DayOverride,
    ScheduleConfigInput,
    ScheduleContext,
    WeeklyHours,
    default_schedule_config,
)

SUNDAY = date(2026, 10, 18)


def test_config_input_converts_decimal_hours():
    payload = ScheduleConfigInput.model_validate(
        {
            "work": {
                "0": {"startHour": 8.5, "endHour": 16.25},
                "5": {"enabled": False},
            },
            "home": {"6": {"startHour": 9, "endHour": 21, "flexible": True}},
            "bufferPercent": 20,
        }
    )

    config = payload.to_config()

    assert (config.work.days[0].start, config.work.days[0].end) == (510, 975)
    assert not config.work.days[5].enabled
    assert not config.work.days[1].enabled
    assert config.home.days[6].flexible
    assert config.buffer_percent == 20


def test_config_input_rejects_bad_weekday():
    payload = ScheduleConfigInput(work={7: {"startHour": 9, "endHour": 17}})
    with pytest.raises(ConfigurationError):
        payload.to_config()


def test_config_input_rejects_bad_hour():
    payload = ScheduleConfigInput(work={0: {"startHour": 9, "endHour": 25}})
    with pytest.raises(ConfigurationError):
        payload.to_config()


def test_weekly_hours_need_seven_days():
    with pytest.raises(PydanticValidationError):
        WeeklyHours(days=[])


def test_default_config_matches_settings():
    config = default_schedule_config()

    assert [window.enabled for window in config.work.days] == [True] * 5 + [False] * 2
    assert (config.home.days[0].start, config.home.days[0].end) == (990, 1260)
    assert config.home.days[5].flexible
    assert config.buffer_percent == 25


def test_last_override_wins():
    context = ScheduleContext(
        config=default_schedule_config(),
        today=SUNDAY,
        overrides=[
            DayOverride(date=SUNDAY, start="09:00", end="12:00"),
            DayOverride(date=SUNDAY, start="10:00", end="13:00"),
        ],
    )

    window = context.window_for(SUNDAY, ScheduleKind.WORK)
    assert (window.start, window.end) == (600, 780)
    assert context.window_for(SUNDAY, ScheduleKind.HOME).start == 990


def test_override_rejects_malformed_time():
    with pytest.raises(PydanticValidationError):
        DayOverride(date=SUNDAY, start="9am", end="12:00")


def test_breathing_default_follows_settings(monkeypatch):
    monkeypatch.setenv("BREATHING_MINUTES", "10")
    get_settings.cache_clear()
    try:
        context = ScheduleContext(config=default_schedule_config(), today=SUNDAY)
        assert context.breathing_minutes == 10
    finally:
        get_settings.cache_clear()
