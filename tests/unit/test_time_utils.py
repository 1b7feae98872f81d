"""
Unit tests for clock and date arithmetic.
"""

from datetime import date, datetime

import pytest

from zmanit.core.exceptions import ValidationError
from zmanit.utils.datetime_utils import minute_of_day, sunday_index, week_dates, week_start_for
from zmanit.utils.time_utils import (
    decimal_hours_to_minutes,
    format_duration,
    hhmm_to_minutes,
    intervals_overlap,
    minutes_to_hhmm,
    overlap_minutes,
    parse_hhmm,
)


def test_hhmm_round_trip_for_work_day_bounds():
    assert hhmm_to_minutes("08:30") == 510
    assert hhmm_to_minutes("16:15") == 975
    assert minutes_to_hhmm(510) == "08:30"
    assert minutes_to_hhmm(975) == "16:15"


def test_hhmm_accepts_seconds_suffix():
    assert parse_hhmm("09:00:00") == 540


@pytest.mark.parametrize("value", ["", "9", "25:00", "10:75", "ab:cd", "1:2:3:4"])
def test_parse_hhmm_is_lenient(value):
    assert parse_hhmm(value) is None


def test_hhmm_to_minutes_raises_on_malformed():
    with pytest.raises(ValidationError):
        hhmm_to_minutes("24:30")


def test_decimal_hours_do_not_drift():
    assert decimal_hours_to_minutes(8.5) == 510
    assert decimal_hours_to_minutes(16.25) == 975
    assert decimal_hours_to_minutes(16.2499999) == 975


def test_decimal_hours_out_of_range():
    with pytest.raises(ValidationError):
        decimal_hours_to_minutes(25)
    with pytest.raises(ValidationError):
        decimal_hours_to_minutes(-1)


def test_overlap_helpers():
    assert intervals_overlap(540, 570, 560, 600)
    assert not intervals_overlap(540, 570, 570, 600)
    assert overlap_minutes(540, 570, 540, 570) == 30
    assert overlap_minutes(540, 570, 600, 630) == 0


def test_format_duration():
    assert format_duration(0) == "0m"
    assert format_duration(45) == "45m"
    assert format_duration(120) == "2h"
    assert format_duration(150) == "2h 30m"


def test_minute_of_day():
    assert minute_of_day(datetime(2026, 10, 19, 13, 18)) == 798


def test_week_helpers_use_sunday_first():
    sunday = date(2026, 10, 18)
    assert sunday_index(sunday) == 0
    assert sunday_index(date(2026, 10, 24)) == 6
    assert week_start_for(date(2026, 10, 22)) == sunday
    assert week_dates(sunday)[-1] == date(2026, 10, 24)
