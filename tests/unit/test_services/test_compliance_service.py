# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for the working-time act validator.

The validator is pure, so entries are plain records here.
"""

import uuid
from datetime import date, time, timedelta
from types import SimpleNamespace

import pytest

from zeitkonto.services.compliance_service import (
    GermanComplianceValidator,
    TimeRecord,
    find_previous,
    get_validator,
    validate_time_entry,
)


def entry(day: date, start: time, end: time, break_minutes: int = 0, **kwargs):
    """Helper to create a stored-entry lookalike."""
    return SimpleNamespace(
        id=kwargs.get("id", uuid.uuid4()),
        date=day,
        start_time=start,
        end_time=end,
        break_minutes=break_minutes,
        hours=kwargs.get("hours"),
    )


def codes(result) -> list[str]:
    return [w.code for w in result.details]


DAY = date(2027, 9, 1)  # Wednesday


def test_regular_day_has_no_warnings():
    result = validate_time_entry(entry(DAY, time(8, 0), time(16, 30), 30), [])

    assert result.valid is True
    assert result.errors == []
    assert result.warnings == []


def test_more_than_eight_hours_warns():
    result = validate_time_entry(entry(DAY, time(8, 0), time(17, 45), 45), [])

    assert codes(result) == ["DAILY_STANDARD_EXCEEDED"]
    assert result.valid is True


def test_more_than_ten_hours_warns_more_strongly():
    result = validate_time_entry(entry(DAY, time(7, 0), time(18, 30), 45), [])

    assert codes(result) == ["DAILY_MAX_EXCEEDED"]
    assert result.details[0].level == "error"
    assert result.valid is True


def test_daily_total_includes_existing_entries():
    morning = entry(DAY, time(6, 0), time(11, 0))
    result = validate_time_entry(entry(DAY, time(12, 0), time(16, 0)), [morning])

    assert "DAILY_STANDARD_EXCEEDED" in codes(result)


def test_technical_ceiling_is_flagged_distinctly():
    existing = [
        entry(DAY, time(0, 0), time(1, 0), hours=12.0),
        entry(DAY, time(1, 0), time(2, 0), hours=12.0),
    ]
    result = validate_time_entry(entry(DAY, time(18, 0), time(23, 30)), existing)

    assert "DAILY_CEILING_EXCEEDED" in codes(result)
    assert "DAILY_MAX_EXCEEDED" not in codes(result)
    assert result.valid is True
    assert result.errors == []


def test_edited_entry_is_not_counted_twice():
    existing_id = uuid.uuid4()
    stored = entry(DAY, time(8, 0), time(16, 0), id=existing_id)
    candidate = SimpleNamespace(
        entry_id=existing_id,
        date=DAY,
        start_time=time(8, 0),
        end_time=time(16, 30),
        break_minutes=30,
    )

    result = validate_time_entry(candidate, [stored])

    assert result.warnings == []


def test_missing_break_after_six_hours():
    result = validate_time_entry(entry(DAY, time(8, 0), time(14, 30)), [])

    assert codes(result) == ["BREAK_INSUFFICIENT"]
    assert "30 minutes" in result.warnings[0]


def test_longer_break_required_after_nine_hours():
    result = validate_time_entry(entry(DAY, time(7, 0), time(17, 0), 30), [])

    assert "BREAK_INSUFFICIENT" in codes(result)
    assert any("45 minutes" in w for w in result.warnings)


def test_rest_period_violation_reports_earliest_start():
    late_shift = entry(date(2027, 8, 31), time(14, 0), time(22, 0), 30)
    result = validate_time_entry(entry(DAY, time(6, 0), time(12, 0)), [late_shift])

    assert codes(result) == ["REST_PERIOD_VIOLATION"]
    assert "2027-09-01 09:00" in result.warnings[0]


def test_sufficient_rest_period():
    day_shift = entry(date(2027, 8, 31), time(8, 0), time(18, 0), 45)
    result = validate_time_entry(entry(DAY, time(8, 0), time(12, 0)), [day_shift])

    assert "REST_PERIOD_VIOLATION" not in codes(result)


def test_find_previous_picks_latest_end_before_start():
    candidate = TimeRecord(date=DAY, start_time=time(13, 0), end_time=time(17, 0))
    earlier = TimeRecord(
        date=date(2027, 8, 31), start_time=time(8, 0), end_time=time(16, 0)
    )
    morning = TimeRecord(date=DAY, start_time=time(8, 0), end_time=time(12, 0))
    later = TimeRecord(date=DAY, start_time=time(18, 0), end_time=time(20, 0))

    assert find_previous(candidate, [earlier, later, morning]) == morning


def test_weekly_limit():
    # Monday to Thursday with 10 hours each, candidate on Friday
    existing = [
        entry(date(2027, 8, 30) + timedelta(days=i), time(7, 0), time(17, 45), 45)
        for i in range(4)
    ]
    candidate = entry(date(2027, 9, 3), time(7, 0), time(17, 45), 45)

    result = validate_time_entry(candidate, existing)

    assert "WEEKLY_MAX_EXCEEDED" in codes(result)
    assert "50.00h" in next(w for w in result.warnings if "week" in w)


def test_previous_iso_week_does_not_count():
    last_week = [
        entry(date(2027, 8, 23 + i), time(7, 0), time(17, 45), 45) for i in range(5)
    ]
    result = validate_time_entry(entry(DAY, time(8, 0), time(16, 30), 30), last_week)

    assert "WEEKLY_MAX_EXCEEDED" not in codes(result)


def test_many_violations_still_valid():
    existing = [entry(date(2027, 8, 31), time(10, 0), time(23, 0))]
    result = validate_time_entry(entry(DAY, time(3, 0), time(17, 0)), existing)

    assert len(result.warnings) >= 3
    assert result.valid is True
    assert result.errors == []


def test_get_validator():
    assert isinstance(get_validator("de"), GermanComplianceValidator)
    with pytest.raises(ValueError):
        get_validator("AT")
