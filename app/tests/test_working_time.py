"""
Tests for the business-hours working-time calendar
"""
from datetime import date, datetime

from app.services.holiday_service import create_holiday
from app.services.working_time import BusinessHoursCalendar

HOUR = 3600


def test_full_working_day_is_eight_hours():
    cal = BusinessHoursCalendar(holidays=set())
    # 2026-10-19 is a Monday
    assert cal.elapsed_seconds(datetime(2026, 10, 19, 9), datetime(2026, 10, 19, 17)) == 8 * HOUR


def test_time_outside_window_is_not_billed():
    cal = BusinessHoursCalendar(holidays=set())
    assert cal.elapsed_seconds(datetime(2026, 10, 19, 7), datetime(2026, 10, 19, 10)) == 1 * HOUR
    assert cal.elapsed_seconds(datetime(2026, 10, 19, 16), datetime(2026, 10, 19, 20)) == 1 * HOUR


def test_multi_day_span_bills_each_day_window():
    cal = BusinessHoursCalendar(holidays=set())
    # Monday 09:00 -> Tuesday 17:00
    assert cal.elapsed_seconds(datetime(2026, 10, 19, 9), datetime(2026, 10, 20, 17)) == 16 * HOUR


def test_weekend_is_skipped():
    cal = BusinessHoursCalendar(holidays=set())
    # Friday 09:00 -> Monday 17:00
    assert cal.elapsed_seconds(datetime(2026, 10, 23, 9), datetime(2026, 10, 26, 17)) == 16 * HOUR
    # Saturday only
    assert cal.elapsed_seconds(datetime(2026, 10, 24, 9), datetime(2026, 10, 24, 17)) == 0


def test_fixed_holiday_is_skipped():
    cal = BusinessHoursCalendar(holidays={date(2026, 10, 20)})
    assert cal.elapsed_seconds(datetime(2026, 10, 19, 9), datetime(2026, 10, 21, 17)) == 16 * HOUR


def test_database_holidays_are_skipped(db):
    create_holiday(db, year=2026, holiday_date=date(2026, 10, 19), name="Founders Day")
    cal = BusinessHoursCalendar(db)
    assert cal.elapsed_seconds(datetime(2026, 10, 19, 9), datetime(2026, 10, 20, 17)) == 8 * HOUR


def test_inactive_database_holiday_is_billed(db):
    create_holiday(db, year=2026, holiday_date=date(2026, 10, 19), name="Retired Day", active=False)
    cal = BusinessHoursCalendar(db)
    assert cal.elapsed_seconds(datetime(2026, 10, 19, 9), datetime(2026, 10, 19, 17)) == 8 * HOUR


def test_custom_window_and_weekdays():
    cal = BusinessHoursCalendar(day_start=8, day_end=12, weekdays={5}, holidays=set())
    # Saturday counts, Monday does not
    assert cal.elapsed_seconds(datetime(2026, 10, 24, 0), datetime(2026, 10, 24, 23)) == 4 * HOUR
    assert cal.elapsed_seconds(datetime(2026, 10, 19, 0), datetime(2026, 10, 19, 23)) == 0


def test_end_not_after_start_is_zero():
    cal = BusinessHoursCalendar(holidays=set())
    assert cal.elapsed_seconds(datetime(2026, 10, 19, 17), datetime(2026, 10, 19, 9)) == 0
