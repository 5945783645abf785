"""
Working-time calendar - converts a leave interval into billable seconds.

The leave engine only depends on the WorkingTimeCalendar protocol. The default
BusinessHoursCalendar bills the seconds that fall inside the daily working
window (WORKDAY_START_HOUR..WORKDAY_END_HOUR) on working weekdays, skipping
active holidays.
"""
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional, Protocol, Set

from sqlalchemy.orm import Session

from app.core.config import settings
from app.services.holiday_service import get_holidays_in_range
from app.utils.datetime_utils import to_calendar_time


class WorkingTimeCalendar(Protocol):
    def elapsed_seconds(self, start: datetime, end: datetime) -> int:
        ...


class BusinessHoursCalendar:
    """Mon-Fri 09:00-17:00 by default; holidays come from the holidays table."""

    def __init__(
        self,
        db: Optional[Session] = None,
        day_start: Optional[int] = None,
        day_end: Optional[int] = None,
        weekdays: Optional[Iterable[int]] = None,
        holidays: Optional[Set[date]] = None,
    ):
        self.db = db
        self.day_start = time(settings.WORKDAY_START_HOUR if day_start is None else day_start)
        end_hour = settings.WORKDAY_END_HOUR if day_end is None else day_end
        # 24 means midnight at the end of the day
        self.day_end_delta = timedelta(hours=end_hour)
        self.weekdays = set(settings.get_working_weekdays() if weekdays is None else weekdays)
        self._fixed_holidays = holidays

    def _holidays(self, from_date: date, to_date: date) -> Set[date]:
        if self._fixed_holidays is not None:
            return self._fixed_holidays
        if self.db is None:
            return set()
        return get_holidays_in_range(self.db, from_date, to_date)

    def is_working_day(self, day: date, holidays: Set[date]) -> bool:
        return day.weekday() in self.weekdays and day not in holidays

    def elapsed_seconds(self, start: datetime, end: datetime) -> int:
        start = to_calendar_time(start)
        end = to_calendar_time(end)
        if end <= start:
            return 0

        holidays = self._holidays(start.date(), end.date())
        total = 0
        day = start.date()
        while day <= end.date():
            if self.is_working_day(day, holidays):
                midnight = datetime.combine(day, time())
                window_start = datetime.combine(day, self.day_start)
                window_end = midnight + self.day_end_delta
                overlap_start = max(start, window_start)
                overlap_end = min(end, window_end)
                if overlap_end > overlap_start:
                    total += int((overlap_end - overlap_start).total_seconds())
            day += timedelta(days=1)
        return total
