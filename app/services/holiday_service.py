"""
Holiday calendar service - non-working dates for the working-time calendar
"""
import logging
from datetime import date
from typing import List, Optional, Set
from sqlalchemy.orm import Session
from sqlalchemy import and_
from fastapi import HTTPException, status
from app.models.holiday import Holiday
from app.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)


def create_holiday(
    db: Session,
    year: int,
    holiday_date: date,
    name: str,
    active: bool = True,
) -> Holiday:
    """
    Create a new holiday

    Raises:
        HTTPException: If the date is outside the year or already registered
    """
    if holiday_date.year != year:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Date {holiday_date} does not fall within year {year}"
        )

    existing = db.query(Holiday).filter(
        Holiday.year == year,
        Holiday.date == holiday_date
    ).first()

    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Holiday already exists for date {holiday_date} in year {year}"
        )

    # Explicitly set created_at/updated_at to avoid SQLite issues with server_default
    now = now_utc()
    holiday = Holiday(
        year=year,
        date=holiday_date,
        name=name,
        active=active,
        created_at=now,
        updated_at=now
    )

    db.add(holiday)
    db.commit()
    db.refresh(holiday)
    logger.info("Holiday created: %s (%s)", holiday.date, holiday.name)
    return holiday


def list_holidays(
    db: Session,
    year: Optional[int] = None,
    active_only: bool = False
) -> List[Holiday]:
    query = db.query(Holiday)
    if year is not None:
        query = query.filter(Holiday.year == year)
    if active_only:
        query = query.filter(Holiday.active == True)  # noqa: E712
    return query.order_by(Holiday.date).all()


def get_holidays_in_range(
    db: Session,
    from_date: date,
    to_date: date
) -> Set[date]:
    """
    Get set of active holiday dates within the given date range

    Args:
        db: Database session
        from_date: Start date (inclusive)
        to_date: End date (inclusive)

    Returns:
        Set of holiday dates
    """
    holidays = db.query(Holiday.date).filter(
        and_(
            Holiday.active == True,  # noqa: E712
            Holiday.date >= from_date,
            Holiday.date <= to_date
        )
    ).all()

    return {holiday_date for (holiday_date,) in holidays}
