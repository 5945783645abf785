"""
Leave application service - creates applications and drives their lifecycle.

Each public operation is one unit of work: it locks what it touches, runs the
transition and its ledger effects, and commits. Any failure rolls back every
ledger and log write of that operation.
"""
import logging
import uuid as uuid_lib
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from app.core.errors import LeaveValidationError
from app.models.leave import AdjustmentLog, LeaveApplication, LeaveCategory, LeaveStatus
from app.services import adjustment_log_service as adjustment_logs
from app.services.employee_service import get_active_employee
from app.services.leave_accounting import (
    TransitionContext,
    deduct_on_create,
    validate_application_fields,
    validate_leave_times,
)
from app.services.leave_balance_service import BalanceResolver
from app.services.leave_state_machine import INITIAL_STATUS, LeaveEvent, ensure_may_fire, fire
from app.services.signature_service import SignatureRecorder, default_recorder
from app.services.working_time import WorkingTimeCalendar
from app.utils.datetime_utils import now_utc, to_calendar_time

logger = logging.getLogger(__name__)


def _coerce_category(leave_type) -> Optional[LeaveCategory]:
    if leave_type is None or isinstance(leave_type, LeaveCategory):
        return leave_type
    try:
        return LeaveCategory(leave_type)
    except ValueError:
        raise LeaveValidationError(
            f"Unknown leave_type {leave_type!r}",
            field="leave_type",
            allowed=[c.value for c in LeaveCategory],
        )


def create_application(
    db: Session,
    employee_id: int,
    manager_id: int,
    leave_type: Optional[LeaveCategory],
    description: Optional[str],
    start_time: datetime,
    end_time: datetime,
    application_uuid: Optional[str] = None,
    resolver: Optional[BalanceResolver] = None,
    calendar: Optional[WorkingTimeCalendar] = None,
) -> LeaveApplication:
    """
    Create a PENDING leave application and charge its hours.

    Start and end are stored as naive wall-clock in the calendar zone, so
    offset-aware input is converted first. Validation happens before any
    ledger mutation; if charging or logging fails the application is not
    persisted.

    Raises:
        LeaveValidationError: missing fields, end not after start, fractional hours
        HTTPException: unknown or inactive employee/manager
    """
    application = LeaveApplication(
        uuid=application_uuid or str(uuid_lib.uuid4()),
        employee_id=employee_id,
        manager_id=manager_id,
        leave_type=_coerce_category(leave_type),
        description=description,
        start_time=to_calendar_time(start_time),
        end_time=to_calendar_time(end_time),
        status=INITIAL_STATUS,
    )
    validate_application_fields(application)
    validate_leave_times(application.start_time, application.end_time)

    get_active_employee(db, employee_id)
    get_active_employee(db, manager_id)

    now = now_utc()
    application.created_at = now
    application.updated_at = now
    try:
        db.add(application)
        ctx = TransitionContext(db=db, application=application, resolver=resolver, calendar=calendar)
        deduct_on_create(ctx)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(application)
    logger.info(
        "Leave %s created for employee %s: %s h of %s",
        application.uuid, employee_id, application.hours, application.leave_type.value,
    )
    return application


def get_application(
    db: Session,
    application_uuid: str,
    include_deleted: bool = False,
    for_update: bool = False,
) -> LeaveApplication:
    query = db.query(LeaveApplication).filter(LeaveApplication.uuid == application_uuid)
    if not include_deleted:
        query = query.filter(LeaveApplication.deleted_at.is_(None))
    if for_update:
        query = query.with_for_update()
    application = query.first()
    if not application:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Leave application {application_uuid} not found",
        )
    return application


def list_applications(
    db: Session,
    employee_id: Optional[int] = None,
    status_filter: Optional[LeaveStatus] = None,
    include_deleted: bool = False,
    limit: int = 100,
) -> List[LeaveApplication]:
    query = db.query(LeaveApplication)
    if employee_id is not None:
        query = query.filter(LeaveApplication.employee_id == employee_id)
    if status_filter is not None:
        query = query.filter(LeaveApplication.status == status_filter)
    if not include_deleted:
        query = query.filter(LeaveApplication.deleted_at.is_(None))
    return query.order_by(LeaveApplication.start_time.desc()).limit(limit).all()


def _run_event(
    db: Session,
    application_uuid: str,
    event: LeaveEvent,
    manager_id: Optional[int] = None,
    updates: Optional[Dict[str, object]] = None,
    resolver: Optional[BalanceResolver] = None,
    calendar: Optional[WorkingTimeCalendar] = None,
    recorder: Optional[SignatureRecorder] = None,
) -> LeaveApplication:
    try:
        application = get_application(db, application_uuid, for_update=True)
        # guard first: nothing below runs for a disallowed event
        ensure_may_fire(application.status, event)
        manager = get_active_employee(db, manager_id) if manager_id is not None else None

        if updates:
            for key, value in updates.items():
                setattr(application, key, value)
            validate_application_fields(application)
            validate_leave_times(application.start_time, application.end_time)

        ctx = TransitionContext(
            db=db,
            application=application,
            manager=manager,
            resolver=resolver,
            calendar=calendar,
            recorder=recorder or default_recorder,
        )
        fire(ctx, event)
        application.updated_at = now_utc()
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(application)
    return application


def approve_application(
    db: Session,
    application_uuid: str,
    manager_id: int,
    recorder: Optional[SignatureRecorder] = None,
) -> LeaveApplication:
    """pending -> approved. Signs for manager; no ledger change."""
    return _run_event(db, application_uuid, LeaveEvent.APPROVE, manager_id=manager_id, recorder=recorder)


def reject_application(
    db: Session,
    application_uuid: str,
    manager_id: int,
    resolver: Optional[BalanceResolver] = None,
    recorder: Optional[SignatureRecorder] = None,
) -> LeaveApplication:
    """pending -> rejected. Signs for manager, then returns the deducted hours."""
    return _run_event(
        db, application_uuid, LeaveEvent.REJECT,
        manager_id=manager_id, resolver=resolver, recorder=recorder,
    )


def revise_application(
    db: Session,
    application_uuid: str,
    start_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
    description: Optional[str] = None,
    resolver: Optional[BalanceResolver] = None,
    calendar: Optional[WorkingTimeCalendar] = None,
) -> LeaveApplication:
    """
    pending/approved/rejected -> pending.

    Optionally moves the leave window or edits the description, then re-charges
    the hours against the ledger.
    """
    updates: Dict[str, object] = {}
    if start_time is not None:
        updates["start_time"] = to_calendar_time(start_time)
    if end_time is not None:
        updates["end_time"] = to_calendar_time(end_time)
    if description is not None:
        updates["description"] = description
    return _run_event(
        db, application_uuid, LeaveEvent.REVISE,
        updates=updates, resolver=resolver, calendar=calendar,
    )


def cancel_application(
    db: Session,
    application_uuid: str,
    resolver: Optional[BalanceResolver] = None,
) -> LeaveApplication:
    """pending/approved/rejected -> canceled. Returns the outstanding hours."""
    return _run_event(db, application_uuid, LeaveEvent.CANCEL, resolver=resolver)


def soft_delete_application(db: Session, application_uuid: str) -> LeaveApplication:
    """Hide an application from lookups. The ledger and logs are untouched."""
    application = get_application(db, application_uuid, for_update=True)
    application.deleted_at = now_utc()
    db.commit()
    db.refresh(application)
    logger.info("Leave %s soft-deleted", application_uuid)
    return application


def restore_application(db: Session, application_uuid: str) -> LeaveApplication:
    application = get_application(db, application_uuid, include_deleted=True, for_update=True)
    if application.deleted_at is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Leave application {application_uuid} is not deleted",
        )
    application.deleted_at = None
    db.commit()
    db.refresh(application)
    logger.info("Leave %s restored", application_uuid)
    return application


def get_adjustment_history(
    db: Session,
    application_uuid: str,
) -> Tuple[List[AdjustmentLog], Dict[str, Decimal]]:
    """Ordered logs for an application plus the net hours they add up to."""
    get_application(db, application_uuid, include_deleted=True)
    entries = adjustment_logs.history(db, application_uuid)
    return entries, adjustment_logs.contribution(entries)
