"""
Leave accounting - the ledger side effects of leave application transitions.

Every procedure here runs inside the caller's transaction:
  lock pair -> read base used_hours -> mutate -> flush -> read post -> record log.
The log delta is always post minus base (or base minus post for reversals),
so it reflects what actually happened to the balances.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from app.core.errors import LeaveValidationError, LedgerInconsistencyError
from app.models.employee import Employee
from app.models.leave import AdjustmentLog, LeaveApplication, SignatureEvent
from app.services import adjustment_log_service as adjustment_logs
from app.services import leave_balance_service as ledger
from app.services.leave_balance_service import BalanceResolver
from app.services.signature_service import SignatureRecorder, default_recorder
from app.services.working_time import BusinessHoursCalendar, WorkingTimeCalendar
from app.utils.datetime_utils import to_calendar_time

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600


@dataclass
class TransitionContext:
    """Everything a transition's side effects need, passed explicitly."""
    db: Session
    application: LeaveApplication
    manager: Optional[Employee] = None
    resolver: Optional[BalanceResolver] = None
    calendar: Optional[WorkingTimeCalendar] = None
    recorder: SignatureRecorder = field(default=default_recorder)

    def get_calendar(self) -> WorkingTimeCalendar:
        if self.calendar is None:
            self.calendar = BusinessHoursCalendar(self.db)
        return self.calendar


def validate_application_fields(application: LeaveApplication) -> None:
    """Presence checks for the client-supplied fields."""
    if application.leave_type is None:
        raise LeaveValidationError("leave_type is required", field="leave_type")
    if application.description is None or not str(application.description).strip():
        raise LeaveValidationError("description is required", field="description")
    if application.start_time is None:
        raise LeaveValidationError("start_time is required", field="start_time")
    if application.end_time is None:
        raise LeaveValidationError("end_time is required", field="end_time")


def validate_leave_times(start_time: datetime, end_time: datetime) -> None:
    """
    end_time must be after start_time and the raw elapsed time must be a
    whole number of hours.
    """
    start = to_calendar_time(start_time)
    end = to_calendar_time(end_time)
    if not end > start:
        raise LeaveValidationError("start_time should be earlier than end_time", field="start_time")
    elapsed = (end - start).total_seconds()
    if elapsed % SECONDS_PER_HOUR != 0:
        raise LeaveValidationError(
            "Leave must span a whole number of hours",
            field="end_time",
            elapsed_seconds=elapsed,
        )


def assign_hours(ctx: TransitionContext) -> Decimal:
    """Recompute the application's hours from the working-time calendar."""
    application = ctx.application
    seconds = ctx.get_calendar().elapsed_seconds(application.start_time, application.end_time)
    application.hours = ledger.to_hours(Decimal(seconds) / SECONDS_PER_HOUR)
    return application.hours


def _latest_log_or_fail(ctx: TransitionContext, action: str) -> AdjustmentLog:
    newest = adjustment_logs.most_recent(ctx.db, ctx.application.uuid)
    if newest is None:
        raise LedgerInconsistencyError(
            f"Cannot {action}: leave application {ctx.application.uuid} has no adjustment log",
            field="uuid",
        )
    return newest


def _charge_and_record(ctx: TransitionContext, general, annual) -> AdjustmentLog:
    general_base, annual_base = ledger.read_used(ctx.db, general, annual)
    assign_hours(ctx)
    ledger.charge(general, annual, ctx.application.hours, ctx.resolver)
    general_post, annual_post = ledger.read_used(ctx.db, general, annual)
    return adjustment_logs.record(
        ctx.db,
        ctx.application.uuid,
        general_post - general_base,
        annual_post - annual_base,
    )


def deduct_on_create(ctx: TransitionContext) -> AdjustmentLog:
    """Charge a new application's hours and write its first (forward) log."""
    application = ctx.application
    general, annual = ledger.lookup_pair(ctx.db, application.employee_id, application.leave_type, ctx.resolver)
    return _charge_and_record(ctx, general, annual)


def revise_hours(ctx: TransitionContext) -> AdjustmentLog:
    """
    Undo the latest forward deduction (if the latest log is not already a
    reversal), recompute hours and charge them again.
    """
    application = ctx.application
    general, annual = ledger.lookup_pair(ctx.db, application.employee_id, application.leave_type, ctx.resolver)
    newest = _latest_log_or_fail(ctx, "revise")
    if not newest.returning:
        ledger.add_back(general, annual, newest.general_hours, newest.annual_hours)
    return _charge_and_record(ctx, general, annual)


def return_hours(ctx: TransitionContext) -> Optional[AdjustmentLog]:
    """
    Add back the hours of the latest log and record a returning entry.
    Nothing is outstanding when the latest log is already a reversal.
    """
    application = ctx.application
    general, annual = ledger.lookup_pair(ctx.db, application.employee_id, application.leave_type, ctx.resolver)
    newest = _latest_log_or_fail(ctx, "return hours")
    if newest.returning:
        logger.warning(
            "Leave %s: latest adjustment #%s is already a reversal, nothing to return",
            application.uuid, newest.id,
        )
        return None

    general_base, annual_base = ledger.read_used(ctx.db, general, annual)
    ledger.add_back(general, annual, newest.general_hours, newest.annual_hours)
    general_post, annual_post = ledger.read_used(ctx.db, general, annual)
    return adjustment_logs.record(
        ctx.db,
        application.uuid,
        general_base - general_post,
        annual_base - annual_post,
        returning=True,
    )


def _sign(ctx: TransitionContext, event: SignatureEvent) -> None:
    if ctx.manager is None:
        raise LeaveValidationError("manager is required to sign", field="manager_id")
    ctx.recorder.sign(ctx.db, ctx.application, ctx.manager, event)


def sign_approval(ctx: TransitionContext) -> None:
    _sign(ctx, SignatureEvent.APPROVE)


def sign_rejection(ctx: TransitionContext) -> None:
    _sign(ctx, SignatureEvent.REJECT)
