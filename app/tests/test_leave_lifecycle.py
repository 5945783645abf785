"""
Tests for the leave application lifecycle and its ledger effects
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi import HTTPException

from app.core.errors import InvalidTransitionError, LeaveValidationError, LedgerInconsistencyError
from app.models.employee import Employee
from app.models.leave import (
    AdjustmentLog,
    BalancePool,
    LeaveApplication,
    LeaveBalance,
    LeaveCategory,
    LeaveStatus,
    Signature,
    SignatureEvent,
)
from app.services import adjustment_log_service as adjustment_logs
from app.services import leave_application_service as leaves
from app.services.leave_balance_service import set_quota

# 2026-10-19 is a Monday
MON_9 = datetime(2026, 10, 19, 9)
MON_17 = datetime(2026, 10, 19, 17)
TUE_17 = datetime(2026, 10, 20, 17)


def _used(db, employee_id, category=LeaveCategory.PERSONAL):
    rows = db.query(LeaveBalance).filter(
        LeaveBalance.employee_id == employee_id,
        LeaveBalance.leave_type == category,
    ).all()
    by_pool = {r.pool: Decimal(r.used_hours) for r in rows}
    return by_pool.get(BalancePool.GENERAL, Decimal("0")), by_pool.get(BalancePool.ANNUAL, Decimal("0"))


def _logs(db, application_uuid):
    return adjustment_logs.history(db, application_uuid)


def _apply(db, employee, manager, start=MON_9, end=MON_17, category=LeaveCategory.PERSONAL):
    return leaves.create_application(
        db,
        employee_id=employee.id,
        manager_id=manager.id,
        leave_type=category,
        description="Family trip",
        start_time=start,
        end_time=end,
    )


def _assert_logs_match_balance(db, application, employee):
    net = adjustment_logs.contribution(_logs(db, application.uuid))
    general, annual = _used(db, employee.id, application.leave_type)
    assert net == {"general": general, "annual": annual}


# --- create ---

def test_create_deducts_hours_and_writes_forward_log(db, employee, manager):
    application = _apply(db, employee, manager)

    assert application.status == LeaveStatus.PENDING
    assert application.hours == Decimal("8")
    assert len(application.uuid) == 36
    assert _used(db, employee.id) == (Decimal("8"), Decimal("0"))

    logs = _logs(db, application.uuid)
    assert len(logs) == 1
    assert logs[0].returning is False
    assert logs[0].general_hours + logs[0].annual_hours == Decimal("8")


def test_create_uses_supplied_uuid(db, employee, manager):
    application = leaves.create_application(
        db, employee.id, manager.id, "sick", "Flu", MON_9, MON_17,
        application_uuid="11111111-2222-3333-4444-555555555555",
    )
    assert application.uuid == "11111111-2222-3333-4444-555555555555"
    assert application.leave_type == LeaveCategory.SICK


def test_create_two_days(db, employee, manager):
    application = _apply(db, employee, manager, end=TUE_17)
    assert application.hours == Decimal("16")
    assert _used(db, employee.id) == (Decimal("16"), Decimal("0"))


def test_create_splits_across_pools_by_general_quota(db, employee, manager):
    set_quota(db, employee.id, LeaveCategory.PERSONAL, BalancePool.GENERAL, 4)
    application = _apply(db, employee, manager)

    log = _logs(db, application.uuid)[0]
    assert (log.general_hours, log.annual_hours) == (Decimal("4"), Decimal("4"))
    assert _used(db, employee.id) == (Decimal("4"), Decimal("4"))


def test_create_rejects_end_before_start(db, employee, manager):
    with pytest.raises(LeaveValidationError) as exc_info:
        _apply(db, employee, manager, start=MON_17, end=MON_9)
    assert exc_info.value.detail["field"] == "start_time"
    assert db.query(LeaveApplication).count() == 0
    assert db.query(LeaveBalance).count() == 0


def test_create_rejects_fractional_hours(db, employee, manager):
    with pytest.raises(LeaveValidationError) as exc_info:
        _apply(db, employee, manager, end=datetime(2026, 10, 19, 16, 30))
    assert exc_info.value.detail["field"] == "end_time"
    assert exc_info.value.detail["elapsed_seconds"] == 7.5 * 3600
    assert db.query(AdjustmentLog).count() == 0


def test_create_requires_description(db, employee, manager):
    with pytest.raises(LeaveValidationError) as exc_info:
        leaves.create_application(db, employee.id, manager.id, LeaveCategory.SICK, "   ", MON_9, MON_17)
    assert exc_info.value.detail["field"] == "description"
    assert db.query(LeaveApplication).count() == 0


def test_create_requires_leave_type(db, employee, manager):
    with pytest.raises(LeaveValidationError) as exc_info:
        leaves.create_application(db, employee.id, manager.id, None, "Flu", MON_9, MON_17)
    assert exc_info.value.detail["field"] == "leave_type"


def test_create_rejects_unknown_leave_type(db, employee, manager):
    with pytest.raises(LeaveValidationError) as exc_info:
        leaves.create_application(db, employee.id, manager.id, "vacation", "Beach", MON_9, MON_17)
    assert "personal" in exc_info.value.detail["allowed"]


def test_create_unknown_or_inactive_people(db, employee, manager):
    with pytest.raises(HTTPException) as exc_info:
        leaves.create_application(db, 9999, manager.id, LeaveCategory.SICK, "Flu", MON_9, MON_17)
    assert exc_info.value.status_code == 404

    manager.active = False
    db.commit()
    with pytest.raises(HTTPException) as exc_info:
        _apply(db, employee, manager)
    assert exc_info.value.status_code == 403
    assert db.query(LeaveApplication).count() == 0


def test_weekend_leave_charges_zero_hours(db, employee, manager):
    application = _apply(db, employee, manager, start=datetime(2026, 10, 24, 9), end=datetime(2026, 10, 24, 17))
    assert application.hours == Decimal("0")
    assert _used(db, employee.id) == (Decimal("0"), Decimal("0"))
    assert len(_logs(db, application.uuid)) == 1


# --- approve / reject ---

def test_approve_signs_without_ledger_change(db, employee, manager):
    application = _apply(db, employee, manager)
    approved = leaves.approve_application(db, application.uuid, manager_id=manager.id)

    assert approved.status == LeaveStatus.APPROVED
    assert _used(db, employee.id) == (Decimal("8"), Decimal("0"))
    assert len(_logs(db, application.uuid)) == 1

    signatures = db.query(Signature).filter(Signature.leave_application_uuid == application.uuid).all()
    assert len(signatures) == 1
    assert signatures[0].manager_id == manager.id
    assert signatures[0].event == SignatureEvent.APPROVE


def test_approve_uses_injected_recorder(db, employee, manager):
    calls = []

    class RecordingSigner:
        def sign(self, db, application, manager, event):
            calls.append((application.uuid, manager.id, event))

    application = _apply(db, employee, manager)
    leaves.approve_application(db, application.uuid, manager_id=manager.id, recorder=RecordingSigner())

    assert calls == [(application.uuid, manager.id, SignatureEvent.APPROVE)]
    assert db.query(Signature).count() == 0


def test_reject_restores_balance_with_returning_log(db, employee, manager):
    application = _apply(db, employee, manager)
    rejected = leaves.reject_application(db, application.uuid, manager_id=manager.id)

    assert rejected.status == LeaveStatus.REJECTED
    assert _used(db, employee.id) == (Decimal("0"), Decimal("0"))

    forward, reversal = _logs(db, application.uuid)
    assert reversal.returning is True
    assert reversal.general_hours == forward.general_hours
    assert reversal.annual_hours == forward.annual_hours
    assert db.query(Signature).filter(Signature.event == SignatureEvent.REJECT).count() == 1


def test_reject_with_split_returns_both_pools(db, employee, manager):
    set_quota(db, employee.id, LeaveCategory.PERSONAL, BalancePool.GENERAL, 4)
    application = _apply(db, employee, manager)
    leaves.reject_application(db, application.uuid, manager_id=manager.id)

    reversal = _logs(db, application.uuid)[-1]
    assert (reversal.general_hours, reversal.annual_hours) == (Decimal("4"), Decimal("4"))
    assert _used(db, employee.id) == (Decimal("0"), Decimal("0"))


def test_approve_twice_is_invalid(db, employee, manager):
    application = _apply(db, employee, manager)
    leaves.approve_application(db, application.uuid, manager_id=manager.id)
    with pytest.raises(InvalidTransitionError):
        leaves.approve_application(db, application.uuid, manager_id=manager.id)
    assert db.query(Signature).count() == 1


def test_reject_after_approve_is_invalid(db, employee, manager):
    application = _apply(db, employee, manager)
    leaves.approve_application(db, application.uuid, manager_id=manager.id)
    with pytest.raises(InvalidTransitionError):
        leaves.reject_application(db, application.uuid, manager_id=manager.id)
    assert _used(db, employee.id) == (Decimal("8"), Decimal("0"))


def test_approve_by_inactive_manager_is_forbidden(db, employee, manager):
    application = _apply(db, employee, manager)
    other = Employee(emp_code="MGR002", name="Former Manager", active=False)
    db.add(other)
    db.commit()

    with pytest.raises(HTTPException) as exc_info:
        leaves.approve_application(db, application.uuid, manager_id=other.id)
    assert exc_info.value.status_code == 403
    assert leaves.get_application(db, application.uuid).status == LeaveStatus.PENDING


# --- cancel ---

@pytest.mark.parametrize("prepare", ["pending", "approved"])
def test_cancel_returns_hours(db, employee, manager, prepare):
    application = _apply(db, employee, manager)
    if prepare == "approved":
        leaves.approve_application(db, application.uuid, manager_id=manager.id)

    canceled = leaves.cancel_application(db, application.uuid)
    assert canceled.status == LeaveStatus.CANCELED
    assert _used(db, employee.id) == (Decimal("0"), Decimal("0"))
    assert [log.returning for log in _logs(db, application.uuid)] == [False, True]


def test_cancel_twice_is_rejected_and_balance_unchanged(db, employee, manager):
    application = _apply(db, employee, manager)
    leaves.cancel_application(db, application.uuid)

    with pytest.raises(InvalidTransitionError):
        leaves.cancel_application(db, application.uuid)
    assert _used(db, employee.id) == (Decimal("0"), Decimal("0"))
    assert len(_logs(db, application.uuid)) == 2


def test_cancel_after_reject_does_not_return_twice(db, employee, manager):
    _apply(db, employee, manager, start=datetime(2026, 10, 21, 9), end=datetime(2026, 10, 21, 17))
    application = _apply(db, employee, manager)
    leaves.reject_application(db, application.uuid, manager_id=manager.id)

    canceled = leaves.cancel_application(db, application.uuid)
    assert canceled.status == LeaveStatus.CANCELED
    # the other application's 8h stay charged
    assert _used(db, employee.id) == (Decimal("8"), Decimal("0"))
    assert len(_logs(db, application.uuid)) == 2


# --- revise ---

def test_revise_charges_only_new_hours(db, employee, manager):
    application = _apply(db, employee, manager)
    leaves.approve_application(db, application.uuid, manager_id=manager.id)

    revised = leaves.revise_application(db, application.uuid, end_time=TUE_17)
    assert revised.status == LeaveStatus.PENDING
    assert revised.hours == Decimal("16")
    assert _used(db, employee.id) == (Decimal("16"), Decimal("0"))

    logs = _logs(db, application.uuid)
    assert [log.returning for log in logs] == [False, False]
    assert logs[-1].general_hours == Decimal("16")
    _assert_logs_match_balance(db, revised, employee)


def test_revise_shorter_window(db, employee, manager):
    application = _apply(db, employee, manager, end=TUE_17)
    leaves.revise_application(db, application.uuid, start_time=datetime(2026, 10, 20, 9))
    assert _used(db, employee.id) == (Decimal("8"), Decimal("0"))


def test_revise_after_reject_charges_again(db, employee, manager):
    application = _apply(db, employee, manager)
    leaves.reject_application(db, application.uuid, manager_id=manager.id)

    revised = leaves.revise_application(db, application.uuid, description="Rescheduled")
    assert revised.status == LeaveStatus.PENDING
    assert revised.description == "Rescheduled"
    assert _used(db, employee.id) == (Decimal("8"), Decimal("0"))
    assert [log.returning for log in _logs(db, application.uuid)] == [False, True, False]


def test_revise_from_canceled_is_invalid(db, employee, manager):
    application = _apply(db, employee, manager)
    leaves.cancel_application(db, application.uuid)
    with pytest.raises(InvalidTransitionError):
        leaves.revise_application(db, application.uuid, end_time=TUE_17)
    assert _used(db, employee.id) == (Decimal("0"), Decimal("0"))


def test_revise_with_fractional_window_changes_nothing(db, employee, manager):
    application = _apply(db, employee, manager)
    with pytest.raises(LeaveValidationError):
        leaves.revise_application(db, application.uuid, end_time=datetime(2026, 10, 19, 17, 15))

    current = leaves.get_application(db, application.uuid)
    assert current.end_time == MON_17
    assert _used(db, employee.id) == (Decimal("8"), Decimal("0"))
    assert len(_logs(db, application.uuid)) == 1


# --- replay ---

def test_log_replay_tracks_balance_through_lifecycle(db, employee, manager):
    application = _apply(db, employee, manager)
    _assert_logs_match_balance(db, application, employee)

    steps = [
        lambda: leaves.approve_application(db, application.uuid, manager_id=manager.id),
        lambda: leaves.revise_application(db, application.uuid, end_time=TUE_17),
        lambda: leaves.reject_application(db, application.uuid, manager_id=manager.id),
        lambda: leaves.revise_application(db, application.uuid, start_time=datetime(2026, 10, 20, 9)),
        lambda: leaves.revise_application(db, application.uuid, end_time=datetime(2026, 10, 21, 17)),
        lambda: leaves.cancel_application(db, application.uuid),
    ]
    for step in steps:
        current = step()
        _assert_logs_match_balance(db, current, employee)

    assert _used(db, employee.id) == (Decimal("0"), Decimal("0"))


# --- failures roll back ---

def test_reversal_without_log_is_inconsistent(db, employee, manager):
    application = LeaveApplication(
        employee_id=employee.id,
        manager_id=manager.id,
        leave_type=LeaveCategory.SICK,
        description="Imported without history",
        start_time=MON_9,
        end_time=MON_17,
        hours=Decimal("8"),
        status=LeaveStatus.PENDING,
    )
    db.add(application)
    db.commit()
    db.refresh(application)

    with pytest.raises(LedgerInconsistencyError) as exc_info:
        leaves.cancel_application(db, application.uuid)
    assert exc_info.value.detail["code"] == "ledger_inconsistency"
    assert leaves.get_application(db, application.uuid).status == LeaveStatus.PENDING


def test_failed_reversal_rolls_back_status_and_logs(db, employee, manager):
    application = _apply(db, employee, manager)
    general = db.query(LeaveBalance).filter(
        LeaveBalance.employee_id == employee.id,
        LeaveBalance.pool == BalancePool.GENERAL,
    ).one()
    general.used_hours = Decimal("0")
    db.commit()

    with pytest.raises(LedgerInconsistencyError) as exc_info:
        leaves.cancel_application(db, application.uuid)
    assert exc_info.value.detail["field"] == "used_hours"

    assert leaves.get_application(db, application.uuid).status == LeaveStatus.PENDING
    assert len(_logs(db, application.uuid)) == 1


# --- soft delete ---

def test_soft_delete_hides_application_and_keeps_ledger(db, employee, manager):
    application = _apply(db, employee, manager)
    leaves.soft_delete_application(db, application.uuid)

    with pytest.raises(HTTPException) as exc_info:
        leaves.get_application(db, application.uuid)
    assert exc_info.value.status_code == 404
    with pytest.raises(HTTPException):
        leaves.cancel_application(db, application.uuid)

    assert leaves.list_applications(db, employee_id=employee.id) == []
    assert len(leaves.list_applications(db, employee_id=employee.id, include_deleted=True)) == 1
    assert _used(db, employee.id) == (Decimal("8"), Decimal("0"))

    entries, net = leaves.get_adjustment_history(db, application.uuid)
    assert len(entries) == 1
    assert net["general"] == Decimal("8")


def test_restore_makes_application_usable_again(db, employee, manager):
    application = _apply(db, employee, manager)
    leaves.soft_delete_application(db, application.uuid)
    restored = leaves.restore_application(db, application.uuid)

    assert restored.deleted_at is None
    leaves.cancel_application(db, application.uuid)
    assert _used(db, employee.id) == (Decimal("0"), Decimal("0"))


def test_restore_of_live_application_is_bad_request(db, employee, manager):
    application = _apply(db, employee, manager)
    with pytest.raises(HTTPException) as exc_info:
        leaves.restore_application(db, application.uuid)
    assert exc_info.value.status_code == 400


def test_list_filters_by_status(db, employee, manager):
    first = _apply(db, employee, manager)
    _apply(db, employee, manager, start=datetime(2026, 10, 20, 9), end=TUE_17)
    leaves.approve_application(db, first.uuid, manager_id=manager.id)

    approved = leaves.list_applications(db, status_filter=LeaveStatus.APPROVED)
    assert [a.uuid for a in approved] == [first.uuid]
    everything = leaves.list_applications(db, employee_id=employee.id)
    # newest start first
    assert everything[0].start_time > everything[1].start_time


# --- offset-aware input ---

def test_offset_aware_times_are_stored_as_calendar_time(db, employee, manager):
    plus_eight = timezone(timedelta(hours=8))
    # 17:00+08:00 -> 01:00+08:00 is Monday 09:00-17:00 in the UTC calendar
    application = _apply(
        db, employee, manager,
        start=datetime(2026, 10, 19, 17, tzinfo=plus_eight),
        end=datetime(2026, 10, 20, 1, tzinfo=plus_eight),
    )
    assert application.hours == Decimal("8")
    assert application.start_time == MON_9
    assert application.end_time == MON_17

    revised = leaves.revise_application(db, application.uuid, description="Same window")
    assert revised.hours == Decimal("8")
    assert revised.start_time == MON_9
    assert _used(db, employee.id) == (Decimal("8"), Decimal("0"))
    _assert_logs_match_balance(db, revised, employee)


def test_revise_with_offset_aware_end(db, employee, manager):
    application = _apply(db, employee, manager)
    revised = leaves.revise_application(
        db, application.uuid,
        end_time=datetime(2026, 10, 21, 1, tzinfo=timezone(timedelta(hours=8))),
    )
    assert revised.end_time == TUE_17
    assert revised.hours == Decimal("16")
