"""
Tests for the leave application transition table
"""
import pytest

from app.core.errors import InvalidTransitionError
from app.models.leave import LeaveStatus
from app.services.leave_accounting import return_hours, revise_hours, sign_approval, sign_rejection
from app.services.leave_state_machine import (
    INITIAL_STATUS,
    TRANSITIONS,
    LeaveEvent,
    ensure_may_fire,
    may_fire,
    permitted_events,
)


def test_initial_status_is_pending():
    assert INITIAL_STATUS == LeaveStatus.PENDING


@pytest.mark.parametrize(
    "status,expected",
    [
        (LeaveStatus.PENDING, {LeaveEvent.APPROVE, LeaveEvent.REJECT, LeaveEvent.REVISE, LeaveEvent.CANCEL}),
        (LeaveStatus.APPROVED, {LeaveEvent.REVISE, LeaveEvent.CANCEL}),
        (LeaveStatus.REJECTED, {LeaveEvent.REVISE, LeaveEvent.CANCEL}),
        (LeaveStatus.CANCELED, set()),
    ],
)
def test_permitted_events(status, expected):
    assert set(permitted_events(status)) == expected


def test_targets():
    assert TRANSITIONS[LeaveEvent.APPROVE].target == LeaveStatus.APPROVED
    assert TRANSITIONS[LeaveEvent.REJECT].target == LeaveStatus.REJECTED
    assert TRANSITIONS[LeaveEvent.REVISE].target == LeaveStatus.PENDING
    assert TRANSITIONS[LeaveEvent.CANCEL].target == LeaveStatus.CANCELED


def test_effect_order():
    assert TRANSITIONS[LeaveEvent.APPROVE].effects == (sign_approval,)
    # signature before the reversal
    assert TRANSITIONS[LeaveEvent.REJECT].effects == (sign_rejection, return_hours)
    assert TRANSITIONS[LeaveEvent.REVISE].effects == (revise_hours,)
    assert TRANSITIONS[LeaveEvent.CANCEL].effects == (return_hours,)


def test_ensure_may_fire_raises_with_detail():
    assert not may_fire(LeaveStatus.APPROVED, LeaveEvent.APPROVE)
    with pytest.raises(InvalidTransitionError) as exc_info:
        ensure_may_fire(LeaveStatus.CANCELED, LeaveEvent.CANCEL)

    err = exc_info.value
    assert err.status_code == 409
    assert err.detail["code"] == "invalid_transition"
    assert err.detail["event"] == "cancel"
    assert err.detail["current_status"] == "canceled"
