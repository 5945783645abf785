"""
Leave application lifecycle.

States: pending (initial), approved, rejected, canceled.
Each event maps to (allowed source states, target state, ordered side effects).
The guard is checked before anything runs; side effects are plain calls made
in table order after the status moves.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Tuple

from app.core.errors import InvalidTransitionError
from app.models.leave import LeaveStatus
from app.services.leave_accounting import (
    TransitionContext,
    return_hours,
    revise_hours,
    sign_approval,
    sign_rejection,
)

logger = logging.getLogger(__name__)

INITIAL_STATUS = LeaveStatus.PENDING

Effect = Callable[[TransitionContext], object]


class LeaveEvent(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"
    REVISE = "revise"
    CANCEL = "cancel"


@dataclass(frozen=True)
class Transition:
    sources: FrozenSet[LeaveStatus]
    target: LeaveStatus
    effects: Tuple[Effect, ...] = ()


TRANSITIONS: Dict[LeaveEvent, Transition] = {
    LeaveEvent.APPROVE: Transition(
        sources=frozenset({LeaveStatus.PENDING}),
        target=LeaveStatus.APPROVED,
        effects=(sign_approval,),
    ),
    LeaveEvent.REJECT: Transition(
        sources=frozenset({LeaveStatus.PENDING}),
        target=LeaveStatus.REJECTED,
        # sign first, then reverse the deduction
        effects=(sign_rejection, return_hours),
    ),
    LeaveEvent.REVISE: Transition(
        sources=frozenset({LeaveStatus.PENDING, LeaveStatus.APPROVED, LeaveStatus.REJECTED}),
        target=LeaveStatus.PENDING,
        effects=(revise_hours,),
    ),
    LeaveEvent.CANCEL: Transition(
        sources=frozenset({LeaveStatus.PENDING, LeaveStatus.APPROVED, LeaveStatus.REJECTED}),
        target=LeaveStatus.CANCELED,
        effects=(return_hours,),
    ),
}


def may_fire(status: LeaveStatus, event: LeaveEvent) -> bool:
    return status in TRANSITIONS[event].sources


def permitted_events(status: LeaveStatus) -> Tuple[LeaveEvent, ...]:
    return tuple(event for event in LeaveEvent if may_fire(status, event))


def ensure_may_fire(status: LeaveStatus, event: LeaveEvent) -> Transition:
    """Return the transition for event, or raise InvalidTransitionError."""
    if not may_fire(status, event):
        raise InvalidTransitionError(event.value, LeaveStatus(status).value)
    return TRANSITIONS[event]


def fire(ctx: TransitionContext, event: LeaveEvent) -> LeaveStatus:
    """
    Move ctx.application through event and run its side effects.

    Does not commit; the caller owns the transaction.
    """
    application = ctx.application
    transition = ensure_may_fire(application.status, event)
    previous = application.status
    application.status = transition.target
    for effect in transition.effects:
        effect(ctx)
    logger.info(
        "Leave %s: %s -> %s via %s",
        application.uuid, LeaveStatus(previous).value, transition.target.value, event.value,
    )
    return transition.target
