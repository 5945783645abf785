"""
Leave balance ledger - pooled general/annual hours per employee and category.

- Every category draws from a general pool and an annual pool (a linked pair of
  leave_balances rows).
- How hours are split between the two pools belongs to the BalanceResolver;
  this module only applies the deltas it is given.
- deduct / add_back are unconditional ledger arithmetic. Insufficient-balance
  policy, if any, belongs to the resolver or a layer above.
- Callers hold the pair under SELECT ... FOR UPDATE for the whole transition.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Protocol, Tuple, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import LedgerInconsistencyError
from app.models.leave import LeaveBalance, LeaveCategory, BalancePool

logger = logging.getLogger(__name__)

HOURS_QUANTUM = Decimal("0.01")
ZERO = Decimal("0")

Number = Union[Decimal, int, float, str]


def to_hours(value: Optional[Number]) -> Decimal:
    """Normalize a numeric value to a 2dp Decimal (None -> 0)."""
    if value is None:
        return ZERO.quantize(HOURS_QUANTUM)
    return Decimal(str(value)).quantize(HOURS_QUANTUM, rounding=ROUND_HALF_UP)


class BalanceResolver(Protocol):
    def lookup_pair(
        self, db: Session, employee_id: int, leave_type: LeaveCategory
    ) -> Tuple[LeaveBalance, LeaveBalance]:
        ...

    def split(
        self, general: LeaveBalance, annual: LeaveBalance, hours: Decimal
    ) -> Tuple[Decimal, Decimal]:
        ...


class DefaultBalanceResolver:
    """
    Gets or creates the (general, annual) rows and locks them, general first.

    Split: the general pool absorbs hours up to its remaining quota, the rest
    goes to the annual pool. A general pool with no quota absorbs everything.
    """

    def lookup_pair(
        self, db: Session, employee_id: int, leave_type: LeaveCategory
    ) -> Tuple[LeaveBalance, LeaveBalance]:
        general = _get_or_create_locked(db, employee_id, leave_type, BalancePool.GENERAL)
        annual = _get_or_create_locked(db, employee_id, leave_type, BalancePool.ANNUAL)
        return general, annual

    def split(
        self, general: LeaveBalance, annual: LeaveBalance, hours: Decimal
    ) -> Tuple[Decimal, Decimal]:
        hours = to_hours(hours)
        if general.quota_hours is None:
            return hours, ZERO
        room = max(ZERO, to_hours(general.quota_hours) - to_hours(general.used_hours))
        general_share = min(hours, room)
        return general_share, hours - general_share


default_resolver = DefaultBalanceResolver()


def _get_or_create_locked(
    db: Session,
    employee_id: int,
    leave_type: LeaveCategory,
    pool: BalancePool,
) -> LeaveBalance:
    bal = (
        db.query(LeaveBalance)
        .filter(
            LeaveBalance.employee_id == employee_id,
            LeaveBalance.leave_type == leave_type,
            LeaveBalance.pool == pool,
        )
        .with_for_update()
        .first()
    )
    if not bal:
        bal = LeaveBalance(
            employee_id=employee_id,
            leave_type=leave_type,
            pool=pool,
            quota_hours=None,
            used_hours=ZERO,
        )
        db.add(bal)
        db.flush()
    return bal


def lookup_pair(
    db: Session,
    employee_id: int,
    leave_type: LeaveCategory,
    resolver: Optional[BalanceResolver] = None,
) -> Tuple[LeaveBalance, LeaveBalance]:
    """Resolve the (general, annual) balances charged for a category."""
    return (resolver or default_resolver).lookup_pair(db, employee_id, leave_type)


def deduct(balance: LeaveBalance, hours: Number) -> LeaveBalance:
    """Increase used_hours by hours."""
    hours = to_hours(hours)
    balance.used_hours = to_hours(balance.used_hours) + hours
    logger.info(
        "Deducted %s h from employee=%s type=%s pool=%s (used=%s)",
        hours, balance.employee_id, _value(balance.leave_type), _value(balance.pool), balance.used_hours,
    )
    return balance


def add_back(
    general: LeaveBalance,
    annual: LeaveBalance,
    general_hours: Number,
    annual_hours: Number,
) -> Tuple[LeaveBalance, LeaveBalance]:
    """
    Decrease used_hours on both pools. Amounts must come from a logged
    adjustment, never be recomputed.
    """
    general_hours = to_hours(general_hours)
    annual_hours = to_hours(annual_hours)
    general.used_hours = to_hours(general.used_hours) - general_hours
    annual.used_hours = to_hours(annual.used_hours) - annual_hours
    logger.info(
        "Added back general=%s h annual=%s h to employee=%s type=%s",
        general_hours, annual_hours, general.employee_id, _value(general.leave_type),
    )
    return general, annual


def charge(
    general: LeaveBalance,
    annual: LeaveBalance,
    hours: Number,
    resolver: Optional[BalanceResolver] = None,
) -> Tuple[Decimal, Decimal]:
    """Split hours across the pair via the resolver and deduct each share."""
    general_share, annual_share = (resolver or default_resolver).split(general, annual, to_hours(hours))
    if general_share:
        deduct(general, general_share)
    if annual_share:
        deduct(annual, annual_share)
    return to_hours(general_share), to_hours(annual_share)


def read_used(db: Session, general: LeaveBalance, annual: LeaveBalance) -> Tuple[Decimal, Decimal]:
    """
    Flush pending ledger writes and re-read used_hours for the pair.

    Flushing here surfaces the used_hours >= 0 CHECK before any log is
    written; a violation is raised as LedgerInconsistencyError. The caller
    still owns the rollback.
    """
    employee_id, leave_type = general.employee_id, _value(general.leave_type)
    try:
        db.flush()
    except IntegrityError as exc:
        logger.warning("Ledger write rejected for employee=%s type=%s: %s", employee_id, leave_type, exc.orig)
        raise LedgerInconsistencyError(
            "Adjustment would drive used_hours below zero",
            field="used_hours",
            employee_id=employee_id,
            leave_type=leave_type,
        ) from exc
    db.refresh(general)
    db.refresh(annual)
    return to_hours(general.used_hours), to_hours(annual.used_hours)


def get_balances(db: Session, employee_id: int) -> List[LeaveBalance]:
    return (
        db.query(LeaveBalance)
        .filter(LeaveBalance.employee_id == employee_id)
        .order_by(LeaveBalance.leave_type, LeaveBalance.pool)
        .all()
    )


def set_quota(
    db: Session,
    employee_id: int,
    leave_type: LeaveCategory,
    pool: BalancePool,
    quota_hours: Optional[Number],
) -> LeaveBalance:
    """Set (or clear, with None) the quota of one pool. Does not touch used_hours."""
    try:
        bal = _get_or_create_locked(db, employee_id, leave_type, pool)
        bal.quota_hours = None if quota_hours is None else to_hours(quota_hours)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(bal)
    logger.info(
        "Quota set: employee=%s type=%s pool=%s quota=%s",
        employee_id, _value(leave_type), _value(pool), bal.quota_hours,
    )
    return bal


def _value(v) -> str:
    return getattr(v, "value", v)
