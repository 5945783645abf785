"""
Rebuild leave_balances.used_hours from the adjustment logs.

Each application's net contribution (forward entries minus returning entries)
is summed per (employee_id, leave_type) and compared with the stored
used_hours of the general and annual pools. Mismatches are printed; with --fix
the stored values are overwritten.

Usage:
  python scripts/rebuild_balances_from_logs.py
  python scripts/rebuild_balances_from_logs.py --employee-id 12
  python scripts/rebuild_balances_from_logs.py --fix
"""
import argparse
import sys
from collections import defaultdict
from decimal import Decimal
from pathlib import Path

# Add project root so app is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy.orm import Session
from app.core.logging import get_logger
from app.db import session as db_session
from app.models.leave import AdjustmentLog, BalancePool, LeaveApplication, LeaveBalance
from app.services import adjustment_log_service as adjustment_logs
from app.services.leave_balance_service import ZERO, lookup_pair, to_hours

logger = get_logger(__name__)


def expected_usage(db: Session, employee_id=None):
    """{(employee_id, leave_type): {"general": Decimal, "annual": Decimal}} from logs.

    Soft-deleted applications still count; deletion has no ledger effect.
    """
    query = db.query(LeaveApplication)
    if employee_id is not None:
        query = query.filter(LeaveApplication.employee_id == employee_id)

    totals = defaultdict(lambda: {"general": ZERO, "annual": ZERO})
    for application in query.all():
        entries = (
            db.query(AdjustmentLog)
            .filter(AdjustmentLog.leave_application_uuid == application.uuid)
            .order_by(AdjustmentLog.id)
            .all()
        )
        net = adjustment_logs.contribution(entries)
        key = (application.employee_id, application.leave_type)
        totals[key]["general"] += net["general"]
        totals[key]["annual"] += net["annual"]
    return totals


def rebuild(db: Session, employee_id=None, fix: bool = False):
    """Return a list of (employee_id, leave_type, pool, stored, expected) mismatches."""
    totals = expected_usage(db, employee_id)

    # Pools with no logged activity should read zero
    stored_query = db.query(LeaveBalance)
    if employee_id is not None:
        stored_query = stored_query.filter(LeaveBalance.employee_id == employee_id)
    for bal in stored_query.all():
        totals.setdefault((bal.employee_id, bal.leave_type), {"general": ZERO, "annual": ZERO})

    mismatches = []
    for (emp_id, leave_type), expected in sorted(totals.items(), key=lambda kv: (kv[0][0], kv[0][1].value)):
        general, annual = lookup_pair(db, emp_id, leave_type)
        for bal, pool in ((general, BalancePool.GENERAL), (annual, BalancePool.ANNUAL)):
            want = to_hours(expected[pool.value])
            have = to_hours(bal.used_hours)
            if want == have:
                continue
            mismatches.append((emp_id, leave_type, pool, have, want))
            if fix:
                if want < Decimal("0"):
                    logger.error(
                        "Logs for employee=%s type=%s pool=%s net to %s; leaving stored value",
                        emp_id, leave_type.value, pool.value, want,
                    )
                    continue
                bal.used_hours = want
    return mismatches


def main():
    parser = argparse.ArgumentParser(description="Rebuild leave balances from adjustment logs")
    parser.add_argument("--employee-id", type=int, default=None, help="Only this employee")
    parser.add_argument("--fix", action="store_true", help="Write the rebuilt values (default: report only)")
    args = parser.parse_args()

    db: Session = db_session.SessionLocal()
    try:
        mismatches = rebuild(db, employee_id=args.employee_id, fix=args.fix)
        for emp_id, leave_type, pool, have, want in mismatches:
            print(f"  employee {emp_id} {leave_type.value}/{pool.value}: stored={have} logs={want}")
        if not mismatches:
            print("All balances match their adjustment logs.")
        if args.fix:
            db.commit()
            print(f"Fixed {len(mismatches)} balance(s).")
        else:
            db.rollback()
            print(f"Report only: {len(mismatches)} mismatch(es). Re-run with --fix to write.")
    except Exception:
        db.rollback()
        logger.exception("Rebuild failed")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
