"""
Tests for scripts/rebuild_balances_from_logs.py
"""
import importlib.util
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest

from app.models.leave import BalancePool, LeaveBalance, LeaveCategory
from app.services import leave_application_service as leaves

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "rebuild_balances_from_logs.py"


@pytest.fixture(scope="module")
def rebuild_script():
    spec = importlib.util.spec_from_file_location("rebuild_balances_from_logs", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _general(db, employee_id):
    return db.query(LeaveBalance).filter(
        LeaveBalance.employee_id == employee_id,
        LeaveBalance.leave_type == LeaveCategory.PERSONAL,
        LeaveBalance.pool == BalancePool.GENERAL,
    ).one()


@pytest.fixture
def drifted(db, employee, manager):
    """Two applications (one revised, one canceled) and a corrupted stored balance."""
    kept = leaves.create_application(
        db, employee.id, manager.id, LeaveCategory.PERSONAL, "Trip",
        datetime(2026, 10, 19, 9), datetime(2026, 10, 19, 17),
    )
    leaves.revise_application(db, kept.uuid, end_time=datetime(2026, 10, 20, 17))
    dropped = leaves.create_application(
        db, employee.id, manager.id, LeaveCategory.PERSONAL, "Errand",
        datetime(2026, 10, 21, 9), datetime(2026, 10, 21, 17),
    )
    leaves.cancel_application(db, dropped.uuid)

    _general(db, employee.id).used_hours = Decimal("3")
    db.commit()
    return employee


def test_report_only_lists_mismatch(db, drifted, rebuild_script):
    mismatches = rebuild_script.rebuild(db, employee_id=drifted.id)
    db.rollback()

    assert len(mismatches) == 1
    emp_id, leave_type, pool, stored, expected = mismatches[0]
    assert (emp_id, leave_type, pool) == (drifted.id, LeaveCategory.PERSONAL, BalancePool.GENERAL)
    assert stored == Decimal("3")
    assert expected == Decimal("16")
    assert _general(db, drifted.id).used_hours == Decimal("3")


def test_fix_writes_rebuilt_values(db, drifted, rebuild_script):
    rebuild_script.rebuild(db, fix=True)
    db.commit()

    assert _general(db, drifted.id).used_hours == Decimal("16")
    assert rebuild_script.rebuild(db) == []


def test_consistent_ledger_reports_nothing(db, employee, manager, rebuild_script):
    leaves.create_application(
        db, employee.id, manager.id, LeaveCategory.SICK, "Flu",
        datetime(2026, 10, 19, 9), datetime(2026, 10, 19, 17),
    )
    assert rebuild_script.rebuild(db) == []
