"""
Leave balance endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.deps import get_db
from app.schemas.balance import BalanceListResponse, BalanceOut, QuotaUpdateRequest
from app.services import leave_balance_service as ledger
from app.services.employee_service import get_active_employee

router = APIRouter()


@router.get("/{employee_id}", response_model=BalanceListResponse)
async def get_balances_endpoint(employee_id: int, db: Session = Depends(get_db)):
    """General and annual pools per category for an employee"""
    get_active_employee(db, employee_id)
    rows = ledger.get_balances(db, employee_id)
    return BalanceListResponse(
        employee_id=employee_id,
        items=[BalanceOut.model_validate(r) for r in rows],
    )


@router.put("/{employee_id}/quota", response_model=BalanceOut)
async def set_quota_endpoint(
    employee_id: int,
    quota_data: QuotaUpdateRequest,
    db: Session = Depends(get_db),
):
    """Set the quota of one pool. Used hours are not changed."""
    get_active_employee(db, employee_id)
    return ledger.set_quota(
        db,
        employee_id=employee_id,
        leave_type=quota_data.leave_type,
        pool=quota_data.pool,
        quota_hours=quota_data.quota_hours,
    )
