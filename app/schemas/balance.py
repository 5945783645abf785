"""
Leave balance (ledger) schemas
"""
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict
from app.models.leave import LeaveCategory, BalancePool


class BalanceOut(BaseModel):
    """One pool of one category for an employee"""
    id: int
    employee_id: int
    leave_type: LeaveCategory
    pool: BalancePool
    quota_hours: Optional[Decimal] = None
    used_hours: Decimal

    model_config = ConfigDict(from_attributes=True)


class BalanceListResponse(BaseModel):
    employee_id: int
    items: List[BalanceOut]


class QuotaUpdateRequest(BaseModel):
    """Set the quota of one pool; null clears it (uncapped)"""
    leave_type: LeaveCategory
    pool: BalancePool
    quota_hours: Optional[Decimal] = Field(None, ge=0, description="Quota in hours, null for uncapped")
