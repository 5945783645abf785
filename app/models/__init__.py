"""
Database models
"""
from app.models.employee import Employee
from app.models.holiday import Holiday
from app.models.leave import (
    LeaveApplication,
    LeaveBalance,
    AdjustmentLog,
    Signature,
    LeaveCategory,
    LeaveStatus,
    BalancePool,
    SignatureEvent,
)

__all__ = [
    "Employee",
    "Holiday",
    "LeaveApplication",
    "LeaveBalance",
    "AdjustmentLog",
    "Signature",
    "LeaveCategory",
    "LeaveStatus",
    "BalancePool",
    "SignatureEvent",
]
