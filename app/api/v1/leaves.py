"""
Leave application endpoints
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from app.core.deps import get_db
from app.models.leave import LeaveStatus
from app.schemas.leave import (
    LeaveApplyRequest,
    LeaveOut,
    LeaveListResponse,
    ManagerActionRequest,
    LeaveReviseRequest,
    AdjustmentHistoryResponse,
    AdjustmentLogOut,
)
from app.services import leave_application_service as leaves

router = APIRouter()


@router.post("", response_model=LeaveOut, status_code=status.HTTP_201_CREATED)
async def apply_leave_endpoint(
    leave_data: LeaveApplyRequest,
    db: Session = Depends(get_db),
):
    """
    Apply for leave (creates a PENDING application)

    Hours are computed from the working-time calendar and deducted from the
    employee's general/annual pools immediately.

    Validations:
    - end_time after start_time
    - whole number of hours between start_time and end_time
    """
    return leaves.create_application(
        db=db,
        employee_id=leave_data.employee_id,
        manager_id=leave_data.manager_id,
        leave_type=leave_data.leave_type,
        description=leave_data.description,
        start_time=leave_data.start_time,
        end_time=leave_data.end_time,
    )


@router.get("", response_model=LeaveListResponse)
async def list_leaves_endpoint(
    employee_id: Optional[int] = Query(None, description="Employee ID filter"),
    status_filter: Optional[LeaveStatus] = Query(None, alias="status", description="Status filter"),
    include_deleted: bool = Query(False, description="Include soft-deleted applications"),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """List leave applications, newest start time first"""
    items = leaves.list_applications(
        db,
        employee_id=employee_id,
        status_filter=status_filter,
        include_deleted=include_deleted,
        limit=limit,
    )
    return LeaveListResponse(items=[LeaveOut.model_validate(a) for a in items], total=len(items))


@router.get("/{application_uuid}", response_model=LeaveOut)
async def get_leave_endpoint(application_uuid: str, db: Session = Depends(get_db)):
    return leaves.get_application(db, application_uuid)


@router.post("/{application_uuid}/approve", response_model=LeaveOut)
async def approve_leave_endpoint(
    application_uuid: str,
    action: ManagerActionRequest,
    db: Session = Depends(get_db),
):
    """Approve a pending leave. Records the manager's signature; balances are unchanged."""
    return leaves.approve_application(db, application_uuid, manager_id=action.manager_id)


@router.post("/{application_uuid}/reject", response_model=LeaveOut)
async def reject_leave_endpoint(
    application_uuid: str,
    action: ManagerActionRequest,
    db: Session = Depends(get_db),
):
    """Reject a pending leave. Records the signature, then returns the deducted hours."""
    return leaves.reject_application(db, application_uuid, manager_id=action.manager_id)


@router.post("/{application_uuid}/revise", response_model=LeaveOut)
async def revise_leave_endpoint(
    application_uuid: str,
    revise_data: LeaveReviseRequest,
    db: Session = Depends(get_db),
):
    """
    Revise a pending, approved or rejected leave back to PENDING

    The previous deduction is returned (unless already returned) and the
    recomputed hours are charged again.
    """
    return leaves.revise_application(
        db,
        application_uuid,
        start_time=revise_data.start_time,
        end_time=revise_data.end_time,
        description=revise_data.description,
    )


@router.post("/{application_uuid}/cancel", response_model=LeaveOut)
async def cancel_leave_endpoint(application_uuid: str, db: Session = Depends(get_db)):
    """Cancel a pending, approved or rejected leave and return outstanding hours"""
    return leaves.cancel_application(db, application_uuid)


@router.delete("/{application_uuid}", response_model=LeaveOut)
async def delete_leave_endpoint(application_uuid: str, db: Session = Depends(get_db)):
    """Soft-delete a leave application (recoverable; ledger untouched)"""
    return leaves.soft_delete_application(db, application_uuid)


@router.post("/{application_uuid}/restore", response_model=LeaveOut)
async def restore_leave_endpoint(application_uuid: str, db: Session = Depends(get_db)):
    return leaves.restore_application(db, application_uuid)


@router.get("/{application_uuid}/logs", response_model=AdjustmentHistoryResponse)
async def leave_logs_endpoint(application_uuid: str, db: Session = Depends(get_db)):
    """Adjustment history in creation order with the net hours it adds up to"""
    entries, net = leaves.get_adjustment_history(db, application_uuid)
    return AdjustmentHistoryResponse(
        leave_application_uuid=application_uuid,
        items=[AdjustmentLogOut.model_validate(e) for e in entries],
        contribution=net,
    )
