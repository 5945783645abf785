"""
Leave application schemas
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Dict
from pydantic import BaseModel, Field, ConfigDict, field_serializer
from app.models.leave import LeaveCategory, LeaveStatus, SignatureEvent
from app.utils.datetime_utils import iso_8601_utc


class LeaveApplyRequest(BaseModel):
    """Schema for applying leave. Hours are computed, never supplied."""
    employee_id: int = Field(..., description="Employee taking the leave")
    manager_id: int = Field(..., description="Manager who will approve or reject")
    leave_type: LeaveCategory = Field(..., description="Leave category")
    description: str = Field(..., min_length=1, description="Reason for leave")
    start_time: datetime = Field(..., description="Leave start (calendar wall-clock)")
    end_time: datetime = Field(..., description="Leave end (calendar wall-clock)")


class ManagerActionRequest(BaseModel):
    """Schema for approve/reject"""
    manager_id: int = Field(..., description="Manager signing the decision")


class LeaveReviseRequest(BaseModel):
    """Schema for revising a leave; omitted fields keep their current value"""
    start_time: Optional[datetime] = Field(None, description="New leave start")
    end_time: Optional[datetime] = Field(None, description="New leave end")
    description: Optional[str] = Field(None, description="New reason for leave")


class SignatureOut(BaseModel):
    id: int
    manager_id: int
    event: SignatureEvent
    signed_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("signed_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class LeaveOut(BaseModel):
    """Schema for leave application output"""
    uuid: str
    employee_id: int
    manager_id: int
    leave_type: LeaveCategory
    description: str
    start_time: datetime
    end_time: datetime
    hours: Decimal
    status: LeaveStatus
    deleted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    signatures: List[SignatureOut] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("deleted_at", "created_at", "updated_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class LeaveListResponse(BaseModel):
    """Schema for leave list response"""
    items: List[LeaveOut]
    total: int


class AdjustmentLogOut(BaseModel):
    id: int
    leave_application_uuid: str
    general_hours: Decimal
    annual_hours: Decimal
    returning: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class AdjustmentHistoryResponse(BaseModel):
    """Ordered adjustment logs plus the net hours they hold per pool"""
    leave_application_uuid: str
    items: List[AdjustmentLogOut]
    contribution: Dict[str, Decimal]
