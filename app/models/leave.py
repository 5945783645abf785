"""
Leave models: applications, pooled balances, adjustment logs, signatures
"""
import uuid

from sqlalchemy import (
    Column,
    Integer,
    DateTime,
    ForeignKey,
    String,
    Text,
    Numeric,
    Enum as SQLEnum,
    Boolean,
    UniqueConstraint,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import text
import enum
from app.db.base import Base


class LeaveCategory(str, enum.Enum):
    # TODO: the source category list reads (personal, bonus, personal, sick); confirm with HR
    # whether the second "personal" was meant to be a different category before adding one.
    PERSONAL = "personal"
    BONUS = "bonus"
    SICK = "sick"


class LeaveStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELED = "canceled"


class BalancePool(str, enum.Enum):
    GENERAL = "general"
    ANNUAL = "annual"


class SignatureEvent(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"


def _new_uuid() -> str:
    return str(uuid.uuid4())


class LeaveApplication(Base):
    """
    A leave request and its lifecycle status.

    Hours are derived from the working-time calendar and never supplied by the
    client. Ledger history lives in adjustment_logs, keyed by uuid.
    """
    __tablename__ = "leave_applications"

    uuid = Column(String(36), primary_key=True, default=_new_uuid)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    manager_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    leave_type = Column(SQLEnum(LeaveCategory), nullable=False)
    description = Column(Text, nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    hours = Column(Numeric(7, 2), nullable=False, server_default=text("'0'"))
    status = Column(SQLEnum(LeaveStatus), nullable=False, default=LeaveStatus.PENDING, server_default=text("'PENDING'"))
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)  # soft delete
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    # Relationships
    employee = relationship("Employee", foreign_keys=[employee_id], back_populates="leave_applications")
    manager = relationship("Employee", foreign_keys=[manager_id], back_populates="managed_leave_applications")
    logs = relationship(
        "AdjustmentLog",
        primaryjoin="LeaveApplication.uuid == foreign(AdjustmentLog.leave_application_uuid)",
        order_by="AdjustmentLog.id",
        viewonly=True,
    )
    signatures = relationship(
        "Signature",
        primaryjoin="LeaveApplication.uuid == foreign(Signature.leave_application_uuid)",
        order_by="Signature.id",
        viewonly=True,
    )

    __table_args__ = (
        Index('ix_leave_applications_employee_times', 'employee_id', 'start_time', 'end_time'),
        CheckConstraint('hours >= 0', name='check_leave_application_hours_non_negative'),
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class LeaveBalance(Base):
    """
    Pooled leave hours: one row per (employee_id, leave_type, pool).
    The general and annual rows for the same employee/category form a pair.
    used_hours only moves through the ledger service (deduct / add_back).
    """
    __tablename__ = "leave_balances"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    leave_type = Column(SQLEnum(LeaveCategory), nullable=False)
    pool = Column(SQLEnum(BalancePool), nullable=False)
    quota_hours = Column(Numeric(7, 2), nullable=True)  # NULL = uncapped
    used_hours = Column(Numeric(9, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    employee = relationship("Employee", backref="leave_balances")

    __table_args__ = (
        UniqueConstraint("employee_id", "leave_type", "pool", name="uq_leave_balances_employee_type_pool"),
        CheckConstraint("used_hours >= 0", name="check_leave_balances_used_non_negative"),
    )


class AdjustmentLog(Base):
    """
    Append-only record of one balance change for a leave application.

    general_hours / annual_hours are magnitudes. Forward entries (returning=False)
    were deducted; returning entries were added back. id is the sequence number.
    """
    __tablename__ = "adjustment_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    leave_application_uuid = Column(String(36), nullable=False, index=True)
    general_hours = Column(Numeric(7, 2), nullable=False, default=0)
    annual_hours = Column(Numeric(7, 2), nullable=False, default=0)
    # "returning" is an SQLite keyword; the attribute keeps the name, the column does not
    returning = Column("is_returning", Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False)

    @property
    def total_hours(self):
        return self.general_hours + self.annual_hours


class Signature(Base):
    """Approval/rejection provenance stamped by a manager."""
    __tablename__ = "signatures"

    id = Column(Integer, primary_key=True, index=True)
    leave_application_uuid = Column(String(36), nullable=False, index=True)
    manager_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    event = Column(SQLEnum(SignatureEvent), nullable=False)
    signed_at = Column(DateTime(timezone=True), nullable=False)

    manager = relationship("Employee", foreign_keys=[manager_id])
