"""
Employee model

Identity and authentication are owned elsewhere; this row only gives leave
applications, balances and signatures something to reference.
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    emp_code = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    # Relationships
    leave_applications = relationship(
        "LeaveApplication", foreign_keys="LeaveApplication.employee_id", back_populates="employee"
    )
    managed_leave_applications = relationship(
        "LeaveApplication", foreign_keys="LeaveApplication.manager_id", back_populates="manager"
    )
