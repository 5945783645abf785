"""
Employee service - the minimal identity rows the leave engine references
"""
import logging
from typing import List
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from app.models.employee import Employee

logger = logging.getLogger(__name__)


def create_employee(db: Session, emp_code: str, name: str, active: bool = True) -> Employee:
    """
    Register an employee (identity itself is managed elsewhere).

    Raises:
        HTTPException: 409 if emp_code is already taken
    """
    existing = db.query(Employee).filter(Employee.emp_code == emp_code).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Employee code '{emp_code}' already exists"
        )
    employee = Employee(emp_code=emp_code, name=name, active=active)
    db.add(employee)
    db.commit()
    db.refresh(employee)
    logger.info("Employee registered: id=%s emp_code=%s", employee.id, employee.emp_code)
    return employee


def list_employees(db: Session, active_only: bool = False) -> List[Employee]:
    query = db.query(Employee)
    if active_only:
        query = query.filter(Employee.active == True)  # noqa: E712
    return query.order_by(Employee.id).all()


def get_active_employee(db: Session, employee_id: int) -> Employee:
    """
    Resolve an acting employee or manager by id.

    Authentication lives outside this service; callers pass the acting id and
    this only checks the row exists and is active.
    """
    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if employee is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Employee {employee_id} not found",
        )
    if not employee.active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Employee {employee_id} is inactive",
        )
    return employee
