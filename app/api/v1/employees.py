"""
Employee endpoints
"""
from typing import List
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from app.core.deps import get_db
from app.schemas.employee import EmployeeCreate, EmployeeOut
from app.services.employee_service import create_employee, list_employees

router = APIRouter()


@router.post("", response_model=EmployeeOut, status_code=status.HTTP_201_CREATED)
async def create_employee_endpoint(employee_data: EmployeeCreate, db: Session = Depends(get_db)):
    """Register an employee reference for leave applications and balances"""
    return create_employee(db, emp_code=employee_data.emp_code, name=employee_data.name, active=employee_data.active)


@router.get("", response_model=List[EmployeeOut])
async def list_employees_endpoint(
    active_only: bool = Query(False, description="Return only active employees"),
    db: Session = Depends(get_db),
):
    return list_employees(db, active_only=active_only)
