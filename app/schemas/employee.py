"""
Employee schemas
"""
from pydantic import BaseModel, Field, ConfigDict


class EmployeeCreate(BaseModel):
    emp_code: str = Field(..., min_length=1, description="Unique employee code")
    name: str = Field(..., min_length=1, description="Display name")
    active: bool = Field(True, description="Whether the employee is active")


class EmployeeOut(BaseModel):
    id: int
    emp_code: str
    name: str
    active: bool

    model_config = ConfigDict(from_attributes=True)
