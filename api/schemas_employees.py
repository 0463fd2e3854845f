"""Employee management schemas."""
from typing import Optional

from pydantic import Field

from records import Employee, Role
from schemas import ApiModel


class EmployeeCreateIn(ApiModel):
    """Create employee request."""
    full_name: str = Field(..., max_length=255)
    email: str = Field(..., max_length=255)
    role: Role = Role.EMPLOYEE
    workday_hours: int = 8
    salary_fixed: Optional[float] = None  # required, checked with a field-level message
    bonus_fixed: float = 0.0
    vouchers_fixed: float = 0.0


class EmployeeUpdateIn(ApiModel):
    """Update employee request."""
    full_name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    role: Optional[Role] = None
    workday_hours: Optional[int] = None
    salary_fixed: Optional[float] = None
    bonus_fixed: Optional[float] = None
    vouchers_fixed: Optional[float] = None
    is_active: Optional[bool] = None


class EmployeeListOut(ApiModel):
    """Employee list response with pagination."""
    employees: list[Employee]
    total: int
    page: int
    page_size: int


class EmployeeStatsOut(ApiModel):
    total: int
    active: int
    inactive: int
    admins: int
    employees: int
    monthly_cost: float
