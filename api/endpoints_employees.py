"""Employee management endpoints (admin only, soft delete)."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

import crud_employees
from auth import Principal, require_admin
from records import Employee, Role
from schemas_employees import (
    EmployeeCreateIn,
    EmployeeListOut,
    EmployeeStatsOut,
    EmployeeUpdateIn,
)
from storage import Storage, get_store
from utils.audit import log_action

router = APIRouter(prefix="/api/employees", tags=["employees"])


@router.get("", response_model=EmployeeListOut)
async def list_employees(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    role: Optional[Role] = Query(None),
    is_active: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    """List employees with pagination and filtering (newest first)."""
    employees = crud_employees.list_employees(store.employees.load(), role_filter=role, search=search)
    if is_active is not None:
        employees = [e for e in employees if e.is_active == is_active]
    employees.sort(key=lambda e: e.created_at, reverse=True)

    offset = (page - 1) * page_size
    return EmployeeListOut(
        employees=employees[offset:offset + page_size],
        total=len(employees),
        page=page,
        page_size=page_size,
    )


@router.get("/stats", response_model=EmployeeStatsOut)
async def employee_stats(
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    return crud_employees.employee_stats(store.employees.load())


@router.get("/{employee_id}", response_model=Employee)
async def get_employee(
    employee_id: str,
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    return crud_employees.get_employee(store.employees.load(), employee_id)


@router.post("", response_model=Employee, status_code=status.HTTP_201_CREATED)
async def create_employee(
    data: EmployeeCreateIn,
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    """Create new employee; hourly cost is derived from the pay fields."""
    employees, employee = crud_employees.create_employee(store.employees.load(), **data.model_dump())
    store.employees.save(employees)
    store.commit()
    log_action(admin.employee_id, "employee.create", {"employee_id": employee.id})
    return employee


@router.patch("/{employee_id}", response_model=Employee)
async def update_employee(
    employee_id: str,
    data: EmployeeUpdateIn,
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    """Partial update. ``isActive`` toggles activation like the dedicated routes."""
    changes = data.model_dump(exclude_unset=True)
    is_active = changes.pop("is_active", None)

    employees, employee = crud_employees.update_employee(store.employees.load(), employee_id, **changes)
    if is_active is not None:
        employees, employee = crud_employees.set_employee_active(employees, employee_id, is_active)
    store.employees.save(employees)
    store.commit()
    log_action(admin.employee_id, "employee.update", {"employee_id": employee_id, "fields": sorted(data.model_fields_set)})
    return employee


@router.post("/{employee_id}/activate", response_model=Employee)
async def activate_employee(
    employee_id: str,
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    employees, employee = crud_employees.set_employee_active(store.employees.load(), employee_id, True)
    store.employees.save(employees)
    store.commit()
    log_action(admin.employee_id, "employee.activate", {"employee_id": employee_id})
    return employee


@router.delete("/{employee_id}", response_model=Employee)
@router.post("/{employee_id}/deactivate", response_model=Employee)
async def deactivate_employee(
    employee_id: str,
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    """Soft delete: employees are never removed, their history stays intact."""
    employees, employee = crud_employees.set_employee_active(store.employees.load(), employee_id, False)
    store.employees.save(employees)
    store.commit()
    log_action(admin.employee_id, "employee.deactivate", {"employee_id": employee_id})
    return employee
