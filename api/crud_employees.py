"""Employee maintenance (soft delete only, hourly cost always recomputed)."""
from typing import List, Optional, Sequence, Tuple

from catalog import EMAIL_RE
from config import settings
from errors import NotFoundError, ValidationError
from records import WORKDAY_HOURS, Employee, Role, compute_hourly_cost


def get_employee(employees: Sequence[Employee], employee_id: str) -> Employee:
    for employee in employees:
        if employee.id == employee_id:
            return employee
    raise NotFoundError("Employee", employee_id)


def get_employee_by_email(employees: Sequence[Employee], email: str) -> Optional[Employee]:
    """Case-insensitive lookup"""
    lowered = (email or "").strip().lower()
    return next((e for e in employees if e.email.lower() == lowered), None)


def list_employees(
    employees: Sequence[Employee],
    role_filter: Optional[Role] = None,
    active_only: bool = False,
    search: Optional[str] = None,
) -> List[Employee]:
    """List employees with optional filters

    Args:
        role_filter: ADMIN / EMPLOYEE, None for all
        active_only: If True, return only active employees
        search: Substring of name or email (case-insensitive)
    """
    result = list(employees)
    if active_only:
        result = [e for e in result if e.is_active]
    if role_filter:
        result = [e for e in result if e.role == role_filter]
    q = (search or "").strip().lower()
    if q:
        result = [e for e in result if q in e.full_name.lower() or q in e.email.lower()]
    return result


def _normalize_email(employees: Sequence[Employee], email: Optional[str], exclude_id: Optional[str] = None) -> str:
    email = (email or "").strip().lower()
    if not email:
        raise ValidationError("Email is required", field="email")
    if not EMAIL_RE.match(email):
        raise ValidationError("Enter a valid email", field="email")
    existing = get_employee_by_email(employees, email)
    if existing is not None and existing.id != exclude_id:
        raise ValidationError("This email is already in use", field="email")
    return email


def _amount(value, field: str, required: bool = False) -> float:
    if value is None or value == "":
        if required:
            raise ValidationError("Salary is required", field=field)
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Enter a valid amount", field=field)
    if amount < 0:
        raise ValidationError("Amount cannot be negative", field=field)
    return amount


def _workday_hours(value) -> int:
    if value not in WORKDAY_HOURS:
        allowed = ", ".join(str(h) for h in WORKDAY_HOURS)
        raise ValidationError(f"Workday hours must be one of {allowed}", field="workdayHours")
    return int(value)


def _with_hourly_cost(fields: dict) -> dict:
    fields["hourly_cost"] = compute_hourly_cost(
        fields["salary_fixed"],
        fields["bonus_fixed"],
        fields["vouchers_fixed"],
        fields["workday_hours"],
        settings.WORKING_DAYS_IN_MONTH,
    )
    return fields


def create_employee(
    employees: Sequence[Employee],
    *,
    full_name: str,
    email: str,
    salary_fixed,
    role: Role = Role.EMPLOYEE,
    workday_hours: int = 8,
    bonus_fixed=0,
    vouchers_fixed=0,
) -> Tuple[List[Employee], Employee]:
    """Create new employee (active)"""
    full_name = (full_name or "").strip()
    if not full_name:
        raise ValidationError("Name is required", field="fullName")
    fields = _with_hourly_cost({
        "full_name": full_name,
        "email": _normalize_email(employees, email),
        "role": Role(role),
        "workday_hours": _workday_hours(workday_hours),
        "salary_fixed": _amount(salary_fixed, "salaryFixed", required=True),
        "bonus_fixed": _amount(bonus_fixed, "bonusFixed"),
        "vouchers_fixed": _amount(vouchers_fixed, "vouchersFixed"),
    })
    employee = Employee(is_active=True, **fields)
    return [*employees, employee], employee


def update_employee(
    employees: Sequence[Employee], employee_id: str, **changes
) -> Tuple[List[Employee], Employee]:
    """Update employee (partial update); hourly cost follows the pay fields"""
    employee = get_employee(employees, employee_id)
    fields = {
        "full_name": employee.full_name,
        "email": employee.email,
        "role": employee.role,
        "workday_hours": employee.workday_hours,
        "salary_fixed": employee.salary_fixed,
        "bonus_fixed": employee.bonus_fixed,
        "vouchers_fixed": employee.vouchers_fixed,
    }
    if changes.get("full_name") is not None:
        full_name = changes["full_name"].strip()
        if not full_name:
            raise ValidationError("Name is required", field="fullName")
        fields["full_name"] = full_name
    if changes.get("email") is not None:
        fields["email"] = _normalize_email(employees, changes["email"], exclude_id=employee_id)
    if changes.get("role") is not None:
        fields["role"] = Role(changes["role"])
    if changes.get("workday_hours") is not None:
        fields["workday_hours"] = _workday_hours(changes["workday_hours"])
    if changes.get("salary_fixed") is not None:
        fields["salary_fixed"] = _amount(changes["salary_fixed"], "salaryFixed", required=True)
    for key, field in (("bonus_fixed", "bonusFixed"), ("vouchers_fixed", "vouchersFixed")):
        if changes.get(key) is not None:
            fields[key] = _amount(changes[key], field)

    updated = employee.evolve(**_with_hourly_cost(fields))
    return [updated if e.id == employee_id else e for e in employees], updated


def set_employee_active(
    employees: Sequence[Employee], employee_id: str, active: bool
) -> Tuple[List[Employee], Employee]:
    """Activate / deactivate (soft delete)"""
    employee = get_employee(employees, employee_id)
    updated = employee.evolve(is_active=active)
    return [updated if e.id == employee_id else e for e in employees], updated


def employee_stats(employees: Sequence[Employee]) -> dict:
    """Employee statistics for the admin dashboard"""
    total = len(employees)
    active = [e for e in employees if e.is_active]
    admins = sum(1 for e in active if e.role == Role.ADMIN)
    return {
        "total": total,
        "active": len(active),
        "inactive": total - len(active),
        "admins": admins,
        "employees": len(active) - admins,
        # Monthly payroll of active staff
        "monthly_cost": sum(e.salary_fixed + e.bonus_fixed + e.vouchers_fixed for e in active),
    }
