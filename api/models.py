"""SQLAlchemy models for Agency Timesheets API.

One table per record collection. Column names match the snake_case
attributes of the records in ``records.py`` so rows and records convert
field by field.
"""
from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Employee(Base):
    """Agency employee (never hard-deleted, only deactivated)."""

    __tablename__ = "employees"

    id = Column(String(64), primary_key=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    role = Column(String(16), nullable=False, default="EMPLOYEE")
    workday_hours = Column(Integer, nullable=False, default=8)
    salary_fixed = Column(Float, nullable=False, default=0.0)
    bonus_fixed = Column(Float, nullable=False, default=0.0)
    vouchers_fixed = Column(Float, nullable=False, default=0.0)
    hourly_cost = Column(Float, nullable=False, default=0.0)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class Client(Base):
    __tablename__ = "clients"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    company = Column(String(255), nullable=True)
    tax_id = Column(String(64), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(64), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class Service(Base):
    __tablename__ = "services"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    pricing_type = Column(String(32), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


class Task(Base):
    """Billable work template under a service."""

    __tablename__ = "tasks"

    id = Column(String(64), primary_key=True)
    service_id = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class ClientService(Base):
    """Service attached to a client with client-specific pricing."""

    __tablename__ = "client_services"
    __table_args__ = (
        UniqueConstraint("client_id", "service_id", name="uq_client_services_client_service"),
    )

    id = Column(String(64), primary_key=True)
    client_id = Column(String(64), nullable=False, index=True)
    service_id = Column(String(64), nullable=False)
    pricing_type = Column(String(32), nullable=False)
    monthly_fixed_price = Column(Float, nullable=True)
    hourly_rate = Column(Float, nullable=True)
    one_time_price = Column(Float, nullable=True)
    commission_rate_pct = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class MonthlyReport(Base):
    """One report per (employee, month)."""

    __tablename__ = "monthly_reports"
    __table_args__ = (
        UniqueConstraint("employee_id", "month_key", name="uq_monthly_reports_employee_month"),
    )

    id = Column(String(64), primary_key=True)
    employee_id = Column(String(64), nullable=False, index=True)
    month_key = Column(String(7), nullable=False, index=True)
    status = Column(String(16), nullable=False, default="OPEN")
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    unlocked_at = Column(DateTime(timezone=True), nullable=True)
    meta_spend = Column(Float, nullable=True)
    google_spend = Column(Float, nullable=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False)


class TimeEntry(Base):
    __tablename__ = "time_entries"

    id = Column(String(64), primary_key=True)
    report_id = Column(String(64), nullable=False, index=True)
    employee_id = Column(String(64), nullable=False, index=True)
    client_id = Column(String(64), nullable=False, index=True)
    client_service_id = Column(String(64), nullable=False)
    service_id = Column(String(64), nullable=False)
    task_id = Column(String(64), nullable=False)
    hours = Column(Float, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class EditRequest(Base):
    """Employee request to unlock a submitted report."""

    __tablename__ = "edit_requests"

    id = Column(String(64), primary_key=True)
    report_id = Column(String(64), nullable=False, index=True)
    employee_id = Column(String(64), nullable=False, index=True)
    month_key = Column(String(7), nullable=True)
    status = Column(String(16), nullable=False, default="PENDING", index=True)
    admin_id = Column(String(64), nullable=True)
    decided_at = Column(DateTime(timezone=True), nullable=True)
    reason = Column(Text, nullable=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False)
