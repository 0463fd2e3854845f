"""Domain records shared by storage, lifecycle and aggregation.

Records are frozen pydantic models. Python attributes are snake_case; the
wire/storage shape uses the camelCase keys of the agency's exported JSON
(``employeeId``, ``monthKey``, ``createdAt``...), so previously exported
collections can be imported as-is. Both spellings are accepted on input.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from utils.months import MONTH_KEY_PATTERN

WORKDAY_HOURS = (4, 6, 8)
MIN_ENTRY_HOURS = 0.25
HOURS_STEP = 0.25
DEFAULT_COMMISSION_PCT = 30.0
UNKNOWN_NAME = "Unknown"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything we store is UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]
MonthKey = Annotated[str, Field(pattern=MONTH_KEY_PATTERN)]


class Role(str, Enum):
    ADMIN = "ADMIN"
    EMPLOYEE = "EMPLOYEE"


class PricingType(str, Enum):
    FIXED_MONTHLY = "FIXED_MONTHLY"
    HOURLY = "HOURLY"
    COMMISSION = "COMMISSION"
    FIXED_ONE_TIME = "FIXED_ONE_TIME"


PRICING_TYPE_LABELS = {
    PricingType.FIXED_MONTHLY: "Fixed Monthly",
    PricingType.HOURLY: "Hourly",
    PricingType.COMMISSION: "Commission",
    PricingType.FIXED_ONE_TIME: "Fixed One-Time",
}


class ReportStatus(str, Enum):
    OPEN = "OPEN"
    SUBMITTED = "SUBMITTED"
    UNLOCKED = "UNLOCKED"


class EditRequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DENIED = "DENIED"


class Record(BaseModel):
    """Base for every persisted record."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    id: str = Field(default_factory=new_id)
    created_at: UtcDatetime = Field(default_factory=utcnow)

    def evolve(self, **changes):
        """Copy with ``changes`` applied (records are immutable)."""
        return self.model_copy(update=changes)


class VersionedRecord(Record):
    """Record guarded by an optimistic version counter."""

    version: int = Field(default=1, ge=1)

    def evolve(self, **changes):
        changes.setdefault("version", self.version + 1)
        return self.model_copy(update=changes)


class Employee(Record):
    full_name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    role: Role = Role.EMPLOYEE
    workday_hours: Literal[4, 6, 8] = 8
    salary_fixed: float = Field(default=0.0, ge=0)
    bonus_fixed: float = Field(default=0.0, ge=0)
    vouchers_fixed: float = Field(default=0.0, ge=0)
    hourly_cost: float = Field(default=0.0, ge=0)
    is_active: bool = True


class Client(Record):
    name: str = Field(min_length=1)
    company: Optional[str] = None
    tax_id: Optional[str] = Field(default=None, alias="eik")
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None


class Service(Record):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    pricing_type: PricingType = PricingType.HOURLY


class Task(Record):
    service_id: str
    name: str = Field(min_length=1)
    is_active: bool = True


class ClientService(Record):
    client_id: str
    service_id: str
    pricing_type: PricingType
    monthly_fixed_price: Optional[float] = None
    hourly_rate: Optional[float] = None
    one_time_price: Optional[float] = None
    commission_rate_pct: Optional[float] = None


class MonthlyReport(VersionedRecord):
    employee_id: str
    month_key: MonthKey
    status: ReportStatus = ReportStatus.OPEN
    submitted_at: Optional[UtcDatetime] = None
    unlocked_at: Optional[UtcDatetime] = None
    meta_spend: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    google_spend: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)

    @property
    def is_editable(self) -> bool:
        return self.status in (ReportStatus.OPEN, ReportStatus.UNLOCKED)

    @property
    def is_locked(self) -> bool:
        return self.status == ReportStatus.SUBMITTED


class TimeEntry(Record):
    report_id: str
    employee_id: str
    client_id: str
    client_service_id: str
    service_id: str
    task_id: str
    hours: float = Field(ge=MIN_ENTRY_HOURS, multiple_of=HOURS_STEP, allow_inf_nan=False)
    notes: Optional[str] = None


class EditRequest(VersionedRecord):
    report_id: str
    employee_id: str
    month_key: Optional[MonthKey] = None
    status: EditRequestStatus = EditRequestStatus.PENDING
    admin_id: Optional[str] = None
    decided_at: Optional[UtcDatetime] = None
    reason: Optional[str] = None


def compute_hourly_cost(
    salary_fixed: float,
    bonus_fixed: float,
    vouchers_fixed: float,
    workday_hours: int,
    working_days: int = 20,
) -> float:
    """Monthly package spread over the contractual monthly hours."""
    total = salary_fixed + bonus_fixed + vouchers_fixed
    monthly_hours = workday_hours * working_days
    return total / monthly_hours if monthly_hours > 0 else 0.0


def index_by_id(records) -> dict:
    return {r.id: r for r in records}
