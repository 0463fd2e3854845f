"""Monthly report, time entry and edit request schemas."""
from typing import Optional

from pydantic import Field

from records import EditRequest, MonthlyReport, TimeEntry
from schemas import ApiModel


class EntryIn(ApiModel):
    """Log time against a client service task."""
    client_id: str
    client_service_id: str
    task_id: str
    hours: float = Field(..., description="At least 0.25, in 0.25 steps")
    notes: Optional[str] = None


class EntryUpdateIn(ApiModel):
    client_id: Optional[str] = None
    client_service_id: Optional[str] = None
    task_id: Optional[str] = None
    hours: Optional[float] = None
    notes: Optional[str] = None


class EntryOut(TimeEntry):
    """Time entry with display names resolved ("Unknown" when dangling)."""
    client_name: Optional[str] = None
    employee_name: Optional[str] = None
    service_name: str
    task_name: str


def entry_out(item: dict) -> EntryOut:
    """Flatten an enriched entry ({"entry": TimeEntry, "<x>_name": ...})."""
    names = {k: v for k, v in item.items() if k != "entry"}
    return EntryOut(**item["entry"].model_dump(), **names)


class AdSpendIn(ApiModel):
    meta_spend: Optional[float] = None
    google_spend: Optional[float] = None


class ReportMonthsOut(ApiModel):
    current_month_key: str
    months: list[str]


class ReportViewOut(ApiModel):
    month_key: str
    month_label: str
    report: Optional[MonthlyReport]
    entries: list[EntryOut]
    total_hours: float
    total_hours_display: str
    is_locked: bool
    is_editable: bool
    edit_request_pending: bool


class DecisionIn(ApiModel):
    """Admin decision on an edit request."""
    reason: Optional[str] = Field(None, max_length=1000)


class AdminReportRowOut(ApiModel):
    report: MonthlyReport
    employee_name: str
    month_label: str
    entry_count: int
    total_hours: float


class PendingRequestOut(ApiModel):
    request: EditRequest
    employee_name: str
    month_key: Optional[str]
    month_label: str


class DecisionOut(ApiModel):
    request: EditRequest
    report: Optional[MonthlyReport]
