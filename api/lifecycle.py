"""Monthly report lifecycle.

    OPEN ──submit──▶ SUBMITTED ──edit request approved──▶ UNLOCKED
      ▲                                                     │
      └──────────────── (UNLOCKED edits like OPEN) ◀────────┘
                          UNLOCKED ──submit──▶ SUBMITTED

Edit requests go PENDING -> APPROVED | DENIED and are terminal after that.

Every function takes the collections it needs and returns new ones; inputs
are never mutated. All checks run before anything is built, so a raised
error leaves the caller's collections exactly as they were. Callers load
the collections, call one of these, and save what came back.
"""
from __future__ import annotations

import math
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from errors import InvalidStateError, NotFoundError, ValidationError
from records import (
    HOURS_STEP,
    MIN_ENTRY_HOURS,
    ClientService,
    EditRequest,
    EditRequestStatus,
    MonthlyReport,
    ReportStatus,
    Task,
    TimeEntry,
    utcnow,
)
from utils.months import validate_month_key


def _replace(items: Sequence, record) -> list:
    return [record if item.id == record.id else item for item in items]


def _find(items: Sequence, record_id: str, entity: str):
    for item in items:
        if item.id == record_id:
            return item
    raise NotFoundError(entity, record_id)


def find_report(reports: Sequence[MonthlyReport], employee_id: str, month_key: str) -> Optional[MonthlyReport]:
    for report in reports:
        if report.employee_id == employee_id and report.month_key == month_key:
            return report
    return None


def validate_hours(hours) -> float:
    """Hours must be at least 0.25 and a multiple of 0.25."""
    try:
        value = float(hours)
    except (TypeError, ValueError):
        raise ValidationError("Hours must be a number", field="hours")
    if not math.isfinite(value):
        raise ValidationError("Hours must be a finite number", field="hours")
    if value < MIN_ENTRY_HOURS:
        raise ValidationError(f"Hours must be at least {MIN_ENTRY_HOURS}", field="hours")
    steps = value / HOURS_STEP
    if abs(steps - round(steps)) > 1e-9:
        raise ValidationError(f"Hours must be in steps of {HOURS_STEP}", field="hours")
    return value


def _require_editable(report: MonthlyReport) -> None:
    if not report.is_editable:
        raise InvalidStateError(
            "Report is submitted; request an edit to change it",
            current=report.status.value,
        )


def _require_owner(report: MonthlyReport, employee_id: str) -> None:
    if report.employee_id != employee_id:
        raise ValidationError("Report belongs to another employee", field="reportId")


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

def create_report_if_missing(
    reports: Sequence[MonthlyReport],
    employee_id: str,
    month_key: str,
    now: Optional[datetime] = None,
) -> Tuple[List[MonthlyReport], MonthlyReport]:
    """Existing report for (employee, month) or a new OPEN one."""
    validate_month_key(month_key)
    existing = find_report(reports, employee_id, month_key)
    if existing is not None:
        return list(reports), existing
    report = MonthlyReport(
        employee_id=employee_id,
        month_key=month_key,
        status=ReportStatus.OPEN,
        created_at=now or utcnow(),
    )
    return [*reports, report], report


def submit_report(
    reports: Sequence[MonthlyReport],
    entries: Sequence[TimeEntry],
    report_id: str,
    now: Optional[datetime] = None,
) -> Tuple[List[MonthlyReport], MonthlyReport]:
    report = _find(reports, report_id, "MonthlyReport")
    if report.status == ReportStatus.SUBMITTED:
        raise InvalidStateError("Report is already submitted", current=report.status.value)
    if not any(entry.report_id == report_id for entry in entries):
        raise InvalidStateError("Cannot submit a report without entries", current=report.status.value)
    updated = report.evolve(status=ReportStatus.SUBMITTED, submitted_at=now or utcnow())
    return _replace(reports, updated), updated


def update_ad_spend(
    reports: Sequence[MonthlyReport],
    report_id: str,
    meta_spend: Optional[float],
    google_spend: Optional[float],
) -> Tuple[List[MonthlyReport], MonthlyReport]:
    report = _find(reports, report_id, "MonthlyReport")
    _require_editable(report)
    for field, value in (("metaSpend", meta_spend), ("googleSpend", google_spend)):
        if value is None:
            continue
        if not math.isfinite(value):
            raise ValidationError("Ad spend must be a finite number", field=field)
        if value < 0:
            raise ValidationError("Ad spend cannot be negative", field=field)
    updated = report.evolve(meta_spend=meta_spend, google_spend=google_spend)
    return _replace(reports, updated), updated


# ---------------------------------------------------------------------------
# Edit requests
# ---------------------------------------------------------------------------

def pending_request_for(
    requests: Sequence[EditRequest], report_id: str, employee_id: str
) -> Optional[EditRequest]:
    for request in requests:
        if (
            request.report_id == report_id
            and request.employee_id == employee_id
            and request.status == EditRequestStatus.PENDING
        ):
            return request
    return None


def request_edit(
    requests: Sequence[EditRequest],
    reports: Sequence[MonthlyReport],
    report_id: str,
    employee_id: str,
    month_key: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Tuple[List[EditRequest], EditRequest]:
    """Ask for a submitted report to be unlocked.

    A second call while the first request is still PENDING returns that
    request and leaves the collection unchanged.
    """
    report = _find(reports, report_id, "MonthlyReport")
    _require_owner(report, employee_id)
    existing = pending_request_for(requests, report_id, employee_id)
    if existing is not None:
        return list(requests), existing
    if report.status != ReportStatus.SUBMITTED:
        raise InvalidStateError("Only submitted reports can be unlocked", current=report.status.value)
    request = EditRequest(
        report_id=report_id,
        employee_id=employee_id,
        month_key=month_key or report.month_key,
        status=EditRequestStatus.PENDING,
        created_at=now or utcnow(),
    )
    return [*requests, request], request


def _require_pending(request: EditRequest) -> None:
    if request.status != EditRequestStatus.PENDING:
        raise InvalidStateError(
            f"Edit request already {request.status.value.lower()}",
            current=request.status.value,
        )


def approve_edit_request(
    requests: Sequence[EditRequest],
    reports: Sequence[MonthlyReport],
    request_id: str,
    admin_id: str,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Tuple[List[EditRequest], List[MonthlyReport], EditRequest, MonthlyReport]:
    """Approve a PENDING request and unlock its report."""
    request = _find(requests, request_id, "EditRequest")
    _require_pending(request)
    report = _find(reports, request.report_id, "MonthlyReport")
    moment = now or utcnow()
    approved = request.evolve(
        status=EditRequestStatus.APPROVED,
        admin_id=admin_id,
        decided_at=moment,
        reason=reason or None,
    )
    unlocked = report.evolve(status=ReportStatus.UNLOCKED, unlocked_at=moment)
    return _replace(requests, approved), _replace(reports, unlocked), approved, unlocked


def deny_edit_request(
    requests: Sequence[EditRequest],
    request_id: str,
    admin_id: str,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Tuple[List[EditRequest], EditRequest]:
    """Deny a PENDING request. The report stays locked."""
    request = _find(requests, request_id, "EditRequest")
    _require_pending(request)
    denied = request.evolve(
        status=EditRequestStatus.DENIED,
        admin_id=admin_id,
        decided_at=now or utcnow(),
        reason=reason or None,
    )
    return _replace(requests, denied), denied


# ---------------------------------------------------------------------------
# Time entries
# ---------------------------------------------------------------------------

def _resolve_work(
    client_services: Sequence[ClientService],
    tasks: Sequence[Task],
    client_id: str,
    client_service_id: str,
    task_id: str,
    require_active_task: bool,
) -> ClientService:
    client_service = _find(client_services, client_service_id, "ClientService")
    if client_service.client_id != client_id:
        raise ValidationError("Service is not attached to this client", field="clientServiceId")
    task = _find(tasks, task_id, "Task")
    if task.service_id != client_service.service_id:
        raise ValidationError("Task does not belong to the selected service", field="taskId")
    if require_active_task and not task.is_active:
        raise ValidationError("Task is inactive", field="taskId")
    return client_service


def add_entry(
    entries: Sequence[TimeEntry],
    reports: Sequence[MonthlyReport],
    client_services: Sequence[ClientService],
    tasks: Sequence[Task],
    *,
    report_id: str,
    employee_id: str,
    client_id: str,
    client_service_id: str,
    task_id: str,
    hours: float,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Tuple[List[TimeEntry], TimeEntry]:
    report = _find(reports, report_id, "MonthlyReport")
    _require_owner(report, employee_id)
    _require_editable(report)
    hours = validate_hours(hours)
    client_service = _resolve_work(
        client_services, tasks, client_id, client_service_id, task_id, require_active_task=True
    )
    entry = TimeEntry(
        report_id=report_id,
        employee_id=employee_id,
        client_id=client_id,
        client_service_id=client_service_id,
        service_id=client_service.service_id,
        task_id=task_id,
        hours=hours,
        notes=(notes or "").strip() or None,
        created_at=now or utcnow(),
    )
    return [*entries, entry], entry


def update_entry(
    entries: Sequence[TimeEntry],
    reports: Sequence[MonthlyReport],
    client_services: Sequence[ClientService],
    tasks: Sequence[Task],
    entry_id: str,
    employee_id: str,
    *,
    client_id: Optional[str] = None,
    client_service_id: Optional[str] = None,
    task_id: Optional[str] = None,
    hours: Optional[float] = None,
    notes: Optional[str] = None,
) -> Tuple[List[TimeEntry], TimeEntry]:
    """Edit an entry in place; omitted fields keep their value."""
    entry = _find(entries, entry_id, "TimeEntry")
    if entry.employee_id != employee_id:
        raise NotFoundError("TimeEntry", entry_id)
    report = _find(reports, entry.report_id, "MonthlyReport")
    _require_editable(report)

    changes = {}
    if hours is not None:
        changes["hours"] = validate_hours(hours)
    if notes is not None:
        changes["notes"] = notes.strip() or None
    if client_id is not None or client_service_id is not None or task_id is not None:
        new_client = client_id or entry.client_id
        new_client_service = client_service_id or entry.client_service_id
        new_task = task_id or entry.task_id
        # keeping an existing (possibly since deactivated) task is allowed
        client_service = _resolve_work(
            client_services,
            tasks,
            new_client,
            new_client_service,
            new_task,
            require_active_task=new_task != entry.task_id,
        )
        changes.update(
            client_id=new_client,
            client_service_id=new_client_service,
            service_id=client_service.service_id,
            task_id=new_task,
        )
    updated = entry.evolve(**changes)
    return _replace(entries, updated), updated


def delete_entry(
    entries: Sequence[TimeEntry],
    reports: Sequence[MonthlyReport],
    entry_id: str,
    employee_id: str,
) -> List[TimeEntry]:
    entry = _find(entries, entry_id, "TimeEntry")
    if entry.employee_id != employee_id:
        raise NotFoundError("TimeEntry", entry_id)
    report = _find(reports, entry.report_id, "MonthlyReport")
    _require_editable(report)
    return [item for item in entries if item.id != entry_id]
