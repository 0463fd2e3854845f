"""Monthly report views for employees and the admin reports screen."""
from typing import Dict, List, Optional, Sequence

from records import (
    UNKNOWN_NAME,
    Client,
    EditRequest,
    EditRequestStatus,
    Employee,
    MonthlyReport,
    ReportStatus,
    Service,
    Task,
    TimeEntry,
)
from lifecycle import find_report, pending_request_for
from utils.months import format_month_key


def list_report_months(
    employee_id: str,
    reports: Sequence[MonthlyReport],
    current_month_key: str,
) -> List[str]:
    """Months an employee can pick: the current one plus every month with a report, newest first."""
    months = {current_month_key}
    months.update(r.month_key for r in reports if r.employee_id == employee_id)
    return sorted(months, reverse=True)


def build_report_view(
    employee_id: str,
    month_key: str,
    reports: Sequence[MonthlyReport],
    entries: Sequence[TimeEntry],
    requests: Sequence[EditRequest],
    clients: Sequence[Client],
    services: Sequence[Service],
    tasks: Sequence[Task],
) -> Dict:
    """
    Employee's report for one month.

    Args:
        employee_id: Owner of the report
        month_key: 'YYYY-MM'
        reports / entries / requests: Fact collections
        clients / services / tasks: Dimension collections (names only)

    Returns:
        {
            "month_key": str,
            "report": MonthlyReport | None,   # None if never created
            "entries": [{"entry", "client_name", "service_name", "task_name"}],  # creation order
            "total_hours": float,
            "is_locked": bool,                # SUBMITTED
            "is_editable": bool,              # OPEN / UNLOCKED
            "edit_request_pending": bool,
        }
    """
    report = find_report(reports, employee_id, month_key)
    client_names = {c.id: c.name for c in clients}
    service_names = {s.id: s.name for s in services}
    task_names = {t.id: t.name for t in tasks}

    report_entries = [e for e in entries if report is not None and e.report_id == report.id]
    report_entries.sort(key=lambda e: e.created_at)
    pending = report is not None and pending_request_for(requests, report.id, employee_id) is not None

    return {
        "month_key": month_key,
        "report": report,
        "entries": [
            {
                "entry": e,
                "client_name": client_names.get(e.client_id, UNKNOWN_NAME),
                "service_name": service_names.get(e.service_id, UNKNOWN_NAME),
                "task_name": task_names.get(e.task_id, UNKNOWN_NAME),
            }
            for e in report_entries
        ],
        "total_hours": sum(e.hours for e in report_entries),
        "is_locked": report is not None and report.is_locked,
        "is_editable": report is not None and report.is_editable,
        "edit_request_pending": pending,
    }


def build_admin_report_rows(
    reports: Sequence[MonthlyReport],
    entries: Sequence[TimeEntry],
    employees: Sequence[Employee],
    month_key: Optional[str] = None,
    status: Optional[ReportStatus] = None,
) -> List[Dict]:
    """All reports for the admin list: SUBMITTED first, then newest month first."""
    employee_names = {e.id: e.full_name for e in employees}
    stats: Dict[str, Dict] = {}
    for entry in entries:
        s = stats.setdefault(entry.report_id, {"count": 0, "hours": 0.0})
        s["count"] += 1
        s["hours"] += entry.hours

    selected = [
        r for r in reports
        if (month_key is None or r.month_key == month_key)
        and (status is None or r.status == status)
    ]
    # stable two-pass sort: month desc, then SUBMITTED to the top
    selected.sort(key=lambda r: r.month_key, reverse=True)
    selected.sort(key=lambda r: r.status != ReportStatus.SUBMITTED)

    rows = []
    for report in selected:
        s = stats.get(report.id, {"count": 0, "hours": 0.0})
        rows.append({
            "report": report,
            "employee_name": employee_names.get(report.employee_id, UNKNOWN_NAME),
            "month_label": format_month_key(report.month_key),
            "entry_count": s["count"],
            "total_hours": s["hours"],
        })
    return rows


def list_pending_edit_requests(
    requests: Sequence[EditRequest],
    reports: Sequence[MonthlyReport],
    employees: Sequence[Employee],
) -> List[Dict]:
    """PENDING requests, newest first, with a month label for display."""
    report_months = {r.id: r.month_key for r in reports}
    employee_names = {e.id: e.full_name for e in employees}

    pending = [r for r in requests if r.status == EditRequestStatus.PENDING]
    pending.sort(key=lambda r: r.created_at, reverse=True)

    rows = []
    for request in pending:
        month_key = request.month_key or report_months.get(request.report_id)
        rows.append({
            "request": request,
            "employee_name": employee_names.get(request.employee_id, UNKNOWN_NAME),
            "month_key": month_key,
            "month_label": format_month_key(month_key) if month_key else "—",
        })
    return rows
