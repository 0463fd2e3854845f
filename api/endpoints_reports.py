"""Employee monthly report endpoints.

Every route works on the calling principal's own report for a month:
view it, log time, submit it, ask for it to be unlocked again.
"""
import logging

from fastapi import APIRouter, Depends, Response, status

import lifecycle
from auth import Principal, require_any_role
from errors import DuplicateRecordError, NotFoundError
from records import EditRequest, MonthlyReport
from schemas_reports import (
    AdSpendIn,
    EntryIn,
    EntryOut,
    EntryUpdateIn,
    ReportMonthsOut,
    ReportViewOut,
    entry_out,
)
from storage import Storage, get_store
from utils.audit import log_action
from utils.money import fmt_hours
from utils.monthly_report import build_report_view, list_report_months
from utils.months import current_month_key, format_month_key, validate_month_key

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reports", tags=["reports"])


def ensure_report(store: Storage, employee_id: str, month_key: str) -> MonthlyReport:
    """Existing report for (employee, month) or a freshly committed OPEN one.

    Two requests racing to create the same report both hit the unique index;
    the loser rolls back and re-reads the winner's row.
    """
    reports = store.reports.load()
    updated, report = lifecycle.create_report_if_missing(reports, employee_id, month_key)
    if len(updated) == len(reports):
        return report
    try:
        store.reports.save(updated)
        store.commit()
    except DuplicateRecordError:
        store.rollback()
        report = lifecycle.find_report(store.reports.load(), employee_id, month_key)
        if report is None:
            raise
        logger.info("Report %s/%s created concurrently, using existing", employee_id, month_key)
        return report
    log_action(employee_id, "report.create", {"report_id": report.id, "month_key": month_key})
    return report


def _report_for(store: Storage, principal: Principal, month_key: str) -> MonthlyReport:
    """The principal's report for ``month_key``; the current month is created on demand."""
    validate_month_key(month_key)
    if month_key == current_month_key():
        return ensure_report(store, principal.employee_id, month_key)
    report = lifecycle.find_report(store.reports.load(), principal.employee_id, month_key)
    if report is None:
        raise NotFoundError("MonthlyReport", f"{principal.employee_id}/{month_key}")
    return report


def _view(store: Storage, principal: Principal, month_key: str) -> ReportViewOut:
    view = build_report_view(
        principal.employee_id,
        month_key,
        store.reports.load(),
        store.entries.load(),
        store.edit_requests.load(),
        store.clients.load(),
        store.services.load(),
        store.tasks.load(),
    )
    return ReportViewOut(
        month_key=month_key,
        month_label=format_month_key(month_key),
        report=view["report"],
        entries=[entry_out(item) for item in view["entries"]],
        total_hours=view["total_hours"],
        total_hours_display=fmt_hours(view["total_hours"]),
        is_locked=view["is_locked"],
        is_editable=view["is_editable"],
        edit_request_pending=view["edit_request_pending"],
    )


def _entry_view(store: Storage, principal: Principal, entry_id: str) -> EntryOut:
    """One entry with its display names, as shown in the month view."""
    entry = store.entries.get(entry_id)
    report = store.reports.get(entry.report_id)
    view = _view(store, principal, report.month_key)
    return next(e for e in view.entries if e.id == entry_id)


@router.get("/months", response_model=ReportMonthsOut)
async def report_months(
    principal: Principal = Depends(require_any_role),
    store: Storage = Depends(get_store),
):
    """Months to choose from: current month plus every month with a report."""
    current = current_month_key()
    return ReportMonthsOut(
        current_month_key=current,
        months=list_report_months(principal.employee_id, store.reports.load(), current),
    )


@router.get("/current", response_model=ReportViewOut)
async def current_report(
    principal: Principal = Depends(require_any_role),
    store: Storage = Depends(get_store),
):
    """Current month's report, created as OPEN on first visit."""
    month_key = current_month_key()
    ensure_report(store, principal.employee_id, month_key)
    return _view(store, principal, month_key)


# Entry routes come before /{month_key} routes so "entries" is never read as a month.

@router.patch("/entries/{entry_id}", response_model=EntryOut)
async def update_entry(
    entry_id: str,
    data: EntryUpdateIn,
    principal: Principal = Depends(require_any_role),
    store: Storage = Depends(get_store),
):
    entries, entry = lifecycle.update_entry(
        store.entries.load(),
        store.reports.load(),
        store.client_services.load(),
        store.tasks.load(),
        entry_id,
        principal.employee_id,
        **data.model_dump(exclude_unset=True),
    )
    store.entries.save(entries)
    store.commit()
    log_action(principal.employee_id, "entry.update", {"entry_id": entry_id})
    return _entry_view(store, principal, entry.id)


@router.delete("/entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(
    entry_id: str,
    principal: Principal = Depends(require_any_role),
    store: Storage = Depends(get_store),
):
    entries = lifecycle.delete_entry(store.entries.load(), store.reports.load(), entry_id, principal.employee_id)
    store.entries.save(entries)
    store.commit()
    log_action(principal.employee_id, "entry.delete", {"entry_id": entry_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{month_key}", response_model=ReportViewOut)
async def get_report(
    month_key: str,
    principal: Principal = Depends(require_any_role),
    store: Storage = Depends(get_store),
):
    """Report view for any month; months without a report come back empty."""
    validate_month_key(month_key)
    if month_key == current_month_key():
        ensure_report(store, principal.employee_id, month_key)
    return _view(store, principal, month_key)


@router.post("/{month_key}/entries", response_model=EntryOut, status_code=status.HTTP_201_CREATED)
async def add_entry(
    month_key: str,
    data: EntryIn,
    principal: Principal = Depends(require_any_role),
    store: Storage = Depends(get_store),
):
    """Log time on the month's report (OPEN or UNLOCKED only)."""
    report = _report_for(store, principal, month_key)
    entries, entry = lifecycle.add_entry(
        store.entries.load(),
        store.reports.load(),
        store.client_services.load(),
        store.tasks.load(),
        report_id=report.id,
        employee_id=principal.employee_id,
        **data.model_dump(),
    )
    store.entries.save(entries)
    store.commit()
    log_action(principal.employee_id, "entry.create", {"entry_id": entry.id, "report_id": report.id, "hours": entry.hours})
    return _entry_view(store, principal, entry.id)


@router.put("/{month_key}/ad-spend", response_model=MonthlyReport)
async def update_ad_spend(
    month_key: str,
    data: AdSpendIn,
    principal: Principal = Depends(require_any_role),
    store: Storage = Depends(get_store),
):
    report = _report_for(store, principal, month_key)
    reports, report = lifecycle.update_ad_spend(
        store.reports.load(), report.id, data.meta_spend, data.google_spend
    )
    store.reports.save(reports)
    store.commit()
    return report


@router.post("/{month_key}/submit", response_model=MonthlyReport)
async def submit_report(
    month_key: str,
    principal: Principal = Depends(require_any_role),
    store: Storage = Depends(get_store),
):
    """Lock the report. Needs at least one entry; resubmitting is refused."""
    report = _report_for(store, principal, month_key)
    reports, report = lifecycle.submit_report(store.reports.load(), store.entries.load(), report.id)
    store.reports.save(reports)
    store.commit()
    log_action(principal.employee_id, "report.submit", {"report_id": report.id, "month_key": month_key})
    return report


@router.post("/{month_key}/edit-request", response_model=EditRequest)
async def request_edit(
    month_key: str,
    principal: Principal = Depends(require_any_role),
    store: Storage = Depends(get_store),
):
    """Ask an admin to unlock a submitted report.

    Asking again while a request is pending returns that same request.
    """
    report = _report_for(store, principal, month_key)
    requests = store.edit_requests.load()
    updated, request = lifecycle.request_edit(
        requests,
        store.reports.load(),
        report.id,
        principal.employee_id,
        month_key=report.month_key,
    )
    if len(updated) != len(requests):
        store.edit_requests.save(updated)
        store.commit()
        log_action(principal.employee_id, "report.request_edit", {"report_id": report.id, "request_id": request.id})
    return request
