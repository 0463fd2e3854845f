"""Admin report overview and edit-request decisions."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

import lifecycle
from auth import Principal, require_admin
from records import ReportStatus
from schemas_reports import AdminReportRowOut, DecisionIn, DecisionOut, PendingRequestOut
from storage import Storage, get_store
from utils.audit import log_action
from utils.monthly_report import build_admin_report_rows, list_pending_edit_requests
from utils.months import validate_month_key

router = APIRouter(prefix="/api/admin/reports", tags=["admin-reports"])


@router.get("", response_model=List[AdminReportRowOut])
async def list_reports(
    month: Optional[str] = Query(None, description="YYYY-MM"),
    report_status: Optional[ReportStatus] = Query(None, alias="status"),
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    """All reports, SUBMITTED first, then newest month, with entry count and hours."""
    if month:
        validate_month_key(month)
    return build_admin_report_rows(
        store.reports.load(),
        store.entries.load(),
        store.employees.load(),
        month_key=month,
        status=report_status,
    )


@router.get("/edit-requests", response_model=List[PendingRequestOut])
async def pending_edit_requests(
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    """PENDING edit requests, newest first."""
    return list_pending_edit_requests(
        store.edit_requests.load(),
        store.reports.load(),
        store.employees.load(),
    )


@router.post("/edit-requests/{request_id}/approve", response_model=DecisionOut)
async def approve_edit_request(
    request_id: str,
    data: Optional[DecisionIn] = None,
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    """Approve a PENDING request; its report becomes UNLOCKED."""
    requests, reports, request, report = lifecycle.approve_edit_request(
        store.edit_requests.load(),
        store.reports.load(),
        request_id,
        admin.employee_id,
        reason=data.reason if data else None,
    )
    store.edit_requests.save(requests)
    store.reports.save(reports)
    store.commit()
    log_action(
        admin.employee_id,
        "edit_request.approve",
        {"request_id": request_id, "report_id": report.id, "report_version": report.version},
    )
    return DecisionOut(request=request, report=report)


@router.post("/edit-requests/{request_id}/deny", response_model=DecisionOut)
async def deny_edit_request(
    request_id: str,
    data: Optional[DecisionIn] = None,
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    """Deny a PENDING request; the report stays SUBMITTED."""
    requests, request = lifecycle.deny_edit_request(
        store.edit_requests.load(),
        request_id,
        admin.employee_id,
        reason=data.reason if data else None,
    )
    store.edit_requests.save(requests)
    store.commit()
    log_action(admin.employee_id, "edit_request.deny", {"request_id": request_id, "reason": request.reason})
    return DecisionOut(request=request, report=store.reports.get(request.report_id))
