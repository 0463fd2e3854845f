"""Admin client reports: monthly hours per client, drill-down and CSV export."""
import csv
import io
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from auth import Principal, require_admin
from errors import NotFoundError
from schemas_client_reports import ClientMonthDetailOut, ClientMonthRowOut
from schemas_reports import entry_out
from storage import Storage, get_store
from utils.client_reports import build_client_month_detail, build_client_month_rows
from utils.money import fmt_hours
from utils.months import current_month_key, format_month_key, validate_month_key

router = APIRouter(prefix="/api/admin/client-reports", tags=["client-reports"])


def _month(month: Optional[str]) -> str:
    return validate_month_key(month) if month else current_month_key()


@router.get("", response_model=List[ClientMonthRowOut])
async def client_month_rows(
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to the current month"),
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    """One row per client (busiest first); clients without hours are listed too."""
    return build_client_month_rows(
        _month(month),
        store.clients.load(),
        store.reports.load(),
        store.entries.load(),
        store.services.load(),
    )


@router.get("/export.csv")
def export_client_month_csv(
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to the current month"),
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    """
    Export the monthly client rollup as CSV.

    Columns: Client, Company, Hours, Employees, Top services.
    A TOTAL row follows when more than one client is listed.
    """
    month_key = _month(month)
    rows = build_client_month_rows(
        month_key,
        store.clients.load(),
        store.reports.load(),
        store.entries.load(),
        store.services.load(),
    )

    output = io.StringIO()
    writer = csv.writer(output, delimiter=',', quotechar='"', quoting=csv.QUOTE_MINIMAL)
    writer.writerow(["Client", "Company", "Hours", "Employees", "Top services"])
    for row in rows:
        client = row["client"]
        writer.writerow([
            client.name,
            client.company or "",
            fmt_hours(row["total_hours"]),
            row["employee_count"],
            "; ".join(f"{s['service_name']} ({fmt_hours(s['hours'])}h)" for s in row["top_services"]),
        ])

    if len(rows) > 1:
        writer.writerow([])
        writer.writerow(["TOTAL", "", fmt_hours(sum(r["total_hours"] for r in rows)), "", ""])

    output.seek(0)
    filename = f"client_report_{month_key}.csv"
    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{client_id}", response_model=ClientMonthDetailOut)
async def client_month_detail(
    client_id: str,
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to the current month"),
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    """Per-employee / per-service / per-task hours and the entries behind them."""
    month_key = _month(month)
    detail = build_client_month_detail(
        client_id,
        month_key,
        store.clients.load(),
        store.reports.load(),
        store.entries.load(),
        store.employees.load(),
        store.services.load(),
        store.tasks.load(),
    )
    if detail is None:
        raise NotFoundError("Client", client_id)
    detail["month_label"] = format_month_key(month_key)
    detail["entries"] = [entry_out(item) for item in detail["entries"]]
    return detail
