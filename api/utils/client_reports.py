"""Per-client monthly hour rollups for the admin "client reports" view.

Pure functions over fully loaded collections. Entries carry no month of
their own: an entry belongs to month M iff its report's month_key is M.
Ids that no longer resolve (deleted service, task, employee) render as
"Unknown" instead of failing.
"""
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from records import (
    UNKNOWN_NAME,
    Client,
    Employee,
    MonthlyReport,
    Service,
    Task,
    TimeEntry,
)

TOP_SERVICES = 2


def report_month_map(reports: Sequence[MonthlyReport]) -> Dict[str, str]:
    return {r.id: r.month_key for r in reports}


def entries_for_month(
    month_key: str,
    reports: Sequence[MonthlyReport],
    entries: Sequence[TimeEntry],
) -> List[TimeEntry]:
    """Entries whose owning report is in ``month_key``, original order kept."""
    months = report_month_map(reports)
    return [e for e in entries if months.get(e.report_id) == month_key]


def _names(items, attr: str = "name") -> Dict[str, str]:
    return {item.id: getattr(item, attr) for item in items}


def _sum_by(entries: Sequence[TimeEntry], key: str) -> Dict[str, float]:
    # dicts keep first-seen order, so equal sums stay in encounter order
    totals: Dict[str, float] = defaultdict(float)
    for entry in entries:
        totals[getattr(entry, key)] += entry.hours
    return totals


def _ranked(totals: Dict[str, float]) -> List[tuple]:
    return sorted(totals.items(), key=lambda item: -item[1])


def build_client_month_rows(
    month_key: str,
    clients: Sequence[Client],
    reports: Sequence[MonthlyReport],
    entries: Sequence[TimeEntry],
    services: Sequence[Service],
) -> List[Dict]:
    """One row per client for the month, busiest first.

    Returns:
        [
            {
                "client": Client,
                "total_hours": float,
                "employee_count": int,
                "top_services": [{"service_name": str, "hours": float}, ...],  # at most 2
            }
        ]

    Clients without entries are still listed (0 hours, 0 employees) and sort
    last; equal totals keep the clients' original order.
    """
    service_names = _names(services)
    month_entries = entries_for_month(month_key, reports, entries)

    by_client: Dict[str, List[TimeEntry]] = defaultdict(list)
    for entry in month_entries:
        by_client[entry.client_id].append(entry)

    rows = []
    for client in clients:
        client_entries = by_client.get(client.id, [])
        top = _ranked(_sum_by(client_entries, "service_id"))[:TOP_SERVICES]
        rows.append({
            "client": client,
            "total_hours": sum(e.hours for e in client_entries),
            "employee_count": len({e.employee_id for e in client_entries}),
            "top_services": [
                {"service_name": service_names.get(sid, UNKNOWN_NAME), "hours": hours}
                for sid, hours in top
            ],
        })
    rows.sort(key=lambda row: -row["total_hours"])
    return rows


def build_client_month_detail(
    client_id: str,
    month_key: str,
    clients: Sequence[Client],
    reports: Sequence[MonthlyReport],
    entries: Sequence[TimeEntry],
    employees: Sequence[Employee],
    services: Sequence[Service],
    tasks: Sequence[Task],
) -> Optional[Dict]:
    """Drill-down for one client and month, or None if the client is gone.

    by_employee / by_service / by_task are partitions of the same filtered
    entries, so each of them sums to total_hours. Entries come newest first.
    """
    client = next((c for c in clients if c.id == client_id), None)
    if client is None:
        return None

    employee_names = _names(employees, "full_name")
    service_names = _names(services)
    task_names = _names(tasks)

    filtered = [e for e in entries_for_month(month_key, reports, entries) if e.client_id == client_id]

    def breakdown(key: str, names: Dict[str, str], prefix: str) -> List[Dict]:
        return [
            {f"{prefix}_id": rid, f"{prefix}_name": names.get(rid, UNKNOWN_NAME), "hours": hours}
            for rid, hours in _ranked(_sum_by(filtered, key))
        ]

    enriched = [
        {
            "entry": e,
            "employee_name": employee_names.get(e.employee_id, UNKNOWN_NAME),
            "service_name": service_names.get(e.service_id, UNKNOWN_NAME),
            "task_name": task_names.get(e.task_id, UNKNOWN_NAME),
        }
        for e in filtered
    ]
    enriched.sort(key=lambda item: item["entry"].created_at, reverse=True)

    return {
        "client": client,
        "month_key": month_key,
        "total_hours": sum(e.hours for e in filtered),
        "employee_count": len({e.employee_id for e in filtered}),
        "service_count": len({e.service_id for e in filtered}),
        "task_count": len({e.task_id for e in filtered}),
        "by_employee": breakdown("employee_id", employee_names, "employee"),
        "by_service": breakdown("service_id", service_names, "service"),
        "by_task": breakdown("task_id", task_names, "task"),
        "entries": enriched,
    }
