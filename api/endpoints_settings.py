"""Settings endpoints (JSON backup export/import)."""
import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from auth import Principal, require_admin
from errors import ValidationError
from records import EditRequestStatus
from storage import Storage, get_store
from utils.audit import log_action

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/settings", tags=["settings"])

BACKUP_FORMAT_VERSION = 1


def _first_duplicate(keys) -> Any:
    for key, count in Counter(keys).items():
        if count > 1:
            return key
    return None


def check_invariants(snapshot: Dict[str, list]) -> None:
    """
    Cross-record rules a backup must satisfy before it replaces anything.

    ``snapshot`` maps every collection name to its full record list (the
    imported lists merged with what is stored for collections the backup
    leaves out). Raises ValidationError naming the offending collection.
    """
    def require_unique(name: str, keys, message: str) -> None:
        duplicate = _first_duplicate(keys)
        if duplicate is not None:
            raise ValidationError(f"{message}: {duplicate}", field=name)

    for name, items in snapshot.items():
        require_unique(name, (item.id for item in items), "Duplicate id")

    require_unique(
        "employees",
        (e.email.lower() for e in snapshot["employees"]),
        "Duplicate employee email",
    )
    require_unique(
        "services",
        (s.name.lower() for s in snapshot["services"]),
        "Duplicate service name",
    )
    require_unique(
        "tasks",
        ((t.service_id, t.name.lower()) for t in snapshot["tasks"]),
        "Duplicate task name within a service",
    )
    require_unique(
        "clientServices",
        ((cs.client_id, cs.service_id) for cs in snapshot["clientServices"]),
        "Service attached twice to a client",
    )
    require_unique(
        "monthlyReports",
        ((r.employee_id, r.month_key) for r in snapshot["monthlyReports"]),
        "More than one report for employee and month",
    )
    require_unique(
        "editRequests",
        (
            (r.employee_id, r.report_id)
            for r in snapshot["editRequests"]
            if r.status == EditRequestStatus.PENDING
        ),
        "More than one pending edit request for employee and report",
    )

    reports = {r.id: r for r in snapshot["monthlyReports"]}
    for entry in snapshot["timeEntries"]:
        report = reports.get(entry.report_id)
        if report is None or report.employee_id != entry.employee_id:
            raise ValidationError(
                f"Time entry {entry.id} does not belong to a report of its employee",
                field="timeEntries",
            )
    for request in snapshot["editRequests"]:
        report = reports.get(request.report_id)
        if report is None or report.employee_id != request.employee_id:
            raise ValidationError(
                f"Edit request {request.id} does not belong to a report of its employee",
                field="editRequests",
            )


@router.get("/backup")
async def export_backup(
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    """Every collection as camelCase JSON records (the import format)."""
    collections = {
        name: [item.model_dump(mode="json", by_alias=True) for item in collection.load()]
        for name, collection in store.collections().items()
    }
    log_action(admin.employee_id, "backup.export", {name: len(items) for name, items in collections.items()})
    return {
        "version": BACKUP_FORMAT_VERSION,
        "exportedAt": datetime.now(timezone.utc).isoformat(),
        "collections": collections,
    }


@router.post("/backup")
async def import_backup(
    payload: Dict[str, Any] = Body(...),
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    """
    Replace collections from a backup.

    Only collections present in ``payload["collections"]`` are replaced.
    Every record is validated before anything is written; the replacement
    commits as one transaction.
    """
    raw = payload.get("collections")
    if not isinstance(raw, dict):
        raise ValidationError("Backup must contain a 'collections' object", field="collections")

    known = store.collections()
    unknown = sorted(set(raw) - set(known))
    if unknown:
        raise ValidationError(f"Unknown collections: {', '.join(unknown)}", field="collections")

    parsed = {}
    for name, items in raw.items():
        collection = known[name]
        try:
            parsed[name] = TypeAdapter(List[collection.record_cls]).validate_python(items)
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            raise ValidationError(f"Invalid {name} record: {first['msg']}", field=f"{name}.{location}")

    snapshot = {
        name: parsed[name] if name in parsed else collection.load()
        for name, collection in known.items()
    }
    check_invariants(snapshot)

    for name, items in parsed.items():
        known[name].replace(items)
    store.commit()

    counts = {name: len(items) for name, items in parsed.items()}
    logger.info("Backup imported by %s: %s", admin.employee_id, counts)
    log_action(admin.employee_id, "backup.import", counts)
    return {"imported": counts}
