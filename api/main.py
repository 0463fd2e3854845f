"""Agency Timesheets API."""
import logging
import platform
import time
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.responses import JSONResponse

from config import settings
from db import SessionLocal, create_schema
from errors import (
    ConcurrencyError,
    DuplicateRecordError,
    InvalidStateError,
    NotFoundError,
    PersistenceError,
    TimesheetError,
    ValidationError,
)
from endpoints_admin_reports import router as admin_reports_router  # Admin report list + edit-request decisions
from endpoints_client_reports import router as client_reports_router  # Per-client monthly rollups + CSV
from endpoints_clients import router as clients_router
from endpoints_employees import router as employees_router
from endpoints_reports import router as reports_router  # Employee's own monthly reports
from endpoints_services import router as services_router
from endpoints_settings import router as settings_router  # Backup export/import
from endpoints_tasks import router as tasks_router
from utils.audit import record_metric

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)

_started_at = time.time()

app = FastAPI(title="Agency Timesheets API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Most specific class first
ERROR_STATUS = [
    (DuplicateRecordError, status.HTTP_409_CONFLICT),
    (PersistenceError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidStateError, status.HTTP_409_CONFLICT),
    (ConcurrencyError, status.HTTP_409_CONFLICT),
]


def status_for(exc: TimesheetError) -> int:
    for cls, code in ERROR_STATUS:
        if isinstance(exc, cls):
            return code
    return status.HTTP_400_BAD_REQUEST


@app.exception_handler(TimesheetError)
async def timesheet_error_handler(request: Request, exc: TimesheetError):
    code = status_for(exc)
    if isinstance(exc, PersistenceError) and not isinstance(exc, DuplicateRecordError):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return JSONResponse(exc.to_dict(), status_code=code)


# Latency middleware (p50/p95 metrics)
ROUTE_KIND_OVERRIDES = {
    "/health": "health",
}


@app.middleware("http")
async def latency_metrics(request: Request, call_next):
    t0 = time.perf_counter()
    response = None
    try:
        response = await call_next(request)
        return response
    finally:
        dt_ms = round((time.perf_counter() - t0) * 1000.0, 2)
        path = request.url.path
        kind = ROUTE_KIND_OVERRIDES.get(path, "http.request")
        status_code = getattr(response, "status_code", 0) if response else 500
        record_metric(kind, {"path": path, "method": request.method, "status": status_code}, latency_ms=dt_ms)


# Include routers
app.include_router(employees_router)
app.include_router(clients_router)
app.include_router(services_router)
app.include_router(tasks_router)
app.include_router(reports_router)
app.include_router(admin_reports_router)
app.include_router(client_reports_router)
app.include_router(settings_router)


@app.on_event("startup")
def startup():
    """Create tables for dev/test runs; production databases are migrated by Alembic."""
    if settings.AUTO_CREATE_SCHEMA:
        create_schema()
        logger.info("Schema ensured at %s", settings.DB_PATH)


@app.get("/health")
def health():
    """Health check endpoint with uptime tracking."""
    db_ok = True
    session = SessionLocal()
    try:
        session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("Health check database probe failed: %s", exc)
        db_ok = False
    finally:
        session.close()

    return {
        "service": "api",
        "status": "ok" if db_ok else "degraded",
        "ok": db_ok,
        "uptime_s": round(time.time() - _started_at, 3),
        "version": app.version,
        "ts": datetime.now(timezone.utc).isoformat(),
        "python": platform.python_version(),
    }


if __name__ == "__main__":
    import os

    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
