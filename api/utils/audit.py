"""Lightweight metrics/audit helpers for API endpoints.

Lifecycle actions and request latency are appended as compact JSONL events
for quick local inspection (logs/metrics/YYYY-MM-DD/api.jsonl).
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from config import settings

logger = logging.getLogger(__name__)


def _logs_dir() -> Path:
    """
    Get logs directory with date-based rotation.

    Returns:
        Path to logs/metrics/YYYY-MM-DD/
    """
    today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    p = Path(settings.LOGS_DIR) / "metrics" / today
    p.mkdir(parents=True, exist_ok=True)
    return p


def record_metric(
    kind: str,
    fields: Dict[str, Any] | None = None,
    outcome: str | None = None,
    latency_ms: float | None = None,
) -> None:
    """Append a single metric event to logs/metrics/<day>/api.jsonl.

    Args:
        kind: Short event kind, e.g. "http.request", "action:report.submit".
        fields: Arbitrary dict with event fields (ids, versions, sizes, etc.).
        outcome: Optional outcome: ok|rejected|error.
        latency_ms: Request latency in milliseconds.
    """
    if not settings.METRICS_ENABLED:
        return
    entry = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "kind": kind,
        "fields": fields or {},
    }
    if outcome:
        entry["outcome"] = outcome
    if latency_ms is not None:
        entry["latency_ms"] = latency_ms
    try:
        out = _logs_dir() / "api.jsonl"
        with out.open("a", encoding="utf-8") as f:
            f.write(json.dumps(entry, ensure_ascii=False, default=str) + "\n")
    except OSError as exc:
        # metrics must never break a request
        logger.warning("Failed to write metric %s: %s", kind, exc)


def log_action(actor: str, action: str, payload: Dict[str, Any] | None = None, outcome: str | None = None) -> None:
    """Record a lifecycle/admin action performed by ``actor`` (employee id)."""
    logger.info("action=%s actor=%s %s", action, actor, payload or {})
    record_metric(f"action:{action}", {"actor": actor, **(payload or {})}, outcome=outcome)
