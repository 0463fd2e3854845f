"""Pytest bootstrap: flat api/ imports and an isolated SQLite database.

Settings and the SQLAlchemy engine are built on first import of ``config``
and ``db``, so the environment is prepared here, before any test module
imports them.
"""
from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent
API_DIR = ROOT_DIR / "api"
if str(API_DIR) not in sys.path:
    sys.path.insert(0, str(API_DIR))

_TMP_DIR = Path(tempfile.mkdtemp(prefix="timesheets-tests-"))

os.environ["DB_PATH"] = str(_TMP_DIR / "timesheets.db")
os.environ["LOGS_DIR"] = str(_TMP_DIR / "logs")
os.environ["METRICS_ENABLED"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-pytest-only-0123456789"
os.environ.setdefault("TIMEZONE", "Europe/Sofia")
