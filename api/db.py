"""Database connection for Agency Timesheets API."""
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from config import settings

# Handle different DB_PATH formats:
# - ":memory:" → sqlite:///:memory: (single shared connection)
# - Absolute path (/app/data/timesheets.db) → sqlite:////app/data/timesheets.db
# - Relative path (data/timesheets.db) → sqlite:///./data/timesheets.db
if settings.DB_PATH == ":memory:":
    db_url = "sqlite:///:memory:"
    engine = create_engine(
        db_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    if settings.DB_PATH.startswith('/'):
        db_url = f"sqlite:///{settings.DB_PATH}"
    else:
        db_url = f"sqlite:///./{settings.DB_PATH}"
    Path(settings.DB_PATH).parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(
        db_url,
        connect_args={"check_same_thread": False}
    )

# Session factory
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def create_schema() -> None:
    """Create all tables known to the ORM metadata (dev/test convenience)."""
    from models import Base

    Base.metadata.create_all(bind=engine)
