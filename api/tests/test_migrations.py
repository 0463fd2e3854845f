"""
Alembic Migration Tests

Runs `upgrade head` / `downgrade base` against a scratch SQLite file and
checks the migrated schema matches the ORM models.
"""
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from models import Base

ROOT_DIR = Path(__file__).resolve().parents[2]


@pytest.fixture
def alembic_config(tmp_path, monkeypatch):
    db_file = tmp_path / "migrated.db"
    url = f"sqlite:///{db_file}"
    monkeypatch.setenv("ALEMBIC_URL", url)

    cfg = Config()
    cfg.set_main_option("script_location", str(ROOT_DIR / "db" / "alembic"))
    return cfg, url


def test_upgrade_head_creates_model_tables(alembic_config):
    cfg, url = alembic_config
    command.upgrade(cfg, "head")

    engine = create_engine(url)
    try:
        inspector = inspect(engine)
        tables = set(inspector.get_table_names())
        expected = set(Base.metadata.tables)
        assert expected <= tables, f"Missing tables: {expected - tables}"

        for name, table in Base.metadata.tables.items():
            columns = {c["name"] for c in inspector.get_columns(name)}
            assert columns == set(table.columns.keys()), f"Column mismatch in {name}"

        uniques = {u["name"] for u in inspector.get_unique_constraints("monthly_reports")}
        assert "uq_monthly_reports_employee_month" in uniques
    finally:
        engine.dispose()


def test_downgrade_base_drops_tables(alembic_config):
    cfg, url = alembic_config
    command.upgrade(cfg, "head")
    command.downgrade(cfg, "base")

    engine = create_engine(url)
    try:
        remaining = set(inspect(engine).get_table_names()) - {"alembic_version"}
        assert remaining == set(), f"Tables left after downgrade: {remaining}"
    finally:
        engine.dispose()
