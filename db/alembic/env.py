"""Alembic env.py for the Agency Timesheets SQLite DB."""
import os
import sys
from logging.config import fileConfig
from pathlib import Path

from sqlalchemy import engine_from_config
from sqlalchemy import pool

from alembic import context

# Make the flat api/ modules importable (models, config)
api_dir = Path(__file__).resolve().parents[2] / "api"
if str(api_dir) not in sys.path:
    sys.path.insert(0, str(api_dir))

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# Interpret the config file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

import models  # noqa: E402
target_metadata = models.Base.metadata


def _database_url() -> str:
    """ALEMBIC_URL, then sqlalchemy.url from the ini, then settings.DB_PATH."""
    url = os.getenv("ALEMBIC_URL") or config.get_main_option("sqlalchemy.url")
    if url:
        return url
    from config import settings
    return f"sqlite:///{settings.DB_PATH}"


db_url = _database_url()


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=db_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = engine_from_config(
        {"sqlalchemy.url": db_url},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=True,  # SQLite cannot ALTER most constraints in place
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
