"""Alembic migration runner for the MindWell Voice schema.

The database URL always comes from ``DATABASE_URL`` via ``app.config``;
alembic.ini only supplies logging. SQLite migrations run in batch mode,
since SQLite cannot ALTER most column properties in place.
"""

import sys
from logging.config import fileConfig
from pathlib import Path

from sqlalchemy import create_engine, pool

from alembic import context

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

# app.config loads .env on import
from app.config import get_settings
from app.database import Base
from app.models.journal_entry import JournalEntry  # noqa: F401
from app.models.processing_job import ProcessingJob  # noqa: F401

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)

DATABASE_URL = get_settings().DATABASE_URL
IS_SQLITE = DATABASE_URL.startswith("sqlite")


def _migrate(**configure_kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        render_as_batch=IS_SQLITE,
        **configure_kwargs,
    )
    with context.begin_transaction():
        context.run_migrations()


def migrate_offline() -> None:
    """Write the migration SQL out instead of executing it."""
    _migrate(url=DATABASE_URL, literal_binds=True, dialect_opts={"paramstyle": "named"})


def migrate_online() -> None:
    engine = create_engine(
        DATABASE_URL,
        poolclass=pool.NullPool,
        connect_args={"check_same_thread": False} if IS_SQLITE else {},
    )
    try:
        with engine.connect() as connection:
            _migrate(connection=connection)
    finally:
        engine.dispose()


if context.is_offline_mode():
    migrate_offline()
else:
    migrate_online()
