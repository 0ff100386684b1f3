"""Alembic environment for the ``blogs`` table."""

from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from digiblog.config import settings
from digiblog.database import Base, engine, is_sqlite
from digiblog.models import blog  # noqa: F401 - registers the blogs table

config = context.config
if config.config_file_name:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
# SQLite cannot ALTER most columns in place; batch mode rebuilds the table.
RENDER_AS_BATCH = is_sqlite(settings.database_url)


def run_migrations_offline() -> None:
    """Emit SQL for ``DATABASE_URL`` without connecting."""
    context.configure(
        url=settings.database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=RENDER_AS_BATCH,
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Migrate through the application's engine."""
    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=RENDER_AS_BATCH,
            compare_type=True,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
