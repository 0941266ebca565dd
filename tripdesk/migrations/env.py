"""
Alembic Migration Environment
===============================

What:  Configures Alembic for TripDesk's async SQLAlchemy setup.
How:   Two entry paths:
       1. Programmatic (application startup): tripdesk.schema passes an
          already-open sync connection in `config.attributes["connection"]`
          and migrations run on it directly.
       2. CLI (`alembic upgrade head`): an async engine is built from
          settings.database_url and migrations run through run_sync().
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config
from alembic import context

from tripdesk.config import settings
from tripdesk.database import Base

# Import all models so Alembic sees them in Base.metadata
from tripdesk.models.admin import Admin  # noqa: F401
from tripdesk.models.registration import Registration  # noqa: F401

config = context.config

# Only the CLI path has an alembic.ini; the application configures logging itself.
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata

if not config.get_main_option("sqlalchemy.url"):
    config.set_main_option("sqlalchemy.url", settings.database_url)


def run_migrations_offline() -> None:
    """Emit migration SQL to stdout without a database connection."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=url.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    """Run the migration steps on a sync connection (shared by both paths)."""
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """CLI path: build a throwaway async engine and migrate through run_sync()."""
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    connection = config.attributes.get("connection")
    if connection is not None:
        do_run_migrations(connection)
    else:
        asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
