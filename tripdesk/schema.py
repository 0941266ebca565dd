"""
TripDesk Backend — Schema Initialization
==========================================

What:  Brings the database schema to the latest Alembic revision.
How:   Runs `alembic upgrade head` on a connection borrowed from the
       application's async engine. The `alembic_version` table records the
       applied revision, so a second call finds nothing to do.
When:  Once at startup (bootstrap), before any request is served.

Idempotency:
    - Fresh database: 001 creates both tables, 002 adds the created_at index.
    - Database from the earlier deployment (tables present, no revision
      marker, possibly no email/city columns): both revisions inspect the
      live schema and only add what is missing. Existing rows are kept.
    - Database already at head: no statements are executed.
"""

import logging
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from alembic.util import CommandError
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from tripdesk.exceptions import DatabaseError

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def alembic_config() -> Config:
    """Alembic config pointing at the packaged migration scripts (no .ini file)."""
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    return cfg


def head_revision() -> Optional[str]:
    return ScriptDirectory.from_config(alembic_config()).get_current_head()


def _upgrade(connection: Connection) -> None:
    cfg = alembic_config()
    cfg.attributes["connection"] = connection
    command.upgrade(cfg, "head")


def _current_revision(connection: Connection) -> Optional[str]:
    return MigrationContext.configure(connection).get_current_revision()


async def initialize_schema(engine: AsyncEngine) -> str:
    """
    Apply pending migrations and return the resulting revision.

    Raises:
        DatabaseError: the database is unreachable or a migration failed.
            The transaction is rolled back, so a failed attempt leaves the
            schema as it was.
    """
    try:
        async with engine.begin() as conn:
            before = await conn.run_sync(_current_revision)
            await conn.run_sync(_upgrade)
            after = await conn.run_sync(_current_revision)
    except (SQLAlchemyError, CommandError, OSError) as e:
        logger.error("Schema initialization failed: %s", str(e))
        raise DatabaseError(
            message="Schema initialization failed.",
            context={"error_type": type(e).__name__},
        )

    if before == after:
        logger.info("Schema up to date at revision %s", after)
    else:
        logger.info("Schema migrated from %s to %s", before or "<none>", after)
    return after or ""


async def schema_revision(engine: AsyncEngine) -> Optional[str]:
    """Revision currently recorded in the database (None before first init)."""
    async with engine.connect() as conn:
        return await conn.run_sync(_current_revision)
