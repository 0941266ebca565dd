"""
TripDesk Backend — Schema Initialization Tests
================================================

What we test:
    ✅ A fresh database reaches head with both tables
    ✅ Running initialization again is a no-op
    ✅ A pre-existing registrations table without email/city is upgraded
       in place and keeps its rows
"""

import pytest
from sqlalchemy import inspect, text

from tripdesk.database import Database
from tripdesk.exceptions import DatabaseError
from tripdesk.schema import head_revision, initialize_schema, schema_revision


def _tables(connection):
    return set(inspect(connection).get_table_names())


def _columns(connection, table):
    return {c["name"] for c in inspect(connection).get_columns(table)}


def _indexes(connection, table):
    return {ix["name"] for ix in inspect(connection).get_indexes(table)}


@pytest.fixture
def empty_database(test_settings):
    return Database.from_settings(test_settings)


class TestInitializeSchema:

    @pytest.mark.asyncio
    async def test_fresh_database_reaches_head(self, empty_database):
        try:
            revision = await initialize_schema(empty_database.engine)

            assert revision == head_revision()
            assert await schema_revision(empty_database.engine) == revision
            async with empty_database.engine.connect() as conn:
                tables = await conn.run_sync(_tables)
                indexes = await conn.run_sync(_indexes, "registrations")
            assert {"registrations", "admins"} <= tables
            assert "idx_registrations_created_at" in indexes
        finally:
            await empty_database.dispose()

    @pytest.mark.asyncio
    async def test_second_run_is_noop(self, empty_database):
        try:
            first = await initialize_schema(empty_database.engine)
            second = await initialize_schema(empty_database.engine)
            assert first == second == head_revision()
        finally:
            await empty_database.dispose()

    @pytest.mark.asyncio
    async def test_legacy_table_is_upgraded_and_keeps_rows(self, empty_database):
        engine = empty_database.engine
        try:
            async with engine.begin() as conn:
                await conn.execute(text(
                    "CREATE TABLE registrations ("
                    " id INTEGER PRIMARY KEY AUTOINCREMENT,"
                    " full_name TEXT NOT NULL, sex TEXT NOT NULL, phone TEXT NOT NULL,"
                    " destination TEXT NOT NULL, persons INTEGER NOT NULL,"
                    " travel_time TEXT NOT NULL, message TEXT,"
                    " created_at TEXT NOT NULL)"
                ))
                await conn.execute(text(
                    "INSERT INTO registrations"
                    " (full_name, sex, phone, destination, persons, travel_time, message, created_at)"
                    " VALUES ('Old Row', 'male', '+1-212-555-0100', 'Accra', 3, 'June', NULL,"
                    " '2023-01-01T00:00:00.000Z')"
                ))

            await initialize_schema(engine)

            async with engine.connect() as conn:
                columns = await conn.run_sync(_columns, "registrations")
                tables = await conn.run_sync(_tables)
                row = (await conn.execute(
                    text("SELECT full_name, email, city FROM registrations")
                )).one()

            assert {"email", "city"} <= columns
            assert "admins" in tables
            assert row.full_name == "Old Row"
            assert row.email == ""
            assert row.city == ""
        finally:
            await empty_database.dispose()

    @pytest.mark.asyncio
    async def test_unreachable_database_raises_database_error(self, tmp_path):
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nested' / 'x.db'}")
        try:
            with pytest.raises(DatabaseError) as exc_info:
                await initialize_schema(database.engine)
            assert exc_info.value.message == "Schema initialization failed."
        finally:
            await database.dispose()
