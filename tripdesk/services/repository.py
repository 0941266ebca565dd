"""
TripDesk Backend — Repository (Persistence Layer)
===================================================

What:  CRUD primitives for registrations and admins.
How:   Each method opens one session from the shared Database, runs a single
       statement, and commits (or rolls back) before returning. No method
       spans more than one row or one call.
Who:   Built once by main.create_app(); used by the route handlers, the auth
       service and the startup bootstrap.

Result conventions:
    - Lookups return None for a missing row.
    - update/delete return the affected row count; 0 means "no such id" and
      is mapped to 404 by the caller, not raised here.
    - Driver/SQL failures become DatabaseError with a generic message; the
      detail goes to the log only.
    - A duplicate admin username becomes DuplicateUsernameError.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from tripdesk.database import Database
from tripdesk.exceptions import DatabaseError, DuplicateUsernameError
from tripdesk.models.admin import Admin
from tripdesk.models.registration import Registration, utc_timestamp

logger = logging.getLogger(__name__)

# Fields a client may write; id and created_at are owned by the store.
WRITABLE_FIELDS = frozenset(
    {
        "full_name",
        "sex",
        "phone",
        "email",
        "destination",
        "city",
        "persons",
        "travel_time",
        "message",
    }
)


def _writable(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in fields.items() if key in WRITABLE_FIELDS}


class Repository:
    """Storage access for the two TripDesk entities."""

    def __init__(self, database: Database):
        self.database = database

    # ── Registrations ─────────────────────────────────────────────────────

    async def insert_registration(self, fields: Dict[str, Any]) -> int:
        """Insert a validated registration; returns the assigned id."""
        try:
            async with self.database.session() as session:
                registration = Registration(**_writable(fields), created_at=utc_timestamp())
                session.add(registration)
                await session.flush()
                new_id = registration.id
        except SQLAlchemyError as e:
            logger.error("Registration insert failed: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to save registration.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Registration %d created", new_id)
        return new_id

    async def list_registrations(self) -> List[Registration]:
        """All registrations, newest created_at first (id breaks ties)."""
        try:
            async with self.database.session() as session:
                result = await session.execute(
                    select(Registration).order_by(
                        Registration.created_at.desc(),
                        Registration.id.desc(),
                    )
                )
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Registrations fetch failed: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to fetch registrations.",
                context={"error_type": type(e).__name__},
            )

    async def get_registration(self, registration_id: int) -> Optional[Registration]:
        try:
            async with self.database.session() as session:
                return await session.get(Registration, registration_id)
        except SQLAlchemyError as e:
            logger.error("Registration fetch failed (id=%s): %s", registration_id, str(e))
            raise DatabaseError(
                message="Failed to fetch registration.",
                context={"registration_id": registration_id},
            )

    async def update_registration(self, registration_id: int, fields: Dict[str, Any]) -> int:
        """
        Replace the writable fields of one registration.

        Returns:
            Number of rows changed (0 or 1). id and created_at are preserved.
        """
        values = _writable(fields)
        try:
            async with self.database.session() as session:
                result = await session.execute(
                    update(Registration)
                    .where(Registration.id == registration_id)
                    .values(**values)
                    .execution_options(synchronize_session=False)
                )
                affected = result.rowcount or 0
        except SQLAlchemyError as e:
            logger.error("Registration update failed (id=%s): %s", registration_id, str(e))
            raise DatabaseError(
                message="Failed to update registration.",
                context={"registration_id": registration_id},
            )

        if affected:
            logger.info("Registration %d updated", registration_id)
        return affected

    async def delete_registration(self, registration_id: int) -> int:
        """Delete one registration; returns rows removed (0 or 1)."""
        try:
            async with self.database.session() as session:
                result = await session.execute(
                    delete(Registration)
                    .where(Registration.id == registration_id)
                    .execution_options(synchronize_session=False)
                )
                affected = result.rowcount or 0
        except SQLAlchemyError as e:
            logger.error("Registration delete failed (id=%s): %s", registration_id, str(e))
            raise DatabaseError(
                message="Failed to delete registration.",
                context={"registration_id": registration_id},
            )

        if affected:
            logger.info("Registration %d deleted", registration_id)
        return affected

    # ── Admins ────────────────────────────────────────────────────────────

    async def find_admin_by_username(self, username: str) -> Optional[Admin]:
        """Exact, case-sensitive username lookup."""
        try:
            async with self.database.session() as session:
                result = await session.execute(
                    select(Admin).where(Admin.username == username)
                )
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Admin lookup failed: %s", str(e))
            raise DatabaseError(
                message="Login failed.",
                context={"error_type": type(e).__name__},
            )

    async def insert_admin(self, username: str, password_hash: str) -> int:
        """
        Store a new admin credential.

        Raises:
            DuplicateUsernameError: the username is already taken.
            DatabaseError: any other storage failure.
        """
        try:
            async with self.database.session() as session:
                admin = Admin(username=username, password_hash=password_hash)
                session.add(admin)
                await session.flush()
                new_id = admin.id
        except IntegrityError as e:
            raise DuplicateUsernameError(username, context={"error_type": type(e).__name__})
        except SQLAlchemyError as e:
            logger.error("Admin insert failed: %s", str(e))
            raise DatabaseError(
                message="Failed to create admin.",
                context={"error_type": type(e).__name__},
            )
        return new_id
