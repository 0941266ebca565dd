"""
TripDesk Backend — Registration SQLAlchemy Model
==================================================

What:  ORM model for the `registrations` table.
Who:   Written and read only through services.repository.Repository.

Column notes:
    - id: INTEGER autoincrement, assigned by the store (never client-settable)
    - created_at: ISO 8601 UTC text with millisecond precision
      (e.g. 2024-05-01T10:00:00.000Z). Stored as text so rows written by the
      earlier deployment keep sorting and parsing the same way.
    - city / email: added after the first release; older databases receive
      them through migration 002 with an empty-string default.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from tripdesk.database import Base


def utc_timestamp() -> str:
    """Current UTC time as ISO 8601 with milliseconds and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Registration(Base):
    """
    A stored traveler submission.

    Lifecycle:
        1. Inserted by POST /api/registrations (created_at assigned here)
        2. Replaced field-by-field by PUT /api/admin/registrations/{id}
           (id and created_at untouched)
        3. Removed by DELETE /api/admin/registrations/{id}
    """

    __tablename__ = "registrations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    sex: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False, server_default="")
    destination: Mapped[str] = mapped_column(Text, nullable=False)
    city: Mapped[str] = mapped_column(Text, nullable=False, server_default="")
    persons: Mapped[int] = mapped_column(Integer, nullable=False)
    travel_time: Mapped[str] = mapped_column(Text, nullable=False)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default="")
    created_at: Mapped[str] = mapped_column(Text, nullable=False, default=utc_timestamp)

    # Dashboard listing is newest-first on every page load.
    __table_args__ = (
        Index("idx_registrations_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<Registration(id={self.id}, created_at='{self.created_at}')>"
