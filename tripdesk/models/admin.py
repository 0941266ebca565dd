"""
TripDesk Backend — Admin SQLAlchemy Model
===========================================

What:  ORM model for the `admins` table (administrator credentials).
Who:   Inserted by the startup bootstrap; read by login.

password_hash holds a bcrypt digest (salt and cost factor embedded).
The plaintext password is never stored.
"""

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from tripdesk.database import Base


class Admin(Base):
    __tablename__ = "admins"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Case-sensitive; uniqueness is enforced by the database.
    username: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<Admin(id={self.id}, username='{self.username}')>"
