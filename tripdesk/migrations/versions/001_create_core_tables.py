"""Create registrations and admins tables

Revision ID: 001
Revises: None
Create Date: 2024-05-01 00:00:00.000000+00:00

What:  Creates the `registrations` and `admins` tables.
How:   Each table is created only when absent, so a database that already
       holds them (written by the earlier deployment, which had no revision
       marker) is stamped without error and without touching its rows.

Rollback: downgrade() drops both tables (destructive).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    insp = sa.inspect(op.get_bind())

    if not insp.has_table("registrations"):
        op.create_table(
            "registrations",
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("full_name", sa.Text(), nullable=False),
            sa.Column("sex", sa.Text(), nullable=False),
            sa.Column("phone", sa.Text(), nullable=False),
            sa.Column("email", sa.Text(), nullable=False, server_default=sa.text("''")),
            sa.Column("destination", sa.Text(), nullable=False),
            sa.Column("city", sa.Text(), nullable=False, server_default=sa.text("''")),
            sa.Column("persons", sa.Integer(), nullable=False),
            sa.Column("travel_time", sa.Text(), nullable=False),
            sa.Column("message", sa.Text(), nullable=True),
            # ISO 8601 UTC text, e.g. 2024-05-01T10:00:00.000Z
            sa.Column("created_at", sa.Text(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
            # Ids are never reused after a delete.
            sqlite_autoincrement=True,
        )

    if not insp.has_table("admins"):
        op.create_table(
            "admins",
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("username", sa.Text(), nullable=False),
            sa.Column("password_hash", sa.Text(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("username"),
            sqlite_autoincrement=True,
        )


def downgrade() -> None:
    """
    Drop both tables.

    WARNING: destructive; every registration and admin row is lost.
    """
    op.drop_table("admins")
    op.drop_table("registrations")
