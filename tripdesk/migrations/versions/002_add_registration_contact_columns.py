"""Add email and city to registrations; index created_at

Revision ID: 002
Revises: 001
Create Date: 2024-06-10 00:00:00.000000+00:00

What:  Brings registrations tables created before email/city existed up to
       the current shape, and adds the created_at index used by the
       newest-first listing.
How:   Columns are added with an empty-string server default so existing
       rows satisfy NOT NULL. Each step checks the live schema first; on a
       database created by 001 this revision changes nothing.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ADDED_COLUMNS = ("city", "email")
CREATED_AT_INDEX = "idx_registrations_created_at"


def upgrade() -> None:
    insp = sa.inspect(op.get_bind())

    existing = {c["name"] for c in insp.get_columns("registrations")}
    for name in ADDED_COLUMNS:
        if name not in existing:
            op.add_column(
                "registrations",
                sa.Column(name, sa.Text(), nullable=False, server_default=sa.text("''")),
            )

    indexes = {ix.get("name") for ix in insp.get_indexes("registrations")}
    if CREATED_AT_INDEX not in indexes:
        op.create_index(CREATED_AT_INDEX, "registrations", ["created_at"])


def downgrade() -> None:
    # The columns are part of the current schema; only the index is reverted.
    insp = sa.inspect(op.get_bind())
    indexes = {ix.get("name") for ix in insp.get_indexes("registrations")}
    if CREATED_AT_INDEX in indexes:
        op.drop_index(CREATED_AT_INDEX, table_name="registrations")
