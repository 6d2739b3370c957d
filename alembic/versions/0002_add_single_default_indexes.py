"""Add partial unique indexes allowing one default member per owner.

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-14
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_TABLES = ("contact_numbers", "email_addresses", "addresses")


def upgrade() -> None:
    for table in _TABLES:
        op.create_index(
            f"uq_{table}_default_per_owner",
            table,
            ["entity_id"],
            unique=True,
            postgresql_where=sa.text("is_default"),
            sqlite_where=sa.text("is_default = 1"),
        )


def downgrade() -> None:
    for table in _TABLES:
        op.drop_index(f"uq_{table}_default_per_owner", table_name=table)
