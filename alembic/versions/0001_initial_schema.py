"""Initial schema: owners and contact-information members.

Revision ID: 0001
Revises:
Create Date: 2026-10-12
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.Text, nullable=True),
        sa.Column("modified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("modified_by", sa.Text, nullable=True),
        sa.Column("row_version", sa.Integer, nullable=False),
    ]


def _owner_fk() -> sa.Column:
    return sa.Column(
        "entity_id",
        sa.Uuid,
        sa.ForeignKey("parents.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    # ------------------------------------------------------------------ #
    # 1. OWNERS                                                            #
    # ------------------------------------------------------------------ #

    op.create_table(
        "parents",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("first_name", sa.Text, nullable=False),
        sa.Column("last_name", sa.Text, nullable=False),
        *_audit_columns(),
    )

    op.create_table(
        "learners",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column(
            "parent_id",
            sa.Uuid,
            sa.ForeignKey("parents.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("first_name", sa.Text, nullable=False),
        sa.Column("last_name", sa.Text, nullable=False),
        sa.Column("grade", sa.Integer, nullable=False),
        *_audit_columns(),
    )
    op.create_index("ix_learners_parent_id", "learners", ["parent_id"])

    # ------------------------------------------------------------------ #
    # 2. CONTACT INFORMATION                                               #
    # ------------------------------------------------------------------ #

    op.create_table(
        "contact_numbers",
        sa.Column("id", sa.Uuid, primary_key=True),
        _owner_fk(),
        sa.Column("number", sa.Text, nullable=False),
        sa.Column("is_default", sa.Boolean, nullable=False),
        *_audit_columns(),
    )
    op.create_index("ix_contact_numbers_entity_id", "contact_numbers", ["entity_id"])

    op.create_table(
        "email_addresses",
        sa.Column("id", sa.Uuid, primary_key=True),
        _owner_fk(),
        sa.Column("email", sa.Text, nullable=False),
        sa.Column("is_default", sa.Boolean, nullable=False),
        *_audit_columns(),
    )
    op.create_index("ix_email_addresses_entity_id", "email_addresses", ["entity_id"])
    op.create_index("ix_email_addresses_email", "email_addresses", ["email"])

    op.create_table(
        "addresses",
        sa.Column("id", sa.Uuid, primary_key=True),
        _owner_fk(),
        sa.Column("street", sa.Text, nullable=False),
        sa.Column("suburb", sa.Text, nullable=True),
        sa.Column("city", sa.Text, nullable=False),
        sa.Column("postal_code", sa.Text, nullable=False),
        sa.Column("country", sa.Text, nullable=False),
        sa.Column("is_default", sa.Boolean, nullable=False),
        *_audit_columns(),
    )
    op.create_index("ix_addresses_entity_id", "addresses", ["entity_id"])


def downgrade() -> None:
    op.drop_table("addresses")
    op.drop_table("email_addresses")
    op.drop_table("contact_numbers")
    op.drop_table("learners")
    op.drop_table("parents")
