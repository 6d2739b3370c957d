"""Contact layer ORM models: contact_numbers, email_addresses, addresses.

Every table carries a partial unique index on entity_id restricted to rows
flagged as default, so the store itself rejects a second default per owner.
The index is immediate, which is why the unit of work flushes staged
operations one at a time in staging order: clearing the old default must
reach the store before the new default does.
"""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, Integer, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database import Base

from .base import AuditColumns


def _single_default_index(table: str) -> Index:
    return Index(
        f"uq_{table}_default_per_owner",
        "entity_id",
        unique=True,
        postgresql_where=text("is_default"),
        sqlite_where=text("is_default = 1"),
    )


class ContactNumber(AuditColumns, Base):
    __tablename__ = "contact_numbers"
    __table_args__ = (_single_default_index("contact_numbers"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    entity_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("parents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    number: Mapped[str] = mapped_column(Text, nullable=False)
    default: Mapped[bool] = mapped_column("is_default", Boolean, nullable=False)
    row_version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": row_version}

    parent: Mapped["Parent"] = relationship(back_populates="contact_numbers")


class EmailAddress(AuditColumns, Base):
    __tablename__ = "email_addresses"
    __table_args__ = (_single_default_index("email_addresses"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    entity_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("parents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    email: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    default: Mapped[bool] = mapped_column("is_default", Boolean, nullable=False)
    row_version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": row_version}

    parent: Mapped["Parent"] = relationship(back_populates="email_addresses")


class Address(AuditColumns, Base):
    """Physical or postal address.  suburb is optional."""

    __tablename__ = "addresses"
    __table_args__ = (_single_default_index("addresses"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    entity_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("parents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    street: Mapped[str] = mapped_column(Text, nullable=False)
    suburb: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    city: Mapped[str] = mapped_column(Text, nullable=False)
    postal_code: Mapped[str] = mapped_column(Text, nullable=False)
    country: Mapped[str] = mapped_column(Text, nullable=False)
    default: Mapped[bool] = mapped_column("is_default", Boolean, nullable=False)
    row_version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": row_version}

    parent: Mapped["Parent"] = relationship(back_populates="addresses")
