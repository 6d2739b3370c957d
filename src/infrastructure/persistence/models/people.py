"""Owner layer ORM models: parents, learners."""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Integer, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database import Base

from .base import AuditColumns


class Parent(AuditColumns, Base):
    """Parent or guardian.

    Owns contact numbers, email addresses and addresses; deleting a parent
    deletes them along with the parent's learners.
    """

    __tablename__ = "parents"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name: Mapped[str] = mapped_column(Text, nullable=False)
    last_name: Mapped[str] = mapped_column(Text, nullable=False)
    row_version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": row_version}

    learners: Mapped[list["Learner"]] = relationship(
        back_populates="parent", cascade="all, delete-orphan"
    )
    contact_numbers: Mapped[list["ContactNumber"]] = relationship(
        back_populates="parent", cascade="all, delete-orphan"
    )
    email_addresses: Mapped[list["EmailAddress"]] = relationship(
        back_populates="parent", cascade="all, delete-orphan"
    )
    addresses: Mapped[list["Address"]] = relationship(
        back_populates="parent", cascade="all, delete-orphan"
    )


class Learner(AuditColumns, Base):
    """Learner enrolled at a school.  grade 0 is Grade R."""

    __tablename__ = "learners"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    parent_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("parents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    first_name: Mapped[str] = mapped_column(Text, nullable=False)
    last_name: Mapped[str] = mapped_column(Text, nullable=False)
    grade: Mapped[int] = mapped_column(Integer, nullable=False)
    row_version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": row_version}

    parent: Mapped["Parent"] = relationship(back_populates="learners")
