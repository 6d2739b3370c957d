"""Columns shared by every persisted entity."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column


class AuditColumns:
    """Audit metadata stamped by the unit of work (never by the database).

    Each model declares its own row_version column and registers it as the
    mapper's version_id_col so stale updates fail with StaleDataError.
    """

    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    modified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    modified_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
