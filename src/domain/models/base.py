"""Base classes for persistable domain entities.

Entities are mutable Pydantic models: tracked reads hand out instances whose
in-memory changes are detected by the unit of work at save time.  Field
constraints are checked on construction and re-checked by the repository
before anything is staged, so invalid assignments never reach the store.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

AUDIT_FIELDS = frozenset({"created_at", "created_by", "modified_at", "modified_by"})


class Entity(BaseModel):
    """A persistable record with an identifier and audit metadata.

    Audit fields are stamped by the unit of work from the session's actor.
    row_version is the optimistic concurrency token; it is assigned by the
    store and compared on every update or delete.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    created_at: datetime | None = None
    created_by: str | None = None
    modified_at: datetime | None = None
    modified_by: str | None = None
    row_version: int = 0


class DefaultMember(Entity):
    """One record of an owner's collection in which exactly one is the default.

    entity_id is the owning record's id.  The single-default invariant is
    maintained by DefaultMemberService, not by the model.
    """

    entity_id: UUID
    default: bool = False
