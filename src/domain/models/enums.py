"""Domain enumerations for the data-access core.

All string-valued enums use str mixin so they serialize cleanly to JSON
and remain comparable to plain strings (Pydantic default behaviour).
"""

from enum import Enum


class EntityState(str, Enum):
    """Change-tracking state of an entity instance within one unit of work.

    DETACHED is the state of anything the unit of work does not know about,
    including entities returned by untracked reads and deleted entities
    after a successful save.
    """

    DETACHED = "detached"
    UNCHANGED = "unchanged"
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"

    @property
    def is_pending(self) -> bool:
        """True when save() has work to do for an entity in this state."""
        return self in (EntityState.ADDED, EntityState.MODIFIED, EntityState.DELETED)


class FailureKind(str, Enum):
    """Category of an expected failure carried by a failed Result."""

    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    CONFLICT = "conflict"  # constraint violation or concurrency-token mismatch
    PERSISTENCE = "persistence"
