"""Domain model package.

All domain objects are pure Python / Pydantic models with no ORM or
infrastructure dependencies.  Import from this package to avoid coupling
application code to individual module paths.
"""

from .base import DefaultMember, Entity
from .contacts import Address, ContactNumber, EmailAddress
from .enums import EntityState, FailureKind
from .pagination import PageParameters, PaginatedResult
from .people import Learner, Parent
from .results import Result
from .specification import Include, Specification

__all__ = [
    # enums
    "EntityState",
    "FailureKind",
    # core
    "Entity",
    "DefaultMember",
    "Result",
    "Include",
    "Specification",
    "PageParameters",
    "PaginatedResult",
    # owners
    "Parent",
    "Learner",
    # contacts
    "ContactNumber",
    "EmailAddress",
    "Address",
]
