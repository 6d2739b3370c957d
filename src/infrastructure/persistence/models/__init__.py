"""ORM model registry: imports all layer modules so every mapper class is
registered with Base.metadata before Alembic or SQLAlchemy runs.

Import order follows the dependency graph (referenced tables first).
"""

from src.infrastructure.persistence.models.people import (
    Learner,
    Parent,
)
from src.infrastructure.persistence.models.contacts import (
    Address,
    ContactNumber,
    EmailAddress,
)

__all__ = [
    # Owners
    "Parent",
    "Learner",
    # Contacts
    "ContactNumber",
    "EmailAddress",
    "Address",
]
