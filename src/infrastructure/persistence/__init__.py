"""Persistence package.

Importing this package registers every ORM mapper with Base.metadata
(required for Alembic autogenerate and SQLAlchemy mapper configuration)
and exports the unit of work, all repository implementations and the DI
factories.
"""

from src.infrastructure.persistence.models import *  # noqa: F401, F403
from src.infrastructure.persistence.models import __all__ as _orm_all
from src.infrastructure.persistence.repositories import (
    Repositories,
    SqlAddressRepository,
    SqlContactNumberRepository,
    SqlEmailAddressRepository,
    SqlLearnerRepository,
    SqlParentRepository,
    SqlRepository,
    get_contact_info_service,
    get_repositories,
)
from src.infrastructure.persistence.unit_of_work import SqlUnitOfWork, get_unit_of_work

__all__ = _orm_all + [
    "SqlUnitOfWork",
    "get_unit_of_work",
    "Repositories",
    "SqlRepository",
    "SqlParentRepository",
    "SqlLearnerRepository",
    "SqlContactNumberRepository",
    "SqlEmailAddressRepository",
    "SqlAddressRepository",
    "get_repositories",
    "get_contact_info_service",
]
