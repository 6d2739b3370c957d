"""Concrete SQLAlchemy repository implementations.

Exports all SqlRepository classes, the get_repositories() factory and the
contact-info service factory for wiring at the application boundary.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.domain.services.contact_info import ContactInfoService
from src.infrastructure.database import settings
from src.infrastructure.persistence.unit_of_work import SqlUnitOfWork

from .base import SqlRepository
from .contacts import SqlAddressRepository, SqlContactNumberRepository, SqlEmailAddressRepository
from .people import SqlLearnerRepository, SqlParentRepository
from .query import SqlEntityQuery


@dataclass
class Repositories:
    """All repository instances bound to a single unit of work."""

    parents: SqlParentRepository
    learners: SqlLearnerRepository
    contact_numbers: SqlContactNumberRepository
    email_addresses: SqlEmailAddressRepository
    addresses: SqlAddressRepository


def get_repositories(uow: SqlUnitOfWork) -> Repositories:
    """Construct all repositories bound to the given unit of work.

    Intended for use from a request-scoped dependency:

        async for uow in get_unit_of_work(actor=user.name):
            repos = get_repositories(uow)
            parent = await repos.parents.find_by_id(parent_id)
    """
    return Repositories(
        parents=SqlParentRepository(uow),
        learners=SqlLearnerRepository(uow),
        contact_numbers=SqlContactNumberRepository(uow),
        email_addresses=SqlEmailAddressRepository(uow),
        addresses=SqlAddressRepository(uow),
    )


def get_contact_info_service(repos: Repositories) -> ContactInfoService:
    """Contact-info service for parents, sharing the repositories' unit of work."""
    return ContactInfoService(
        contact_numbers=repos.contact_numbers,
        email_addresses=repos.email_addresses,
        addresses=repos.addresses,
        owners=repos.parents,
        retry_attempts=settings.default_member_retry_attempts,
    )


__all__ = [
    "SqlRepository",
    "SqlEntityQuery",
    "SqlParentRepository",
    "SqlLearnerRepository",
    "SqlContactNumberRepository",
    "SqlEmailAddressRepository",
    "SqlAddressRepository",
    "Repositories",
    "get_repositories",
    "get_contact_info_service",
]
