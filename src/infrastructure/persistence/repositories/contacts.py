"""SQLAlchemy repositories for contact-information members."""

from __future__ import annotations

from uuid import UUID

from src.domain.models.contacts import Address, ContactNumber, EmailAddress
from src.infrastructure.persistence.mappers import (
    ADDRESS_MAPPER,
    CONTACT_NUMBER_MAPPER,
    EMAIL_ADDRESS_MAPPER,
)

from .base import SqlRepository


class SqlContactNumberRepository(SqlRepository[ContactNumber, UUID]):
    mapper = CONTACT_NUMBER_MAPPER


class SqlEmailAddressRepository(SqlRepository[EmailAddress, UUID]):
    mapper = EMAIL_ADDRESS_MAPPER


class SqlAddressRepository(SqlRepository[Address, UUID]):
    mapper = ADDRESS_MAPPER
