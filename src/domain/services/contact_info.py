"""Contact information for one owner family.

One DefaultMemberService per member type, all bound to repositories that
share a unit of work, plus lookups that only make sense for one type.
"""

from __future__ import annotations

from uuid import UUID

from src.domain.models.base import Entity
from src.domain.models.contacts import Address, ContactNumber, EmailAddress
from src.domain.models.enums import FailureKind
from src.domain.models.results import Result
from src.domain.models.specification import LIKE_ESCAPE, Specification, like_literal
from src.domain.repositories.base import Repository

from .default_members import DefaultMemberService


class ContactInfoService:
    def __init__(
        self,
        contact_numbers: Repository[ContactNumber, UUID],
        email_addresses: Repository[EmailAddress, UUID],
        addresses: Repository[Address, UUID],
        owners: Repository[Entity, UUID] | None = None,
        *,
        retry_attempts: int = 3,
    ) -> None:
        self._email_addresses = email_addresses
        self.numbers: DefaultMemberService[ContactNumber] = DefaultMemberService(
            contact_numbers, label="contact number", owners=owners, retry_attempts=retry_attempts
        )
        self.emails: DefaultMemberService[EmailAddress] = DefaultMemberService(
            email_addresses, label="email address", owners=owners, retry_attempts=retry_attempts
        )
        self.addresses: DefaultMemberService[Address] = DefaultMemberService(
            addresses, label="address", owners=owners, retry_attempts=retry_attempts
        )

    async def email_address_by_address(self, email: str) -> Result[EmailAddress]:
        """Look up an email record by its address (case-insensitive)."""
        pattern = like_literal(email.strip().lower())
        spec = Specification(
            criteria=lambda c: c.email.ilike(pattern, escape=LIKE_ESCAPE),
            order_by=lambda c: (c.created_at, c.id),
        )
        found = await self._email_addresses.first_or_default(spec)
        if found.failed:
            return found
        if found.data is None:
            return Result.fail(
                f"No email address found in the database matching {email}",
                kind=FailureKind.NOT_FOUND,
            )
        return found
