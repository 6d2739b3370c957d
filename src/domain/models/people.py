"""Owner aggregates: parents and the learners they are responsible for.

Relationship fields are only populated when the read asked for them through
an include directive; otherwise they stay empty (or None).
"""

from __future__ import annotations

from uuid import UUID

from pydantic import Field

from .base import Entity
from .contacts import Address, ContactNumber, EmailAddress


class Parent(Entity):
    """A parent or guardian; owner of contact numbers, emails and addresses."""

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)

    learners: list[Learner] = Field(default_factory=list)
    contact_numbers: list[ContactNumber] = Field(default_factory=list)
    email_addresses: list[EmailAddress] = Field(default_factory=list)
    addresses: list[Address] = Field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def default_contact_number(self) -> ContactNumber | None:
        return next((c for c in self.contact_numbers if c.default), None)

    def default_email_address(self) -> EmailAddress | None:
        return next((e for e in self.email_addresses if e.default), None)


class Learner(Entity):
    parent_id: UUID
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    grade: int = Field(ge=0, le=12)  # 0 = Grade R

    parent: Parent | None = None


Parent.model_rebuild()
ContactNumber.model_rebuild()
EmailAddress.model_rebuild()
Address.model_rebuild()
