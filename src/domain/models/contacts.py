"""Contact-information members owned by a parent record.

parent is only populated when a read includes it; the forward reference is
resolved in people.py once Parent exists.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import EmailStr, Field

from .base import DefaultMember

if TYPE_CHECKING:
    from .people import Parent

PHONE_PATTERN = r"^\+?[0-9][0-9 ()\-]*$"


class ContactNumber(DefaultMember):
    """A telephone number, e.g. "+27 13 752 1234" or "555-0001"."""

    number: str = Field(min_length=3, max_length=32, pattern=PHONE_PATTERN)

    parent: Parent | None = None


class EmailAddress(DefaultMember):
    email: EmailStr

    parent: Parent | None = None


class Address(DefaultMember):
    """A postal or physical address.

    suburb is optional; everything else is required for delivery.
    """

    street: str = Field(min_length=1)
    suburb: str | None = None
    city: str = Field(min_length=1)
    postal_code: str = Field(min_length=1, max_length=16)
    country: str = Field(min_length=2)

    parent: Parent | None = None
