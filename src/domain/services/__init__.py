"""Domain services: invariant maintenance and query helpers over repositories."""

from .contact_info import ContactInfoService
from .default_members import DefaultMemberService, owner_spec
from .pagination import paginate

__all__ = [
    "ContactInfoService",
    "DefaultMemberService",
    "owner_spec",
    "paginate",
]
