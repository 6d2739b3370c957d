"""Page request and paged response models.

Page numbers are 1-based.  A page maps onto a specification window as
skip = (page_nr - 1) * page_size, take = page_size.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class PageParameters(BaseModel):
    model_config = ConfigDict(frozen=True)

    page_nr: int = Field(default=1, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    @property
    def skip(self) -> int:
        return (self.page_nr - 1) * self.page_size

    @property
    def take(self) -> int:
        return self.page_size


@dataclass(frozen=True)
class PaginatedResult(Generic[T]):
    """One page of results plus total-count metadata for the whole query."""

    data: list[T] = field(default_factory=list)
    total_count: int = 0
    current_page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size) if self.page_size else 0

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    def metadata(self) -> dict[str, int | bool]:
        return {
            "TotalCount": self.total_count,
            "PageSize": self.page_size,
            "CurrentPage": self.current_page,
            "TotalPages": self.total_pages,
            "HasNext": self.has_next,
            "HasPrevious": self.has_previous,
        }

    def pagination_header(self) -> dict[str, str]:
        """Out-of-band paging metadata for the REST layer's response headers."""
        return {"X-Pagination": json.dumps(self.metadata())}
