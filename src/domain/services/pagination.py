"""Page a repository query: one count plus one windowed list."""

from __future__ import annotations

from typing import TypeVar

from src.domain.models.base import Entity
from src.domain.models.pagination import PageParameters, PaginatedResult
from src.domain.models.results import Result
from src.domain.models.specification import Specification
from src.domain.repositories.base import Repository

E = TypeVar("E", bound=Entity)


async def paginate(
    repository: Repository[E, object],
    spec: Specification[E],
    page: PageParameters,
) -> Result[PaginatedResult[E]]:
    """Return the requested page of spec's results with total-count metadata.

    spec should carry a total ordering; its own skip/take are replaced by the
    page window.  A page past the end is an empty page, not a failure.
    """
    total = await repository.count(spec)
    if total.failed:
        return Result.propagate(total)
    rows = await repository.list(spec.paged(page.page_nr, page.page_size))
    if rows.failed:
        return Result.propagate(rows)
    return Result.success(
        PaginatedResult(
            data=rows.data,
            total_count=total.data,
            current_page=page.page_nr,
            page_size=page.page_size,
        )
    )
