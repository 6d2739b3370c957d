"""SQLAlchemy repositories for owner aggregates."""

from __future__ import annotations

from uuid import UUID

from src.domain.models.people import Learner, Parent
from src.domain.models.results import Result
from src.domain.models.specification import LIKE_ESCAPE, Specification, like_literal
from src.infrastructure.persistence.mappers import LEARNER_MAPPER, PARENT_MAPPER

from .base import SqlRepository


class SqlParentRepository(SqlRepository[Parent, UUID]):
    mapper = PARENT_MAPPER

    async def search(self, term: str, *, track_changes: bool = False) -> Result[list[Parent]]:
        """Parents whose first or last name contains term (case-insensitive)."""
        pattern = f"%{like_literal(term.strip().lower())}%"
        spec = Specification(
            criteria=lambda c: (
                c.first_name.ilike(pattern, escape=LIKE_ESCAPE)
                | c.last_name.ilike(pattern, escape=LIKE_ESCAPE)
            ),
            order_by=lambda c: (c.last_name, c.first_name, c.id),
        )
        return await self.list(spec, track_changes=track_changes)


class SqlLearnerRepository(SqlRepository[Learner, UUID]):
    mapper = LEARNER_MAPPER

    async def for_parent(self, parent_id: UUID, *, track_changes: bool = False) -> Result[list[Learner]]:
        spec = Specification(
            criteria=lambda c: c.parent_id == parent_id,
            order_by=lambda c: (c.grade, c.last_name, c.first_name, c.id),
        )
        return await self.list(spec, track_changes=track_changes)
