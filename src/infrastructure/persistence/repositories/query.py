"""Lazily evaluated query returned by find_all() and find_by_condition()."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from sqlalchemy import Select, func, select

from src.domain.models.base import Entity
from src.domain.models.specification import Ordering, Predicate
from src.domain.repositories.base import EntityQuery

from .evaluator import _as_columns

if TYPE_CHECKING:
    from .base import SqlRepository

E = TypeVar("E", bound=Entity)


class SqlEntityQuery(EntityQuery[E]):
    def __init__(
        self,
        repository: SqlRepository,
        stmt: Select,
        track_changes: bool,
        take: int | None = None,
    ) -> None:
        self._repository = repository
        self._stmt = stmt
        self._track_changes = track_changes
        self._take = take

    @property
    def statement(self) -> Select:
        return self._stmt

    def _derive(self, stmt: Select, *, take: int | None = None) -> SqlEntityQuery[E]:
        return SqlEntityQuery(
            self._repository, stmt, self._track_changes, self._take if take is None else take
        )

    def where(self, predicate: Predicate) -> SqlEntityQuery[E]:
        return self._derive(self._stmt.where(predicate(self._repository.model)))

    def order_by(self, ordering: Ordering) -> SqlEntityQuery[E]:
        columns = _as_columns(ordering, self._repository.model)
        return self._derive(self._stmt.order_by(None).order_by(*columns))

    def skip(self, count: int) -> SqlEntityQuery[E]:
        if count < 0:
            raise ValueError(f"skip must be non-negative, got {count}")
        return self._derive(self._stmt.offset(count))

    def take(self, count: int) -> SqlEntityQuery[E]:
        if count < 0:
            raise ValueError(f"take must be non-negative, got {count}")
        return self._derive(self._stmt.limit(count), take=count)

    async def to_list(self) -> list[E]:
        return await self._repository._fetch(self._stmt, self._track_changes)

    async def first_or_default(self) -> E | None:
        limit = 1 if self._take is None else min(self._take, 1)
        entities = await self._repository._fetch(self._stmt.limit(limit), self._track_changes)
        return entities[0] if entities else None

    async def count(self) -> int:
        subquery = self._stmt.order_by(None).subquery()
        result = await self._repository.session.execute(
            select(func.count()).select_from(subquery)
        )
        return result.scalar_one()

    async def any(self) -> bool:
        result = await self._repository.session.execute(
            select(self._stmt.order_by(None).exists())
        )
        return bool(result.scalar())
