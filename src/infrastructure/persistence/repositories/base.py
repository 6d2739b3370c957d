"""Generic SQLAlchemy implementation of Repository[E, K].

Concrete repositories only bind a mapper:

    class SqlParentRepository(SqlRepository[Parent, UUID]):
        mapper = PARENT_MAPPER

Reads run immediately against the unit of work's session and map rows to
domain entities; tracked reads register the entities with the unit of work.
Writes validate and stage; save() delegates to SqlUnitOfWork.commit().
Expected failures come back as failed Results; store errors other than the
ones the unit of work converts propagate unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import ValidationError
from sqlalchemy import Select, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.models.base import Entity
from src.domain.models.enums import EntityState, FailureKind
from src.domain.models.results import Result, validation_messages
from src.domain.models.specification import IncludeLike, Predicate, Specification
from src.domain.repositories.base import Repository
from src.infrastructure.persistence.mappers import EntityMapper, registry
from src.infrastructure.persistence.unit_of_work import SqlUnitOfWork

from .evaluator import InvalidSpecification, apply_specification, count_statement, with_includes
from .query import SqlEntityQuery

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Entity)
K = TypeVar("K")


class SqlRepository(Repository[E, K], Generic[E, K]):
    mapper: ClassVar[EntityMapper]

    def __init__(self, uow: SqlUnitOfWork) -> None:
        self._uow = uow

    @property
    def session(self) -> AsyncSession:
        return self._uow.session

    @property
    def model(self) -> type:
        return self.mapper.orm_model

    @property
    def unit_of_work(self) -> SqlUnitOfWork:
        return self._uow

    def state_of(self, entity: E) -> EntityState:
        return self._uow.state_of(self.mapper, entity)

    # ------------------------------------------------------------------ #
    # Helpers                                                              #
    # ------------------------------------------------------------------ #

    async def _fetch(self, stmt: Select, track_changes: bool) -> list[E]:
        result = await self.session.execute(stmt.execution_options(populate_existing=True))
        return [self._materialise(row, track_changes) for row in result.scalars()]

    def _materialise(self, row: Any, track_changes: bool) -> E:
        entity = self.mapper.to_domain(row)
        return self._track(self.mapper, entity) if track_changes else entity

    def _track(self, mapper: EntityMapper, entity: Entity) -> Entity:
        """Attach entity and everything its includes loaded.

        The first instance seen for a key is the tracked one; a later copy of
        the same key in the graph (or one tracked by an earlier read) is left
        as loaded and its edits are not saved.
        """
        tracked = self._uow.attach(mapper, entity)
        if tracked is entity:
            for child in mapper.related(entity):
                self._track(registry.for_entity(type(child)), child)
        return tracked

    def _validate(self, entity: E, label: str | None = None) -> list[str]:
        """Re-run field validation and write normalised values back onto entity."""
        columns = set(self.mapper.columns)
        try:
            validated = type(entity).model_validate(entity.model_dump(include=columns))
        except ValidationError as exc:
            return validation_messages(exc, label)
        for key in self.mapper.columns:
            value = getattr(validated, key)
            if getattr(entity, key) != value:
                setattr(entity, key, value)
        return []

    def _check_spec(self, spec: Specification | None) -> list[str]:
        if spec is None:
            return []
        errors = spec.window_errors()
        if spec.take is not None and spec.order_by is None:
            logger.debug("%s query pages without an ordering; page boundaries are arbitrary", self.mapper.name)
        return errors

    async def _select(
        self, spec: Specification | None, track_changes: bool, *, first: bool = False
    ) -> Result:
        errors = self._check_spec(spec)
        if errors:
            return Result.fail(*errors, kind=FailureKind.VALIDATION)
        try:
            stmt = apply_specification(select(self.model), self.model, spec)
        except InvalidSpecification as exc:
            return Result.fail(str(exc), kind=FailureKind.VALIDATION)
        if first:
            limit = 1 if spec is None or spec.take is None else min(spec.take, 1)
            entities = await self._fetch(stmt.limit(limit), track_changes)
            return Result.success(entities[0] if entities else None)
        return Result.success(await self._fetch(stmt, track_changes))

    async def _missing_keys(self, keys: list[Any]) -> set[Any]:
        if not keys:
            return set()
        result = await self.session.execute(select(self.model.id).where(self.model.id.in_(keys)))
        return set(keys) - set(result.scalars())

    # ------------------------------------------------------------------ #
    # Reads                                                                #
    # ------------------------------------------------------------------ #

    async def list(
        self, spec: Specification[E] | None = None, *, track_changes: bool = False
    ) -> Result[list[E]]:
        return await self._select(spec, track_changes)

    async def first_or_default(
        self, spec: Specification[E], *, track_changes: bool = False
    ) -> Result[E]:
        return await self._select(spec, track_changes, first=True)

    async def find_by_id(
        self, id: K, *includes: IncludeLike, track_changes: bool = False
    ) -> Result[E]:
        try:
            stmt = with_includes(select(self.model).where(self.model.id == id), self.model, includes)
        except InvalidSpecification as exc:
            return Result.fail(str(exc), kind=FailureKind.VALIDATION)
        entities = await self._fetch(stmt, track_changes)
        return Result.success(entities[0] if entities else None)

    async def count(self, spec: Specification[E] | None = None) -> Result[int]:
        result = await self.session.execute(count_statement(self.model, spec))
        return Result.success(result.scalar_one())

    def find_all(
        self, *includes: IncludeLike, track_changes: bool = False
    ) -> Result[SqlEntityQuery[E]]:
        try:
            stmt = with_includes(select(self.model), self.model, includes)
        except InvalidSpecification as exc:
            return Result.fail(str(exc), kind=FailureKind.VALIDATION)
        return Result.success(SqlEntityQuery(self, stmt, track_changes))

    def find_by_condition(
        self, predicate: Predicate, *includes: IncludeLike, track_changes: bool = False
    ) -> Result[SqlEntityQuery[E]]:
        found = self.find_all(*includes, track_changes=track_changes)
        if found.failed:
            return found
        return Result.success(found.data.where(predicate))

    async def exists(self, predicate: Predicate) -> Result[bool]:
        result = await self.session.execute(select(exists().where(predicate(self.model))))
        return Result.success(bool(result.scalar()))

    async def exists_by_id(self, id: K) -> Result[bool]:
        return await self.exists(lambda c: c.id == id)

    # ------------------------------------------------------------------ #
    # Writes                                                               #
    # ------------------------------------------------------------------ #

    async def create(self, entity: E) -> Result[E]:
        errors = self._validate(entity)
        if errors:
            return Result.fail(*errors, kind=FailureKind.VALIDATION)
        if self.state_of(entity) is not EntityState.DETACHED:
            return Result.fail(
                f"{self.mapper.name} with ID {entity.id} is already being tracked.",
                kind=FailureKind.VALIDATION,
            )
        self._uow.stage_added(self.mapper, entity)
        return Result.success(entity)

    async def create_range(self, entities: Iterable[E]) -> Result[list[E]]:
        batch = [*entities]
        errors: list[str] = []
        seen: set[Any] = set()
        for position, entity in enumerate(batch, start=1):
            label = f"{self.mapper.name} #{position}"
            errors.extend(self._validate(entity, label))
            if entity.id in seen or self.state_of(entity) is not EntityState.DETACHED:
                errors.append(f"{label}: ID {entity.id} is already being tracked.")
            seen.add(entity.id)
        if errors:
            logger.debug("Rejected batch insert of %d %s entities", len(batch), self.mapper.name)
            return Result.fail(*errors, kind=FailureKind.VALIDATION)
        for entity in batch:
            self._uow.stage_added(self.mapper, entity)
        return Result.success(batch)

    async def update(self, entity: E) -> Result[E]:
        errors = self._validate(entity)
        if errors:
            return Result.fail(*errors, kind=FailureKind.VALIDATION)
        state = self.state_of(entity)
        if state is EntityState.DELETED:
            return Result.fail(
                f"{self.mapper.name} with ID {entity.id} is marked for deletion.",
                kind=FailureKind.VALIDATION,
            )
        if state is EntityState.DETACHED and await self._missing_keys([entity.id]):
            return Result.fail(
                f"{self.mapper.name} with ID {entity.id} does not exist.",
                kind=FailureKind.VALIDATION,
            )
        self._uow.stage_modified(self.mapper, entity)
        return Result.success(entity)

    async def update_range(self, entities: Iterable[E]) -> Result[list[E]]:
        batch = [*entities]
        errors: list[str] = []
        detached = []
        for position, entity in enumerate(batch, start=1):
            label = f"{self.mapper.name} #{position}"
            errors.extend(self._validate(entity, label))
            state = self.state_of(entity)
            if state is EntityState.DELETED:
                errors.append(f"{label}: ID {entity.id} is marked for deletion.")
            elif state is EntityState.DETACHED:
                detached.append(entity.id)
        for key in sorted(await self._missing_keys(detached), key=str):
            errors.append(f"{self.mapper.name} with ID {key} does not exist.")
        if errors:
            logger.debug("Rejected batch update of %d %s entities", len(batch), self.mapper.name)
            return Result.fail(*errors, kind=FailureKind.VALIDATION)
        for entity in batch:
            self._uow.stage_modified(self.mapper, entity)
        return Result.success(batch)

    async def delete(self, entity: E) -> Result[E]:
        self._uow.stage_deleted(self.mapper, entity)
        return Result.success(entity)

    async def delete_by_id(self, id: K) -> Result[E]:
        entity = self._uow.tracked(self.mapper, id)
        if entity is None:
            found = await self.find_by_id(id)
            entity = found.data
        if entity is None:
            return Result.fail(f"Entity with ID {id} not found.", kind=FailureKind.NOT_FOUND)
        return await self.delete(entity)

    async def remove_range(self, entities: Iterable[E]) -> Result[list[E]]:
        batch = [*entities]
        for entity in batch:
            self._uow.stage_deleted(self.mapper, entity)
        return Result.success(batch)

    # ------------------------------------------------------------------ #
    # Unit of work                                                         #
    # ------------------------------------------------------------------ #

    async def save(self) -> Result[None]:
        return await self._uow.commit()

    def discard(self) -> None:
        self._uow.discard()
