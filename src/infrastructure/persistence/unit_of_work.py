"""Session-scoped unit of work.

SqlUnitOfWork owns one AsyncSession and tracks domain entities keyed by
(entity type, id).  Repositories stage creates, updates and deletes here;
tracked reads register a snapshot of the entity's scalar fields so that
in-memory edits are detected by diffing at commit time.

commit() replays every pending operation in staging order, flushing after
each one, inside a single transaction.  Replaying in order lets invariant
services control the sequence in which rows reach the store (clear the old
default before writing the new one) under immediate unique indexes.  Any
store rejection rolls the whole transaction back and discards the batch.

A unit of work is not safe for concurrent use; build one per request.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from src.domain.models.base import Entity
from src.domain.models.enums import EntityState, FailureKind
from src.domain.models.results import Result
from src.infrastructure.database import AsyncSessionLocal, settings
from src.infrastructure.persistence.mappers import ConcurrencyConflict, EntityMapper

logger = logging.getLogger(__name__)

CONCURRENCY_MESSAGE = "The entity was updated by another user or process."


@dataclass
class _Entry:
    mapper: EntityMapper
    entity: Entity
    state: EntityState
    sequence: int
    snapshot: dict[str, Any] | None = None
    row: Any = field(default=None, repr=False)

    @property
    def is_dirty(self) -> bool:
        return (
            self.state is EntityState.UNCHANGED
            and self.snapshot is not None
            and self.mapper.snapshot(self.entity) != self.snapshot
        )


class SqlUnitOfWork:
    def __init__(self, session: AsyncSession, actor: str | None = None) -> None:
        self._session = session
        self.actor = actor or settings.system_actor
        self._entries: dict[tuple[type, Any], _Entry] = {}
        self._sequence = itertools.count()

    @property
    def session(self) -> AsyncSession:
        return self._session

    # ------------------------------------------------------------------ #
    # Tracking                                                             #
    # ------------------------------------------------------------------ #

    def _entry(self, mapper: EntityMapper, entity: Entity) -> _Entry | None:
        return self._entries.get(mapper.key_of(entity))

    def state_of(self, mapper: EntityMapper, entity: Entity) -> EntityState:
        entry = self._entry(mapper, entity)
        if entry is None:
            return EntityState.DETACHED
        if entry.is_dirty:
            return EntityState.MODIFIED
        return entry.state

    def tracked(self, mapper: EntityMapper, key: Any) -> Entity | None:
        """Return the tracked instance for key, unless it is staged for deletion."""
        entry = self._entries.get((mapper.entity_type, key))
        if entry is None or entry.state is EntityState.DELETED:
            return None
        return entry.entity

    def attach(self, mapper: EntityMapper, entity: Entity) -> Entity:
        """Start tracking a freshly read entity.

        If an instance with the same key is already tracked, that instance is
        returned instead so each key maps to one object per unit of work.
        """
        entry = self._entry(mapper, entity)
        if entry is not None:
            return entry.entity
        self._entries[mapper.key_of(entity)] = _Entry(
            mapper=mapper,
            entity=entity,
            state=EntityState.UNCHANGED,
            sequence=next(self._sequence),
            snapshot=mapper.snapshot(entity),
        )
        return entity

    def stage_added(self, mapper: EntityMapper, entity: Entity) -> None:
        self._entries[mapper.key_of(entity)] = _Entry(
            mapper=mapper,
            entity=entity,
            state=EntityState.ADDED,
            sequence=next(self._sequence),
        )
        logger.debug("Staged insert of %s %s", mapper.name, entity.id)

    def stage_modified(self, mapper: EntityMapper, entity: Entity) -> None:
        entry = self._entry(mapper, entity)
        if entry is None:
            self._entries[mapper.key_of(entity)] = _Entry(
                mapper=mapper,
                entity=entity,
                state=EntityState.MODIFIED,
                sequence=next(self._sequence),
            )
        elif entry.state is EntityState.ADDED:
            # Still an insert; only the instance to insert may have changed.
            entry.entity = entity
            return
        else:
            entry.entity = entity
            entry.state = EntityState.MODIFIED
            entry.sequence = next(self._sequence)
        logger.debug("Staged update of %s %s", mapper.name, entity.id)

    def stage_deleted(self, mapper: EntityMapper, entity: Entity) -> None:
        key = mapper.key_of(entity)
        entry = self._entries.get(key)
        if entry is not None and entry.state is EntityState.ADDED:
            del self._entries[key]
            logger.debug("Unstaged pending insert of %s %s", mapper.name, entity.id)
            return
        self._entries[key] = _Entry(
            mapper=mapper,
            entity=entity,
            state=EntityState.DELETED,
            sequence=next(self._sequence),
        )
        logger.debug("Staged delete of %s %s", mapper.name, entity.id)

    def pending(self) -> list[tuple[EntityState, Entity]]:
        """Pending operations in the order commit() would replay them."""
        return [(state, entry.entity) for state, entry in self._pending_entries()]

    @property
    def has_changes(self) -> bool:
        return bool(self._pending_entries())

    def _pending_entries(self) -> list[tuple[EntityState, _Entry]]:
        pending = []
        for entry in sorted(self._entries.values(), key=lambda e: e.sequence):
            if entry.state.is_pending:
                pending.append((entry.state, entry))
            elif entry.is_dirty:
                pending.append((EntityState.MODIFIED, entry))
        return pending

    def discard(self) -> None:
        """Forget every staged change and every tracked entity."""
        if self._entries:
            logger.debug("Discarding %d tracked entities", len(self._entries))
        self._entries.clear()

    # ------------------------------------------------------------------ #
    # Commit                                                               #
    # ------------------------------------------------------------------ #

    async def commit(self) -> Result[None]:
        pending = self._pending_entries()
        if not pending:
            return Result.success()

        now = datetime.now(timezone.utc)
        written: list[tuple[EntityState, _Entry, dict[str, Any]]] = []
        try:
            for state, entry in pending:
                await self._write(state, entry, now)
                await self._session.flush()
            for state, entry in pending:
                # Read store-assigned values before commit can expire the rows.
                values = {} if entry.row is None else {
                    key: getattr(entry.row, key) for key in entry.mapper.columns
                }
                written.append((state, entry, values))
            await self._session.commit()
        except (IntegrityError, StaleDataError, ConcurrencyConflict) as exc:
            await self._abort()
            message = _describe(exc)
            logger.warning("Save rejected (%d pending operations): %s", len(pending), message)
            return Result.fail(message, kind=FailureKind.CONFLICT)
        except DataError as exc:
            await self._abort()
            message = _describe(exc)
            logger.warning("Save rejected (%d pending operations): %s", len(pending), message)
            return Result.fail(message, kind=FailureKind.PERSISTENCE)
        except (Exception, asyncio.CancelledError):
            # Cancelled or unexpected: roll back so nothing is committed, then re-raise.
            await self._abort()
            raise

        for state, entry, values in written:
            if state is EntityState.DELETED:
                self._entries.pop(entry.mapper.key_of(entry.entity), None)
                continue
            entry.mapper.refresh(entry.entity, values)
            entry.state = EntityState.UNCHANGED
            entry.snapshot = entry.mapper.snapshot(entry.entity)
            entry.row = None
        logger.info("Committed %d operations for %s", len(pending), self.actor)
        return Result.success()

    async def _write(self, state: EntityState, entry: _Entry, now: datetime) -> None:
        mapper, entity = entry.mapper, entry.entity
        if state is EntityState.ADDED:
            if entity.created_at is None:
                entity.created_at = now
            entity.created_by = entity.created_by or self.actor
            entry.row = mapper.to_row(entity)
            self._session.add(entry.row)
            return

        row = await self._session.get(mapper.orm_model, entity.id, populate_existing=True)
        if row is None:
            raise ConcurrencyConflict(mapper.entity_type, entity.id)
        if state is EntityState.MODIFIED:
            entity.modified_at = now
            entity.modified_by = self.actor
            mapper.apply(entity, row)
            entry.row = row
        else:
            if row.row_version != entity.row_version:
                raise ConcurrencyConflict(mapper.entity_type, entity.id)
            await self._session.delete(row)

    async def _abort(self) -> None:
        await self._session.rollback()
        self.discard()


def _describe(exc: Exception) -> str:
    if isinstance(exc, (StaleDataError, ConcurrencyConflict)):
        return CONCURRENCY_MESSAGE
    orig = getattr(exc, "orig", None)
    return str(orig if orig is not None else exc)


async def get_unit_of_work(actor: str | None = None) -> AsyncGenerator[SqlUnitOfWork, None]:
    """Request-scoped dependency yielding a unit of work over a fresh session."""
    async with AsyncSessionLocal() as session:
        yield SqlUnitOfWork(session, actor=actor)
