"""Generic repository base interface.

Repository[E, K] is the root abstraction for all data access in this domain
layer.  Concrete implementations live in src/infrastructure/persistence/ and
are wired at the application boundary via dependency injection.

Design notes:
  - All methods are async; every store round-trip is an await point and
    asyncio task cancellation is the cooperative cancellation signal.
  - E is the domain entity type (never an ORM row or DTO); K is its key type.
  - Every operation returns a Result.  "Not found" on a single-item read is a
    success carrying None, not a failure.
  - Writes only stage changes.  Nothing reaches the store until save(),
    which commits everything staged since the last save as one unit.
  - Filtering, eager loading, ordering and paging are requested exclusively
    through Specification objects or composable EntityQuery instances.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Iterable
from typing import Generic, TypeVar

from src.domain.models.base import Entity
from src.domain.models.results import Result
from src.domain.models.specification import IncludeLike, Ordering, Predicate, Specification

E = TypeVar("E", bound=Entity)
K = TypeVar("K")


class EntityQuery(ABC, Generic[E]):
    """A lazily evaluated, composable query over one entity type.

    Composition methods return new queries; nothing touches the store until
    one of the materialising coroutines is awaited.
    """

    @abstractmethod
    def where(self, predicate: Predicate) -> EntityQuery[E]:
        """Narrow the query with an additional predicate."""

    @abstractmethod
    def order_by(self, ordering: Ordering) -> EntityQuery[E]:
        """Replace the ordering."""

    @abstractmethod
    def skip(self, count: int) -> EntityQuery[E]: ...

    @abstractmethod
    def take(self, count: int) -> EntityQuery[E]: ...

    @abstractmethod
    async def to_list(self) -> list[E]:
        """Execute the query and return every matching entity."""

    @abstractmethod
    async def first_or_default(self) -> E | None: ...

    @abstractmethod
    async def count(self) -> int: ...

    @abstractmethod
    async def any(self) -> bool: ...

    def __aiter__(self) -> AsyncIterator[E]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[E]:
        for entity in await self.to_list():
            yield entity


class Repository(ABC, Generic[E, K]):
    """Abstract CRUD and query interface for one entity type."""

    # --- reads --------------------------------------------------------------

    @abstractmethod
    async def list(
        self, spec: Specification[E] | None = None, *, track_changes: bool = False
    ) -> Result[list[E]]:
        """Return every entity, or every entity satisfying spec."""

    @abstractmethod
    async def first_or_default(
        self, spec: Specification[E], *, track_changes: bool = False
    ) -> Result[E]:
        """Return the first entity satisfying spec; success with None when absent."""

    @abstractmethod
    async def find_by_id(
        self, id: K, *includes: IncludeLike, track_changes: bool = False
    ) -> Result[E]:
        """Return the entity with the given key; success with None when absent."""

    @abstractmethod
    async def count(self, spec: Specification[E] | None = None) -> Result[int]:
        """Count entities matching spec's criteria (window and includes ignored)."""

    @abstractmethod
    def find_all(
        self, *includes: IncludeLike, track_changes: bool = False
    ) -> Result[EntityQuery[E]]:
        """Return an unmaterialised query over every entity."""

    @abstractmethod
    def find_by_condition(
        self, predicate: Predicate, *includes: IncludeLike, track_changes: bool = False
    ) -> Result[EntityQuery[E]]:
        """Return an unmaterialised query over entities satisfying predicate."""

    @abstractmethod
    async def exists(self, predicate: Predicate) -> Result[bool]: ...

    @abstractmethod
    async def exists_by_id(self, id: K) -> Result[bool]: ...

    # --- writes -------------------------------------------------------------

    @abstractmethod
    async def create(self, entity: E) -> Result[E]:
        """Stage a new entity for insertion."""

    @abstractmethod
    async def create_range(self, entities: Iterable[E]) -> Result[list[E]]:
        """Stage every entity or, if any is invalid, none of them."""

    @abstractmethod
    async def update(self, entity: E) -> Result[E]:
        """Stage changes to an entity whose key already exists."""

    @abstractmethod
    async def update_range(self, entities: Iterable[E]) -> Result[list[E]]:
        """Stage updates for every entity or, if any is invalid, none of them."""

    @abstractmethod
    async def delete(self, entity: E) -> Result[E]:
        """Stage removal of an entity."""

    @abstractmethod
    async def delete_by_id(self, id: K) -> Result[E]:
        """Resolve the entity by key and stage its removal; fails when absent."""

    @abstractmethod
    async def remove_range(self, entities: Iterable[E]) -> Result[list[E]]: ...

    # --- unit of work -------------------------------------------------------

    @abstractmethod
    async def save(self) -> Result[None]:
        """Commit everything staged since the last save as one atomic unit."""

    @abstractmethod
    def discard(self) -> None:
        """Drop every staged change and stop tracking all entities."""
