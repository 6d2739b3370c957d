"""Row ↔ domain entity mapping.

Each repository module defines per-entity mapping functions in this style:

    def _to_domain(row: OrmX) -> DomainX: ...

EntityMapper generalises that once.  Scalar fields are the ORM class's
column attributes (attribute keys, not column names); relationship fields
are the ORM relationships that the domain model also declares.  Only
relationships that were actually eager-loaded are mapped, so an unloaded
relationship never triggers lazy IO on the async session.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from sqlalchemy import inspect as sa_inspect

from src.domain.models import Address, ContactNumber, EmailAddress, Learner, Parent
from src.domain.models.base import Entity
from src.infrastructure.database import Base
from src.infrastructure.persistence.models import (
    Address as OrmAddress,
)
from src.infrastructure.persistence.models import (
    ContactNumber as OrmContactNumber,
)
from src.infrastructure.persistence.models import (
    EmailAddress as OrmEmailAddress,
)
from src.infrastructure.persistence.models import (
    Learner as OrmLearner,
)
from src.infrastructure.persistence.models import (
    Parent as OrmParent,
)

E = TypeVar("E", bound=Entity)
R = TypeVar("R", bound=Base)

# Never copied from an entity onto an existing row.
_IMMUTABLE_ON_UPDATE = frozenset({"id", "created_at", "created_by", "row_version"})


class ConcurrencyConflict(Exception):
    """The row changed (or vanished) since the entity was read."""

    def __init__(self, entity_type: type, key: Any) -> None:
        super().__init__(f"{entity_type.__name__} {key} was updated by another user or process")
        self.entity_type = entity_type
        self.key = key


class MapperRegistry:
    """Resolves the mapper for an ORM class or a domain entity type."""

    def __init__(self) -> None:
        self._by_model: dict[type, EntityMapper] = {}
        self._by_entity: dict[type, EntityMapper] = {}

    def register(self, mapper: EntityMapper) -> EntityMapper:
        self._by_model[mapper.orm_model] = mapper
        self._by_entity[mapper.entity_type] = mapper
        return mapper

    def for_model(self, orm_model: type) -> EntityMapper:
        try:
            return self._by_model[orm_model]
        except KeyError:
            raise LookupError(f"No entity mapper registered for {orm_model.__name__}") from None

    def for_entity(self, entity_type: type) -> EntityMapper:
        try:
            return self._by_entity[entity_type]
        except KeyError:
            raise LookupError(f"No entity mapper registered for {entity_type.__name__}") from None


registry = MapperRegistry()


class EntityMapper(Generic[E, R]):
    def __init__(self, entity_type: type[E], orm_model: type[R]) -> None:
        self.entity_type = entity_type
        self.orm_model = orm_model
        orm_mapper = sa_inspect(orm_model)
        self.columns: tuple[str, ...] = tuple(attr.key for attr in orm_mapper.column_attrs)
        self.relationships: tuple[str, ...] = tuple(
            rel.key for rel in orm_mapper.relationships if rel.key in entity_type.model_fields
        )

    @property
    def name(self) -> str:
        return self.entity_type.__name__

    def key_of(self, entity: E) -> tuple[type, Any]:
        return (self.entity_type, entity.id)

    def to_domain(self, row: R, _seen: set[tuple[type, Any]] | None = None) -> E:
        data = {key: getattr(row, key) for key in self.columns}
        seen = set() if _seen is None else _seen
        identity = (self.entity_type, data.get("id"))
        if identity in seen:
            # Already mapped higher up this graph (e.g. learners.parent); stop here.
            return self.entity_type.model_validate(data)
        seen.add(identity)

        state = sa_inspect(row, raiseerr=False)
        unloaded = state.unloaded if state is not None else frozenset()
        for name in self.relationships:
            if name in unloaded or not hasattr(row, name):
                continue
            value = getattr(row, name)
            if value is None:
                data[name] = None
            elif isinstance(value, (list, set, tuple)):
                data[name] = [
                    registry.for_model(type(child)).to_domain(child, seen) for child in value
                ]
            else:
                data[name] = registry.for_model(type(value)).to_domain(value, seen)
        return self.entity_type.model_validate(data)

    def to_row(self, entity: E) -> R:
        """Build a new row for insertion; row_version is assigned by the mapper."""
        return self.orm_model(
            **{key: getattr(entity, key) for key in self.columns if key != "row_version"}
        )

    def apply(self, entity: E, row: R) -> None:
        """Copy mutable fields onto an existing row after checking the version."""
        if row.row_version != entity.row_version:
            raise ConcurrencyConflict(self.entity_type, entity.id)
        for key in self.columns:
            if key not in _IMMUTABLE_ON_UPDATE:
                setattr(row, key, getattr(entity, key))

    def refresh(self, entity: E, values: dict[str, Any]) -> None:
        """Copy column values read from a written row back onto the entity."""
        for key in self.columns:
            if key in values:
                setattr(entity, key, values[key])

    def snapshot(self, entity: E) -> dict[str, Any]:
        return entity.model_dump(include=set(self.columns))

    def related(self, entity: E) -> list[Entity]:
        """Entities held in entity's relationship fields, one level down."""
        found: list[Entity] = []
        for name in self.relationships:
            value = getattr(entity, name)
            if isinstance(value, list):
                found.extend(value)
            elif value is not None:
                found.append(value)
        return found


PARENT_MAPPER = registry.register(EntityMapper(Parent, OrmParent))
LEARNER_MAPPER = registry.register(EntityMapper(Learner, OrmLearner))
CONTACT_NUMBER_MAPPER = registry.register(EntityMapper(ContactNumber, OrmContactNumber))
EMAIL_ADDRESS_MAPPER = registry.register(EntityMapper(EmailAddress, OrmEmailAddress))
ADDRESS_MAPPER = registry.register(EntityMapper(Address, OrmAddress))
