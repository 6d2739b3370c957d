"""Translate Specification objects into SQLAlchemy select statements."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import selectinload

from src.domain.models.specification import Include, IncludeLike, Ordering, Specification, as_include
from src.infrastructure.persistence.mappers import registry


class InvalidSpecification(ValueError):
    """A specification names something the entity's mapping does not have."""


def _as_columns(ordering: Ordering, model: type) -> tuple[Any, ...]:
    columns = ordering(model)
    return tuple(columns) if isinstance(columns, (list, tuple)) else (columns,)


def loader_option(model: type, include: Include) -> Any:
    """Build a chained selectinload() for an include path.

    Include.of("parent").then("contact_numbers") on Learner becomes
    selectinload(Learner.parent).selectinload(Parent.contact_numbers).
    """
    option = None
    current = model
    for name in include.path:
        relationship = sa_inspect(current).relationships.get(name)
        # The domain model must have somewhere to put what the include loads.
        if relationship is None or name not in registry.for_model(current).relationships:
            raise InvalidSpecification(
                f"{current.__name__} has no relationship named '{name}' (include '{include}')"
            )
        attr = getattr(current, name)
        option = selectinload(attr) if option is None else option.selectinload(attr)
        current = relationship.mapper.class_
    return option


def with_includes(stmt: Select, model: type, includes: tuple[IncludeLike, ...]) -> Select:
    for include in includes:
        stmt = stmt.options(loader_option(model, as_include(include)))
    return stmt


def apply_specification(stmt: Select, model: type, spec: Specification | None) -> Select:
    if spec is None:
        return stmt
    if spec.criteria is not None:
        stmt = stmt.where(spec.criteria(model))
    stmt = with_includes(stmt, model, spec.includes)
    if spec.order_by is not None:
        stmt = stmt.order_by(*_as_columns(spec.order_by, model))
    if spec.skip:
        stmt = stmt.offset(spec.skip)
    if spec.take is not None:
        stmt = stmt.limit(spec.take)
    return stmt


def count_statement(model: type, spec: Specification | None) -> Select:
    """Count rows matching the criteria only; window, ordering and includes are ignored."""
    stmt = select(func.count()).select_from(model)
    if spec is not None and spec.criteria is not None:
        stmt = stmt.where(spec.criteria(model))
    return stmt
