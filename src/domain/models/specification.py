"""Declarative query descriptor consumed by repositories.

A Specification never executes anything. Filter predicates and orderings are
closures over the entity's column namespace (the mapped table class), so
they are written in the persistence library's query DSL and translate to SQL:

    Specification(
        criteria=lambda c: c.entity_id == owner_id,
        includes=("parent.contact_numbers",),
        order_by=lambda c: (c.created_at, c.id),
    ).paged(page_nr=2, page_size=25)

Include directives name relationships, optionally chained with dots or
Include.then() (include A, then for each A include A.B).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any, Generic, TypeVar, Union

E = TypeVar("E")

Predicate = Callable[[Any], Any]
Ordering = Callable[[Any], Any]


@dataclass(frozen=True)
class Include:
    """A chain of relationship names to eager-load, outermost first."""

    path: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.path or any(not name for name in self.path):
            raise ValueError(f"Invalid include path: {self.path!r}")

    @classmethod
    def of(cls, name: str) -> Include:
        return cls(tuple(name.split(".")))

    def then(self, name: str) -> Include:
        """Extend the chain one level deeper."""
        return Include(self.path + tuple(name.split(".")))

    def __str__(self) -> str:
        return ".".join(self.path)


IncludeLike = Union[Include, str]


def as_include(value: IncludeLike) -> Include:
    return value if isinstance(value, Include) else Include.of(value)


LIKE_ESCAPE = "\\"


def like_literal(text: str) -> str:
    """Escape LIKE wildcards in text; pass escape=LIKE_ESCAPE alongside it."""
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


@dataclass(frozen=True)
class Specification(Generic[E]):
    """Which entities, with what related data, in what order, in what window.

    criteria absent means "all entities".  skip/take are not validated here;
    the repository rejects negative values and paging without an ordering
    yields no deterministic page boundaries.
    """

    criteria: Predicate | None = None
    includes: tuple[Include, ...] = field(default=())
    order_by: Ordering | None = None
    skip: int | None = None
    take: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "includes", tuple(as_include(i) for i in self.includes))

    @property
    def is_paged(self) -> bool:
        return self.skip is not None or self.take is not None

    def where(self, predicate: Predicate) -> Specification[E]:
        """Return a copy whose criteria is the conjunction with predicate."""
        if self.criteria is None:
            return replace(self, criteria=predicate)
        current = self.criteria
        return replace(self, criteria=lambda c: current(c) & predicate(c))

    def include(self, *includes: IncludeLike) -> Specification[E]:
        return replace(self, includes=self.includes + tuple(as_include(i) for i in includes))

    def ordered_by(self, ordering: Ordering) -> Specification[E]:
        return replace(self, order_by=ordering)

    def window(self, skip: int | None, take: int | None) -> Specification[E]:
        return replace(self, skip=skip, take=take)

    def paged(self, page_nr: int, page_size: int) -> Specification[E]:
        """Map a 1-based page number and page size onto skip/take."""
        return self.window((page_nr - 1) * page_size, page_size)

    def unpaged(self) -> Specification[E]:
        return self.window(None, None)

    def window_errors(self) -> list[str]:
        errors = []
        if self.skip is not None and self.skip < 0:
            errors.append(f"skip must be non-negative, got {self.skip}")
        if self.take is not None and self.take < 0:
            errors.append(f"take must be non-negative, got {self.take}")
        return errors
