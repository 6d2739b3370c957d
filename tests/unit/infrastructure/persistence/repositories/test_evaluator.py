"""Tests for the Specification → SELECT translation (compiled SQL only)."""

import pytest
from sqlalchemy import select
from sqlalchemy.dialects import sqlite

from src.domain.models import Include, Specification
from src.infrastructure.persistence.mappers import CONTACT_NUMBER_MAPPER
from src.infrastructure.persistence.models import ContactNumber, Learner
from src.infrastructure.persistence.repositories.evaluator import (
    InvalidSpecification,
    apply_specification,
    count_statement,
    loader_option,
)


def _sql(stmt):
    return str(stmt.compile(dialect=sqlite.dialect(), compile_kwargs={"literal_binds": True}))


def test_no_spec_leaves_statement_untouched():
    stmt = select(Learner)
    assert apply_specification(stmt, Learner, None) is stmt


def test_criteria_become_where_clause():
    spec = Specification(criteria=lambda c: c.grade >= 7)
    assert "WHERE learners.grade >= 7" in _sql(apply_specification(select(Learner), Learner, spec))


def test_ordering_accepts_tuples():
    spec = Specification(order_by=lambda c: (c.last_name, c.id))
    assert "ORDER BY learners.last_name, learners.id" in _sql(
        apply_specification(select(Learner), Learner, spec)
    )


def test_window_becomes_limit_and_offset():
    spec = Specification(order_by=lambda c: c.id).paged(page_nr=3, page_size=10)
    sql = _sql(apply_specification(select(Learner), Learner, spec))
    assert "LIMIT 10" in sql
    assert "OFFSET 20" in sql


def test_zero_skip_adds_no_offset():
    # SQLite always renders an OFFSET next to LIMIT, so compile generically.
    spec = Specification(order_by=lambda c: c.id).paged(page_nr=1, page_size=10)
    sql = str(apply_specification(select(Learner), Learner, spec))
    assert "LIMIT" in sql
    assert "OFFSET" not in sql


def test_renamed_column_compiles_to_store_name():
    spec = Specification(criteria=lambda c: c.default.is_(True))
    assert "WHERE contact_numbers.is_default IS" in _sql(
        apply_specification(select(ContactNumber), ContactNumber, spec)
    )


def test_count_ignores_window_and_ordering():
    spec = Specification(criteria=lambda c: c.grade >= 7, order_by=lambda c: c.id).paged(2, 5)
    sql = _sql(count_statement(Learner, spec))
    assert "count(*)" in sql
    assert "LIMIT" not in sql
    assert "ORDER BY" not in sql


def test_loader_option_follows_chained_path():
    assert loader_option(Learner, Include.of("parent").then("contact_numbers")) is not None


def test_loader_option_rejects_unknown_relationship():
    with pytest.raises(InvalidSpecification, match="Parent has no relationship named 'siblings'"):
        loader_option(Learner, Include.of("parent.siblings"))


def test_loader_option_rejects_columns():
    with pytest.raises(InvalidSpecification):
        loader_option(Learner, Include.of("grade"))


def test_loader_option_follows_member_to_owner():
    assert loader_option(ContactNumber, Include.of("parent").then("learners")) is not None


def test_loader_option_rejects_relationship_the_entity_cannot_hold(monkeypatch):
    monkeypatch.setattr(CONTACT_NUMBER_MAPPER, "relationships", ())
    with pytest.raises(InvalidSpecification, match="ContactNumber has no relationship named 'parent'"):
        loader_option(ContactNumber, Include.of("parent"))
