"""Tests for EntityMapper: row ↔ domain mapping without a database."""

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest

from src.domain.models import ContactNumber, Learner, Parent
from src.infrastructure.persistence.mappers import (
    CONTACT_NUMBER_MAPPER,
    LEARNER_MAPPER,
    PARENT_MAPPER,
    ConcurrencyConflict,
    registry,
)
from src.infrastructure.persistence.models import ContactNumber as OrmContactNumber
from src.infrastructure.persistence.models import Learner as OrmLearner
from src.infrastructure.persistence.models import Parent as OrmParent


def _orm_number(**overrides):
    defaults = {
        "id": uuid4(),
        "entity_id": uuid4(),
        "number": "555-0001",
        "default": True,
        "created_at": datetime(2026, 1, 5, tzinfo=timezone.utc),
        "created_by": "tester",
        "modified_at": None,
        "modified_by": None,
        "row_version": 3,
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


# --- metadata ---

def test_columns_use_attribute_keys_not_column_names():
    assert "default" in CONTACT_NUMBER_MAPPER.columns
    assert "is_default" not in CONTACT_NUMBER_MAPPER.columns


def test_relationships_limited_to_domain_fields():
    assert set(PARENT_MAPPER.relationships) == {
        "learners", "contact_numbers", "email_addresses", "addresses"
    }
    assert CONTACT_NUMBER_MAPPER.relationships == ("parent",)


def test_registry_resolves_mapper_by_orm_class():
    assert registry.for_model(OrmLearner) is LEARNER_MAPPER


def test_registry_rejects_unmapped_class():
    with pytest.raises(LookupError):
        registry.for_model(SimpleNamespace)


# --- to_domain ---

def test_to_domain_maps_renamed_column():
    assert CONTACT_NUMBER_MAPPER.to_domain(_orm_number(default=False)).default is False


def test_to_domain_maps_row_version():
    assert CONTACT_NUMBER_MAPPER.to_domain(_orm_number()).row_version == 3


def test_to_domain_returns_domain_type():
    assert isinstance(CONTACT_NUMBER_MAPPER.to_domain(_orm_number()), ContactNumber)


def test_to_domain_maps_loaded_collections():
    pid = uuid4()
    row = OrmParent(
        id=pid,
        first_name="Thandi",
        last_name="Nkosi",
        row_version=1,
        contact_numbers=[
            OrmContactNumber(id=uuid4(), entity_id=pid, number="555-0001", default=True, row_version=1)
        ],
    )
    parent = PARENT_MAPPER.to_domain(row)
    assert isinstance(parent, Parent)
    assert [n.number for n in parent.contact_numbers] == ["555-0001"]


def test_to_domain_skips_unloaded_relationships():
    row = OrmParent(id=uuid4(), first_name="Thandi", last_name="Nkosi", row_version=1)
    assert PARENT_MAPPER.to_domain(row).learners == []


def test_to_domain_stops_at_cycles():
    pid, lid = uuid4(), uuid4()
    learner_row = OrmLearner(
        id=lid, parent_id=pid, first_name="Sipho", last_name="Nkosi", grade=4, row_version=1
    )
    OrmParent(id=pid, first_name="Thandi", last_name="Nkosi", row_version=1, learners=[learner_row])

    learner = LEARNER_MAPPER.to_domain(learner_row)
    assert isinstance(learner, Learner)
    assert learner.parent.id == pid
    assert learner.parent.learners[0].id == lid
    assert learner.parent.learners[0].parent is None


# --- to_row / apply / snapshot ---

def test_to_row_leaves_row_version_to_the_store():
    number = ContactNumber(entity_id=uuid4(), number="555-0001", default=True)
    row = CONTACT_NUMBER_MAPPER.to_row(number)
    assert isinstance(row, OrmContactNumber)
    assert row.default is True
    assert row.row_version is None


def test_apply_copies_mutable_fields():
    row = _orm_number(number="555-0001", row_version=2)
    entity = CONTACT_NUMBER_MAPPER.to_domain(row)
    entity.number = "555-9999"
    entity.created_by = "mallory"
    CONTACT_NUMBER_MAPPER.apply(entity, row)
    assert row.number == "555-9999"
    assert row.created_by == "tester"
    assert row.row_version == 2


def test_apply_rejects_stale_version():
    row = _orm_number(row_version=2)
    entity = CONTACT_NUMBER_MAPPER.to_domain(row)
    row.row_version = 3
    with pytest.raises(ConcurrencyConflict):
        CONTACT_NUMBER_MAPPER.apply(entity, row)


def test_refresh_copies_known_columns_only():
    entity = CONTACT_NUMBER_MAPPER.to_domain(_orm_number(row_version=1))
    CONTACT_NUMBER_MAPPER.refresh(entity, {"row_version": 2, "unrelated": "x"})
    assert entity.row_version == 2


def test_snapshot_excludes_relationships():
    parent = Parent(first_name="Thandi", last_name="Nkosi")
    assert "learners" not in PARENT_MAPPER.snapshot(parent)
    assert PARENT_MAPPER.snapshot(parent)["first_name"] == "Thandi"


def test_related_lists_loaded_entities_one_level_down():
    number = ContactNumber(entity_id=uuid4(), number="555-0001")
    learner = Learner(parent_id=uuid4(), first_name="Sipho", last_name="Nkosi", grade=4)
    parent = Parent(first_name="Thandi", last_name="Nkosi", learners=[learner], contact_numbers=[number])
    related = PARENT_MAPPER.related(parent)
    assert len(related) == 2
    assert learner in related and number in related
    assert LEARNER_MAPPER.related(learner) == []


def test_registry_resolves_mapper_by_entity_type():
    assert registry.for_entity(ContactNumber) is CONTACT_NUMBER_MAPPER
    with pytest.raises(LookupError):
        registry.for_entity(SimpleNamespace)


def test_member_maps_loaded_owner():
    pid = uuid4()
    number_row = OrmContactNumber(id=uuid4(), entity_id=pid, number="555-0001", default=True, row_version=1)
    OrmParent(id=pid, first_name="Thandi", last_name="Nkosi", row_version=1, contact_numbers=[number_row])
    number = CONTACT_NUMBER_MAPPER.to_domain(number_row)
    assert number.parent.id == pid
    assert number.parent.contact_numbers[0].parent is None
