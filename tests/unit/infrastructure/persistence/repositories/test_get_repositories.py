"""Tests for the get_repositories() DI factory."""

from unittest.mock import MagicMock

from src.infrastructure.persistence.repositories import (
    Repositories,
    SqlAddressRepository,
    SqlContactNumberRepository,
    SqlEmailAddressRepository,
    SqlLearnerRepository,
    SqlParentRepository,
    get_repositories,
)
from src.infrastructure.persistence.unit_of_work import SqlUnitOfWork


def _repos(uow=None):
    return get_repositories(uow or SqlUnitOfWork(MagicMock()))


def test_get_repositories_returns_repositories_instance():
    assert isinstance(_repos(), Repositories)


def test_repositories_parents_is_correct_type():
    assert isinstance(_repos().parents, SqlParentRepository)


def test_repositories_learners_is_correct_type():
    assert isinstance(_repos().learners, SqlLearnerRepository)


def test_repositories_contact_numbers_is_correct_type():
    assert isinstance(_repos().contact_numbers, SqlContactNumberRepository)


def test_repositories_email_addresses_is_correct_type():
    assert isinstance(_repos().email_addresses, SqlEmailAddressRepository)


def test_repositories_addresses_is_correct_type():
    assert isinstance(_repos().addresses, SqlAddressRepository)


def test_repositories_share_one_unit_of_work():
    uow = SqlUnitOfWork(MagicMock())
    repos = _repos(uow)
    assert repos.parents.unit_of_work is uow
    assert repos.addresses.unit_of_work is uow


def test_repositories_dataclass_has_five_fields():
    assert len(Repositories.__dataclass_fields__) == 5
