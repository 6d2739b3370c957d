"""Tests for src/domain/models/pagination.py."""

import json

import pytest
from pydantic import ValidationError

from src.domain.models import PageParameters, PaginatedResult
from src.domain.models.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


# --- PageParameters ---

def test_page_parameters_defaults():
    page = PageParameters()
    assert page.page_nr == 1
    assert page.page_size == DEFAULT_PAGE_SIZE


def test_page_parameters_window():
    page = PageParameters(page_nr=3, page_size=20)
    assert (page.skip, page.take) == (40, 20)


def test_page_parameters_reject_page_zero():
    with pytest.raises(ValidationError):
        PageParameters(page_nr=0)


def test_page_parameters_reject_oversized_page():
    with pytest.raises(ValidationError):
        PageParameters(page_size=MAX_PAGE_SIZE + 1)


def test_page_parameters_are_frozen():
    with pytest.raises(ValidationError):
        PageParameters().page_nr = 2


# --- PaginatedResult ---

def test_total_pages_rounds_up():
    assert PaginatedResult(total_count=23, page_size=5).total_pages == 5


def test_total_pages_zero_when_empty():
    assert PaginatedResult(total_count=0, page_size=5).total_pages == 0


def test_first_page_has_next_but_no_previous():
    page = PaginatedResult(total_count=23, current_page=1, page_size=5)
    assert page.has_next
    assert not page.has_previous


def test_last_page_has_previous_but_no_next():
    page = PaginatedResult(total_count=23, current_page=5, page_size=5)
    assert page.has_previous
    assert not page.has_next


def test_pagination_header_serialises_metadata():
    header = PaginatedResult(data=[1, 2], total_count=12, current_page=2, page_size=10).pagination_header()
    assert json.loads(header["X-Pagination"]) == {
        "TotalCount": 12,
        "PageSize": 10,
        "CurrentPage": 2,
        "TotalPages": 2,
        "HasNext": False,
        "HasPrevious": True,
    }
