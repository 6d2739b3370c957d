"""Tests for the paginate() service."""

from unittest.mock import AsyncMock

import pytest

from src.domain.models import FailureKind, Learner, PageParameters, Result, Specification
from src.domain.services import paginate

BY_NAME = Specification(order_by=lambda c: (c.last_name, c.first_name, c.id))


@pytest.fixture
async def learners(repos, parent):
    created = [
        Learner(parent_id=parent.id, first_name=f"Learner{i:02d}", last_name="Nkosi", grade=i % 13)
        for i in range(23)
    ]
    await repos.learners.create_range(created)
    assert (await repos.learners.save()).succeeded
    return created


async def test_pages_cover_every_row_exactly_once(repos, learners):
    seen = []
    for page_nr in range(1, 6):
        result = await paginate(repos.learners, BY_NAME, PageParameters(page_nr=page_nr, page_size=5))
        assert result.succeeded
        seen.extend(learner.id for learner in result.data.data)
    everything = await repos.learners.list(BY_NAME)
    assert seen == [learner.id for learner in everything.data]
    assert len(set(seen)) == 23


async def test_page_metadata_reports_totals(repos, learners):
    result = await paginate(repos.learners, BY_NAME, PageParameters(page_nr=2, page_size=5))
    page = result.data
    assert page.total_count == 23
    assert page.total_pages == 5
    assert page.current_page == 2
    assert page.has_previous and page.has_next
    assert len(page.data) == 5


async def test_last_page_is_partial(repos, learners):
    page = (await paginate(repos.learners, BY_NAME, PageParameters(page_nr=5, page_size=5))).data
    assert len(page.data) == 3
    assert not page.has_next


async def test_page_past_the_end_is_empty(repos, learners):
    result = await paginate(repos.learners, BY_NAME, PageParameters(page_nr=9, page_size=5))
    assert result.succeeded
    assert result.data.data == []
    assert result.data.total_count == 23


async def test_criteria_narrow_count_and_rows(repos, learners):
    spec = BY_NAME.where(lambda c: c.grade >= 10)
    page = (await paginate(repos.learners, spec, PageParameters(page_size=100))).data
    assert page.total_count == len(page.data) == sum(1 for learner in learners if learner.grade >= 10)


async def test_count_failure_is_propagated():
    repository = AsyncMock()
    repository.count.return_value = Result.fail("store offline", kind=FailureKind.PERSISTENCE)
    result = await paginate(repository, BY_NAME, PageParameters())
    assert result.failed
    assert result.messages == ("store offline",)
    repository.list.assert_not_awaited()
