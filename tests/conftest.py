"""Shared fixtures: a throwaway SQLite database per test, built from the ORM metadata.

Each test gets its own database file so sessions opened by different units
of work really are independent connections (needed for concurrency tests).
"""

from contextlib import asynccontextmanager

import pytest
import pytest_asyncio

import src.infrastructure.persistence  # noqa: F401  (registers ORM models)
from src.domain.models import Parent
from src.infrastructure.database import Base, build_engine, build_session_factory
from src.infrastructure.persistence.repositories import get_repositories
from src.infrastructure.persistence.unit_of_work import SqlUnitOfWork


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'school.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def uow(session_factory):
    async with session_factory() as session:
        yield SqlUnitOfWork(session, actor="tester")


@pytest.fixture
def repos(uow):
    return get_repositories(uow)


@pytest.fixture
def fresh_repos(session_factory):
    """Open repositories over a brand-new session to observe committed state."""

    @asynccontextmanager
    async def _open(actor="observer"):
        async with session_factory() as session:
            yield get_repositories(SqlUnitOfWork(session, actor=actor))

    return _open


@pytest_asyncio.fixture
async def parent(repos):
    parent = Parent(first_name="Thandi", last_name="Nkosi")
    await repos.parents.create(parent)
    saved = await repos.parents.save()
    assert saved.succeeded, saved.messages
    return parent
