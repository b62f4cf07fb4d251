"""Tests for database session management."""

from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy import select

from optirules.config import GeneralConfig
from optirules.db import session as db_session_module
from optirules.db.models import Organization
from optirules.db.session import (
    close_db,
    create_tables,
    get_engine,
    get_session,
    get_session_maker,
    init_db,
)


@pytest_asyncio.fixture
async def sqlite_db():
    init_db("sqlite+aiosqlite:///:memory:")
    await create_tables()
    yield
    await close_db()


class TestSessionLifecycle:
    """Tests for init_db / get_session / close_db."""

    def test_uninitialized(self):
        assert db_session_module._engine is None
        with pytest.raises(RuntimeError):
            get_engine()
        with pytest.raises(RuntimeError):
            get_session_maker()

    @pytest.mark.asyncio
    async def test_commit_on_success(self, sqlite_db):
        org_id = uuid4()
        async with get_session() as session:
            session.add(Organization(id=org_id, name="Acme", slug="acme"))

        async with get_session() as session:
            result = await session.execute(select(Organization).where(Organization.id == org_id))
            assert result.scalar_one().slug == "acme"

    @pytest.mark.asyncio
    async def test_rollback_on_error(self, sqlite_db):
        org_id = uuid4()
        with pytest.raises(ValueError):
            async with get_session() as session:
                session.add(Organization(id=org_id, name="Acme", slug="acme"))
                await session.flush()
                raise ValueError("boom")

        async with get_session() as session:
            assert await session.get(Organization, org_id) is None

    @pytest.mark.asyncio
    async def test_url_from_general_config(self):
        init_db(general=GeneralConfig(database_url="sqlite+aiosqlite:///:memory:"))
        try:
            assert get_engine().url.drivername == "sqlite+aiosqlite"
        finally:
            await close_db()

    @pytest.mark.asyncio
    async def test_init_is_idempotent(self, sqlite_db):
        engine = get_engine()
        init_db("sqlite+aiosqlite:///:memory:")
        assert get_engine() is engine
