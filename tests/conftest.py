"""Shared fixtures for optirules tests."""

from __future__ import annotations

from typing import Any
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from optirules.db.base import Base
from optirules.db.models import Organization, Team
from optirules.types import OptimizationRule


class FakeEncoder:
    """Whitespace tokenizer standing in for a tiktoken encoding."""

    def encode(self, text: str, **kwargs) -> list[str]:
        return text.split()


def _make_rule(
    rule_type: str,
    conditions: dict[str, Any],
    target_model: str,
    enabled: bool = True,
    **overrides: Any,
) -> OptimizationRule:
    """Build a rule in the camelCase wire form."""
    data = {
        "id": uuid4(),
        "entityType": "organization",
        "entityId": uuid4(),
        "provider": "openai",
        "ruleType": rule_type,
        "conditions": conditions,
        "targetModel": target_model,
        "enabled": enabled,
    }
    data.update(overrides)
    return OptimizationRule.model_validate(data)


@pytest.fixture
def make_rule():
    """Factory for rules in the camelCase wire form."""
    return _make_rule


@pytest.fixture
def fake_encoder() -> FakeEncoder:
    return FakeEncoder()


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def org(db_session: AsyncSession) -> Organization:
    """Create a test organization."""
    org = Organization(id=uuid4(), name="Test Org", slug="test-org")
    db_session.add(org)
    await db_session.commit()
    return org


@pytest_asyncio.fixture
async def other_org(db_session: AsyncSession) -> Organization:
    """Create a second, unrelated organization."""
    org = Organization(id=uuid4(), name="Other Org", slug="other-org")
    db_session.add(org)
    await db_session.commit()
    return org


@pytest_asyncio.fixture
async def team(db_session: AsyncSession, org: Organization) -> Team:
    """Create a team inside the test organization."""
    team = Team(id=uuid4(), name="Test Team", slug="test-team", org_id=org.id)
    db_session.add(team)
    await db_session.commit()
    return team
