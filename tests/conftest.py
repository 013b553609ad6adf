"""Shared test fixtures for all test groups."""

import os
from datetime import UTC, date, datetime, timedelta
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.db.base import Base
from app.db.models import KeyResult, Objective, OkrSession, Organization, Profile
from app.domain.key_results import KeyResultType, KeyResultValues


@pytest.fixture
def make_key_result():
    """Factory for KeyResultValues with increase-to defaults."""

    def _make(
        key_result_type=KeyResultType.INCREASE_TO,
        initial_value=0,
        current_value=0,
        target_value=100,
    ) -> KeyResultValues:
        return KeyResultValues(
            key_result_type=key_result_type,
            initial_value=initial_value,
            current_value=current_value,
            target_value=target_value,
        )

    return _make


# Shared test database URL; defaults to a per-test SQLite file
_TEST_DB_URL = os.getenv("TEST_DATABASE_URL")


@pytest.fixture
async def engine(tmp_path) -> AsyncEngine:
    """Create the test engine, build all tables and set the global session factory.

    Tests using AsyncClient (in-process) share the pytest-asyncio loop and
    can use get_session_factory().
    """
    import app.db.base as db_mod

    url = _TEST_DB_URL or f"sqlite+aiosqlite:///{tmp_path / 'okr_test.db'}"
    engine = create_async_engine(url, echo=False)

    # Import all models so metadata is populated
    import app.db.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    db_mod._engine = engine
    db_mod._session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    db_mod._engine = None
    db_mod._session_factory = None
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncSession:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seeded(db_session: AsyncSession) -> dict:
    """Two organizations; org A has a session, an objective with three key results and a member.

    Key result progress in org A: 50 (increase), 100 (stay above), 0 (decrease).
    """
    org_a = Organization(id=uuid4(), name="Acme", slug="acme")
    org_b = Organization(id=uuid4(), name="Globex", slug="globex")
    alice = Profile(id=uuid4(), organization_id=org_a.id, email="alice@acme.test", full_name="Alice", role="admin")
    bob = Profile(id=uuid4(), organization_id=org_b.id, email="bob@globex.test", full_name="Bob")
    drifter = Profile(id=uuid4(), organization_id=None, email="drifter@nowhere.test")

    q3 = OkrSession(
        id=uuid4(),
        organization_id=org_a.id,
        name="Q3",
        start_date=date(2026, 7, 1),
        end_date=date(2026, 9, 30),
        status="in_progress",
    )
    objective = Objective(
        id=uuid4(),
        organization_id=org_a.id,
        session_id=q3.id,
        owner_id=alice.id,
        title="Grow the user base",
        start_date=q3.start_date,
        end_date=q3.end_date,
        tags=["growth"],
    )
    now = datetime.now(UTC)
    signups = KeyResult(
        id=uuid4(),
        organization_id=org_a.id,
        objective_id=objective.id,
        owner_id=alice.id,
        title="Weekly signups",
        key_result_type="should_increase_to",
        initial_value=0,
        current_value=50,
        target_value=100,
        created_at=now - timedelta(minutes=3),
    )
    uptime = KeyResult(
        id=uuid4(),
        organization_id=org_a.id,
        objective_id=objective.id,
        owner_id=alice.id,
        title="Uptime",
        key_result_type="should_stay_above",
        initial_value=0,
        current_value=99.95,
        target_value=99.9,
        unit="percentage",
        created_at=now - timedelta(minutes=2),
    )
    churn = KeyResult(
        id=uuid4(),
        organization_id=org_a.id,
        objective_id=objective.id,
        owner_id=alice.id,
        title="Monthly churn",
        key_result_type="should_decrease_to",
        initial_value=8,
        current_value=8,
        target_value=4,
        unit="percentage",
        created_at=now - timedelta(minutes=1),
    )
    foreign_objective = Objective(
        id=uuid4(),
        organization_id=org_b.id,
        owner_id=bob.id,
        title="Globex secret plan",
    )
    foreign_kr = KeyResult(
        id=uuid4(),
        organization_id=org_b.id,
        objective_id=foreign_objective.id,
        owner_id=bob.id,
        title="Volcano lairs",
        key_result_type="achieved_or_not",
        current_value=0,
        target_value=1,
    )

    db_session.add_all([org_a, org_b])
    await db_session.flush()
    db_session.add_all([alice, bob, drifter, q3])
    await db_session.flush()
    db_session.add_all([objective, foreign_objective])
    await db_session.flush()
    db_session.add_all([signups, uptime, churn, foreign_kr])
    await db_session.commit()

    return {
        "org_a": org_a,
        "org_b": org_b,
        "alice": alice,
        "bob": bob,
        "drifter": drifter,
        "session": q3,
        "objective": objective,
        "signups": signups,
        "uptime": uptime,
        "churn": churn,
        "foreign_objective": foreign_objective,
        "foreign_kr": foreign_kr,
    }
