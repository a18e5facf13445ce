from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import holdaspot.models  # noqa: F401
from holdaspot.core.config import settings
from holdaspot.core.database import Base, get_db
from holdaspot.core.timeutils import week_bounds
from holdaspot.main import app
from holdaspot.models import Facility, FacilityType, Sport
from holdaspot.services.user_service import UserService


@pytest.fixture(autouse=True)
def fixed_settings(monkeypatch):
    monkeypatch.setattr(settings, "LOCAL_TIMEZONE", "UTC")
    monkeypatch.setattr(settings, "WEEKLY_CREDITS", 10)
    monkeypatch.setattr(settings, "MINUTES_PER_CREDIT", 30)


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'holdaspot-test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def sport(db):
    sport = Sport(name="Tennis", max_booking_hours=4.0, slot_duration_minutes=30)
    db.add(sport)
    await db.commit()
    return sport


@pytest.fixture
async def facility(db, sport):
    facility = Facility(name="Court 1", sport_id=sport.id, type=FacilityType.COURT)
    db.add(facility)
    await db.commit()
    await db.refresh(facility)
    return facility


@pytest.fixture
async def other_facility(db, sport):
    facility = Facility(name="Court 2", sport_id=sport.id, type=FacilityType.COURT)
    db.add(facility)
    await db.commit()
    await db.refresh(facility)
    return facility


@pytest.fixture
async def user(db):
    user, _ = await UserService(db).get_or_create("player@example.com")
    return user


@pytest.fixture
def next_week():
    """Monday 00:00 UTC of next week; every slot built from it is in the future"""
    _, monday = week_bounds(datetime.now(timezone.utc))
    return monday
