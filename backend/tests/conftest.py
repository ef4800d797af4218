"""
Pytest fixtures for the test database, HTTP client, users and spaces.

Each test gets its own SQLite database file (aiosqlite) with the schema
created from the models, so concurrency tests can open independent
sessions against the same data.
"""

import os

os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("MOBILE_MONEY_ENABLED", "false")

from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from app.main import app
from app.db.base import Base
from app.db.session import get_db
from app.core.security import create_access_token, hash_password
from app.domain.enums import PriceUnit, UserRole
from app.models.user import User
from app.models.space import Space
from app.services.interfaces.notifier import BookingNotifier
from app.services.strategy_factory import get_notifier


class RecordingNotifier(BookingNotifier):
    """Keeps every summary it is asked to send."""

    def __init__(self):
        self.sent = []

    async def send_booking_confirmation(self, summary):
        self.sent.append(summary)


class FailingNotifier(BookingNotifier):
    async def send_booking_confirmation(self, summary):
        raise RuntimeError("mail relay down")


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'space_booking_test.db'}",
        echo=False,
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession, notifier: RecordingNotifier) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB and notifier dependencies."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _create_user(db: AsyncSession, email: str, username: str, role: UserRole) -> User:
    user = User(
        email=email,
        username=username,
        hashed_password=hash_password("testpassword123"),
        role=role.value,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def _headers_for(user: User) -> dict:
    token = create_access_token(data={"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def owner(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "owner@example.com", "owner", UserRole.OWNER)


@pytest_asyncio.fixture
async def other_owner(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "other@example.com", "otherowner", UserRole.OWNER)


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """A client account."""
    return await _create_user(db_session, "test@example.com", "testuser", UserRole.CLIENT)


@pytest.fixture
def owner_headers(owner: User) -> dict:
    return _headers_for(owner)


@pytest.fixture
def other_owner_headers(other_owner: User) -> dict:
    return _headers_for(other_owner)


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Authorization headers for the client account."""
    return _headers_for(test_user)


async def _create_space(
    db: AsyncSession, owner: User, name: str, amount: str, unit: PriceUnit, is_active: bool = True
) -> Space:
    space = Space(
        owner_id=owner.id,
        name=name,
        description=f"{name} for tests",
        address="Plot 1, Kampala Road",
        capacity=50,
        price_amount=Decimal(amount),
        price_unit=unit.value,
        is_active=is_active,
    )
    db.add(space)
    await db.commit()
    await db.refresh(space)
    return space


@pytest_asyncio.fixture
async def hourly_space(db_session: AsyncSession, owner: User) -> Space:
    """Active space priced at 5000 per hour."""
    return await _create_space(db_session, owner, "Board Room", "5000", PriceUnit.HOUR)


@pytest_asyncio.fixture
async def daily_space(db_session: AsyncSession, owner: User) -> Space:
    """Active space priced at 50000 per day."""
    return await _create_space(db_session, owner, "Garden Hall", "50000", PriceUnit.DAY)


@pytest_asyncio.fixture
async def event_space(db_session: AsyncSession, owner: User) -> Space:
    """Active space with a flat 200000 per event."""
    return await _create_space(db_session, owner, "Rooftop Terrace", "200000", PriceUnit.EVENT)


@pytest_asyncio.fixture
async def inactive_space(db_session: AsyncSession, owner: User) -> Space:
    return await _create_space(db_session, owner, "Closed Studio", "1000", PriceUnit.HOUR, is_active=False)
