import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["EVENT_BACKEND"] = "local"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pilgrimpath.core.database import Base, get_db
from pilgrimpath.core.events import EventBus, get_event_bus
from pilgrimpath.core.security import create_access_token, get_password_hash
from pilgrimpath.main import app
from pilgrimpath.models import booking, health, incident, notification, room  # noqa: F401
from pilgrimpath.models.user import User


class RecordingEventBus(EventBus):
    """Keeps every published event so tests can assert on them."""

    def __init__(self):
        self.events = []

    async def publish(self, event, payload):
        self.events.append((event, payload))

    @property
    def names(self):
        return [event for event, _ in self.events]


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def bus():
    return RecordingEventBus()


@pytest.fixture
async def client(session_factory, bus):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_bus] = lambda: bus
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    async def _make_user(email, role="user", name="Test User", is_active=True):
        user = User(
            name=name,
            email=email,
            phone="+91 9876543210",
            role=role,
            language="en",
            is_active=is_active,
            hashed_password=get_password_hash("secret123"),
        )
        db.add(user)
        await db.commit()
        return user
    return _make_user


def auth_headers(user):
    token = create_access_token(data={"sub": user.email, "role": user.role, "user_id": user.id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def admin(make_user):
    return await make_user("admin@pilgrimpath.com", role="admin", name="Admin User")


@pytest.fixture
async def moderator(make_user):
    return await make_user("moderator@pilgrimpath.com", role="moderator", name="Sector Moderator")


@pytest.fixture
async def pilgrim(make_user):
    return await make_user("john@example.com", name="John Doe")


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def moderator_headers(moderator):
    return auth_headers(moderator)


@pytest.fixture
def pilgrim_headers(pilgrim):
    return auth_headers(pilgrim)
