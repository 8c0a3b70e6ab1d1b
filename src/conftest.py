import os

# must be set before anything from src reads the settings
os.environ.setdefault("DB_DSN", "sqlite+aiosqlite:///./event_lottery.db")

from contextlib import asynccontextmanager
from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from src.config.database import async_session_manager, engine
from src.events.dtos import EventDTO
from src.events.repository.orm_models import Event
from src.main import app
from src.models import BaseModel, User
from src.models.base import utcnow
from src.push_service.base import PushServiceBase
from src.users.roles import Role


class InMemoryPushService(PushServiceBase):
    def __init__(self, failing_users: set[str] | None = None):
        self.sent: list[dict] = []
        self.failing_users = failing_users or set()

    async def send(self, user_id, title, body, data=None) -> None:
        if user_id in self.failing_users:
            raise ConnectionError(f"device of {user_id} unreachable")
        self.sent.append({"user_id": user_id, "title": title, "body": body, "data": data or {}})


@pytest.fixture(autouse=True)
async def database():
    """Fresh schema for every test."""
    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.drop_all)
        await conn.run_sync(BaseModel.metadata.create_all)
    yield
    await engine.dispose()


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def client_factory():
    """Build a client with some dependencies replaced, e.g. write models by in-memory ones."""

    @asynccontextmanager
    async def factory(overrides: dict | None = None):
        app.dependency_overrides.update(overrides or {})
        try:
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                yield ac
        finally:
            app.dependency_overrides.clear()

    return factory


@pytest.fixture
def inmemory_push_service():
    return InMemoryPushService()


@pytest.fixture
def make_user():
    async def factory(user_id: str, role: Role = Role.ENTRANT, name: str = "", **fields) -> User:
        async with async_session_manager() as session:
            user = User(user_id=user_id, name=name or user_id, role=role, **fields)
            session.add(user)
        return user

    return factory


@pytest.fixture
def make_event():
    """Insert an event directly. Registration has ended unless told otherwise."""

    async def factory(organizer_id: str = "org1", **fields) -> EventDTO:
        values = {
            "name": "Swim lessons",
            "description": "Beginner swimming, ten sessions",
            "max_attendees": 2,
            "registration_start": utcnow() - timedelta(days=7),
            "registration_end": utcnow() - timedelta(minutes=1),
            "waiting_list": [],
            "lottery_complete": False,
            "geolocation_required": False,
        }
        values.update(fields)
        async with async_session_manager() as session:
            event = Event(organizer_id=organizer_id, **values)
            session.add(event)
            await session.flush()
            return EventDTO.from_event(event)

    return factory


@pytest.fixture
def open_registration():
    """Registration window fields for an event that is still accepting entrants."""
    return {
        "registration_start": utcnow() - timedelta(days=1),
        "registration_end": utcnow() + timedelta(days=1),
    }
