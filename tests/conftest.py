"""Shared pytest fixtures."""
import json
import os

# Settings are read on first import of photofeed.config
os.environ.setdefault("OTEL_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from httpx import ASGITransport, AsyncClient

from photofeed.clients.kafka_producer import get_notifier
from photofeed.clients.minio_client import get_photo_store
from photofeed.database import build_engine, build_sessionmaker, get_db, init_db
from photofeed.errors import PhotoNotFound
from photofeed.main import app
from photofeed.storage.users import UserStorage


class RecordingNotifier:
    """Stands in for Kafka; keeps every published event in order."""

    def __init__(self):
        self.events = []
        self.error = None

    async def publish(self, topic, payload):
        if self.error is not None:
            raise self.error
        self.events.append({"topic": topic, "payload": json.loads(payload)})

    def topics(self):
        return [e["topic"] for e in self.events]


class MemoryPhotoStore:
    def __init__(self):
        self.objects = {}
        self.error = None

    def put(self, key, data, content_type=None):
        if self.error is not None:
            raise self.error
        self.objects[key] = data

    def get(self, key):
        try:
            return self.objects[key]
        except KeyError:
            raise PhotoNotFound() from None


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'photofeed.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def photo_store():
    return MemoryPhotoStore()


@pytest.fixture
def make_user(db):
    """Insert a user straight through storage (skips bcrypt)."""
    counter = {"n": 0}

    async def _make(username=None):
        counter["n"] += 1
        name = username or f"user{counter['n']}"
        user = await UserStorage(db).insert(name, f"{name}@example.com", "not-a-real-hash")
        return user.id

    return _make


@pytest.fixture
async def client(session_factory, notifier, photo_store):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_photo_store] = lambda: photo_store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
