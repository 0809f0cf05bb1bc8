# chat_triggers/tests/conftest.py

import json
import logging
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fakeredis import aioredis
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from chat_triggers.config import AppConfig
from chat_triggers.infrastructure.database import create_database
from chat_triggers.infrastructure.document_store import SqlDocumentStore
from chat_triggers.infrastructure.push_senders import RedisPushSender
from chat_triggers.main import Application


class RecordingStore(SqlDocumentStore):
    """Document store that remembers every query cursor and write batch."""

    def __init__(self, database):
        super().__init__(database)
        self.cursors = []
        self.batches = []

    async def query(self, collection, filters=(), limit=None, start_after=None):
        self.cursors.append(start_after)
        return await super().query(collection, filters, limit, start_after)

    def batch(self):
        batch = super().batch()
        self.batches.append(batch)
        return batch

    def reset(self):
        self.cursors.clear()
        self.batches.clear()


@pytest.fixture(scope="function")
def app_config():
    """
    Provide a test configuration with a shared in-memory SQLite database.
    """
    return AppConfig(
        DATABASE_URL="sqlite+aiosqlite:///:memory:?cache=shared",
        SECRET_KEY="test_secret_key",
        PROJECT_NAME="Test Chat Triggers",
        SCHEDULER_ENABLED=False,
        PUSH_BACKEND="redis",
        PUSH_QUEUE_KEY="push:test-outbox",
    )


@pytest.fixture
def test_logger():
    logger = logging.getLogger("test_chat_triggers")
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture(scope="function")
async def engine(app_config):
    """Create a SQLAlchemy engine for testing with shared in-memory SQLite."""
    engine = create_async_engine(
        app_config.DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,  # Reuse the same connection
        echo=False,
    )
    yield engine
    await engine.dispose()


@pytest.fixture(scope="function")
async def database(engine):
    database = create_database(engine)
    await database.connect()
    return database


@pytest.fixture(scope="function")
def store(database):
    return RecordingStore(database)


@pytest.fixture(scope="function")
async def mock_redis():
    """Provide a fake Redis client for testing."""
    redis = aioredis.FakeRedis(decode_responses=True)
    yield redis
    await redis.flushall()
    await redis.aclose()


@pytest.fixture(scope="function")
def push_sender(app_config, mock_redis, test_logger):
    sender = RedisPushSender(
        app_config.REDIS_HOST, app_config.REDIS_PORT, app_config.PUSH_QUEUE_KEY, test_logger
    )
    sender.client = mock_redis
    return sender


@pytest.fixture(scope="function")
async def application(app_config, engine, push_sender):
    application = Application(config=app_config, engine=engine, push_sender=push_sender)
    await application.database.connect()
    return application


@pytest.fixture(scope="function")
async def client(application):
    """Provide an HTTP client with the test app."""
    app = application.create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def issue_token(app_config):
    """Sign tokens the way the chat app's auth service does."""

    def _issue(claims, expires_delta=timedelta(minutes=15)):
        to_encode = {**claims, "exp": datetime.now(timezone.utc) + expires_delta}
        return jwt.encode(to_encode, app_config.SECRET_KEY, algorithm=app_config.ALGORITHM)

    return _issue


@pytest.fixture(scope="function")
def auth_header(issue_token):
    access_token = issue_token({"sub": "alice"})
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture(scope="function")
def queued_pushes(mock_redis, app_config):
    """Return a coroutine reading the push messages queued so far."""

    async def _read():
        raw = await mock_redis.lrange(app_config.PUSH_QUEUE_KEY, 0, -1)
        return [json.loads(item)["message"] for item in raw]

    return _read
