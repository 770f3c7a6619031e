"""Shared pytest fixtures for Napoleon tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from napoleon.chats.router import get_chat_store
from napoleon.chats.store import ChatStore
from napoleon.db.connection import Database
from napoleon.importer.router import get_import_service
from napoleon.importer.service import ImportService
from napoleon.main import app
from napoleon.share.backends import SqliteShareInboxBackend
from napoleon.share.router import get_share_service
from napoleon.share.service import ShareInboxService
from napoleon.share.store import ShareInboxStore


@pytest.fixture
async def db():
    """In-memory database for tests."""
    database = await Database.connect(":memory:")
    yield database
    await database.close()


@pytest.fixture
async def chat_store(db):
    return ChatStore(db)


@pytest.fixture
async def share_store(db):
    """ShareInboxStore over the SQLite backend."""
    return ShareInboxStore(SqliteShareInboxBackend(db))


@pytest.fixture
async def share_service(share_store, chat_store):
    return ShareInboxService(share_store, chat_store)


@pytest.fixture
async def import_service(chat_store):
    return ImportService(chat_store)


@pytest.fixture
async def client(chat_store, share_service, import_service):
    """Async test client with in-memory services wired into the app."""
    app.dependency_overrides[get_chat_store] = lambda: chat_store
    app.dependency_overrides[get_share_service] = lambda: share_service
    app.dependency_overrides[get_import_service] = lambda: import_service
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()
