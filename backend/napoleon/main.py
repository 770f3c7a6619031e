"""Napoleon FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from napoleon.chats.router import get_chat_store
from napoleon.chats.router import router as chats_router
from napoleon.chats.store import ChatStore
from napoleon.config import load_settings
from napoleon.db.connection import Database
from napoleon.importer.router import get_import_service
from napoleon.importer.router import router as import_router
from napoleon.importer.service import ImportService
from napoleon.share.backends import (
    JsonFileShareInboxBackend,
    ShareInboxBackend,
    SqliteShareInboxBackend,
)
from napoleon.share.router import get_share_service
from napoleon.share.router import router as share_router
from napoleon.share.service import ShareInboxService
from napoleon.share.store import ShareInboxStore

# Load .env from backend/ directory before settings are read
load_dotenv(Path(__file__).resolve().parent.parent / ".env")
settings = load_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage database lifecycle and service wiring."""
    db = await Database.connect(settings.db_path)

    chat_store = ChatStore(db)
    app.dependency_overrides[get_chat_store] = lambda: chat_store

    import_svc = ImportService(chat_store)
    app.dependency_overrides[get_import_service] = lambda: import_svc

    backend: ShareInboxBackend
    if settings.share_inbox_file:
        backend = JsonFileShareInboxBackend(settings.share_inbox_file)
    else:
        backend = SqliteShareInboxBackend(db)
    share_store = ShareInboxStore(
        backend,
        max_content_length=settings.share_max_content,
        max_items=settings.share_max_items,
    )
    share_svc = ShareInboxService(share_store, chat_store)
    app.dependency_overrides[get_share_service] = lambda: share_svc

    logger.info("Napoleon started (db=%s, share backend=%s)", settings.db_path, type(backend).__name__)
    app.state.db = db
    yield

    await db.close()


app = FastAPI(
    title="Napoleon",
    description=(
        "Ingestion core: chat export import and a triage inbox for shared material"
    ),
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(import_router)
app.include_router(chats_router)
app.include_router(share_router)


@app.get("/api/health")
async def health() -> dict:
    return {"status": "ok", "version": "0.1.0"}
