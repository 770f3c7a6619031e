"""Canonical data structures for Napoleon.

Defined once here, referenced everywhere else. Chats are what the bulk
importer produces; share inbox items are what live submissions become.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Chats
# ---------------------------------------------------------------------------

ChatRole = Literal["user", "assistant"]
ChatImportSource = Literal["chatgpt", "claude", "gemini", "generic"]


class Message(BaseModel):
    id: str
    role: ChatRole
    content: str
    timestamp: datetime
    attachments: list[dict[str, Any]] = Field(default_factory=list)


class Chat(BaseModel):
    id: str
    title: str
    messages: list[Message]
    created_at: datetime
    updated_at: datetime


class ChatImportResult(BaseModel):
    source: ChatImportSource
    chats: list[Chat]
    warnings: list[str] = Field(default_factory=list)
    duplicates: int = 0


# ---------------------------------------------------------------------------
# Share inbox
# ---------------------------------------------------------------------------

SHARE_INBOX_STATUSES: tuple[str, ...] = ("new", "in_progress", "done")
SHARE_HISTORY_TYPES: tuple[str, ...] = (
    "created",
    "status_changed",
    "moved_to_chat",
    "exported_to_project",
    "note",
)

ShareInboxStatus = Literal["new", "in_progress", "done"]
ShareHistoryType = Literal[
    "created",
    "status_changed",
    "moved_to_chat",
    "exported_to_project",
    "note",
]
# History types a caller may attach to an update
ShareActionType = Literal["moved_to_chat", "exported_to_project", "note"]


class ShareHistoryEntry(BaseModel):
    id: str
    type: ShareHistoryType
    at: datetime
    note: str | None = None
    from_status: ShareInboxStatus | None = None
    to_status: ShareInboxStatus | None = None


class ShareInboxItem(BaseModel):
    id: str
    source: str
    title: str
    content: str
    url: str | None = None
    author: str | None = None
    tags: list[str] = Field(default_factory=list)
    status: ShareInboxStatus = "new"
    history: list[ShareHistoryEntry]
    created_at: datetime
    updated_at: datetime


class CreateShareItem(BaseModel):
    """Normalized fields for a new inbox item."""

    source: str
    content: str
    title: str | None = None
    url: str | None = None
    author: str | None = None
    tags: list[str] = Field(default_factory=list)


class ShareHistoryInput(BaseModel):
    type: ShareHistoryType
    note: str | None = None
    from_status: ShareInboxStatus | None = None
    to_status: ShareInboxStatus | None = None


class UpdateShareItem(BaseModel):
    """Partial update. Only non-None fields are applied."""

    source: str | None = None
    title: str | None = None
    content: str | None = None
    url: str | None = None
    author: str | None = None
    tags: list[str] | None = None
    status: ShareInboxStatus | None = None
    history_entry: ShareHistoryInput | None = None
