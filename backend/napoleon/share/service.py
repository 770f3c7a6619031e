"""ShareInboxService: live submissions and triage actions over the inbox store."""

import logging
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from napoleon.chats.store import ChatStore
from napoleon.models import (
    Chat,
    CreateShareItem,
    Message,
    ShareHistoryInput,
    ShareInboxItem,
    ShareInboxStatus,
    UpdateShareItem,
)
from napoleon.share.payload import normalize_share_payload
from napoleon.share.store import ShareInboxStore, ShareItemNotFoundError

logger = logging.getLogger(__name__)

CHAT_TITLE_LENGTH = 40
DEFAULT_CHAT_TITLE = "Share Inbox"


class ShareInboxService:
    def __init__(self, store: ShareInboxStore, chat_store: ChatStore) -> None:
        self._store = store
        self._chat_store = chat_store

    async def list_items(self, status: ShareInboxStatus | None = None) -> list[ShareInboxItem]:
        return await self._store.list_items(status)

    async def counts(self) -> dict[str, int]:
        return await self._store.counts()

    async def submit(self, body: Any) -> ShareInboxItem:
        """Normalize an arbitrary submission and create an inbox item.

        Raises ShareContentMissingError when no content can be derived.
        """
        normalized = normalize_share_payload(body)
        return await self._store.add_item(CreateShareItem(
            source=normalized.source,
            title=normalized.title,
            content=normalized.content,
            url=normalized.url,
            author=normalized.author,
            tags=normalized.tags,
        ))

    async def update(self, item_id: str, updates: UpdateShareItem) -> ShareInboxItem:
        return await self._store.update_item(item_id, updates)

    async def remove(self, item_id: str) -> None:
        await self._store.remove_item(item_id)

    async def move_to_chat(self, item_id: str) -> tuple[ShareInboxItem, Chat]:
        """Copy an item into a new chat and record the move on the item.

        Raises ShareItemNotFoundError when the id is unknown.
        """
        items = await self._store.get_items_by_ids([item_id])
        if not items:
            raise ShareItemNotFoundError(item_id)
        item = items[0]

        chat = self._build_chat(item)
        await self._chat_store.add_chats([chat], source=item.source)

        updated = await self._store.update_item(item_id, UpdateShareItem(
            status="in_progress" if item.status == "new" else item.status,
            history_entry=ShareHistoryInput(
                type="moved_to_chat",
                note=f'Перенесено в чат "{chat.title}"',
            ),
        ))
        logger.info("Share item %s moved to chat %s", item_id, chat.id)
        return updated, chat

    @staticmethod
    def _build_chat(item: ShareInboxItem) -> Chat:
        now = datetime.now(UTC)
        title = item.title.strip() or DEFAULT_CHAT_TITLE
        if len(title) > CHAT_TITLE_LENGTH:
            title = f"{title[:CHAT_TITLE_LENGTH]}..."

        header = [
            f"Источник: {item.source}",
            f"Автор: {item.author}" if item.author else "",
            f"Ссылка: {item.url}" if item.url else "",
            f"Теги: {', '.join(item.tags)}" if item.tags else "",
        ]
        content = "\n".join([*(line for line in header if line), "", item.content])

        return Chat(
            id=f"chat_{uuid4().hex}",
            title=title,
            created_at=now,
            updated_at=now,
            messages=[Message(id=f"msg_{uuid4().hex}", role="user", content=content, timestamp=now)],
        )
