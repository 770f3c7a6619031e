"""Share inbox store: triage state machine over an in-memory item set.

The item list is loaded lazily, once, from the backend. Mutations happen in
memory between awaits, so they are atomic for this process; persistence of
each mutation is queued behind a single lock and runs in submission order.
A failed save is logged and the in-memory state stays authoritative.
"""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from napoleon.models import (
    SHARE_INBOX_STATUSES,
    CreateShareItem,
    ShareHistoryInput,
    ShareInboxItem,
    ShareInboxStatus,
    UpdateShareItem,
)
from napoleon.share.backends import ShareInboxBackend, SharePersistenceError
from napoleon.share.history import append_history, create_history_entry, normalize_history
from napoleon.share.tags import (
    derive_share_title,
    infer_share_tags,
    merge_share_tags,
    normalize_share_source,
    normalize_share_tags,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONTENT_LENGTH = 20_000
DEFAULT_MAX_ITEMS = 500


class ShareItemNotFoundError(Exception):
    def __init__(self, item_id: str) -> None:
        self.item_id = item_id
        super().__init__(f"Share item not found: {item_id}")


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def _parse_datetime(value: Any, fallback: datetime) -> datetime:
    if not isinstance(value, str):
        return fallback
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return fallback
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


class ShareInboxStore:
    """Repository for share inbox items with bounded size and history."""

    def __init__(
        self,
        backend: ShareInboxBackend,
        *,
        max_content_length: int = DEFAULT_MAX_CONTENT_LENGTH,
        max_items: int = DEFAULT_MAX_ITEMS,
    ) -> None:
        self._backend = backend
        self._max_content_length = max_content_length
        self._max_items = max_items
        self._items: list[ShareInboxItem] = []
        self._loaded = False
        self._load_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def list_items(self, status: ShareInboxStatus | None = None) -> list[ShareInboxItem]:
        """Items newest first, optionally filtered by status."""
        await self._ensure_loaded()
        items = self._sorted_by_created_desc(self._items)
        if status is None:
            return items
        return [item for item in items if item.status == status]

    async def counts(self) -> dict[str, int]:
        await self._ensure_loaded()
        counts = {"all": len(self._items)}
        for status in SHARE_INBOX_STATUSES:
            counts[status] = sum(1 for item in self._items if item.status == status)
        return counts

    async def get_items_by_ids(self, ids: list[str]) -> list[ShareInboxItem]:
        await self._ensure_loaded()
        wanted = set(ids)
        return [item for item in self._items if item.id in wanted]

    async def add_item(self, data: CreateShareItem) -> ShareInboxItem:
        """Create an item with status `new` and a single `created` entry."""
        await self._ensure_loaded()

        now = datetime.now(UTC)
        source = normalize_share_source(data.source)
        content = self._cap_content(data.content)
        title = derive_share_title(data.title, content)
        url = _clean(data.url)
        item = ShareInboxItem(
            id=f"{uuid4().hex[:8]}-{uuid4().hex[:8]}",
            source=source,
            title=title,
            content=content,
            url=url,
            author=_clean(data.author),
            tags=merge_share_tags(
                normalize_share_tags(data.tags),
                infer_share_tags(source=source, title=title, content=content, url=url),
            ),
            status="new",
            history=[create_history_entry(ShareHistoryInput(type="created", to_status="new"), at=now)],
            created_at=now,
            updated_at=now,
        )

        self._items.insert(0, item)
        self._trim()
        await self._persist()
        logger.info("Share item %s created from %s", item.id, source)
        return item

    async def update_item(self, item_id: str, updates: UpdateShareItem) -> ShareInboxItem:
        """Apply a partial update and record status changes and actions.

        Raises ShareItemNotFoundError when the id is unknown.
        """
        await self._ensure_loaded()

        index = self._index_of(item_id)
        item = self._items[index]

        content = item.content
        if updates.content is not None:
            content = self._cap_content(updates.content)
        if not content:
            # An update that would empty the content leaves the item as is
            return item

        title = derive_share_title(updates.title if updates.title is not None else item.title, content)
        source = normalize_share_source(updates.source) if updates.source else item.source
        url = _clean(updates.url) if updates.url is not None else item.url
        author = _clean(updates.author) if updates.author is not None else item.author
        status = updates.status or item.status

        history = list(item.history)
        if status != item.status:
            history = append_history(history, ShareHistoryInput(
                type="status_changed",
                from_status=item.status,
                to_status=status,
                note=f"Статус: {item.status} → {status}",
            ))
        if updates.history_entry is not None:
            history = append_history(history, updates.history_entry)

        tags = item.tags
        if updates.tags is not None:
            tags = merge_share_tags(
                normalize_share_tags(updates.tags),
                infer_share_tags(source=source, title=title, content=content, url=url),
            )

        updated = item.model_copy(update={
            "source": source,
            "title": title,
            "content": content,
            "url": url,
            "author": author,
            "tags": tags,
            "status": status,
            "history": history,
            "updated_at": datetime.now(UTC),
        })
        self._items[index] = updated
        self._trim()
        await self._persist()

        if status != item.status:
            logger.info("Share item %s: %s -> %s", item_id, item.status, status)
        return updated

    async def remove_item(self, item_id: str) -> None:
        """Delete an item. Raises ShareItemNotFoundError when the id is unknown."""
        await self._ensure_loaded()
        index = self._index_of(item_id)
        del self._items[index]
        self._trim()
        await self._persist()
        logger.info("Share item %s removed", item_id)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _index_of(self, item_id: str) -> int:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        raise ShareItemNotFoundError(item_id)

    def _cap_content(self, content: str) -> str:
        return content.strip()[: self._max_content_length]

    @staticmethod
    def _sorted_by_created_desc(items: list[ShareInboxItem]) -> list[ShareInboxItem]:
        return sorted(items, key=lambda item: item.created_at, reverse=True)

    def _trim(self) -> None:
        """Evict the oldest items beyond max_items."""
        if len(self._items) <= self._max_items:
            return
        evicted = len(self._items) - self._max_items
        self._items = self._sorted_by_created_desc(self._items)[: self._max_items]
        logger.info("Share inbox trimmed: %d oldest items evicted", evicted)

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        async with self._load_lock:
            if self._loaded:
                return
            try:
                raw_items = await self._backend.load_all()
            except SharePersistenceError as e:
                logger.warning("Share inbox load failed, starting empty: %s", e)
                raw_items = []

            items: dict[str, ShareInboxItem] = {}
            for raw in raw_items:
                item = self._normalize_item(raw)
                if item is not None and item.id not in items:
                    items[item.id] = item
            self._items = self._sorted_by_created_desc(list(items.values()))
            self._loaded = True
            logger.debug("Share inbox loaded: %d items", len(self._items))

    async def _persist(self) -> None:
        """Save a snapshot taken now; saves run one at a time, in order."""
        snapshot = [item.model_dump(mode="json") for item in self._items]
        async with self._write_lock:
            try:
                await self._backend.save_all(snapshot)
            except SharePersistenceError as e:
                logger.warning("Share inbox save failed, keeping in-memory state: %s", e)

    def _normalize_item(self, raw: Any) -> ShareInboxItem | None:
        """Rebuild a stored record; None when it has no content."""
        if not isinstance(raw, dict):
            return None
        content = raw.get("content")
        content = content.strip() if isinstance(content, str) else ""
        if not content:
            return None

        now = datetime.now(UTC)
        created_at = _parse_datetime(raw.get("created_at"), now)
        updated_at = _parse_datetime(raw.get("updated_at"), created_at)
        status = raw.get("status") if raw.get("status") in SHARE_INBOX_STATUSES else "new"
        source = normalize_share_source(raw.get("source"))
        raw_title = raw.get("title") if isinstance(raw.get("title"), str) else None
        url = _clean(raw.get("url")) if isinstance(raw.get("url"), str) else None
        author = _clean(raw.get("author")) if isinstance(raw.get("author"), str) else None
        raw_id = raw.get("id")

        return ShareInboxItem(
            id=raw_id if isinstance(raw_id, str) and raw_id.strip() else uuid4().hex,
            source=source,
            title=derive_share_title(raw_title, content),
            content=content[: self._max_content_length],
            url=url,
            author=author,
            tags=merge_share_tags(
                normalize_share_tags(raw.get("tags")),
                infer_share_tags(source=source, title=raw_title, content=content, url=url),
            ),
            status=status,
            history=normalize_history(raw.get("history"), created_at, status),
            created_at=created_at,
            updated_at=updated_at,
        )
