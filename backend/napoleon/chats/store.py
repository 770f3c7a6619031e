"""SQLite-backed chat list: where imported and moved-to-chat chats land."""

import json

from napoleon.chats.schemas import ChatSummary
from napoleon.db.connection import Database
from napoleon.models import Chat, Message
from napoleon.utils.json import parse_json_or_none


class ChatStore:
    """Persists canonical Chats. No dedup against rows already stored."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def add_chats(self, chats: list[Chat], *, source: str = "manual") -> None:
        """Insert chats and their messages in one transaction."""
        statements: list[tuple[str, tuple]] = []
        for chat in chats:
            statements.append((
                """
                INSERT INTO chats (chat_id, title, source, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    chat.id,
                    chat.title,
                    source,
                    chat.created_at.isoformat(),
                    chat.updated_at.isoformat(),
                ),
            ))
            for position, message in enumerate(chat.messages):
                statements.append((
                    """
                    INSERT INTO chat_messages
                        (message_id, chat_id, position, role, content, timestamp, attachments)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        message.id,
                        chat.id,
                        position,
                        message.role,
                        message.content,
                        message.timestamp.isoformat(),
                        json.dumps(message.attachments),
                    ),
                ))
        if statements:
            await self._db.execute_batch(statements)

    async def list_chats(self) -> list[ChatSummary]:
        """All chats, most recently updated first."""
        rows = await self._db.fetchall(
            """
            SELECT c.*, COUNT(m.message_id) AS message_count
            FROM chats c
            LEFT JOIN chat_messages m ON m.chat_id = c.chat_id
            GROUP BY c.chat_id
            ORDER BY c.updated_at DESC
            """
        )
        return [
            ChatSummary(
                chat_id=row["chat_id"],
                title=row["title"],
                source=row["source"],
                message_count=row["message_count"],
                created_at=row["created_at"],
                updated_at=row["updated_at"],
            )
            for row in rows
        ]

    async def get_chat(self, chat_id: str) -> Chat | None:
        row = await self._db.fetchone("SELECT * FROM chats WHERE chat_id = ?", (chat_id,))
        if row is None:
            return None

        message_rows = await self._db.fetchall(
            "SELECT * FROM chat_messages WHERE chat_id = ? ORDER BY position",
            (chat_id,),
        )
        return Chat(
            id=row["chat_id"],
            title=row["title"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            messages=[
                Message(
                    id=m["message_id"],
                    role=m["role"],
                    content=m["content"],
                    timestamp=m["timestamp"],
                    attachments=parse_json_or_none(m["attachments"]) or [],
                )
                for m in message_rows
            ],
        )
