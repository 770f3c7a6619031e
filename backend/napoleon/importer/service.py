"""ImportService: parses external conversation files into the chat list."""

import logging

from napoleon.chats.schemas import ChatSummary
from napoleon.chats.store import ChatStore
from napoleon.importer.parsers.detection import parse_import_file
from napoleon.importer.schemas import ImportResponse
from napoleon.models import ChatImportResult

logger = logging.getLogger(__name__)


class ImportService:
    def __init__(self, chat_store: ChatStore) -> None:
        self._chat_store = chat_store

    async def preview(self, content: bytes, filename: str) -> ChatImportResult:
        """Parse file and return the reconstructed chats without storing them."""
        return parse_import_file(content, filename)

    async def import_chats(self, content: bytes, filename: str) -> ImportResponse:
        """Parse file and hand the reconstructed chats to the chat list."""
        result = parse_import_file(content, filename)
        await self._chat_store.add_chats(result.chats, source=result.source)
        logger.info("Imported %d %s chats from %r", len(result.chats), result.source, filename)

        return ImportResponse(
            source=result.source,
            imported=len(result.chats),
            duplicates=result.duplicates,
            warnings=result.warnings,
            chats=[
                ChatSummary(
                    chat_id=chat.id,
                    title=chat.title,
                    source=result.source,
                    message_count=len(chat.messages),
                    created_at=chat.created_at,
                    updated_at=chat.updated_at,
                )
                for chat in result.chats
            ],
        )
