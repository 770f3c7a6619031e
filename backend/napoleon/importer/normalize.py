"""Per-conversation cleanup and batch-level deduplication.

Parsers hand over raw ParsedConversations; this module turns each into a
canonical Chat (or drops it) and removes duplicate chats within one batch.
"""

import logging
import re
from collections.abc import Callable
from uuid import uuid4

from napoleon.importer.models import ParsedConversation, ParsedMessage
from napoleon.models import Chat, Message

logger = logging.getLogger(__name__)

MAX_IMPORTED_CHATS = 120
MAX_MESSAGES_PER_CHAT = 600
MAX_MESSAGE_LENGTH = 20_000
MAX_TITLE_LENGTH = 120
MAX_WARNINGS = 40
SIGNATURE_TEXT_LENGTH = 240

DEFAULT_CHAT_TITLE = "Импортированный чат"

_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_WHITESPACE = re.compile(r"\s+")
_SIGNATURE_STRIP = re.compile(r"[^a-z0-9а-яё\s.,!?-]", re.IGNORECASE)


def normalize_message_text(value: str) -> str:
    """Unify line endings, collapse blank runs, trim and cap."""
    text = value.replace("\r\n", "\n").replace("\r", "\n")
    text = _EXCESS_NEWLINES.sub("\n\n", text).strip()
    return text[:MAX_MESSAGE_LENGTH]


def compact_messages(messages: list[ParsedMessage]) -> list[ParsedMessage]:
    """Drop empty, non-chat and adjacent-duplicate messages; cap the count."""
    result: list[ParsedMessage] = []

    for message in messages:
        if message.role not in ("user", "assistant"):
            continue
        content = normalize_message_text(message.content)
        if not content:
            continue

        previous = result[-1] if result else None
        if previous and previous.role == message.role and previous.content == content:
            continue

        result.append(ParsedMessage(role=message.role, content=content, timestamp=message.timestamp))
        if len(result) >= MAX_MESSAGES_PER_CHAT:
            break

    return result


def to_chat(conversation: ParsedConversation) -> Chat | None:
    """Build a canonical Chat, or None when nothing usable remains."""
    messages = compact_messages(conversation.messages)
    if not messages:
        return None

    first_time = messages[0].timestamp
    last_time = messages[-1].timestamp
    created_at = conversation.created_at if conversation.created_at <= last_time else first_time
    updated_at = conversation.updated_at if conversation.updated_at >= created_at else last_time

    title = conversation.title.strip() or DEFAULT_CHAT_TITLE
    return Chat(
        id=f"chat_{uuid4().hex}",
        title=title[:MAX_TITLE_LENGTH],
        created_at=created_at,
        updated_at=updated_at,
        messages=[
            Message(
                id=f"msg_{uuid4().hex}",
                role=message.role,
                content=message.content,
                timestamp=message.timestamp,
            )
            for message in messages
        ],
    )


def collect_chats(
    conversations: list[dict],
    parse: Callable[[dict, int], ParsedConversation | None],
    skipped_warning: Callable[[int], str],
) -> tuple[list[Chat], list[str]]:
    """Parse and normalize up to MAX_IMPORTED_CHATS conversations.

    Conversations that yield no chat become warnings instead of errors.
    """
    chats: list[Chat] = []
    warnings: list[str] = []

    for index, conversation in enumerate(conversations[:MAX_IMPORTED_CHATS]):
        parsed = parse(conversation, index)
        chat = to_chat(parsed) if parsed else None
        if chat:
            chats.append(chat)
        else:
            logger.debug("Skipped conversation #%d: no usable messages", index + 1)
            warnings.append(skipped_warning(index))

    return chats, warnings


# ---------------------------------------------------------------------------
# Batch dedup
# ---------------------------------------------------------------------------


def normalize_signature_text(value: str) -> str:
    text = _WHITESPACE.sub(" ", value.lower())
    return _SIGNATURE_STRIP.sub("", text).strip()


def _message_key(message: Message) -> str:
    return f"{message.role}:{normalize_signature_text(message.content)[:SIGNATURE_TEXT_LENGTH]}"


def chat_signature(chat: Chat) -> str:
    """Fingerprint of a chat's size, minute-level timing and sampled text."""
    messages = chat.messages
    tail_start = max(len(messages) - 3, 3)
    sample = "|".join(_message_key(m) for m in messages[:3] + messages[tail_start:])
    created_bucket = int(chat.created_at.timestamp() // 60)
    updated_bucket = int(chat.updated_at.timestamp() // 60)
    return "#".join([
        str(len(messages)),
        str(created_bucket),
        str(updated_bucket),
        _message_key(messages[0]),
        _message_key(messages[-1]),
        sample,
    ])


def dedupe_chats(chats: list[Chat]) -> tuple[list[Chat], int]:
    """Drop chats whose signature was already seen. First occurrence wins."""
    seen: set[str] = set()
    unique: list[Chat] = []
    duplicates = 0

    for chat in chats:
        signature = chat_signature(chat)
        if signature in seen:
            duplicates += 1
            continue
        seen.add(signature)
        unique.append(chat)

    return unique, duplicates


def truncate_warnings(warnings: list[str]) -> list[str]:
    if len(warnings) <= MAX_WARNINGS:
        return warnings
    remainder = len(warnings) - MAX_WARNINGS
    return [*warnings[:MAX_WARNINGS], f"…и ещё {remainder} предупреждений."]
