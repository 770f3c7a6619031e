"""Parser for flat message-array formats (Claude, Gemini, generic JSON).

These exports keep each conversation as a plain list of messages under one
of several field names. Field names for role, text and time vary per
producer, so every lookup walks a list of candidates.
"""

import math
from datetime import datetime
from typing import Any

from napoleon.importer.extract import extract_text, normalize_role, parse_timestamp
from napoleon.importer.models import ParsedConversation, ParsedMessage
from napoleon.importer.normalize import collect_chats
from napoleon.models import ChatImportResult
from napoleon.utils.json import as_array, as_record, as_string, records

MESSAGE_ARRAY_KEYS = ("messages", "chat_messages", "contents", "turns", "items", "transcript")
_WRAPPER_KEYS = ("conversations", "chats", "items", "data")

SINGLE_CHAT_TITLE = "Импортированный чат"


def find_message_array(conversation: dict) -> list[Any]:
    """First non-empty message list on the conversation or its nested conversation."""
    containers = [conversation]
    nested = as_record(conversation.get("conversation"))
    if nested:
        containers.append(nested)

    for container in containers:
        for key in MESSAGE_ARRAY_KEYS:
            candidate = as_array(container.get(key))
            if candidate:
                return candidate
    return []


def looks_like_message_record(record: dict) -> bool:
    role = normalize_role(
        record.get("role")
        or record.get("sender")
        or record.get("author")
        or record.get("type")
        or record.get("name")
    )
    if role:
        return True

    return bool(
        as_string(record.get("text"))
        or as_string(record.get("content"))
        or as_string(record.get("body"))
        or as_string(record.get("message"))
        or as_array(record.get("parts"))
    )


def select_conversations(payload: Any) -> list[dict]:
    """Pick the list of conversation objects out of a decoded export.

    A list that is mostly message-like is treated as one conversation;
    otherwise each dict element is a conversation. Dicts contribute a
    wrapper array or, when they carry messages, themselves.
    """
    if isinstance(payload, list):
        items = records(payload)
        if not items:
            return []

        message_like = sum(1 for item in items if looks_like_message_record(item))
        if message_like >= max(2, math.ceil(len(items) * 0.6)):
            return [{"title": SINGLE_CHAT_TITLE, "messages": items}]
        return items

    record = as_record(payload)
    if record is None:
        return []

    for key in _WRAPPER_KEYS:
        value = record.get(key)
        if isinstance(value, list):
            return records(value)
        nested = as_record(value)
        if nested and isinstance(nested.get("items"), list):
            return records(nested["items"])

    if isinstance(record.get("messages"), list):
        return [record]

    return []


def parse_generic_message(
    raw: dict,
    fallback_role: str | None,
    fallback_time: datetime,
) -> ParsedMessage | None:
    """Resolve role, text and timestamp for one array element."""
    author = as_record(raw.get("author")) or {}
    nested_message = as_record(raw.get("message")) or {}
    nested_content = as_record(raw.get("content")) or {}

    role = normalize_role(
        raw.get("role")
        or raw.get("sender")
        or raw.get("author")
        or author.get("role")
        or author.get("name")
        or nested_message.get("role")
    ) or fallback_role
    if not role:
        return None

    text = (
        extract_text(raw.get("text"))
        or extract_text(raw.get("content"))
        or extract_text(raw.get("body"))
        or extract_text(raw.get("parts"))
        or extract_text(nested_content.get("parts"))
        or extract_text(nested_content.get("text"))
        or extract_text(raw.get("response"))
        or extract_text(raw.get("output"))
        or extract_text(raw.get("value"))
        or extract_text(raw.get("candidates"))
        or extract_text(nested_message.get("content"))
        or extract_text(nested_message.get("text"))
    )
    if not text:
        return None

    timestamp = parse_timestamp(
        raw.get("created_at")
        or raw.get("createdAt")
        or raw.get("timestamp")
        or raw.get("time")
        or raw.get("create_time")
        or raw.get("updated_at")
        or raw.get("updatedAt")
        or nested_message.get("created_time")
        or nested_message.get("create_time"),
        fallback_time,
    )
    return ParsedMessage(role=role, content=text, timestamp=timestamp)


def parse_message_array_conversation(
    conversation: dict,
    fallback_title: str,
    fallback_role: str | None = None,
) -> ParsedConversation | None:
    """Parse one flat-array conversation. None when no message survives."""
    title = (
        as_string(conversation.get("title"))
        or as_string(conversation.get("name"))
        or as_string(conversation.get("chat_name"))
        or as_string(conversation.get("topic"))
        or fallback_title
    )
    fallback_time = parse_timestamp(
        conversation.get("updated_at")
        or conversation.get("updatedAt")
        or conversation.get("update_time")
        or conversation.get("create_time")
        or conversation.get("created_at")
        or conversation.get("createdAt")
    )

    messages: list[ParsedMessage] = []
    for raw in find_message_array(conversation):
        if not isinstance(raw, dict):
            continue
        parsed = parse_generic_message(raw, fallback_role, fallback_time)
        if parsed:
            messages.append(parsed)

    if not messages:
        return None

    messages.sort(key=lambda m: m.timestamp)
    return ParsedConversation(
        title=title,
        messages=messages,
        created_at=parse_timestamp(
            conversation.get("created_at")
            or conversation.get("createdAt")
            or conversation.get("create_time"),
            messages[0].timestamp,
        ),
        updated_at=parse_timestamp(
            conversation.get("updated_at")
            or conversation.get("updatedAt")
            or conversation.get("update_time"),
            messages[-1].timestamp,
        ),
    )


def parse_generic_payload(payload: Any) -> ChatImportResult | None:
    """Catch-all parser: any conversation-shaped JSON with a message array."""
    conversations = select_conversations(payload)
    if not conversations:
        return None

    chats, warnings = collect_chats(
        conversations,
        lambda conv, i: parse_message_array_conversation(conv, f"Импорт #{i + 1}"),
        lambda i: f"Пропущен диалог #{i + 1}: не удалось извлечь сообщения.",
    )
    return ChatImportResult(source="generic", chats=chats, warnings=warnings)
