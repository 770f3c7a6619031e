"""Parser for ChatGPT conversations.json export format.

ChatGPT's export is tree-native: a `mapping` dict of nodes with parent/children
pointers. Only the branch the user last saw is imported: we walk backward from
`current_node` through `parent` links and reverse. Exports without a usable
`current_node` fall back to every node in creation-time order.
"""

from datetime import UTC, datetime
from typing import Any

from napoleon.importer.extract import extract_text, normalize_role, parse_timestamp
from napoleon.importer.models import ParsedConversation, ParsedMessage
from napoleon.importer.normalize import collect_chats
from napoleon.importer.parsers.linear import select_conversations
from napoleon.models import ChatImportResult
from napoleon.utils.json import as_record, as_string, records

_EPOCH = datetime.fromtimestamp(0, tz=UTC)


def _node_time(node: dict) -> datetime:
    message = as_record(node.get("message")) or {}
    return parse_timestamp(message.get("create_time") or node.get("create_time"), _EPOCH)


def _walk_current_branch(mapping: dict[str, Any], current_node: str) -> list[str]:
    """Node ids from the root down to current_node.

    The walk stops at a missing parent or at the first repeated id, so a
    cyclic mapping cannot loop forever.
    """
    ordered: list[str] = []
    visited: set[str] = set()
    node_id: str | None = current_node

    while node_id and node_id not in visited:
        visited.add(node_id)
        ordered.append(node_id)
        node = as_record(mapping.get(node_id))
        node_id = as_string(node.get("parent")) if node else None

    ordered.reverse()
    return ordered


def _extract_content(message: dict) -> str:
    """Text from content.parts/text/result, then the message as a whole."""
    content = as_record(message.get("content"))
    text = ""
    if content:
        text = (
            extract_text(content.get("parts"))
            or extract_text(content.get("text"))
            or extract_text(content.get("result"))
        )
    return text or extract_text(message.get("text")) or extract_text(message.get("content"))


def parse_chatgpt_conversation(conversation: dict, index: int) -> ParsedConversation | None:
    """Parse a single ChatGPT conversation object into a ParsedConversation."""
    mapping = as_record(conversation.get("mapping"))
    if not mapping:
        return None

    entries = [(node_id, node) for node_id, node in mapping.items() if isinstance(node, dict)]
    if not entries:
        return None

    fallback_time = parse_timestamp(conversation.get("update_time") or conversation.get("create_time"))

    ordered_ids: list[str] = []
    current_node = as_string(conversation.get("current_node"))
    if current_node and isinstance(mapping.get(current_node), dict):
        ordered_ids = _walk_current_branch(mapping, current_node)

    if not ordered_ids:
        # sorted() is stable, so equal times keep export order
        ordered_ids = [node_id for node_id, _ in sorted(entries, key=lambda e: _node_time(e[1]))]

    messages: list[ParsedMessage] = []
    for node_id in ordered_ids:
        node = as_record(mapping.get(node_id))
        if not node:
            continue
        message = as_record(node.get("message"))
        if not message:
            continue

        author = as_record(message.get("author")) or {}
        role = normalize_role(author.get("role") or message.get("role"))
        if not role:
            continue

        text = _extract_content(message)
        if not text:
            continue

        messages.append(ParsedMessage(
            role=role,
            content=text,
            timestamp=parse_timestamp(
                message.get("create_time")
                or node.get("create_time")
                or conversation.get("update_time")
                or conversation.get("create_time"),
                fallback_time,
            ),
        ))

    if not messages:
        return None

    return ParsedConversation(
        title=as_string(conversation.get("title")) or f"ChatGPT импорт #{index + 1}",
        messages=messages,
        created_at=parse_timestamp(conversation.get("create_time"), messages[0].timestamp),
        updated_at=parse_timestamp(conversation.get("update_time"), messages[-1].timestamp),
    )


def _select_chatgpt_conversations(payload: Any) -> list[dict]:
    if isinstance(payload, list):
        return records(payload)
    record = as_record(payload)
    if record is None:
        return []
    if as_record(record.get("mapping")) is not None:
        return [record]
    return [conv for conv in select_conversations(record) if as_record(conv.get("mapping")) is not None]


def parse_chatgpt_payload(payload: Any) -> ChatImportResult | None:
    """Parse ChatGPT conversations.json (array, single conversation, or wrapper)."""
    conversations = _select_chatgpt_conversations(payload)
    if not any(as_record(conv.get("mapping")) is not None for conv in conversations):
        return None

    chats, warnings = collect_chats(
        conversations,
        parse_chatgpt_conversation,
        lambda i: f"ChatGPT: пропущен диалог #{i + 1} (нет поддерживаемых сообщений).",
    )
    return ChatImportResult(source="chatgpt", chats=chats, warnings=warnings)
