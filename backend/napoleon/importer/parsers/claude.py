"""Parser for Claude.ai conversation export format.

Claude.ai exports a list of conversations, each with a flat `chat_messages`
array. Messages carry `sender` ("human"/"assistant"), an often-empty `text`
and a `content` array of typed blocks; the generic array parser handles all
of that, so this module only recognizes the shape.
"""

from typing import Any

from napoleon.importer.normalize import collect_chats
from napoleon.importer.parsers.linear import parse_message_array_conversation, select_conversations
from napoleon.models import ChatImportResult


def parse_claude_payload(payload: Any) -> ChatImportResult | None:
    """Parse a Claude.ai export. None unless some conversation has chat_messages."""
    conversations = select_conversations(payload)
    if not any(isinstance(conv.get("chat_messages"), list) for conv in conversations):
        return None

    chats, warnings = collect_chats(
        conversations,
        lambda conv, i: parse_message_array_conversation(conv, f"Claude импорт #{i + 1}"),
        lambda i: f"Claude: пропущен диалог #{i + 1}.",
    )
    return ChatImportResult(source="claude", chats=chats, warnings=warnings)
