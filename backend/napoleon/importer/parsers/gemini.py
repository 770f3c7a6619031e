"""Parser for Gemini (and legacy Bard) conversation exports.

Gemini dumps use a `contents` array of `{role, parts: [{text}]}` turns, with
the assistant side labelled "model". Takeout-style dumps may instead wrap
conversations whose messages carry a Gemini-flavored author.

Recognition is structural only: a plain list of user/assistant/system
messages with no `contents` array and no model/gemini/bard author is left
to the generic parser and reported as "generic".
"""

from typing import Any

from napoleon.importer.normalize import collect_chats
from napoleon.importer.parsers.linear import parse_message_array_conversation, select_conversations
from napoleon.models import ChatImportResult
from napoleon.utils.json import as_array, as_record, as_string

GEMINI_CHAT_TITLE = "Gemini импорт"

_GEMINI_ROLE_MARKERS = ("model", "gemini", "bard")


def _has_gemini_role(message: Any) -> bool:
    record = as_record(message)
    if record is None:
        return False
    author = record.get("author")
    raw = as_string(record.get("role")) or as_string(author)
    if not raw and isinstance(author, dict):
        raw = as_string(author.get("role")) or as_string(author.get("name"))
    if not raw:
        return False
    lowered = raw.lower()
    return any(marker in lowered for marker in _GEMINI_ROLE_MARKERS)


def _looks_gemini(payload: Any, conversations: list[dict]) -> bool:
    if as_record(payload) is not None and isinstance(payload.get("contents"), list):
        return True
    for conversation in conversations:
        if isinstance(conversation.get("contents"), list):
            return True
        if any(_has_gemini_role(m) for m in as_array(conversation.get("messages"))):
            return True
    return False


def parse_gemini_payload(payload: Any) -> ChatImportResult | None:
    """Parse a Gemini export. None unless a Gemini structural marker is present."""
    conversations = select_conversations(payload)
    if not _looks_gemini(payload, conversations):
        return None

    if not conversations and as_record(payload) is not None:
        conversations = [{"title": GEMINI_CHAT_TITLE, "messages": as_array(payload.get("contents"))}]

    chats, warnings = collect_chats(
        conversations,
        lambda conv, i: parse_message_array_conversation(conv, f"Gemini импорт #{i + 1}"),
        lambda i: f"Gemini: пропущен диалог #{i + 1}.",
    )
    return ChatImportResult(source="gemini", chats=chats, warnings=warnings)
