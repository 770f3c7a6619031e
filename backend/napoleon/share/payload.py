"""Share payload normalizer: one arbitrary JSON body -> inbox item fields.

Submissions come from bookmarklets, mobile share sheets and webhook
automations, so nothing about their shape is guaranteed. Fields are looked
up through alias lists across the root object, a nested payload object and
nested `conversation` objects; when no direct text is present a transcript
is synthesized from chat-export-shaped bodies.
"""

import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from napoleon.importer.extract import extract_text, normalize_role, parse_timestamp
from napoleon.share.tags import (
    DEFAULT_SHARE_SOURCE,
    infer_share_tags,
    merge_share_tags,
    normalize_share_source,
    parse_tags,
)
from napoleon.utils.json import as_array, as_record, first_string

PAYLOAD_KEYS = ("payload", "data", "item", "share", "body")
SOURCE_KEYS = ("source", "provider", "from", "app", "platform")
TITLE_KEYS = ("title", "subject", "name", "topic")
URL_KEYS = ("url", "link", "href", "share_url")
AUTHOR_KEYS = ("author", "user", "username", "sender")
CONTENT_KEYS = ("content", "text", "message", "prompt", "body", "summary")
TRANSCRIPT_ARRAY_KEYS = ("chat_messages", "messages", "contents", "turns")

MAX_TRANSCRIPT_LINES = 40
MAX_TRANSCRIPT_LINE_LENGTH = 4000

ROLE_LABELS = {
    "user": "Пользователь",
    "assistant": "Ассистент",
    "system": "Система",
}
UNKNOWN_ROLE_LABEL = "Сообщение"

_EPOCH = datetime.fromtimestamp(0, tz=UTC)

_CHATGPT_URL = re.compile(r"chatgpt\.com|chat\.openai\.com|openai\.com", re.IGNORECASE)
_CLAUDE_URL = re.compile(r"claude\.ai", re.IGNORECASE)
_GEMINI_URL = re.compile(r"gemini\.google\.com|bard\.google\.com", re.IGNORECASE)


class ShareContentMissingError(Exception):
    """Raised when a submission yields neither text nor a URL."""

    def __init__(self) -> None:
        super().__init__("Нужно передать хотя бы content/text/message или url")


@dataclass
class NormalizedSharePayload:
    source: str
    content: str
    title: str | None = None
    url: str | None = None
    author: str | None = None
    tags: list[str] = field(default_factory=list)


def _containers(root: dict, payload: dict | None) -> list[dict]:
    """Root, payload, then the nested conversation of each, in that order."""
    result = [root]
    if payload:
        result.append(payload)
    for container in (root, payload):
        conversation = as_record(container.get("conversation")) if container else None
        if conversation:
            result.append(conversation)
    return result


def _find_payload(root: dict) -> dict | None:
    for key in PAYLOAD_KEYS:
        candidate = as_record(root.get(key))
        if candidate is not None:
            return candidate
    return None


def _scan(containers: list[dict], keys: tuple[str, ...]) -> str:
    return first_string(*(container.get(key) for container in containers for key in keys))


def _infer_source(containers: list[dict], url: str) -> str:
    """Guess the producer from structural fingerprints and the URL."""
    if any(as_record(c.get("mapping")) is not None for c in containers) or _CHATGPT_URL.search(url):
        return "chatgpt"
    if any(as_array(c.get("chat_messages")) for c in containers) or _CLAUDE_URL.search(url):
        return "claude"
    if any(as_array(c.get("contents")) for c in containers) or _GEMINI_URL.search(url):
        return "gemini"
    return DEFAULT_SHARE_SOURCE


def _transcript_line(role: str | None, text: str) -> str:
    label = ROLE_LABELS.get(role or "", UNKNOWN_ROLE_LABEL)
    return f"{label}: {text[:MAX_TRANSCRIPT_LINE_LENGTH]}"


def _join_transcript(lines: list[str]) -> str:
    return "\n\n".join(lines[:MAX_TRANSCRIPT_LINES])


def _mapping_transcript(mapping: dict[str, Any]) -> str:
    """Every mapping node in creation-time order; no branch selection."""
    timed = []
    for node in mapping.values():
        if not isinstance(node, dict):
            continue
        message = as_record(node.get("message"))
        if message is None:
            continue
        timed.append((parse_timestamp(message.get("create_time"), _EPOCH), message))
    timed.sort(key=lambda pair: pair[0])

    lines: list[str] = []
    for _, message in timed:
        author = as_record(message.get("author")) or {}
        content = as_record(message.get("content")) or {}
        text = extract_text(content.get("parts")) or extract_text(message.get("content"))
        if text:
            lines.append(_transcript_line(normalize_role(author.get("role") or message.get("role")), text))
    return _join_transcript(lines)


def _array_transcript(messages: list[Any]) -> str:
    lines: list[str] = []
    for raw in messages:
        record = as_record(raw)
        if record is None:
            text = extract_text(raw)
            role = None
        else:
            role = normalize_role(record.get("role") or record.get("sender") or record.get("author"))
            text = extract_text(record)
        if text:
            lines.append(_transcript_line(role, text))
    return _join_transcript(lines)


def _derive_content(root: dict, payload: dict | None, containers: list[dict], url: str) -> str:
    for container in (root, payload):
        if not container:
            continue
        for key in CONTENT_KEYS:
            value = container.get(key)
            if value is payload:
                continue
            text = extract_text(value)
            if text:
                return text

    for container in containers:
        mapping = as_record(container.get("mapping"))
        if mapping:
            transcript = _mapping_transcript(mapping)
            if transcript:
                return transcript

    for container in containers:
        for key in TRANSCRIPT_ARRAY_KEYS:
            candidate = as_array(container.get(key))
            if candidate:
                transcript = _array_transcript(candidate)
                if transcript:
                    return transcript

    if url:
        return f"Ссылка: {url}"
    return ""


def normalize_share_payload(body: Any) -> NormalizedSharePayload:
    """Derive source, title, url, author, tags and content from a submission.

    Raises ShareContentMissingError when no content can be derived.
    """
    root = as_record(body) or {}
    payload = _find_payload(root)
    containers = _containers(root, payload)

    url = _scan(containers, URL_KEYS)
    title = _scan(containers, TITLE_KEYS)
    author = _scan(containers, AUTHOR_KEYS)

    source = normalize_share_source(_scan([c for c in (root, payload) if c], SOURCE_KEYS))
    if source == DEFAULT_SHARE_SOURCE:
        source = _infer_source(containers, url)

    content = _derive_content(root, payload, containers, url)
    if not content:
        raise ShareContentMissingError()

    explicit_tags = parse_tags(root.get("tags"))
    if not explicit_tags and payload:
        explicit_tags = parse_tags(payload.get("tags"))

    tags = merge_share_tags(
        explicit_tags,
        infer_share_tags(source=source, title=title, content=content, url=url or None),
    )
    return NormalizedSharePayload(
        source=source,
        title=title or None,
        url=url or None,
        author=author or None,
        tags=tags,
        content=content,
    )
