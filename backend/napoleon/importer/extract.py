"""Heuristic text, role and timestamp extraction from untyped JSON.

Every parser (and the share payload normalizer) is built on these three pure
functions. They never raise: unknown shapes produce an empty string, None,
or the caller's fallback time.
"""

import math
from datetime import UTC, datetime
from typing import Any

from napoleon.utils.json import as_string

MAX_EXTRACT_DEPTH = 6

# Epoch values above this are milliseconds, at or below it seconds
_EPOCH_MS_THRESHOLD = 1_000_000_000_000

_COLLECTION_KEYS = ("content", "items", "messages", "blocks", "data", "parts")
_SCALAR_KEYS = (
    "text",
    "content",
    "value",
    "body",
    "message",
    "response",
    "output",
    "result",
    "completion",
    "raw_text",
)

_ASSISTANT_KEYWORDS = (
    "assistant",
    "model",
    "bot",
    "ai",
    "claude",
    "gemini",
    "bard",
    "chatgpt",
    "minimax",
    "kimi",
    "moonshot",
)
_USER_KEYWORDS = ("user", "human", "client", "customer")
_SYSTEM_KEYWORDS = ("system", "developer")


def _join_extracted(items: list[Any], depth: int) -> str:
    texts = [extract_text(item, depth + 1) for item in items]
    return "\n".join(text for text in texts if text).strip()


def extract_text(value: Any, depth: int = 0) -> str:
    """Best-effort human-readable text from an arbitrary JSON value."""
    if depth > MAX_EXTRACT_DEPTH or value is None:
        return ""

    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)

    if isinstance(value, list):
        return _join_extracted(value, depth)

    if not isinstance(value, dict):
        return ""

    for key in _COLLECTION_KEYS:
        collection = value.get(key)
        if not isinstance(collection, list):
            continue
        merged = _join_extracted(collection, depth)
        if merged:
            return merged

    for key in _SCALAR_KEYS:
        if key not in value:
            continue
        text = extract_text(value[key], depth + 1)
        if text:
            return text

    return ""


def normalize_role(value: Any) -> str | None:
    """Resolve "user", "assistant" or "system" from a role-ish value.

    Accepts a string or a dict carrying role/name/type. Keyword sets are
    checked assistant, then user, then system; first substring hit wins.
    """
    raw: str | None = None
    if isinstance(value, str):
        raw = value
    elif isinstance(value, dict):
        raw = as_string(value.get("role")) or as_string(value.get("name")) or as_string(value.get("type"))

    if not raw:
        return None

    normalized = raw.lower()
    if any(keyword in normalized for keyword in _ASSISTANT_KEYWORDS):
        return "assistant"
    if any(keyword in normalized for keyword in _USER_KEYWORDS):
        return "user"
    if any(keyword in normalized for keyword in _SYSTEM_KEYWORDS):
        return "system"
    return None


def _from_epoch(number: float) -> datetime | None:
    if not math.isfinite(number):
        return None
    seconds = number / 1000 if number > _EPOCH_MS_THRESHOLD else number
    try:
        return datetime.fromtimestamp(seconds, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def _from_iso(text: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def parse_timestamp(value: Any, fallback: datetime | None = None) -> datetime:
    """Resolve a timestamp from epoch seconds/milliseconds or an ISO string.

    Unparseable values yield ``fallback`` (default: now, UTC).
    """
    parsed: datetime | None = None

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        parsed = _from_epoch(float(value))
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            number = float(text)
        except ValueError:
            parsed = _from_iso(text)
        else:
            parsed = _from_epoch(number)

    if parsed is not None:
        return parsed
    return fallback if fallback is not None else datetime.now(UTC)
