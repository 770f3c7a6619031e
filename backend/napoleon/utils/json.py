"""Accessor helpers for untyped JSON values.

Export files and share submissions arrive as arbitrary JSON. Instead of
casting, callers probe values with these capability checks and get a safe
empty result when the shape does not match.
"""

import json
from typing import Any


def as_record(value: Any) -> dict[str, Any] | None:
    """Return value if it is a dict, else None."""
    return value if isinstance(value, dict) else None


def as_array(value: Any) -> list[Any]:
    """Return value if it is a list, else an empty list."""
    return value if isinstance(value, list) else []


def as_string(value: Any) -> str | None:
    """Return the trimmed string, or None for non-strings and blank strings."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


def first_string(*values: Any) -> str:
    """First non-blank string among values, trimmed. Empty string if none."""
    for value in values:
        text = as_string(value)
        if text:
            return text
    return ""


def records(value: Any) -> list[dict[str, Any]]:
    """The dict elements of a list, in order."""
    return [item for item in as_array(value) if isinstance(item, dict)]


def parse_json_or_none(raw: str | dict | list | None) -> dict | list | None:
    """Parse a JSON string or return structured value as-is, None on failure.

    Accepts dicts and lists as-is without re-parsing.
    Returns None for: None, empty string, invalid JSON.
    """
    if raw is None:
        return None
    if isinstance(raw, (dict, list)):
        return raw
    if isinstance(raw, str):
        if not raw:
            return None
        try:
            return json.loads(raw)
        except (ValueError, TypeError):
            return None
    return None
