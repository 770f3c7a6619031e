"""Audit history for share inbox items.

History is append-only and kept in ascending time order. It always opens
with the `created` entry; past MAX_HISTORY_ENTRIES the oldest entries after
it are discarded first.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from napoleon.models import (
    SHARE_HISTORY_TYPES,
    SHARE_INBOX_STATUSES,
    ShareHistoryEntry,
    ShareHistoryInput,
)

MAX_HISTORY_ENTRIES = 40


def trim_history(history: list[ShareHistoryEntry]) -> list[ShareHistoryEntry]:
    """Keep the newest entries, pinning the leading `created` entry."""
    if len(history) <= MAX_HISTORY_ENTRIES:
        return history
    head = history[0]
    if head.type != "created":
        return history[-MAX_HISTORY_ENTRIES:]
    return [head, *history[-(MAX_HISTORY_ENTRIES - 1):]]


def _parse_iso(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def create_history_entry(entry: ShareHistoryInput, at: Any = None) -> ShareHistoryEntry:
    """Stamp an entry with a fresh id and time (``at`` when it parses)."""
    note = entry.note.strip() if entry.note else ""
    return ShareHistoryEntry(
        id=f"h_{uuid4().hex[:12]}",
        type=entry.type,
        at=_parse_iso(at) or datetime.now(UTC),
        note=note or None,
        from_status=entry.from_status,
        to_status=entry.to_status,
    )


def append_history(
    history: list[ShareHistoryEntry],
    entry: ShareHistoryInput,
) -> list[ShareHistoryEntry]:
    """Return history plus one new entry, trimmed to the newest entries."""
    return trim_history([*history, create_history_entry(entry)])


def normalize_history(value: Any, created_at: datetime, status: str) -> list[ShareHistoryEntry]:
    """Rebuild stored history, dropping malformed entries.

    Surviving entries are sorted ascending by time. A history that does not
    open with a `created` entry gets one at ``created_at``.
    """
    entries: list[ShareHistoryEntry] = []
    if isinstance(value, list):
        for raw in value:
            if not isinstance(raw, dict) or raw.get("type") not in SHARE_HISTORY_TYPES:
                continue
            from_status = raw.get("from_status")
            to_status = raw.get("to_status")
            entry = create_history_entry(
                ShareHistoryInput(
                    type=raw["type"],
                    note=raw["note"] if isinstance(raw.get("note"), str) else None,
                    from_status=from_status if from_status in SHARE_INBOX_STATUSES else None,
                    to_status=to_status if to_status in SHARE_INBOX_STATUSES else None,
                ),
                at=raw.get("at"),
            )
            if isinstance(raw.get("id"), str) and raw["id"].strip():
                entry.id = raw["id"]
            entries.append(entry)

    entries.sort(key=lambda e: e.at)
    if not entries or entries[0].type != "created":
        created_entry_at = min(created_at, entries[0].at) if entries else created_at
        entries.insert(0, create_history_entry(
            ShareHistoryInput(type="created", to_status=status), at=created_entry_at,
        ))
    return trim_history(entries)
