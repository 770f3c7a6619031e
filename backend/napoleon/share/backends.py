"""Backing stores for the share inbox.

A backend only knows how to load every stored record and atomically replace
them all. Normalization, trimming and write ordering live in the store.
"""

import asyncio
import json
import os
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from napoleon.db.connection import Database


class SharePersistenceError(Exception):
    """Raised when a backend cannot read or write its medium."""


class ShareInboxBackend(ABC):
    """Keyed collection with load-all and save-all (atomic replace)."""

    @abstractmethod
    async def load_all(self) -> list[dict[str, Any]]:
        """Raw stored records. Raises SharePersistenceError on failure."""

    @abstractmethod
    async def save_all(self, items: list[dict[str, Any]]) -> None:
        """Replace every stored record. Raises SharePersistenceError on failure."""


class SqliteShareInboxBackend(ShareInboxBackend):
    """Records as JSON rows in the share_inbox_items table."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def load_all(self) -> list[dict[str, Any]]:
        try:
            rows = await self._db.fetchall("SELECT payload FROM share_inbox_items")
        except sqlite3.Error as e:
            raise SharePersistenceError(f"Failed to load share inbox: {e}") from e

        items: list[dict[str, Any]] = []
        for row in rows:
            try:
                parsed = json.loads(row["payload"])
            except ValueError:
                continue
            if isinstance(parsed, dict):
                items.append(parsed)
        return items

    async def save_all(self, items: list[dict[str, Any]]) -> None:
        statements: list[tuple[str, tuple]] = [("DELETE FROM share_inbox_items", ())]
        statements.extend(
            (
                "INSERT INTO share_inbox_items (item_id, created_at, payload) VALUES (?, ?, ?)",
                (item["id"], item["created_at"], json.dumps(item, ensure_ascii=False)),
            )
            for item in items
        )
        try:
            await self._db.execute_batch(statements)
        except sqlite3.Error as e:
            raise SharePersistenceError(f"Failed to save share inbox: {e}") from e


class JsonFileShareInboxBackend(ShareInboxBackend):
    """A single JSON array file, replaced through a temp file and rename."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def _read(self) -> list[dict[str, Any]]:
        if not self._path.exists():
            return []
        parsed = json.loads(self._path.read_text(encoding="utf-8"))
        if not isinstance(parsed, list):
            return []
        return [item for item in parsed if isinstance(item, dict)]

    def _write(self, items: list[dict[str, Any]]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(items, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp_path, self._path)

    async def load_all(self) -> list[dict[str, Any]]:
        try:
            return await asyncio.to_thread(self._read)
        except (OSError, ValueError) as e:
            raise SharePersistenceError(f"Failed to load {self._path}: {e}") from e

    async def save_all(self, items: list[dict[str, Any]]) -> None:
        try:
            await asyncio.to_thread(self._write, items)
        except OSError as e:
            raise SharePersistenceError(f"Failed to save {self._path}: {e}") from e
