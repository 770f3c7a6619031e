"""Integration tests for database connection and schema."""

import asyncio
import sqlite3

import pytest

from napoleon.db.connection import Database


class TestDatabaseConnection:
    async def test_connect_creates_tables(self, db):
        """Database.connect creates chat and share inbox tables."""
        rows = await db.fetchall("SELECT name FROM sqlite_master WHERE type='table'")
        table_names = {row["name"] for row in rows}
        assert {"chats", "chat_messages", "share_inbox_items"} <= table_names

    async def test_file_database_creates_parent_dir_and_uses_wal(self, tmp_path):
        path = tmp_path / "nested" / "napoleon.db"
        db = await Database.connect(str(path))
        try:
            assert path.parent.is_dir()
            row = await db.fetchone("PRAGMA journal_mode")
            assert row["journal_mode"] == "wal"
        finally:
            await db.close()

    async def test_foreign_keys_enabled(self, db):
        row = await db.fetchone("PRAGMA foreign_keys")
        assert row["foreign_keys"] == 1

    async def test_schema_idempotent(self, db):
        """Calling _ensure_schema twice does not error."""
        await db._ensure_schema()
        rows = await db.fetchall("SELECT name FROM sqlite_master WHERE type='table'")
        assert len(rows) == 3


class TestExecuteBatch:
    async def test_all_statements_land(self, db):
        await db.execute_batch([
            ("INSERT INTO share_inbox_items (item_id, created_at, payload) VALUES (?, ?, ?)", ("a", "t", "{}")),
            ("INSERT INTO share_inbox_items (item_id, created_at, payload) VALUES (?, ?, ?)", ("b", "t", "{}")),
        ])
        rows = await db.fetchall("SELECT item_id FROM share_inbox_items ORDER BY item_id")
        assert [r["item_id"] for r in rows] == ["a", "b"]

    async def test_failure_rolls_back(self, db):
        insert = "INSERT INTO share_inbox_items (item_id, created_at, payload) VALUES (?, ?, ?)"
        with pytest.raises(sqlite3.IntegrityError):
            await db.execute_batch([(insert, ("a", "t", "{}")), (insert, ("a", "t", "{}"))])
        rows = await db.fetchall("SELECT item_id FROM share_inbox_items")
        assert rows == []

    async def test_concurrent_batches_do_not_interleave(self, db):
        """A failing batch neither drags down nor leaks into one running alongside it."""
        insert = "INSERT INTO share_inbox_items (item_id, created_at, payload) VALUES (?, ?, ?)"
        good = [(insert, (f"g{i}", "t", "{}")) for i in range(3)]
        bad = [(insert, ("b", "t", "{}")), (insert, ("b", "t", "{}"))]

        results = await asyncio.gather(
            db.execute_batch(good),
            db.execute_batch(bad),
            return_exceptions=True,
        )

        assert results[0] is None
        assert isinstance(results[1], sqlite3.IntegrityError)
        rows = await db.fetchall("SELECT item_id FROM share_inbox_items ORDER BY item_id")
        assert [r["item_id"] for r in rows] == ["g0", "g1", "g2"]
