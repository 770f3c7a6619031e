"""Async SQLite connection wrapper with WAL mode and schema initialization."""

import asyncio
from pathlib import Path

import aiosqlite

from napoleon.db.schema import SCHEMA_SQL


class Database:
    """Thin async wrapper around aiosqlite with WAL mode and auto-schema."""

    def __init__(self, connection: aiosqlite.Connection) -> None:
        self._conn = connection
        # Held for the whole of each write transaction on the shared connection
        self._write_lock = asyncio.Lock()

    @classmethod
    async def connect(cls, path: str = "napoleon.db") -> "Database":
        """Create a connection with WAL mode, foreign keys, and schema init."""
        if path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(path)
        conn.row_factory = aiosqlite.Row
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA foreign_keys=ON")
        await conn.execute("PRAGMA busy_timeout=5000")
        db = cls(conn)
        await db._ensure_schema()
        return db

    async def _ensure_schema(self) -> None:
        """Create tables if they don't exist. Idempotent."""
        await self._conn.executescript(SCHEMA_SQL)
        await self._conn.commit()

    async def execute_batch(self, statements: list[tuple[str, tuple]]) -> None:
        """Execute several statements in one transaction.

        Either every statement lands or none does: any failure rolls the
        transaction back and re-raises. Concurrent batches run one after
        another, never interleaved.
        """
        async with self._write_lock:
            await self._conn.execute("BEGIN")
            try:
                for sql, params in statements:
                    await self._conn.execute(sql, params)
                await self._conn.commit()
            except Exception:
                await self._conn.rollback()
                raise

    async def fetchone(self, sql: str, params: tuple | None = None) -> aiosqlite.Row | None:
        """Execute and return a single row."""
        cursor = await self._conn.execute(sql, params or ())
        return await cursor.fetchone()

    async def fetchall(self, sql: str, params: tuple | None = None) -> list[aiosqlite.Row]:
        """Execute and return all rows."""
        cursor = await self._conn.execute(sql, params or ())
        return list(await cursor.fetchall())

    async def close(self) -> None:
        """Close the database connection."""
        await self._conn.close()
