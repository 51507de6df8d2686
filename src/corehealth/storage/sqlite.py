"""SQLite key-value backend.

Provides persistent storage using a single SQLite table.
Uses aiosqlite for async access.
"""

from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from ..errors import PersistenceReadError, PersistenceWriteError
from .base import KeyValueStore


class SQLiteKeyValueStore(KeyValueStore):
    """SQLite-backed key-value store.

    Stores each value as one row keyed by its string key. Writes are upserts,
    so the last full write for a key wins.
    """

    def __init__(self, path: str | Path = "./corehealth.db"):
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Initialize database connection and schema."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._create_schema()

    async def _create_schema(self) -> None:
        """Create the key-value table."""
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        await self._connection.commit()

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    def _require_connection(
        self,
        key: str,
        error: type[PersistenceReadError | PersistenceWriteError],
    ) -> aiosqlite.Connection:
        if self._connection is None:
            raise error(key, "store is not connected; call connect() first")
        return self._connection

    async def get(self, key: str) -> str | None:
        connection = self._require_connection(key, PersistenceReadError)
        try:
            async with connection.execute(
                "SELECT value FROM kv_store WHERE key = ?",
                (key,)
            ) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise PersistenceReadError(key, str(e)) from e

        return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        connection = self._require_connection(key, PersistenceWriteError)
        now = datetime.now(timezone.utc).isoformat()
        try:
            await connection.execute("""
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
            """, (key, value, now))
            await connection.commit()
        except aiosqlite.Error as e:
            raise PersistenceWriteError(key, str(e)) from e

    async def multi_remove(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if not keys:
            return
        connection = self._require_connection(", ".join(keys), PersistenceWriteError)
        try:
            await connection.executemany(
                "DELETE FROM kv_store WHERE key = ?",
                [(key,) for key in keys]
            )
            await connection.commit()
        except aiosqlite.Error as e:
            raise PersistenceWriteError(", ".join(keys), str(e)) from e

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
