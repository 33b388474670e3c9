"""SQLite-backed record store.

Drop-in alternative to the JSON flat file: the repository still loads and
saves the whole collection, but each save happens inside one transaction.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

import aiosqlite

from estate360.db.storage import records_from_json
from estate360.exceptions import StorageUnavailableError
from estate360.logging import get_logger
from estate360.models import PropertyRecord

logger = get_logger(__name__)


class SqliteStore:
    """Property records kept as ordered JSON payload rows in SQLite."""

    def __init__(self, db_path: str) -> None:
        """Initialize storage with database path.

        Args:
            db_path: Path to SQLite database file, or ":memory:" for in-memory.
        """
        self.db_path = db_path
        self._conn: aiosqlite.Connection | None = None
        self._initialized = False

    def _ensure_directory(self) -> None:
        """Ensure the directory for the database exists."""
        if self.db_path != ":memory:":
            try:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageUnavailableError(f"Cannot create {self.db_path}: {e}") from e

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create the database connection and schema."""
        if self._conn is None:
            self._ensure_directory()
            try:
                self._conn = await aiosqlite.connect(self.db_path)
            except aiosqlite.Error as e:
                raise StorageUnavailableError(f"Cannot open {self.db_path}: {e}") from e
            await self._conn.execute("PRAGMA journal_mode=WAL")
            await self._conn.execute("PRAGMA busy_timeout=5000")
        if not self._initialized:
            await self._conn.execute("""
                CREATE TABLE IF NOT EXISTS property_records (
                    position INTEGER PRIMARY KEY,
                    id TEXT NOT NULL UNIQUE,
                    payload TEXT NOT NULL
                )
            """)
            await self._conn.commit()
            self._initialized = True
        return self._conn

    async def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            self._initialized = False

    async def load_all(self) -> list[PropertyRecord]:
        """Load every record in stored order; an empty database yields []."""
        conn = await self._get_connection()
        try:
            cursor = await conn.execute("SELECT payload FROM property_records ORDER BY position")
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StorageUnavailableError(f"Cannot read {self.db_path}: {e}") from e

        try:
            items = [json.loads(row[0]) for row in rows]
        except json.JSONDecodeError as e:
            raise StorageUnavailableError(f"{self.db_path} holds an undecodable row: {e}") from e
        return records_from_json(items, self.db_path)

    async def save_all(self, records: Sequence[PropertyRecord]) -> None:
        """Replace the stored collection inside a single transaction."""
        conn = await self._get_connection()
        rows = [
            (position, r.id, json.dumps(r.to_json_dict(), ensure_ascii=False))
            for position, r in enumerate(records)
        ]
        try:
            await conn.execute("DELETE FROM property_records")
            await conn.executemany(
                "INSERT INTO property_records (position, id, payload) VALUES (?, ?, ?)", rows
            )
            await conn.commit()
        except aiosqlite.Error as e:
            await conn.rollback()
            raise StorageUnavailableError(f"Cannot write {self.db_path}: {e}") from e
        logger.debug("record_store_saved", path=self.db_path, count=len(rows))
