# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""SQLite cache for serialized provider specifications."""

import logging
import sqlite3

from datetime import datetime, timezone
from pathlib import Path

from tps.analyzer import DiscoveredProvider
from tps.persistence import PersistenceError
from tps.provider import ProviderSpecification
from tps.serialization import deserialize, serialize

logger = logging.getLogger(__name__)


class SQLiteSpecCache:
    """Cache provider specifications in a SQLite database."""

    def __init__(self, db_path: Path) -> None:
        """Initialize cache backend.

        Args:
            db_path: SQLite database file path.
        """
        self._db_path = db_path

    def store(self, providers: list[DiscoveredProvider]) -> int:
        """Insert or replace providers atomically.

        Rows are keyed by unique name, so storing an unchanged provider again
        only refreshes its file path and timestamp.

        Args:
            providers: Discovered providers to cache.

        Returns:
            Number of rows written.

        Raises:
            PersistenceError: If schema setup or write operations fail.
        """
        stored_at = datetime.now(tz=timezone.utc).isoformat()
        connection = sqlite3.connect(self._db_path)
        try:
            self._ensure_schema(connection=connection)
            connection.execute("BEGIN")
            connection.executemany(
                "INSERT OR REPLACE INTO providers ("
                "unique_name, name, content_hash, file_path, lineno, payload, stored_at"
                ") VALUES (?, ?, ?, ?, ?, ?, ?)",
                [
                    (
                        provider.spec.unique_name,
                        provider.spec.name,
                        provider.spec.content_hash,
                        provider.file_path,
                        provider.lineno,
                        serialize(provider.spec),
                        stored_at,
                    )
                    for provider in providers
                ],
            )
            connection.commit()
        except sqlite3.DatabaseError as exc:
            connection.rollback()
            logger.warning(f"SQLite cache write failed (db_path={self._db_path} error={exc})")
            raise PersistenceError(str(exc)) from exc
        finally:
            connection.close()
        logger.info(
            f"Cached provider specifications (db_path={self._db_path} count={len(providers)})"
        )
        return len(providers)

    def load(self, unique_name: str) -> ProviderSpecification | None:
        """Load one cached provider.

        Args:
            unique_name: Hash-qualified provider name.

        Returns:
            The cached specification, or ``None`` when absent.

        Raises:
            PersistenceError: If the database cannot be read.
            FormatError: If the cached payload is corrupted.
        """
        connection = sqlite3.connect(self._db_path)
        try:
            self._ensure_schema(connection=connection)
            row = connection.execute(
                "SELECT payload FROM providers WHERE unique_name = ?", (unique_name,)
            ).fetchone()
        except sqlite3.DatabaseError as exc:
            logger.warning(f"SQLite cache read failed (db_path={self._db_path} error={exc})")
            raise PersistenceError(str(exc)) from exc
        finally:
            connection.close()
        if row is None:
            return None
        return deserialize(bytes(row[0]))

    def list_unique_names(self) -> list[str]:
        """List cached unique names.

        Raises:
            PersistenceError: If the database cannot be read.
        """
        connection = sqlite3.connect(self._db_path)
        try:
            self._ensure_schema(connection=connection)
            rows = connection.execute(
                "SELECT unique_name FROM providers ORDER BY unique_name"
            ).fetchall()
        except sqlite3.DatabaseError as exc:
            logger.warning(f"SQLite cache read failed (db_path={self._db_path} error={exc})")
            raise PersistenceError(str(exc)) from exc
        finally:
            connection.close()
        return [str(row[0]) for row in rows]

    def _ensure_schema(self, connection: sqlite3.Connection) -> None:
        """Create required tables and indexes when missing.

        Args:
            connection: Open SQLite connection.
        """
        connection.execute(
            "CREATE TABLE IF NOT EXISTS providers ("
            "unique_name TEXT PRIMARY KEY, "
            "name TEXT NOT NULL, "
            "content_hash TEXT NOT NULL, "
            "file_path TEXT NOT NULL, "
            "lineno INTEGER NOT NULL, "
            "payload BLOB NOT NULL, "
            "stored_at TEXT NOT NULL"
            ")"
        )
        connection.execute(
            "CREATE INDEX IF NOT EXISTS idx_providers_name ON providers(name)"
        )
