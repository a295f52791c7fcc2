"""SQLite-based cache layer for enrichment results.

This module provides a persistent cache so that projects enriched during a
recent run are not fetched again from GitHub, Open Collective and friends.
Entries expire lazily: a stale row is ignored by get() and replaced by the
next set() for the same key, but never deleted on its own.
"""

import contextlib
import json
import logging
import sqlite3
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Callable, Optional

from syld.models import UpstreamProject

logger = logging.getLogger(__name__)


class CacheCorruptionError(Exception):
    """Raised when a cached project snapshot or its timestamp cannot be read."""


def _utcnow() -> datetime:
    return datetime.now(UTC)


class EnrichmentCache:
    """SQLite cache for storing enriched upstream project metadata.

    Entries are keyed by the project's identity (repository URL, falling back
    to homepage) as seen before normalization, and are valid for seven days
    after they were written.

    Attributes:
        db_path: Path to the SQLite database file.
        ttl: How long an entry stays fresh.
    """

    DEFAULT_TTL_DAYS = 7

    def __init__(
        self,
        db_path: Path,
        ttl_days: int = DEFAULT_TTL_DAYS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """Initialize the enrichment cache.

        Args:
            db_path: Path to the SQLite database. Parent directories are
                created if needed.
            ttl_days: Number of days before cache entries go stale. The
                application always uses the seven-day default.
            clock: Callable returning the current timezone-aware time.
        """
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self.db_path = db_path
        self.ttl = timedelta(days=ttl_days)
        self._clock = clock
        self._conn: Optional[sqlite3.Connection] = None
        self._init_database()

    def __enter__(self) -> "EnrichmentCache":
        """Enter context manager, keeping connection open."""
        self._conn = sqlite3.connect(self.db_path)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager, closing connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    @contextlib.contextmanager
    def _connect(self):
        """Get a database connection.

        Reuses the connection opened by the context manager if there is one,
        otherwise opens a new connection and closes it after use.
        """
        if self._conn:
            yield self._conn
        else:
            conn = sqlite3.connect(self.db_path)
            try:
                yield conn
            finally:
                conn.close()

    def _init_database(self) -> None:
        """Initialize the database schema if it doesn't exist."""
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS enrichment_cache (
                    cache_key TEXT PRIMARY KEY,
                    project_data TEXT NOT NULL,
                    cached_at TEXT NOT NULL
                )
                """
            )
            conn.commit()

    @staticmethod
    def _parse_timestamp(key: str, value: str) -> datetime:
        """Parse a stored cached_at value.

        Raises:
            CacheCorruptionError: If the value is not an ISO 8601 timestamp
                with a UTC offset.
        """
        try:
            cached_at = datetime.fromisoformat(value)
        except (TypeError, ValueError) as e:
            raise CacheCorruptionError(
                f"Invalid timestamp for cache entry {key!r}: {value!r}"
            ) from e
        if cached_at.tzinfo is None:
            raise CacheCorruptionError(
                f"Timestamp without timezone for cache entry {key!r}: {value!r}"
            )
        return cached_at

    def _is_stale(self, cached_at: datetime) -> bool:
        return self._clock() - cached_at > self.ttl

    def get(self, key: str) -> Optional[UpstreamProject]:
        """Retrieve a cached project.

        Args:
            key: Project identity (repository URL or homepage).

        Returns:
            The cached project, or None if there is no entry or the entry is
            older than the TTL.

        Raises:
            CacheCorruptionError: If the stored snapshot or timestamp cannot
                be decoded.
        """
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT project_data, cached_at
                FROM enrichment_cache
                WHERE cache_key = ?
                """,
                (key,),
            ).fetchone()

        if row is None:
            return None

        project_json, cached_at_str = row
        cached_at = self._parse_timestamp(key, cached_at_str)

        if self._is_stale(cached_at):
            logger.debug("Cache entry for %s is stale (cached at %s)", key, cached_at)
            return None

        try:
            return UpstreamProject.from_dict(json.loads(project_json))
        except (json.JSONDecodeError, TypeError, KeyError, ValueError) as e:
            raise CacheCorruptionError(
                f"Corrupt cache entry for {key!r}: {e}"
            ) from e

    def set(self, key: str, project: UpstreamProject) -> None:
        """Store a project in the cache, replacing any existing entry.

        Args:
            key: Project identity (repository URL or homepage).
            project: Enriched project to store.
        """
        cached_at = self._clock()
        project_json = json.dumps(project.to_dict())

        with self._connect() as conn:
            conn.execute(
                """
                REPLACE INTO enrichment_cache (cache_key, project_data, cached_at)
                VALUES (?, ?, ?)
                """,
                (key, project_json, cached_at.isoformat()),
            )
            conn.commit()

    def clear(self, key: Optional[str] = None) -> None:
        """Clear cache entries.

        Args:
            key: If specified, clear only this entry. If None, clear all entries.
        """
        with self._connect() as conn:
            if key is None:
                conn.execute("DELETE FROM enrichment_cache")
            else:
                conn.execute(
                    "DELETE FROM enrichment_cache WHERE cache_key = ?", (key,)
                )
            conn.commit()

    def info(self) -> dict:
        """Get cache statistics.

        Returns:
            Dictionary with cache information:
                - path: Path to cache database file
                - count: Number of stored entries, stale ones included
                - stale: Entries older than the TTL, waiting to be replaced
                - corrupt: Entries whose timestamp cannot be read
                - size_bytes: Database file size in bytes
        """
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT cache_key, cached_at FROM enrichment_cache"
            ).fetchall()

        stale = corrupt = 0
        for key, cached_at_str in rows:
            try:
                if self._is_stale(self._parse_timestamp(key, cached_at_str)):
                    stale += 1
            except CacheCorruptionError:
                corrupt += 1

        size_bytes = self.db_path.stat().st_size if self.db_path.exists() else 0

        return {
            "path": str(self.db_path),
            "count": len(rows),
            "stale": stale,
            "corrupt": corrupt,
            "size_bytes": size_bytes,
        }
