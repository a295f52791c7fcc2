"""SQLite persistence of scan results.

`syld scan` stores the discovered packages here and `syld report` reads the
most recent scan back.
"""

import contextlib
import json
import sqlite3
from datetime import UTC, datetime
from pathlib import Path
from typing import Optional

from syld.models import PackageRecord


class ScanStore:
    """SQLite store of package scans.

    Each scan is one row holding the JSON-serialized package list.

    Attributes:
        db_path: Path to the SQLite database file.
    """

    def __init__(self, db_path: Path):
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self.db_path = db_path
        self._init_database()

    @contextlib.contextmanager
    def _connect(self):
        conn = sqlite3.connect(self.db_path)
        try:
            yield conn
        finally:
            conn.close()

    def _init_database(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS scans (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    scanned_at TEXT NOT NULL,
                    packages TEXT NOT NULL
                )
                """
            )
            conn.commit()

    def save_scan(
        self, packages: list[PackageRecord], scanned_at: Optional[datetime] = None
    ) -> datetime:
        """Store a scan.

        Args:
            packages: Discovered packages.
            scanned_at: Scan time. Defaults to now.

        Returns:
            The timestamp recorded for the scan.
        """
        scanned_at = scanned_at or datetime.now(UTC)
        packages_json = json.dumps([pkg.to_dict() for pkg in packages])

        with self._connect() as conn:
            conn.execute(
                "INSERT INTO scans (scanned_at, packages) VALUES (?, ?)",
                (scanned_at.isoformat(), packages_json),
            )
            conn.commit()

        return scanned_at

    def load_latest_scan(self) -> Optional[tuple[datetime, list[PackageRecord]]]:
        """Load the most recent scan.

        Returns:
            Tuple of (scan timestamp, packages), or None if nothing was scanned yet.

        Raises:
            ValueError: If the stored scan cannot be decoded.
        """
        with self._connect() as conn:
            row = conn.execute(
                "SELECT scanned_at, packages FROM scans ORDER BY id DESC LIMIT 1"
            ).fetchone()

        if row is None:
            return None

        scanned_at_str, packages_json = row
        try:
            packages = [PackageRecord.from_dict(d) for d in json.loads(packages_json)]
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise ValueError(f"Stored scan in {self.db_path} is corrupt: {e}") from e

        return datetime.fromisoformat(scanned_at_str), packages
