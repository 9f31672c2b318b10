"""Read-only SQLite handle shared by the catalog services."""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from petadex.core.settings import Settings
from petadex.utils.logger import get_logger

logger = get_logger(__name__)


class Database:
    """Owns one SQLite connection for the lifetime of the process.

    The handle is created explicitly and passed to each service. Call
    :meth:`open` at start-up and :meth:`close` at shutdown, or use it as a
    context manager. Statements are executed under a lock so the connection
    can be shared by request threads.
    """

    def __init__(self, path: Path | str, *, read_only: bool = True) -> None:
        self.path = Path(path)
        self.read_only = read_only
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.database.path, read_only=settings.database.read_only)

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> "Database":
        if self._conn is not None:
            return self
        if not self.path.exists():
            raise FileNotFoundError(f"Database not found at {self.path}")
        if self.read_only:
            uri = f"{self.path.resolve().as_uri()}?mode=ro"
            conn = sqlite3.connect(uri, uri=True, check_same_thread=False)
        else:
            conn = sqlite3.connect(self.path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        self._conn = conn
        logger.info("database.open", path=str(self.path), read_only=self.read_only)
        return self

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.info("database.close", path=str(self.path))

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    def fetch_all(self, query: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """Run a parameterised query and return every row as a dict."""
        conn = self._require_connection()
        with self._lock:
            rows = conn.execute(query, tuple(params)).fetchall()
        return [dict(row) for row in rows]

    def fetch_one(self, query: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        conn = self._require_connection()
        with self._lock:
            row = conn.execute(query, tuple(params)).fetchone()
        return dict(row) if row is not None else None

    def fetch_scalar(self, query: str, params: Sequence[Any] = ()) -> Any:
        conn = self._require_connection()
        with self._lock:
            row = conn.execute(query, tuple(params)).fetchone()
        return row[0] if row is not None else None

    def _require_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Database is not open; call open() first")
        return self._conn


__all__ = ["Database"]
