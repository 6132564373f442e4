"""
Database connection management (DB-API 2.0 over sqlite3).

Not an ORM: only pooled connection management, transactions, and a few
helpers shared by the record modules.

Usage:
    from core.db import DatabaseManager

    dm = DatabaseManager(db_path=settings.database.database_path)
    with dm.connect() as conn:
        row = conn.execute("SELECT * FROM admins WHERE id = ?", (admin_id,)).fetchone()

The manager is built once by the app factory from DatabaseSettings and
stored on ``app.extensions["db"]``; request code reaches it through
``get_db()``.
"""

import logging
import queue
import sqlite3
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def new_id() -> str:
    """Return a new opaque record id."""
    return uuid.uuid4().hex


def utcnow_iso() -> str:
    """Current UTC time as an ISO 8601 string with +00:00 offset."""
    return datetime.now(timezone.utc).isoformat()


def unique_violation_column(error: sqlite3.IntegrityError) -> Optional[str]:
    """Return the column named by a UNIQUE constraint failure, if any.

    sqlite reports ``UNIQUE constraint failed: clients.email``.
    """
    message = str(error)
    prefix = "UNIQUE constraint failed: "
    if not message.startswith(prefix):
        return None
    first = message[len(prefix):].split(",")[0].strip()
    return first.split(".")[-1]


class DatabaseManager:
    """
    Connection pool for the application database.

    Usage:
        dm = DatabaseManager(db_path=Path("data/rental.db"))
        with dm.connect() as conn:
            conn.execute("SELECT ...")
    """

    def __init__(self, db_path: Path, pool_size: int = 10):
        self._db_path = Path(db_path)
        self._pool_size = pool_size
        self._lock = threading.Lock()
        self._closed = False

        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._pool: queue.Queue = queue.Queue(maxsize=pool_size)

    @classmethod
    def from_settings(cls, database_settings) -> "DatabaseManager":
        return cls(
            db_path=database_settings.database_path,
            pool_size=database_settings.database_pool_size,
        )

    # ----- connection acquisition / release -----------------------------------

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    def get_connection(self) -> sqlite3.Connection:
        """Acquire a connection from the pool."""
        try:
            conn = self._pool.get_nowait()
            # Verify connection is still usable
            conn.execute("SELECT 1")
            return conn
        except queue.Empty:
            pass
        except sqlite3.Error:
            logger.debug("Discarding stale pooled connection")

        return self._open()

    def release_connection(self, conn: sqlite3.Connection) -> None:
        """Return a connection to the pool."""
        if self._closed:
            conn.close()
            return
        try:
            self._pool.put_nowait(conn)
        except queue.Full:
            conn.close()

    @contextmanager
    def connect(self):
        """Context manager: acquire → yield → commit/rollback → release."""
        conn = self.get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self.release_connection(conn)

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self.connect() as conn:
                conn.execute("SELECT 1")
            return True
        except sqlite3.Error as e:
            logger.warning(f"Database ping failed: {e}")
            return False

    def close(self) -> None:
        """Drain and close all pooled connections."""
        with self._lock:
            self._closed = True
            while not self._pool.empty():
                try:
                    self._pool.get_nowait().close()
                except queue.Empty:
                    break

    @property
    def db_path(self) -> Path:
        """Return the SQLite database path."""
        return self._db_path


def get_db() -> DatabaseManager:
    """Return the DatabaseManager bound to the current Flask app."""
    from flask import current_app
    return current_app.extensions["db"]
