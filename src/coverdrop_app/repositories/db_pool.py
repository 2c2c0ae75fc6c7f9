"""Thread-local database connection management."""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from coverdrop_app.core.config import AppConfig, get_required_env

try:
    from pysqlcipher3 import dbapi2 as sqlcipher

    SQLCIPHER_AVAILABLE = True
except ImportError:
    sqlcipher = None
    SQLCIPHER_AVAILABLE = False


class ThreadLocalConnection:
    """Maintain one DB connection per thread and serialize write transactions.

    Statements issued outside ``transaction()`` commit immediately. Inside it,
    they commit together when the outermost block exits, or roll back on error.
    """

    def __init__(self, config: AppConfig):
        self._config = config
        self._local = threading.local()
        self._write_lock = threading.RLock()
        self._registry_lock = threading.Lock()
        self._connections: list[sqlite3.Connection] = []

    def _open_connection(self) -> sqlite3.Connection:
        db_path = Path(self._config.database.path)
        db_path.parent.mkdir(parents=True, exist_ok=True)

        if SQLCIPHER_AVAILABLE:
            connection = sqlcipher.connect(str(db_path), check_same_thread=False)
            key = get_required_env(self._config.database.key_env).replace("'", "''")
            connection.execute(f"PRAGMA key = '{key}'")
            connection.execute("PRAGMA cipher_compatibility = 4")
        elif self._config.database.allow_sqlite_fallback:
            connection = sqlite3.connect(str(db_path), check_same_thread=False)
        else:
            raise RuntimeError(
                "SQLCipher is required but unavailable. Install pysqlcipher3 or enable fallback."
            )

        connection.execute("PRAGMA busy_timeout = 5000")
        connection.row_factory = sqlite3.Row
        return connection

    def get_connection(self) -> sqlite3.Connection:
        """Return current thread's connection, creating it when needed."""
        connection = getattr(self._local, "connection", None)
        if connection is None:
            connection = self._open_connection()
            self._local.connection = connection
            with self._registry_lock:
                self._connections.append(connection)
        return connection

    def close_all(self) -> None:
        """Close the connections opened by every thread.

        Threads that use the pool afterwards open fresh connections.
        """
        with self._registry_lock:
            connections, self._connections = self._connections, []
        for connection in connections:
            connection.close()
        self._local = threading.local()

    def in_transaction(self) -> bool:
        return getattr(self._local, "depth", 0) > 0

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run a block as one atomic unit. Nested blocks join the outer one."""
        with self._write_lock:
            connection = self.get_connection()
            depth = getattr(self._local, "depth", 0)
            self._local.depth = depth + 1
            try:
                yield connection
            except BaseException:
                if depth == 0:
                    connection.rollback()
                raise
            else:
                if depth == 0:
                    connection.commit()
            finally:
                self._local.depth = depth

    def execute(self, query: str, params: tuple[Any, ...] = ()) -> sqlite3.Cursor:
        """Execute a query, committing unless a transaction is open."""
        connection = self.get_connection()
        cursor = connection.cursor()
        cursor.execute(query, params)
        if not self.in_transaction():
            connection.commit()
        return cursor

    def fetchall(self, query: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        """Fetch all rows for a query."""
        cursor = self.execute(query, params)
        return cursor.fetchall()

    def fetchone(self, query: str, params: tuple[Any, ...] = ()) -> sqlite3.Row | None:
        """Fetch first row for a query."""
        cursor = self.execute(query, params)
        return cursor.fetchone()
