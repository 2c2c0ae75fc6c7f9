"""Keyed JSON record store on top of SQLite."""

from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Iterator

from coverdrop_app.repositories.db_pool import ThreadLocalConnection


class KeyValueStore:
    """get/put/iterate over named collections, plus monotonic counters.

    Records are JSON documents keyed by ``(collection, key)``. Iteration
    follows insertion order; overwriting a key keeps its position.
    """

    def __init__(self, pool: ThreadLocalConnection):
        self._pool = pool

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._pool.transaction():
            yield

    def get(self, collection: str, key: str | int) -> Any | None:
        row = self._pool.fetchone(
            "SELECT body FROM records WHERE collection = ? AND record_key = ?",
            (collection, str(key)),
        )
        return json.loads(row["body"]) if row else None

    def put(self, collection: str, key: str | int, value: Any) -> None:
        self._pool.execute(
            """
            INSERT INTO records (collection, record_key, body)
            VALUES (?, ?, ?)
            ON CONFLICT(collection, record_key) DO UPDATE SET
                body = excluded.body,
                updated_at = CURRENT_TIMESTAMP
            """,
            (collection, str(key), json.dumps(value, ensure_ascii=False)),
        )

    def iterate(self, collection: str) -> Iterator[tuple[str, Any]]:
        rows = self._pool.fetchall(
            "SELECT record_key, body FROM records WHERE collection = ? ORDER BY rowid",
            (collection,),
        )
        for row in rows:
            yield row["record_key"], json.loads(row["body"])

    def next_id(self, counter: str) -> int:
        """Allocate the next value of a counter, starting at 1."""
        with self._pool.transaction():
            self._pool.execute(
                """
                INSERT INTO counters (name, value) VALUES (?, 1)
                ON CONFLICT(name) DO UPDATE SET value = value + 1
                """,
                (counter,),
            )
            row = self._pool.fetchone("SELECT value FROM counters WHERE name = ?", (counter,))
        return int(row["value"])
