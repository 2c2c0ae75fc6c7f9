"""Token drop repository."""

from __future__ import annotations

from typing import Iterator

from coverdrop_app.models.drop import TokenDrop
from coverdrop_app.repositories.kv_store import KeyValueStore
from coverdrop_app.repositories.schema import DROP_COUNTER, DROPS


class DropRepository:
    """Handles drop persistence."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def next_drop_id(self) -> int:
        return self._store.next_id(DROP_COUNTER)

    def get_drop(self, drop_id: int) -> TokenDrop | None:
        row = self._store.get(DROPS, drop_id)
        return TokenDrop.from_record(row) if row else None

    def save_drop(self, drop: TokenDrop) -> None:
        self._store.put(DROPS, drop.id, drop.to_record())

    def iter_drops(self) -> Iterator[TokenDrop]:
        for _, row in self._store.iterate(DROPS):
            yield TokenDrop.from_record(row)
