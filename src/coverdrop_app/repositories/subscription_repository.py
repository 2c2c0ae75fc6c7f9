"""User -> subscribed drop ids index."""

from __future__ import annotations

from coverdrop_app.repositories.kv_store import KeyValueStore
from coverdrop_app.repositories.schema import USER_SUBSCRIPTIONS


class SubscriptionRepository:
    """Stores each user's subscription set as an ordered id list."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def get_subscriptions(self, user_id: str) -> list[int] | None:
        """Return the user's drop ids, or None when no set was ever created."""
        row = self._store.get(USER_SUBSCRIPTIONS, user_id)
        if row is None:
            return None
        return [int(item) for item in row]

    def save_subscriptions(self, user_id: str, drop_ids: list[int]) -> None:
        self._store.put(USER_SUBSCRIPTIONS, user_id, list(dict.fromkeys(drop_ids)))
