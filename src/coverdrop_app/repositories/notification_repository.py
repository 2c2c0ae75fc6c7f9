"""Notification repository."""

from __future__ import annotations

from coverdrop_app.models.notification import Notification
from coverdrop_app.repositories.kv_store import KeyValueStore
from coverdrop_app.repositories.schema import NOTIFICATION_COUNTER, NOTIFICATIONS


class NotificationRepository:
    """Handles notification persistence."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def next_notification_id(self) -> int:
        return self._store.next_id(NOTIFICATION_COUNTER)

    def get_notification(self, notification_id: int) -> Notification | None:
        row = self._store.get(NOTIFICATIONS, notification_id)
        return Notification.from_record(row) if row else None

    def save_notification(self, notification: Notification) -> None:
        self._store.put(NOTIFICATIONS, notification.id, notification.to_record())

    def list_for_user(self, user_id: str) -> list[Notification]:
        """Return a user's notifications, newest first."""
        items = [
            Notification.from_record(row)
            for _, row in self._store.iterate(NOTIFICATIONS)
            if row["user_id"] == user_id
        ]
        items.sort(key=lambda item: item.id, reverse=True)
        return items
