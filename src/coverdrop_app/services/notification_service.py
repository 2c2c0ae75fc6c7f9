"""Notification inbox service."""

from __future__ import annotations

from dataclasses import replace

from coverdrop_app.core.errors import NotAuthorizedError, NotFoundError
from coverdrop_app.core.timeutil import Clock, system_clock
from coverdrop_app.models.notification import Notification, NotificationInbox
from coverdrop_app.repositories.kv_store import KeyValueStore
from coverdrop_app.repositories.notification_repository import NotificationRepository


class NotificationService:
    """Per-user inbox with read/unread state."""

    def __init__(
        self,
        store: KeyValueStore,
        notification_repo: NotificationRepository,
        clock: Clock = system_clock,
    ):
        self._store = store
        self._notification_repo = notification_repo
        self._clock = clock

    def record(self, user_id: str, drop_id: int, title: str, message: str) -> Notification:
        """Store a new unread notification. Joins the caller's transaction."""
        with self._store.transaction():
            notification = Notification(
                id=self._notification_repo.next_notification_id(),
                user_id=user_id,
                drop_id=drop_id,
                title=title,
                message=message,
                created_at=self._clock(),
            )
            self._notification_repo.save_notification(notification)
        return notification

    def get_my_notifications(self, caller: str, mark_as_read: bool = False) -> NotificationInbox:
        """Return the caller's inbox, newest first.

        The unread count and the returned items reflect the state before
        ``mark_as_read`` flips anything.
        """
        with self._store.transaction():
            notifications = self._notification_repo.list_for_user(caller)
            unread = [item for item in notifications if not item.is_read]
            if mark_as_read:
                for item in unread:
                    self._notification_repo.save_notification(replace(item, is_read=True))
        return NotificationInbox(notifications=notifications, unread_count=len(unread))

    def mark_notification_as_read(self, caller: str, notification_id: int) -> None:
        """Mark one of the caller's notifications as read. Idempotent."""
        with self._store.transaction():
            notification = self._notification_repo.get_notification(notification_id)
            if notification is None:
                raise NotFoundError("notification", notification_id)
            if notification.user_id != caller:
                raise NotAuthorizedError("Notification belongs to another user.")
            if notification.is_read:
                return
            notification.is_read = True
            self._notification_repo.save_notification(notification)
