"""Subscription registry service."""

from __future__ import annotations

import json

from coverdrop_app.core.errors import NotFoundError
from coverdrop_app.models.drop import TokenDrop
from coverdrop_app.repositories.audit_repository import AuditRepository
from coverdrop_app.repositories.drop_repository import DropRepository
from coverdrop_app.repositories.kv_store import KeyValueStore
from coverdrop_app.repositories.subscription_repository import SubscriptionRepository
from coverdrop_app.services.notification_service import NotificationService


class SubscriptionService:
    """Tracks which drops each user follows."""

    def __init__(
        self,
        store: KeyValueStore,
        subscription_repo: SubscriptionRepository,
        drop_repo: DropRepository,
        notification_service: NotificationService,
        audit_repo: AuditRepository,
    ):
        self._store = store
        self._subscription_repo = subscription_repo
        self._drop_repo = drop_repo
        self._notifications = notification_service
        self._audit_repo = audit_repo

    def subscribe(self, caller: str, drop_id: int) -> bool:
        """Subscribe to a drop. Returns False when already subscribed."""
        with self._store.transaction():
            drop = self._drop_repo.get_drop(drop_id)
            if drop is None:
                raise NotFoundError("drop", drop_id)

            drop_ids = self._subscription_repo.get_subscriptions(caller) or []
            if drop_id in drop_ids:
                return False

            self._subscription_repo.save_subscriptions(caller, [*drop_ids, drop_id])
            self._notifications.record(
                caller,
                drop_id,
                f"Subscribed to {drop.name}",
                f"You will receive updates about the {drop.token_symbol} drop on {drop.network}.",
            )
            self._audit_repo.add_log(
                "SUBSCRIBE",
                "drop",
                drop_id,
                json.dumps({"event": "subscribed"}),
                caller=caller,
            )
        return True

    def unsubscribe(self, caller: str, drop_id: int) -> None:
        """Remove a drop from the caller's set.

        Raises NotFoundError when the caller never subscribed to anything;
        removing a drop that is not in an existing set is a no-op.
        """
        with self._store.transaction():
            drop_ids = self._subscription_repo.get_subscriptions(caller)
            if drop_ids is None:
                raise NotFoundError("subscriptions", caller)
            if drop_id not in drop_ids:
                return
            self._subscription_repo.save_subscriptions(
                caller, [item for item in drop_ids if item != drop_id]
            )
            self._audit_repo.add_log(
                "UNSUBSCRIBE",
                "drop",
                drop_id,
                json.dumps({"event": "unsubscribed"}),
                caller=caller,
            )

    def get_my_subscriptions(self, caller: str) -> list[TokenDrop]:
        """Return subscribed drops, skipping ids whose drop record is gone."""
        drops: list[TokenDrop] = []
        for drop_id in self._subscription_repo.get_subscriptions(caller) or []:
            drop = self._drop_repo.get_drop(drop_id)
            if drop is not None:
                drops.append(drop)
        return drops
