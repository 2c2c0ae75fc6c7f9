"""Notification fan-out for new and newly activated drops."""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future

from coverdrop_app.core.ports import ChannelDispatcher
from coverdrop_app.models.drop import TokenDrop
from coverdrop_app.models.notification import Notification
from coverdrop_app.models.profile import NotificationPreference, PreferenceKind, UserProfile
from coverdrop_app.repositories.kv_store import KeyValueStore
from coverdrop_app.repositories.profile_repository import ProfileRepository
from coverdrop_app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


def preference_matches(preference: NotificationPreference, drop: TokenDrop) -> bool:
    """Return True when a drop passes a user's notification filter.

    - ALL matches every drop.
    - SPECIFIC_TOKENS matches when the drop's token symbol is listed.
    - SPECIFIC_NETWORKS matches when the drop's network is listed.
    """
    if preference.kind is PreferenceKind.ALL:
        return True
    if preference.kind is PreferenceKind.SPECIFIC_TOKENS:
        return drop.token_symbol in preference.values
    if preference.kind is PreferenceKind.SPECIFIC_NETWORKS:
        return drop.network in preference.values
    return False


def build_drop_message(drop: TokenDrop) -> tuple[str, str]:
    """Return (title, message) announcing a drop."""
    title = f"New drop: {drop.name}"
    message = f"{drop.token_symbol} on {drop.network}. {drop.description}".strip()
    return title, message


class FanoutService:
    """Scans every profile and records one notification per matching user.

    Recipients are chosen when a drop is dispatched. With an executor the
    recording and delivery run as a background unit of work; the caller must
    only dispatch after its own transaction has committed.
    """

    def __init__(
        self,
        store: KeyValueStore,
        profile_repo: ProfileRepository,
        notification_service: NotificationService,
        dispatcher: ChannelDispatcher,
        executor: Executor | None = None,
    ):
        self._store = store
        self._profile_repo = profile_repo
        self._notifications = notification_service
        self._dispatcher = dispatcher
        self._executor = executor

    def matching_profiles(self, drop: TokenDrop) -> list[UserProfile]:
        return [
            profile
            for profile in self._profile_repo.iter_profiles()
            if preference_matches(profile.notification_preference, drop)
        ]

    def dispatch(self, drop: TokenDrop) -> Future | None:
        """Fan out now, or schedule it when running in background mode.

        Recipients are chosen from the profiles as they are at call time.
        Failures are logged and never reach the caller, whose drop is
        already committed.
        """
        try:
            recipients = self.matching_profiles(drop)
        except Exception:  # pylint: disable=broad-except
            self._log_failure(drop)
            return None
        if self._executor is None:
            self._broadcast_safely(drop, recipients)
            return None
        return self._executor.submit(self._broadcast_safely, drop, recipients)

    def broadcast(
        self, drop: TokenDrop, recipients: list[UserProfile] | None = None
    ) -> list[Notification]:
        """Record notifications for the recipients, then deliver them.

        Without an explicit recipient list every matching profile is used.
        """
        title, message = build_drop_message(drop)
        recorded: list[tuple[UserProfile, Notification]] = []
        with self._store.transaction():
            if recipients is None:
                recipients = self.matching_profiles(drop)
            for profile in recipients:
                notification = self._notifications.record(profile.user_id, drop.id, title, message)
                recorded.append((profile, notification))

        for profile, notification in recorded:
            self._deliver(profile, notification)

        logger.info(
            "Drop %s fanned out to %s users",
            drop.id,
            len(recorded),
            extra={"entity": "drop", "entity_id": drop.id, "recipients": len(recorded)},
        )
        return [notification for _, notification in recorded]

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)

    def _deliver(self, profile: UserProfile, notification: Notification) -> None:
        try:
            self._dispatcher.deliver(profile, notification)
        except Exception:  # pylint: disable=broad-except
            # Delivery is best-effort; the stored notification is the guarantee.
            logger.exception(
                "Channel delivery failed for notification %s",
                notification.id,
                extra={"entity": "notification", "entity_id": notification.id},
            )

    def _broadcast_safely(
        self, drop: TokenDrop, recipients: list[UserProfile]
    ) -> list[Notification]:
        try:
            return self.broadcast(drop, recipients)
        except Exception:  # pylint: disable=broad-except
            self._log_failure(drop)
            return []

    @staticmethod
    def _log_failure(drop: TokenDrop) -> None:
        logger.exception(
            "Fan-out failed for drop %s",
            drop.id,
            extra={"entity": "drop", "entity_id": drop.id},
        )
