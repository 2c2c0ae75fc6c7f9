"""Logging channel adapter.

Satisfies the ChannelDispatcher port by logging which channels a real
integration would use for each notification.
"""

from __future__ import annotations

import logging

from coverdrop_app.core.crypto import mask_email
from coverdrop_app.models.notification import Notification
from coverdrop_app.models.profile import UserProfile

logger = logging.getLogger(__name__)


def enabled_channels(profile: UserProfile) -> list[str]:
    """Return the channels a profile can be reached on."""
    channels: list[str] = []
    if profile.email_notifications and profile.email:
        channels.append("email")
    if profile.push_notifications:
        channels.append("push")
    return channels


class LoggingChannelDispatcher:
    """Delivery stub; records intent only."""

    def deliver(self, profile: UserProfile, notification: Notification) -> None:
        channels = enabled_channels(profile)
        if not channels:
            return
        logger.info(
            "Notification %s queued for %s via %s%s",
            notification.id,
            profile.user_id,
            ", ".join(channels),
            f" ({mask_email(profile.email)})" if "email" in channels else "",
            extra={"entity": "notification", "entity_id": notification.id},
        )
