"""User profile and notification preference models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from coverdrop_app.models.fields import UNSET


class PreferenceKind(str, Enum):
    ALL = "all"
    SPECIFIC_TOKENS = "specific_tokens"
    SPECIFIC_NETWORKS = "specific_networks"


@dataclass(frozen=True)
class NotificationPreference:
    """Which drops a user wants to hear about.

    ``values`` holds token symbols or network ids depending on ``kind`` and
    is empty for ``ALL``.
    """

    kind: PreferenceKind = PreferenceKind.ALL
    values: frozenset[str] = frozenset()

    @classmethod
    def all(cls) -> "NotificationPreference":
        return cls(PreferenceKind.ALL, frozenset())

    @classmethod
    def specific_tokens(cls, symbols: set[str] | frozenset[str]) -> "NotificationPreference":
        return cls(PreferenceKind.SPECIFIC_TOKENS, frozenset(symbols))

    @classmethod
    def specific_networks(cls, networks: set[str] | frozenset[str]) -> "NotificationPreference":
        return cls(PreferenceKind.SPECIFIC_NETWORKS, frozenset(networks))

    def to_record(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "values": sorted(self.values)}

    @classmethod
    def from_record(cls, row: dict[str, Any]) -> "NotificationPreference":
        return cls(PreferenceKind(row["kind"]), frozenset(row.get("values") or []))


@dataclass
class UserProfile:
    user_id: str
    notification_preference: NotificationPreference
    email_notifications: bool
    push_notifications: bool
    email: str | None
    created_at: int
    last_updated: int

    def to_view(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "notification_preference": self.notification_preference.to_record(),
            "email_notifications": self.email_notifications,
            "push_notifications": self.push_notifications,
            "email": self.email,
            "created_at": self.created_at,
            "last_updated": self.last_updated,
        }


@dataclass
class UserProfileUpdateRequest:
    """Partial profile update; ``UNSET`` fields keep their current value.

    ``email=None`` clears a stored address.
    """

    notification_preference: Any = UNSET
    email_notifications: Any = UNSET
    push_notifications: Any = UNSET
    email: Any = UNSET
