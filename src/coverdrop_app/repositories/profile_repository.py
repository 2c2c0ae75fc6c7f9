"""User profile repository with encrypted contact details."""

from __future__ import annotations

from typing import Any, Iterator

from coverdrop_app.core.crypto import CryptoService
from coverdrop_app.models.profile import NotificationPreference, UserProfile
from coverdrop_app.repositories.kv_store import KeyValueStore
from coverdrop_app.repositories.schema import PROFILES


class ProfileRepository:
    """Handles profile persistence; email addresses never hit disk in clear."""

    def __init__(self, store: KeyValueStore, crypto_service: CryptoService):
        self._store = store
        self._crypto = crypto_service

    def _to_row(self, profile: UserProfile) -> dict[str, Any]:
        return {
            "user_id": profile.user_id,
            "notification_preference": profile.notification_preference.to_record(),
            "email_notifications": profile.email_notifications,
            "push_notifications": profile.push_notifications,
            "email_encrypted": (
                self._crypto.encrypt_text(profile.email) if profile.email else None
            ),
            "created_at": profile.created_at,
            "last_updated": profile.last_updated,
        }

    def _from_row(self, row: dict[str, Any]) -> UserProfile:
        encrypted = row.get("email_encrypted")
        return UserProfile(
            user_id=row["user_id"],
            notification_preference=NotificationPreference.from_record(
                row["notification_preference"]
            ),
            email_notifications=bool(row["email_notifications"]),
            push_notifications=bool(row["push_notifications"]),
            email=self._crypto.decrypt_text(encrypted) if encrypted else None,
            created_at=int(row["created_at"]),
            last_updated=int(row["last_updated"]),
        )

    def get_profile(self, user_id: str) -> UserProfile | None:
        row = self._store.get(PROFILES, user_id)
        return self._from_row(row) if row else None

    def save_profile(self, profile: UserProfile) -> None:
        self._store.put(PROFILES, profile.user_id, self._to_row(profile))

    def iter_profiles(self) -> Iterator[UserProfile]:
        for _, row in self._store.iterate(PROFILES):
            yield self._from_row(row)
