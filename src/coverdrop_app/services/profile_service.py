"""Profile store service with merge-on-update semantics."""

from __future__ import annotations

import json

from coverdrop_app.core.crypto import mask_email
from coverdrop_app.core.errors import InvalidInputError, NotFoundError
from coverdrop_app.core.timeutil import Clock, system_clock
from coverdrop_app.core.validation import validate_email, validate_tag_set
from coverdrop_app.models.fields import UNSET, resolve
from coverdrop_app.models.profile import (
    NotificationPreference,
    PreferenceKind,
    UserProfile,
    UserProfileUpdateRequest,
)
from coverdrop_app.repositories.audit_repository import AuditRepository
from coverdrop_app.repositories.kv_store import KeyValueStore
from coverdrop_app.repositories.profile_repository import ProfileRepository


class ProfileService:
    """Coordinates profile use cases."""

    def __init__(
        self,
        store: KeyValueStore,
        profile_repo: ProfileRepository,
        audit_repo: AuditRepository,
        clock: Clock = system_clock,
    ):
        self._store = store
        self._profile_repo = profile_repo
        self._audit_repo = audit_repo
        self._clock = clock

    @staticmethod
    def _validate(request: UserProfileUpdateRequest) -> UserProfileUpdateRequest:
        for field_name in ("notification_preference", "email_notifications", "push_notifications"):
            if getattr(request, field_name) is None:
                raise InvalidInputError(f"{field_name} cannot be cleared.", field_name)

        preference = request.notification_preference
        if preference is not UNSET:
            values = validate_tag_set(preference.values, "notification_preference")
            if preference.kind is PreferenceKind.ALL:
                values = frozenset()
            preference = NotificationPreference(preference.kind, values)

        return UserProfileUpdateRequest(
            notification_preference=preference,
            email_notifications=(
                UNSET if request.email_notifications is UNSET else bool(request.email_notifications)
            ),
            push_notifications=(
                UNSET if request.push_notifications is UNSET else bool(request.push_notifications)
            ),
            email=UNSET if request.email is UNSET else validate_email(request.email),
        )

    def create_or_update_profile(
        self, caller: str, request: UserProfileUpdateRequest
    ) -> UserProfile:
        """Create the caller's profile or merge the supplied fields into it."""
        validated = self._validate(request)

        with self._store.transaction():
            now = self._clock()
            current = self._profile_repo.get_profile(caller)
            if current is None:
                current = UserProfile(
                    user_id=caller,
                    notification_preference=NotificationPreference.all(),
                    email_notifications=True,
                    push_notifications=True,
                    email=None,
                    created_at=now,
                    last_updated=now,
                )
                action = "CREATE"
            else:
                action = "UPDATE"

            profile = UserProfile(
                user_id=caller,
                notification_preference=resolve(
                    current.notification_preference, validated.notification_preference
                ),
                email_notifications=resolve(
                    current.email_notifications, validated.email_notifications
                ),
                push_notifications=resolve(current.push_notifications, validated.push_notifications),
                email=resolve(current.email, validated.email),
                created_at=current.created_at,
                last_updated=now,
            )
            self._profile_repo.save_profile(profile)
            self._audit_repo.add_log(
                action,
                "profile",
                caller,
                json.dumps(
                    {
                        "event": f"profile {action.lower()}d",
                        "preference": profile.notification_preference.kind.value,
                        "email": mask_email(profile.email),
                    },
                    ensure_ascii=False,
                ),
                caller=caller,
            )
        return profile

    def get_my_profile(self, caller: str) -> UserProfile:
        """Fetch the caller's profile."""
        profile = self._profile_repo.get_profile(caller)
        if profile is None:
            raise NotFoundError("profile", caller)
        return profile
