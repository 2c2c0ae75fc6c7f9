"""Profile store behaviour."""

from __future__ import annotations

import json

import pytest

from coverdrop_app.core.errors import InvalidInputError, NotFoundError
from coverdrop_app.core.timeutil import NANOS_PER_SECOND
from coverdrop_app.models.profile import (
    NotificationPreference,
    PreferenceKind,
    UserProfileUpdateRequest,
)
from coverdrop_app.repositories.db_pool import ThreadLocalConnection
from coverdrop_app.repositories.kv_store import KeyValueStore
from coverdrop_app.repositories.schema import PROFILES


def test_get_my_profile_before_creation(container) -> None:
    with pytest.raises(NotFoundError):
        container.profile_service.get_my_profile("alice")


def test_first_update_creates_profile_with_defaults(container, clock) -> None:
    profile = container.profile_service.create_or_update_profile(
        "alice", UserProfileUpdateRequest()
    )

    assert profile.notification_preference == NotificationPreference.all()
    assert profile.email_notifications is True
    assert profile.push_notifications is True
    assert profile.email is None
    assert profile.created_at == clock.now
    assert container.profile_service.get_my_profile("alice") == profile


def test_partial_update_merges_fields(container, clock) -> None:
    service = container.profile_service
    service.create_or_update_profile("alice", UserProfileUpdateRequest(email="alice@example.com"))
    created_at = clock.now
    clock.advance(5 * NANOS_PER_SECOND)

    updated = service.create_or_update_profile(
        "alice",
        UserProfileUpdateRequest(
            notification_preference=NotificationPreference.specific_tokens({" ETH ", "SOL"}),
            push_notifications=False,
        ),
    )

    assert updated.notification_preference.kind is PreferenceKind.SPECIFIC_TOKENS
    assert updated.notification_preference.values == frozenset({"ETH", "SOL"})
    assert updated.push_notifications is False
    assert updated.email_notifications is True
    assert updated.email == "alice@example.com"
    assert updated.created_at == created_at
    assert updated.last_updated == clock.now


def test_email_can_be_cleared(container) -> None:
    service = container.profile_service
    service.create_or_update_profile("alice", UserProfileUpdateRequest(email="alice@example.com"))

    assert service.create_or_update_profile("alice", UserProfileUpdateRequest(email=None)).email is None


def test_invalid_updates_are_rejected(container) -> None:
    service = container.profile_service

    with pytest.raises(InvalidInputError):
        service.create_or_update_profile("alice", UserProfileUpdateRequest(email="nope"))
    with pytest.raises(InvalidInputError):
        service.create_or_update_profile(
            "alice", UserProfileUpdateRequest(email_notifications=None)
        )
    with pytest.raises(NotFoundError):
        service.get_my_profile("alice")


def test_email_is_encrypted_at_rest_and_masked_in_audit(container, config) -> None:
    container.profile_service.create_or_update_profile(
        "alice", UserProfileUpdateRequest(email="alice@example.com")
    )

    raw = KeyValueStore(ThreadLocalConnection(config)).get(PROFILES, "alice")
    assert "email" not in raw
    assert "alice@example.com" not in json.dumps(raw)

    log = container.audit_repo.list_logs(entity="profile", entity_id="alice")[0]
    assert log["action"] == "CREATE"
    assert json.loads(log["detail"])["email"] == "a****@example.com"
