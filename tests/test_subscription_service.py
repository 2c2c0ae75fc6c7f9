"""Subscription registry behaviour."""

from __future__ import annotations

import pytest

from coverdrop_app.core.errors import NotFoundError


def test_subscribe_is_idempotent(container, new_drop_request) -> None:
    drop_id = container.drop_service.create_drop("issuer", new_drop_request())
    service = container.subscription_service

    assert service.subscribe("alice", drop_id) is True
    assert service.subscribe("alice", drop_id) is False

    assert [drop.id for drop in service.get_my_subscriptions("alice")] == [drop_id]
    inbox = container.notification_service.get_my_notifications("alice")
    assert [item.title for item in inbox.notifications] == ["Subscribed to Genesis Mint"]


def test_subscribe_to_unknown_drop(container) -> None:
    with pytest.raises(NotFoundError):
        container.subscription_service.subscribe("alice", 42)
    assert container.subscription_service.get_my_subscriptions("alice") == []


def test_subscriptions_keep_order(container, new_drop_request) -> None:
    first = container.drop_service.create_drop("issuer", new_drop_request())
    second = container.drop_service.create_drop("issuer", new_drop_request(name="Second"))
    service = container.subscription_service

    service.subscribe("alice", second)
    service.subscribe("alice", first)

    assert [drop.id for drop in service.get_my_subscriptions("alice")] == [second, first]


def test_unsubscribe(container, new_drop_request) -> None:
    first = container.drop_service.create_drop("issuer", new_drop_request())
    second = container.drop_service.create_drop("issuer", new_drop_request(name="Second"))
    service = container.subscription_service
    service.subscribe("alice", first)
    service.subscribe("alice", second)

    service.unsubscribe("alice", first)
    service.unsubscribe("alice", 999)

    assert [drop.id for drop in service.get_my_subscriptions("alice")] == [second]
    actions = [log["action"] for log in container.audit_repo.list_logs(entity="drop", entity_id=first)]
    assert actions[:2] == ["UNSUBSCRIBE", "SUBSCRIBE"]


def test_unsubscribe_without_any_subscription(container, new_drop_request) -> None:
    drop_id = container.drop_service.create_drop("issuer", new_drop_request())

    with pytest.raises(NotFoundError):
        container.subscription_service.unsubscribe("stranger", drop_id)


def test_emptied_subscription_set_still_exists(container, new_drop_request) -> None:
    drop_id = container.drop_service.create_drop("issuer", new_drop_request())
    service = container.subscription_service
    service.subscribe("alice", drop_id)
    service.unsubscribe("alice", drop_id)

    service.unsubscribe("alice", drop_id)
    assert service.get_my_subscriptions("alice") == []
