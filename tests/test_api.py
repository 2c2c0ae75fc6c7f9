"""HTTP surface tests through FastAPI's TestClient."""

from __future__ import annotations

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from coverdrop_app.api.app import create_app
from coverdrop_app.core.timeutil import NANOS_PER_DAY, NANOS_PER_SECOND

START_NS = 1_767_225_600 * NANOS_PER_SECOND

POLICY_BODY = {
    "product_type": "laptop",
    "product_name": "ThinkPad",
    "product_model": "X1 Carbon",
    "purchase_date": "2025-06-01",
    "purchase_price": "1000",
    "serial_number": "SN-001",
    "coverage_amount": "1500",
}

DROP_BODY = {
    "name": "Genesis Mint",
    "description": "First public mint",
    "token_symbol": "ETH",
    "network": "ethereum",
    "total_supply": 10000,
    "price": "0.05",
    "start_time": START_NS - NANOS_PER_DAY,
    "website_url": "https://genesis.example",
}


def as_user(user_id: str) -> dict[str, str]:
    return {"X-Caller-Id": user_id}


@pytest.fixture
def client(container):
    with TestClient(create_app(container)) as test_client:
        yield test_client


def test_health(client) -> None:
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_mutations_require_caller(client) -> None:
    response = client.post("/api/v1/policies", json=POLICY_BODY)

    assert response.status_code == 401
    assert response.json()["detail"]["error"]["code"] == "CALLER_REQUIRED"


def test_policy_lifecycle(client) -> None:
    created = client.post("/api/v1/policies", json=POLICY_BODY, headers=as_user("alice"))
    assert created.status_code == 201
    policy_id = created.json()["id"]

    policy = client.get(f"/api/v1/policies/{policy_id}").json()
    assert policy["owner"] == "alice"
    assert Decimal(policy["coverage"]["monthly_premium"]) == Decimal("39")
    assert policy["coverage"]["end_time"] - policy["coverage"]["start_time"] == 365 * NANOS_PER_DAY

    mine = client.get("/api/v1/policies/mine", headers=as_user("alice")).json()
    assert [item["id"] for item in mine] == [policy_id]

    claim = client.post(
        f"/api/v1/policies/{policy_id}/claims",
        json={"description": "Cracked screen", "damage_type": "physical", "claim_amount": "200"},
        headers=as_user("alice"),
    )
    assert claim.status_code == 201
    claim_id = claim.json()["id"]

    decision = client.post(
        f"/api/v1/policies/{policy_id}/claims/{claim_id}/decision",
        json={"approved": True},
        headers=as_user("adjuster"),
    )
    assert decision.status_code == 204
    assert client.get(f"/api/v1/policies/{policy_id}").json()["status"] == "claimed"

    again = client.post(
        f"/api/v1/policies/{policy_id}/claims/{claim_id}/decision",
        json={"approved": True},
        headers=as_user("adjuster"),
    )
    assert again.status_code == 400
    assert again.json()["error"]["code"] == "INVALID_INPUT"


def test_policy_errors_map_to_status_codes(client) -> None:
    policy_id = client.post(
        "/api/v1/policies", json=POLICY_BODY, headers=as_user("alice")
    ).json()["id"]

    missing = client.get("/api/v1/policies/999")
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "NOT_FOUND"

    forbidden = client.post(f"/api/v1/policies/{policy_id}/cancel", headers=as_user("bob"))
    assert forbidden.status_code == 403
    assert forbidden.json()["error"]["code"] == "NOT_AUTHORIZED"

    over = client.post(
        "/api/v1/policies",
        json={**POLICY_BODY, "coverage_amount": "5000"},
        headers=as_user("alice"),
    )
    assert over.status_code == 400
    assert over.json()["error"]["code"] == "INVALID_COVERAGE"


def test_request_validation_errors(client) -> None:
    response = client.post(
        "/api/v1/policies",
        json={**POLICY_BODY, "product_type": "toaster"},
        headers=as_user("alice"),
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"][0]["field"] == "body.product_type"


def test_premium_quote(client) -> None:
    response = client.post("/api/v1/premiums/quote", json=POLICY_BODY)

    assert response.status_code == 200
    assert Decimal(response.json()["monthly_premium"]) == Decimal("39")


def test_payment_renew_and_cancel(client, payments) -> None:
    policy_id = client.post(
        "/api/v1/policies", json=POLICY_BODY, headers=as_user("alice")
    ).json()["id"]

    assert client.post(f"/api/v1/policies/{policy_id}/payments", headers=as_user("alice")).status_code == 204
    assert client.post(f"/api/v1/policies/{policy_id}/renew", headers=as_user("alice")).status_code == 204
    assert client.post(f"/api/v1/policies/{policy_id}/cancel", headers=as_user("alice")).status_code == 204
    assert payments.payments == [(policy_id, "alice")]

    renewed = client.post(f"/api/v1/policies/{policy_id}/renew", headers=as_user("alice"))
    assert renewed.status_code == 400


def test_drop_catalog(client) -> None:
    drop_id = client.post("/api/v1/drops", json=DROP_BODY, headers=as_user("issuer")).json()["id"]
    client.post(
        "/api/v1/drops",
        json={**DROP_BODY, "name": "Later", "start_time": START_NS + NANOS_PER_DAY},
        headers=as_user("issuer"),
    )

    drop = client.get(f"/api/v1/drops/{drop_id}").json()
    assert drop["creator"] == "issuer"
    assert drop["price"] == "0.05"

    assert [item["id"] for item in client.get("/api/v1/drops/active").json()] == [drop_id]
    assert [item["name"] for item in client.get("/api/v1/drops/upcoming").json()] == ["Later"]
    assert len(client.get("/api/v1/drops/network/ethereum").json()) == 2
    assert client.get("/api/v1/drops/token/SOL").json() == []


def test_drop_patch_uses_field_presence(client) -> None:
    drop_id = client.post("/api/v1/drops", json=DROP_BODY, headers=as_user("issuer")).json()["id"]

    cleared = client.patch(
        f"/api/v1/drops/{drop_id}",
        json={"price": None, "total_supply": 42},
        headers=as_user("issuer"),
    )
    assert cleared.status_code == 204

    drop = client.get(f"/api/v1/drops/{drop_id}").json()
    assert drop["price"] is None
    assert drop["total_supply"] == 42
    assert drop["website_url"] == "https://genesis.example"

    refused = client.patch(
        f"/api/v1/drops/{drop_id}", json={"name": None}, headers=as_user("issuer")
    )
    assert refused.status_code == 400

    stranger = client.patch(
        f"/api/v1/drops/{drop_id}", json={"name": "Mine now"}, headers=as_user("mallory")
    )
    assert stranger.status_code == 403


def test_profile_subscription_and_inbox_flow(client) -> None:
    profile = client.put(
        "/api/v1/profile",
        json={
            "notification_preference": {"kind": "specific_tokens", "values": ["ETH"]},
            "email": "alice@example.com",
        },
        headers=as_user("alice"),
    )
    assert profile.status_code == 200
    assert profile.json()["notification_preference"] == {
        "kind": "specific_tokens",
        "values": ["ETH"],
    }
    assert client.get("/api/v1/profile", headers=as_user("bob")).status_code == 404

    drop_id = client.post("/api/v1/drops", json=DROP_BODY, headers=as_user("issuer")).json()["id"]

    subscribed = client.put(f"/api/v1/subscriptions/{drop_id}", headers=as_user("alice"))
    assert subscribed.json()["created"] is True
    assert client.put(f"/api/v1/subscriptions/{drop_id}", headers=as_user("alice")).json()["created"] is False
    assert [item["id"] for item in client.get("/api/v1/subscriptions", headers=as_user("alice")).json()] == [drop_id]

    inbox = client.get(
        "/api/v1/notifications", params={"mark_as_read": "true"}, headers=as_user("alice")
    ).json()
    assert inbox["unread_count"] == 2
    assert [item["title"] for item in inbox["notifications"]] == [
        "Subscribed to Genesis Mint",
        "New drop: Genesis Mint",
    ]
    assert client.get("/api/v1/notifications", headers=as_user("alice")).json()["unread_count"] == 0

    notification_id = inbox["notifications"][0]["id"]
    foreign = client.post(f"/api/v1/notifications/{notification_id}/read", headers=as_user("bob"))
    assert foreign.status_code == 403

    assert client.delete(f"/api/v1/subscriptions/{drop_id}", headers=as_user("alice")).status_code == 204
    assert client.delete(f"/api/v1/subscriptions/{drop_id}", headers=as_user("bob")).status_code == 404
