"""Shared fixtures: a temporary database, a fixed clock, and recording fakes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

import pytest

from coverdrop_app.core.config import (
    DEFAULT_DB_KEY_ENV,
    AppConfig,
    ClaimsConfig,
    DatabaseConfig,
    EncryptionConfig,
    LoggingConfig,
    NotificationConfig,
)
from coverdrop_app.core.container import wire_services
from coverdrop_app.core.crypto import CryptoService
from coverdrop_app.core.timeutil import NANOS_PER_DAY
from coverdrop_app.models.drop import DropCreationRequest
from coverdrop_app.models.insurance import PolicyRequest, ProductType

# 2026-01-01T00:00:00Z
START_NS = 1_767_225_600 * 1_000_000_000


@dataclass
class FakeClock:
    now: int = START_NS

    def __call__(self) -> int:
        return self.now

    def advance(self, nanos: int) -> None:
        self.now += nanos


@dataclass
class RecordingPaymentProcessor:
    acknowledge: bool = True
    payments: list[tuple[int, str]] = field(default_factory=list)

    def process_payment(self, policy, payer: str) -> bool:
        self.payments.append((policy.id, payer))
        return self.acknowledge


@dataclass
class RecordingDispatcher:
    fail: bool = False
    delivered: list[tuple[str, int]] = field(default_factory=list)

    def deliver(self, profile, notification) -> None:
        if self.fail:
            raise ConnectionError("channel unavailable")
        self.delivered.append((profile.user_id, notification.id))


def build_config(tmp_path, fanout_mode: str = "sync", adjudicators=()) -> AppConfig:
    return AppConfig(
        database=DatabaseConfig(
            path=str(tmp_path / "test.db"),
            key_env=DEFAULT_DB_KEY_ENV,
            allow_sqlite_fallback=True,
        ),
        encryption=EncryptionConfig(key_env="COVERDROP_ENCRYPTION_KEY"),
        logging=LoggingConfig(retention_days=1095),
        claims=ClaimsConfig(adjudicators=frozenset(adjudicators)),
        notifications=NotificationConfig(fanout_mode=fanout_mode, fanout_workers=2),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def payments() -> RecordingPaymentProcessor:
    return RecordingPaymentProcessor()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def crypto() -> CryptoService:
    return CryptoService.from_base64_key(CryptoService.generate_base64_key())


@pytest.fixture
def make_container(tmp_path, monkeypatch, clock, payments, dispatcher, crypto):
    monkeypatch.setenv(DEFAULT_DB_KEY_ENV, "test-db-key")
    built = []

    def _make(fanout_mode: str = "sync", adjudicators=()):
        container = wire_services(
            build_config(tmp_path, fanout_mode, adjudicators),
            crypto,
            clock=clock,
            payment_processor=payments,
            channel_dispatcher=dispatcher,
        )
        built.append(container)
        return container

    yield _make
    for container in built:
        container.close()


@pytest.fixture
def container(make_container):
    return make_container()


@pytest.fixture
def config(tmp_path, monkeypatch) -> AppConfig:
    monkeypatch.setenv(DEFAULT_DB_KEY_ENV, "test-db-key")
    return build_config(tmp_path)


def policy_request(**overrides) -> PolicyRequest:
    values = {
        "product_type": ProductType.LAPTOP,
        "product_name": "ThinkPad",
        "product_model": "X1 Carbon",
        "purchase_date": date(2025, 6, 1),
        "purchase_price": Decimal("1000"),
        "serial_number": "SN-001",
        "coverage_amount": Decimal("1500"),
    }
    values.update(overrides)
    return PolicyRequest(**values)


def drop_request(**overrides) -> DropCreationRequest:
    values = {
        "name": "Genesis Mint",
        "description": "First public mint",
        "token_symbol": "ETH",
        "network": "ethereum",
        "total_supply": 10_000,
        "start_time": START_NS - NANOS_PER_DAY,
        "price": Decimal("0.05"),
    }
    values.update(overrides)
    return DropCreationRequest(**values)


@pytest.fixture
def new_policy_request():
    return policy_request


@pytest.fixture
def new_drop_request():
    return drop_request
