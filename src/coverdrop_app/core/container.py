"""Application dependency container."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from coverdrop_app.adapters.channel_dispatcher import LoggingChannelDispatcher
from coverdrop_app.adapters.payment_gateway import AcknowledgingPaymentProcessor
from coverdrop_app.core.config import AppConfig, ensure_runtime_keys, get_required_env, load_config
from coverdrop_app.core.crypto import CryptoService
from coverdrop_app.core.ports import ChannelDispatcher, PaymentProcessor
from coverdrop_app.core.timeutil import Clock, system_clock
from coverdrop_app.repositories.audit_repository import AuditRepository
from coverdrop_app.repositories.db_pool import ThreadLocalConnection
from coverdrop_app.repositories.drop_repository import DropRepository
from coverdrop_app.repositories.kv_store import KeyValueStore
from coverdrop_app.repositories.notification_repository import NotificationRepository
from coverdrop_app.repositories.policy_repository import PolicyRepository
from coverdrop_app.repositories.profile_repository import ProfileRepository
from coverdrop_app.repositories.schema import initialize_schema
from coverdrop_app.repositories.subscription_repository import SubscriptionRepository
from coverdrop_app.services.drop_service import DropService
from coverdrop_app.services.fanout_service import FanoutService
from coverdrop_app.services.notification_service import NotificationService
from coverdrop_app.services.policy_service import PolicyService
from coverdrop_app.services.profile_service import ProfileService
from coverdrop_app.services.subscription_service import SubscriptionService


@dataclass
class ServiceContainer:
    """Wires repositories and services."""

    config: AppConfig
    policy_service: PolicyService
    drop_service: DropService
    subscription_service: SubscriptionService
    profile_service: ProfileService
    notification_service: NotificationService
    fanout_service: FanoutService
    audit_repo: AuditRepository
    pool: ThreadLocalConnection

    def close(self) -> None:
        self.fanout_service.shutdown()
        self.pool.close_all()


def wire_services(
    config: AppConfig,
    crypto: CryptoService,
    clock: Clock = system_clock,
    payment_processor: PaymentProcessor | None = None,
    channel_dispatcher: ChannelDispatcher | None = None,
) -> ServiceContainer:
    """Build repositories and services over an initialized database."""
    pool = ThreadLocalConnection(config)
    initialize_schema(pool)
    store = KeyValueStore(pool)

    audit_repo = AuditRepository(pool)
    policy_repo = PolicyRepository(store)
    drop_repo = DropRepository(store)
    profile_repo = ProfileRepository(store, crypto)
    subscription_repo = SubscriptionRepository(store)
    notification_repo = NotificationRepository(store)

    executor = None
    if config.notifications.fanout_mode == "background":
        executor = ThreadPoolExecutor(
            max_workers=config.notifications.fanout_workers,
            thread_name_prefix="fanout",
        )

    notification_service = NotificationService(store, notification_repo, clock)
    fanout_service = FanoutService(
        store,
        profile_repo,
        notification_service,
        channel_dispatcher or LoggingChannelDispatcher(),
        executor,
    )

    return ServiceContainer(
        config=config,
        policy_service=PolicyService(
            store,
            policy_repo,
            audit_repo,
            payment_processor or AcknowledgingPaymentProcessor(),
            clock,
            config.claims.adjudicators,
        ),
        drop_service=DropService(store, drop_repo, audit_repo, fanout_service, clock),
        subscription_service=SubscriptionService(
            store, subscription_repo, drop_repo, notification_service, audit_repo
        ),
        profile_service=ProfileService(store, profile_repo, audit_repo, clock),
        notification_service=notification_service,
        fanout_service=fanout_service,
        audit_repo=audit_repo,
        pool=pool,
    )


def build_container(config: AppConfig | None = None) -> ServiceContainer:
    """Resolve keys for the configured database and wire the service graph."""
    config = config or load_config()
    ensure_runtime_keys(config.database.path)
    encryption_key = get_required_env(config.encryption.key_env)
    crypto = CryptoService.from_base64_key(encryption_key)
    return wire_services(config, crypto)
