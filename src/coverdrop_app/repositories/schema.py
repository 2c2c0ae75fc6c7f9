"""Database schema management."""

from __future__ import annotations

from coverdrop_app.repositories.db_pool import ThreadLocalConnection

POLICIES = "policies"
DROPS = "drops"
PROFILES = "profiles"
NOTIFICATIONS = "notifications"
USER_POLICIES = "user_policies"
USER_SUBSCRIPTIONS = "user_subscriptions"

POLICY_COUNTER = "policy"
CLAIM_COUNTER = "claim"
DROP_COUNTER = "drop"
NOTIFICATION_COUNTER = "notification"


def initialize_schema(pool: ThreadLocalConnection) -> None:
    """Create required tables and indexes if they do not exist."""
    pool.execute(
        """
        CREATE TABLE IF NOT EXISTS records (
            collection TEXT NOT NULL,
            record_key TEXT NOT NULL,
            body TEXT NOT NULL,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (collection, record_key)
        )
        """
    )

    pool.execute(
        """
        CREATE TABLE IF NOT EXISTS counters (
            name TEXT PRIMARY KEY,
            value INTEGER NOT NULL
        )
        """
    )

    pool.execute(
        """
        CREATE TABLE IF NOT EXISTS audit_logs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            action TEXT NOT NULL,
            entity TEXT NOT NULL,
            entity_id TEXT,
            caller TEXT,
            detail TEXT,
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
        """
    )

    pool.execute("CREATE INDEX IF NOT EXISTS idx_audit_logs_created_at ON audit_logs(created_at)")
    pool.execute("CREATE INDEX IF NOT EXISTS idx_audit_logs_entity ON audit_logs(entity, entity_id)")
