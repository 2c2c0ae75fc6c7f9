"""Audit log repository."""

from __future__ import annotations

from typing import Any

from coverdrop_app.repositories.db_pool import ThreadLocalConnection


class AuditRepository:
    """Persists mutation audit logs alongside the records they describe."""

    def __init__(self, pool: ThreadLocalConnection):
        self._pool = pool

    def add_log(
        self,
        action: str,
        entity: str,
        entity_id: int | str | None,
        detail: str,
        caller: str | None = None,
    ) -> None:
        """Insert an audit log record."""
        self._pool.execute(
            """
            INSERT INTO audit_logs (action, entity, entity_id, caller, detail)
            VALUES (?, ?, ?, ?, ?)
            """,
            (action, entity, None if entity_id is None else str(entity_id), caller, detail),
        )

    def cleanup_old_logs(self, retention_days: int) -> int:
        """Delete logs older than retention_days and return removed row count."""
        cursor = self._pool.execute(
            """
            DELETE FROM audit_logs
            WHERE created_at < datetime('now', ?)
            """,
            (f"-{retention_days} days",),
        )
        return cursor.rowcount

    def list_logs(
        self,
        limit: int = 200,
        entity: str | None = None,
        entity_id: int | str | None = None,
        action: str | None = None,
    ) -> list[dict[str, Any]]:
        """List audit logs, newest first, with optional filters."""
        where_clauses: list[str] = []
        params: list[Any] = []

        if entity:
            where_clauses.append("entity = ?")
            params.append(entity)
        if entity_id is not None:
            where_clauses.append("entity_id = ?")
            params.append(str(entity_id))
        if action:
            where_clauses.append("action = ?")
            params.append(action)

        where_sql = ""
        if where_clauses:
            where_sql = "WHERE " + " AND ".join(where_clauses)

        rows = self._pool.fetchall(
            f"""
            SELECT id, action, entity, entity_id, caller, detail, created_at
            FROM audit_logs
            {where_sql}
            ORDER BY id DESC
            LIMIT ?
            """,
            tuple(params + [limit]),
        )
        return [dict(row) for row in rows]
