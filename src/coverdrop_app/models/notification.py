"""Notification inbox models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class Notification:
    id: int
    user_id: str
    drop_id: int
    title: str
    message: str
    created_at: int
    is_read: bool = False

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "drop_id": self.drop_id,
            "title": self.title,
            "message": self.message,
            "created_at": self.created_at,
            "is_read": self.is_read,
        }

    @classmethod
    def from_record(cls, row: dict[str, Any]) -> "Notification":
        return cls(
            id=int(row["id"]),
            user_id=row["user_id"],
            drop_id=int(row["drop_id"]),
            title=row["title"],
            message=row["message"],
            created_at=int(row["created_at"]),
            is_read=bool(row["is_read"]),
        )


@dataclass
class NotificationInbox:
    """Caller's notifications with the unread count taken before any flip."""

    notifications: list[Notification]
    unread_count: int
