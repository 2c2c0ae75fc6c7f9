"""Token drop domain models."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from coverdrop_app.models.fields import UNSET


@dataclass
class TokenDrop:
    id: int
    name: str
    description: str
    token_symbol: str
    network: str
    total_supply: int
    price: Decimal | None
    start_time: int
    end_time: int | None
    website_url: str | None
    image_url: str | None
    created_at: int
    creator: str
    is_active: bool

    def is_live(self, now: int) -> bool:
        """Active, started, and not yet ended at ``now``."""
        if not self.is_active or self.start_time > now:
            return False
        return self.end_time is None or self.end_time > now

    def is_upcoming(self, now: int) -> bool:
        return self.is_active and self.start_time > now

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "token_symbol": self.token_symbol,
            "network": self.network,
            "total_supply": self.total_supply,
            "price": None if self.price is None else str(self.price),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "website_url": self.website_url,
            "image_url": self.image_url,
            "created_at": self.created_at,
            "creator": self.creator,
            "is_active": self.is_active,
        }

    @classmethod
    def from_record(cls, row: dict[str, Any]) -> "TokenDrop":
        return cls(
            id=int(row["id"]),
            name=row["name"],
            description=row["description"],
            token_symbol=row["token_symbol"],
            network=row["network"],
            total_supply=int(row["total_supply"]),
            price=None if row.get("price") is None else Decimal(row["price"]),
            start_time=int(row["start_time"]),
            end_time=row.get("end_time"),
            website_url=row.get("website_url"),
            image_url=row.get("image_url"),
            created_at=int(row["created_at"]),
            creator=row["creator"],
            is_active=bool(row["is_active"]),
        )


@dataclass
class DropCreationRequest:
    """Input model for announcing a drop."""

    name: str
    description: str
    token_symbol: str
    network: str
    total_supply: int
    start_time: int
    price: Decimal | None = None
    end_time: int | None = None
    website_url: str | None = None
    image_url: str | None = None


@dataclass
class DropUpdateRequest:
    """Partial update; ``UNSET`` fields are left unchanged.

    ``price``, ``end_time``, ``website_url`` and ``image_url`` may be set to
    ``None`` to clear them.
    """

    name: Any = UNSET
    description: Any = UNSET
    token_symbol: Any = UNSET
    network: Any = UNSET
    total_supply: Any = UNSET
    price: Any = UNSET
    start_time: Any = UNSET
    end_time: Any = UNSET
    website_url: Any = UNSET
    image_url: Any = UNSET
    is_active: Any = UNSET
