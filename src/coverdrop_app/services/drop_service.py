"""Drop catalog service."""

from __future__ import annotations

import json
import logging
from typing import Callable

from coverdrop_app.core.errors import InvalidInputError, NotAuthorizedError, NotFoundError
from coverdrop_app.core.timeutil import Clock, system_clock
from coverdrop_app.core.validation import (
    validate_optional_price,
    validate_required_text,
    validate_time_window,
    validate_total_supply,
)
from coverdrop_app.models.drop import DropCreationRequest, DropUpdateRequest, TokenDrop
from coverdrop_app.models.fields import UNSET, resolve
from coverdrop_app.repositories.audit_repository import AuditRepository
from coverdrop_app.repositories.drop_repository import DropRepository
from coverdrop_app.repositories.kv_store import KeyValueStore
from coverdrop_app.services.fanout_service import FanoutService

logger = logging.getLogger(__name__)

REQUIRED_UPDATE_FIELDS = (
    "name",
    "description",
    "token_symbol",
    "network",
    "total_supply",
    "start_time",
    "is_active",
)


def _optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


class DropService:
    """Coordinates drop announcements; only a drop's creator may change it."""

    def __init__(
        self,
        store: KeyValueStore,
        drop_repo: DropRepository,
        audit_repo: AuditRepository,
        fanout: FanoutService,
        clock: Clock = system_clock,
    ):
        self._store = store
        self._drop_repo = drop_repo
        self._audit_repo = audit_repo
        self._fanout = fanout
        self._clock = clock

    def _audit(self, action: str, drop_id: int, caller: str, event: str, **payload) -> None:
        self._audit_repo.add_log(
            action,
            "drop",
            drop_id,
            json.dumps({"event": event, **payload}, ensure_ascii=False),
            caller=caller,
        )

    def create_drop(self, caller: str, request: DropCreationRequest) -> int:
        """Validate, persist, and announce a new active drop; return its id."""
        name = validate_required_text(request.name, "name")
        token_symbol = validate_required_text(request.token_symbol, "token_symbol")
        network = validate_required_text(request.network, "network")
        total_supply = validate_total_supply(request.total_supply)
        price = validate_optional_price(request.price)
        validate_time_window(request.start_time, request.end_time)

        with self._store.transaction():
            drop = TokenDrop(
                id=self._drop_repo.next_drop_id(),
                name=name,
                description=(request.description or "").strip(),
                token_symbol=token_symbol,
                network=network,
                total_supply=total_supply,
                price=price,
                start_time=int(request.start_time),
                end_time=None if request.end_time is None else int(request.end_time),
                website_url=_optional_text(request.website_url),
                image_url=_optional_text(request.image_url),
                created_at=self._clock(),
                creator=caller,
                is_active=True,
            )
            self._drop_repo.save_drop(drop)
            self._audit(
                "CREATE",
                drop.id,
                caller,
                "drop created",
                token_symbol=token_symbol,
                network=network,
            )

        logger.info(
            "Drop %s created for %s on %s",
            drop.id,
            token_symbol,
            network,
            extra={"caller": caller, "entity": "drop", "entity_id": drop.id},
        )
        self._fanout.dispatch(drop)
        return drop.id

    def update_drop(self, caller: str, drop_id: int, request: DropUpdateRequest) -> None:
        """Apply a partial update; reactivating a drop announces it again."""
        for field_name in REQUIRED_UPDATE_FIELDS:
            if getattr(request, field_name) is None:
                raise InvalidInputError(f"{field_name} cannot be cleared.", field_name)

        with self._store.transaction():
            current = self._drop_repo.get_drop(drop_id)
            if current is None:
                raise NotFoundError("drop", drop_id)
            if current.creator != caller:
                raise NotAuthorizedError("Only the drop creator may update it.")

            updated = self._apply_update(current, request)
            self._drop_repo.save_drop(updated)
            before, after = current.to_record(), updated.to_record()
            changed = sorted(key for key in after if before[key] != after[key])
            self._audit("UPDATE", drop_id, caller, "drop updated", changes=changed)

        if not current.is_active and updated.is_active:
            logger.info(
                "Drop %s reactivated",
                drop_id,
                extra={"caller": caller, "entity": "drop", "entity_id": drop_id},
            )
            self._fanout.dispatch(updated)

    @staticmethod
    def _apply_update(current: TokenDrop, request: DropUpdateRequest) -> TokenDrop:
        def text(field_name: str, validator: Callable[[str], str] | None = None) -> str:
            value = resolve(getattr(current, field_name), getattr(request, field_name))
            return validator(value) if validator else (value or "").strip()

        start_time = int(resolve(current.start_time, request.start_time))
        end_time = resolve(current.end_time, request.end_time)
        end_time = None if end_time is None else int(end_time)
        validate_time_window(start_time, end_time)

        return TokenDrop(
            id=current.id,
            name=text("name", lambda value: validate_required_text(value, "name")),
            description=text("description"),
            token_symbol=text(
                "token_symbol", lambda value: validate_required_text(value, "token_symbol")
            ),
            network=text("network", lambda value: validate_required_text(value, "network")),
            total_supply=validate_total_supply(
                resolve(current.total_supply, request.total_supply)
            ),
            price=(
                current.price
                if request.price is UNSET
                else validate_optional_price(request.price)
            ),
            start_time=start_time,
            end_time=end_time,
            website_url=(
                current.website_url
                if request.website_url is UNSET
                else _optional_text(request.website_url)
            ),
            image_url=(
                current.image_url
                if request.image_url is UNSET
                else _optional_text(request.image_url)
            ),
            created_at=current.created_at,
            creator=current.creator,
            is_active=bool(resolve(current.is_active, request.is_active)),
        )

    def get_drop(self, drop_id: int) -> TokenDrop:
        """Fetch one drop by id."""
        drop = self._drop_repo.get_drop(drop_id)
        if drop is None:
            raise NotFoundError("drop", drop_id)
        return drop

    def get_active_drops(self) -> list[TokenDrop]:
        """Drops that are active, started, and not yet ended."""
        now = self._clock()
        return [drop for drop in self._drop_repo.iter_drops() if drop.is_live(now)]

    def get_upcoming_drops(self) -> list[TokenDrop]:
        """Active drops whose start time is still ahead."""
        now = self._clock()
        return [drop for drop in self._drop_repo.iter_drops() if drop.is_upcoming(now)]

    def get_drops_by_network(self, network: str) -> list[TokenDrop]:
        return [
            drop for drop in self._drop_repo.iter_drops()
            if drop.is_active and drop.network == network
        ]

    def get_drops_by_token(self, token_symbol: str) -> list[TokenDrop]:
        return [
            drop for drop in self._drop_repo.iter_drops()
            if drop.is_active and drop.token_symbol == token_symbol
        ]
