"""Drop subscription endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from coverdrop_app.api.dependencies import get_container, require_caller
from coverdrop_app.core.container import ServiceContainer

router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])


@router.get("")
def get_my_subscriptions(
    caller: str = Depends(require_caller),
    container: ServiceContainer = Depends(get_container),
):
    drops = container.subscription_service.get_my_subscriptions(caller)
    return [drop.to_record() for drop in drops]


@router.put("/{drop_id}")
def subscribe(
    drop_id: int,
    caller: str = Depends(require_caller),
    container: ServiceContainer = Depends(get_container),
):
    created = container.subscription_service.subscribe(caller, drop_id)
    return {"drop_id": drop_id, "subscribed": True, "created": created}


@router.delete("/{drop_id}", status_code=status.HTTP_204_NO_CONTENT)
def unsubscribe(
    drop_id: int,
    caller: str = Depends(require_caller),
    container: ServiceContainer = Depends(get_container),
):
    container.subscription_service.unsubscribe(caller, drop_id)
