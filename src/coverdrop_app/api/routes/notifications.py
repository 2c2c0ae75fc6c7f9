"""Notification inbox endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from coverdrop_app.api.dependencies import get_container, require_caller
from coverdrop_app.core.container import ServiceContainer

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


@router.get("")
def get_my_notifications(
    mark_as_read: bool = False,
    caller: str = Depends(require_caller),
    container: ServiceContainer = Depends(get_container),
):
    inbox = container.notification_service.get_my_notifications(caller, mark_as_read)
    return {
        "notifications": [item.to_record() for item in inbox.notifications],
        "unread_count": inbox.unread_count,
    }


@router.post("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
def mark_notification_as_read(
    notification_id: int,
    caller: str = Depends(require_caller),
    container: ServiceContainer = Depends(get_container),
):
    container.notification_service.mark_notification_as_read(caller, notification_id)
