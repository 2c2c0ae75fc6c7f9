"""Caller profile endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from coverdrop_app.api.dependencies import get_container, require_caller
from coverdrop_app.api.schemas import ProfileUpdate
from coverdrop_app.core.container import ServiceContainer

router = APIRouter(prefix="/api/v1/profile", tags=["profile"])


@router.put("")
def create_or_update_profile(
    body: ProfileUpdate,
    caller: str = Depends(require_caller),
    container: ServiceContainer = Depends(get_container),
):
    return container.profile_service.create_or_update_profile(caller, body.to_domain()).to_view()


@router.get("")
def get_my_profile(
    caller: str = Depends(require_caller),
    container: ServiceContainer = Depends(get_container),
):
    return container.profile_service.get_my_profile(caller).to_view()
