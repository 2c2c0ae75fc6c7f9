"""Drop catalog endpoints.

Fixed paths (``active``, ``upcoming``) are declared before ``/{drop_id}`` so
they are not captured as ids.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from coverdrop_app.api.dependencies import get_container, require_caller
from coverdrop_app.api.schemas import DropCreate, DropUpdate
from coverdrop_app.core.container import ServiceContainer
from coverdrop_app.models.drop import TokenDrop

router = APIRouter(prefix="/api/v1/drops", tags=["drops"])


def _records(drops: list[TokenDrop]) -> list[dict]:
    return [drop.to_record() for drop in drops]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_drop(
    body: DropCreate,
    caller: str = Depends(require_caller),
    container: ServiceContainer = Depends(get_container),
):
    drop_id = container.drop_service.create_drop(caller, body.to_domain())
    return {"id": drop_id}


@router.get("/active")
def get_active_drops(container: ServiceContainer = Depends(get_container)):
    return _records(container.drop_service.get_active_drops())


@router.get("/upcoming")
def get_upcoming_drops(container: ServiceContainer = Depends(get_container)):
    return _records(container.drop_service.get_upcoming_drops())


@router.get("/network/{network}")
def get_drops_by_network(network: str, container: ServiceContainer = Depends(get_container)):
    return _records(container.drop_service.get_drops_by_network(network))


@router.get("/token/{token_symbol}")
def get_drops_by_token(token_symbol: str, container: ServiceContainer = Depends(get_container)):
    return _records(container.drop_service.get_drops_by_token(token_symbol))


@router.get("/{drop_id}")
def get_drop(drop_id: int, container: ServiceContainer = Depends(get_container)):
    return container.drop_service.get_drop(drop_id).to_record()


@router.patch("/{drop_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_drop(
    drop_id: int,
    body: DropUpdate,
    caller: str = Depends(require_caller),
    container: ServiceContainer = Depends(get_container),
):
    container.drop_service.update_drop(caller, drop_id, body.to_domain())
