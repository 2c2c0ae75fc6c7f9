"""Policy ledger endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from coverdrop_app.api.dependencies import get_container, require_caller
from coverdrop_app.api.schemas import ClaimCreate, ClaimDecision, PolicyCreate
from coverdrop_app.core.container import ServiceContainer

router = APIRouter(prefix="/api/v1", tags=["policies"])


@router.post("/premiums/quote")
def quote_premium(body: PolicyCreate, container: ServiceContainer = Depends(get_container)):
    premium = container.policy_service.quote_premium(body.to_domain())
    return {"monthly_premium": premium}


@router.post("/policies", status_code=status.HTTP_201_CREATED)
def create_policy(
    body: PolicyCreate,
    caller: str = Depends(require_caller),
    container: ServiceContainer = Depends(get_container),
):
    policy_id = container.policy_service.create_policy(caller, body.to_domain())
    return {"id": policy_id}


@router.get("/policies/mine")
def get_my_policies(
    caller: str = Depends(require_caller),
    container: ServiceContainer = Depends(get_container),
):
    return [policy.to_record() for policy in container.policy_service.get_my_policies(caller)]


@router.get("/policies/{policy_id}")
def get_policy(policy_id: int, container: ServiceContainer = Depends(get_container)):
    return container.policy_service.get_policy(policy_id).to_record()


@router.post("/policies/{policy_id}/claims", status_code=status.HTTP_201_CREATED)
def submit_claim(
    policy_id: int,
    body: ClaimCreate,
    caller: str = Depends(require_caller),
    container: ServiceContainer = Depends(get_container),
):
    claim_id = container.policy_service.submit_claim(caller, body.to_domain(policy_id))
    return {"id": claim_id}


@router.post("/policies/{policy_id}/claims/{claim_id}/decision", status_code=status.HTTP_204_NO_CONTENT)
def process_claim(
    policy_id: int,
    claim_id: int,
    body: ClaimDecision,
    caller: str = Depends(require_caller),
    container: ServiceContainer = Depends(get_container),
):
    container.policy_service.process_claim(caller, policy_id, claim_id, body.approved)


@router.post("/policies/{policy_id}/payments", status_code=status.HTTP_204_NO_CONTENT)
def pay_premium(
    policy_id: int,
    caller: str = Depends(require_caller),
    container: ServiceContainer = Depends(get_container),
):
    container.policy_service.pay_premium(caller, policy_id)


@router.post("/policies/{policy_id}/renew", status_code=status.HTTP_204_NO_CONTENT)
def renew_policy(
    policy_id: int,
    caller: str = Depends(require_caller),
    container: ServiceContainer = Depends(get_container),
):
    container.policy_service.renew_policy(caller, policy_id)


@router.post("/policies/{policy_id}/cancel", status_code=status.HTTP_204_NO_CONTENT)
def cancel_policy(
    policy_id: int,
    caller: str = Depends(require_caller),
    container: ServiceContainer = Depends(get_container),
):
    container.policy_service.cancel_policy(caller, policy_id)
