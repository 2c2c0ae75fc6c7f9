"""Policy ledger service: policies, their claims, and lifecycle transitions."""

from __future__ import annotations

import json
import logging

from coverdrop_app.core.errors import (
    InvalidInputError,
    NotAuthorizedError,
    NotFoundError,
    SystemFailureError,
)
from coverdrop_app.core.ports import PaymentProcessor
from coverdrop_app.core.premium import calculate_premium
from coverdrop_app.core.timeutil import COVERAGE_TERM_NS, Clock, system_clock, to_utc_date
from coverdrop_app.core.validation import (
    validate_choice,
    validate_optional_label,
    validate_positive_amount,
    validate_purchase_date,
    validate_required_text,
)
from coverdrop_app.models.insurance import (
    OPEN_CLAIM_STATUSES,
    Claim,
    ClaimRequest,
    ClaimStatus,
    Coverage,
    DamageType,
    InsurancePolicy,
    PolicyRequest,
    PolicyStatus,
    ProductDetails,
    ProductType,
)
from coverdrop_app.repositories.audit_repository import AuditRepository
from coverdrop_app.repositories.kv_store import KeyValueStore
from coverdrop_app.repositories.policy_repository import PolicyRepository

logger = logging.getLogger(__name__)

RENEWABLE_STATUSES = frozenset({PolicyStatus.ACTIVE, PolicyStatus.EXPIRED})


class PolicyService:
    """Coordinates policy and claim use cases.

    Every mutating call validates first and then writes inside one store
    transaction, so a raised error never leaves a half-applied change.
    """

    def __init__(
        self,
        store: KeyValueStore,
        policy_repo: PolicyRepository,
        audit_repo: AuditRepository,
        payment_processor: PaymentProcessor,
        clock: Clock = system_clock,
        adjudicators: frozenset[str] = frozenset(),
    ):
        self._store = store
        self._policy_repo = policy_repo
        self._audit_repo = audit_repo
        self._payments = payment_processor
        self._clock = clock
        self._adjudicators = adjudicators

    def _validate(self, request: PolicyRequest) -> PolicyRequest:
        product_type = validate_choice(ProductType, request.product_type, "product_type")
        return PolicyRequest(
            product_type=product_type,
            product_label=validate_optional_label(
                product_type is ProductType.OTHER, request.product_label, "product_label"
            ),
            product_name=validate_required_text(request.product_name, "product_name"),
            product_model=(request.product_model or "").strip(),
            purchase_date=validate_purchase_date(request.purchase_date, to_utc_date(self._clock())),
            purchase_price=validate_positive_amount(request.purchase_price, "purchase_price"),
            serial_number=(request.serial_number or "").strip(),
            coverage_amount=validate_positive_amount(request.coverage_amount, "coverage_amount"),
        )

    def _require_policy(self, policy_id: int) -> InsurancePolicy:
        policy = self._policy_repo.get_policy(policy_id)
        if policy is None:
            raise NotFoundError("policy", policy_id)
        return policy

    def _require_owned(self, caller: str, policy_id: int) -> InsurancePolicy:
        policy = self._require_policy(policy_id)
        if policy.owner != caller:
            raise NotAuthorizedError("Only the policy owner may perform this action.")
        return policy

    @staticmethod
    def _require_active(policy: InsurancePolicy) -> None:
        if policy.status is not PolicyStatus.ACTIVE:
            raise InvalidInputError(f"Policy {policy.id} is {policy.status.value}, not active.")

    def _audit(self, action: str, entity_id: int, caller: str | None, event: str, **payload) -> None:
        self._audit_repo.add_log(
            action,
            "policy",
            entity_id,
            json.dumps({"event": event, **payload}, ensure_ascii=False),
            caller=caller,
        )

    def quote_premium(self, request: PolicyRequest) -> str:
        """Return the monthly premium a request would be charged, as a string."""
        validated = self._validate(request)
        return str(
            calculate_premium(
                validated.product_type, validated.purchase_price, validated.coverage_amount
            )
        )

    def create_policy(self, caller: str, request: PolicyRequest) -> int:
        """Price, persist, and index a new active policy; return its id."""
        validated = self._validate(request)
        premium = calculate_premium(
            validated.product_type, validated.purchase_price, validated.coverage_amount
        )

        with self._store.transaction():
            policy_id = self._policy_repo.next_policy_id()
            now = self._clock()
            policy = InsurancePolicy(
                id=policy_id,
                owner=caller,
                product_type=validated.product_type,
                product_label=validated.product_label,
                product=ProductDetails(
                    name=validated.product_name,
                    model=validated.product_model,
                    purchase_date=validated.purchase_date,
                    purchase_price=validated.purchase_price,
                    serial_number=validated.serial_number,
                ),
                coverage=Coverage(
                    start_time=now,
                    end_time=now + COVERAGE_TERM_NS,
                    coverage_amount=validated.coverage_amount,
                    monthly_premium=premium,
                ),
                status=PolicyStatus.ACTIVE,
                created_at=now,
            )
            self._policy_repo.save_policy(policy)
            self._policy_repo.add_owner_policy(caller, policy_id)
            self._audit(
                "CREATE",
                policy_id,
                caller,
                "policy created",
                product_type=policy.product_type.value,
                coverage_amount=str(policy.coverage.coverage_amount),
                monthly_premium=str(premium),
            )

        logger.info(
            "Policy %s created with premium %s",
            policy_id,
            premium,
            extra={"caller": caller, "entity": "policy", "entity_id": policy_id},
        )
        return policy_id

    def get_policy(self, policy_id: int) -> InsurancePolicy:
        """Fetch one policy by id."""
        return self._require_policy(policy_id)

    def get_my_policies(self, caller: str) -> list[InsurancePolicy]:
        """List the caller's policies, newest first, skipping dangling ids."""
        policies: list[InsurancePolicy] = []
        for policy_id in self._policy_repo.list_owner_policy_ids(caller):
            policy = self._policy_repo.get_policy(policy_id)
            if policy is not None:
                policies.append(policy)
        return policies

    def submit_claim(self, caller: str, request: ClaimRequest) -> int:
        """Append a submitted claim to an active policy owned by the caller."""
        damage_type = validate_choice(DamageType, request.damage_type, "damage_type")
        description = validate_required_text(request.description, "description")
        damage_label = validate_optional_label(
            damage_type is DamageType.OTHER, request.damage_label, "damage_label"
        )
        amount = validate_positive_amount(request.claim_amount, "claim_amount")
        evidence = [item.strip() for item in request.evidence if item and item.strip()]

        with self._store.transaction():
            policy = self._require_policy(request.policy_id)
            # Checked before ownership so an over-coverage claim is rejected for any caller.
            if amount > policy.coverage.coverage_amount:
                raise InvalidInputError(
                    "Claim amount exceeds the policy coverage amount.", "claim_amount"
                )
            if policy.owner != caller:
                raise NotAuthorizedError("Only the policy owner may submit claims.")
            self._require_active(policy)

            claim = Claim(
                id=self._policy_repo.next_claim_id(),
                policy_id=policy.id,
                description=description,
                damage_type=damage_type,
                damage_label=damage_label,
                claim_amount=amount,
                evidence=evidence,
                status=ClaimStatus.SUBMITTED,
                submitted_at=self._clock(),
            )
            policy.claims.append(claim)
            self._policy_repo.save_policy(policy)
            self._audit(
                "CLAIM",
                policy.id,
                caller,
                "claim submitted",
                claim_id=claim.id,
                claim_amount=str(amount),
            )

        logger.info(
            "Claim %s submitted against policy %s",
            claim.id,
            policy.id,
            extra={"caller": caller, "entity": "claim", "entity_id": claim.id},
        )
        return claim.id

    def process_claim(self, caller: str, policy_id: int, claim_id: int, approved: bool) -> None:
        """Approve or reject an open claim; approval marks the policy claimed."""
        if self._adjudicators:
            if caller not in self._adjudicators:
                raise NotAuthorizedError("Only configured adjudicators may process claims.")
        else:
            logger.warning(
                "Claim %s processed without adjudicator restriction",
                claim_id,
                extra={"caller": caller, "entity": "claim", "entity_id": claim_id},
            )

        with self._store.transaction():
            policy = self._require_policy(policy_id)
            claim = policy.find_claim(claim_id)
            if claim is None:
                raise NotFoundError("claim", claim_id)
            if claim.status not in OPEN_CLAIM_STATUSES:
                raise InvalidInputError(f"Claim {claim_id} is already {claim.status.value}.")
            if approved and policy.status is not PolicyStatus.ACTIVE:
                raise InvalidInputError(
                    f"Policy {policy_id} is {policy.status.value} and cannot be claimed."
                )

            claim.status = ClaimStatus.APPROVED if approved else ClaimStatus.REJECTED
            if claim.resolved_at is None:
                claim.resolved_at = self._clock()
            if approved:
                policy.status = PolicyStatus.CLAIMED
            self._policy_repo.save_policy(policy)
            self._audit(
                "UPDATE",
                policy.id,
                caller,
                "claim processed",
                claim_id=claim_id,
                claim_status=claim.status.value,
                policy_status=policy.status.value,
            )

    def pay_premium(self, caller: str, policy_id: int) -> None:
        """Hand an owner's premium payment to the payment processor."""
        with self._store.transaction():
            policy = self._require_owned(caller, policy_id)
            self._require_active(policy)
            if not self._payments.process_payment(policy, caller):
                raise SystemFailureError(f"Payment for policy {policy_id} was not acknowledged.")
            self._audit(
                "PAYMENT",
                policy.id,
                caller,
                "premium paid",
                amount=str(policy.coverage.monthly_premium),
            )

    def renew_policy(self, caller: str, policy_id: int) -> None:
        """Restart a fresh coverage year for an active or expired policy."""
        with self._store.transaction():
            policy = self._require_owned(caller, policy_id)
            if policy.status not in RENEWABLE_STATUSES:
                raise InvalidInputError(
                    f"Policy {policy_id} is {policy.status.value} and cannot be renewed."
                )
            now = self._clock()
            policy.coverage.start_time = now
            policy.coverage.end_time = now + COVERAGE_TERM_NS
            previous = policy.status
            policy.status = PolicyStatus.ACTIVE
            self._policy_repo.save_policy(policy)
            self._audit(
                "UPDATE",
                policy.id,
                caller,
                "policy renewed",
                previous_status=previous.value,
                end_time=policy.coverage.end_time,
            )

    def cancel_policy(self, caller: str, policy_id: int) -> None:
        """Cancel an active policy."""
        with self._store.transaction():
            policy = self._require_owned(caller, policy_id)
            self._require_active(policy)
            policy.status = PolicyStatus.CANCELLED
            self._policy_repo.save_policy(policy)
            self._audit("UPDATE", policy.id, caller, "policy cancelled")

    def expire_due_policies(self) -> int:
        """Move active policies whose coverage has ended to expired."""
        expired = 0
        with self._store.transaction():
            now = self._clock()
            for policy in list(self._policy_repo.iter_policies()):
                if policy.status is PolicyStatus.ACTIVE and policy.coverage.end_time <= now:
                    policy.status = PolicyStatus.EXPIRED
                    self._policy_repo.save_policy(policy)
                    self._audit("UPDATE", policy.id, None, "policy expired")
                    expired += 1
        if expired:
            logger.info("Expired %s policies", expired)
        return expired
