"""Insurance policy and claim domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any


class ProductType(str, Enum):
    PHONE = "phone"
    LAPTOP = "laptop"
    TABLET = "tablet"
    OTHER = "other"


class PolicyStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"
    CLAIMED = "claimed"


class DamageType(str, Enum):
    PHYSICAL = "physical"
    THEFT = "theft"
    MALFUNCTION = "malfunction"
    OTHER = "other"


class ClaimStatus(str, Enum):
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"


OPEN_CLAIM_STATUSES = frozenset({ClaimStatus.SUBMITTED, ClaimStatus.UNDER_REVIEW})


@dataclass(frozen=True)
class ProductDetails:
    """Declared product facts; never change after the policy is created."""

    name: str
    model: str
    purchase_date: date
    purchase_price: Decimal
    serial_number: str


@dataclass
class Coverage:
    """Coverage window and pricing; replaced only by renewal."""

    start_time: int
    end_time: int
    coverage_amount: Decimal
    monthly_premium: Decimal


@dataclass
class Claim:
    id: int
    policy_id: int
    description: str
    damage_type: DamageType
    damage_label: str | None
    claim_amount: Decimal
    evidence: list[str]
    status: ClaimStatus
    submitted_at: int
    resolved_at: int | None = None

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "policy_id": self.policy_id,
            "description": self.description,
            "damage_type": self.damage_type.value,
            "damage_label": self.damage_label,
            "claim_amount": str(self.claim_amount),
            "evidence": list(self.evidence),
            "status": self.status.value,
            "submitted_at": self.submitted_at,
            "resolved_at": self.resolved_at,
        }

    @classmethod
    def from_record(cls, row: dict[str, Any]) -> "Claim":
        return cls(
            id=int(row["id"]),
            policy_id=int(row["policy_id"]),
            description=row["description"],
            damage_type=DamageType(row["damage_type"]),
            damage_label=row.get("damage_label"),
            claim_amount=Decimal(row["claim_amount"]),
            evidence=list(row.get("evidence") or []),
            status=ClaimStatus(row["status"]),
            submitted_at=int(row["submitted_at"]),
            resolved_at=row.get("resolved_at"),
        )


@dataclass
class InsurancePolicy:
    id: int
    owner: str
    product_type: ProductType
    product_label: str | None
    product: ProductDetails
    coverage: Coverage
    status: PolicyStatus
    created_at: int
    claims: list[Claim] = field(default_factory=list)

    def find_claim(self, claim_id: int) -> Claim | None:
        for claim in self.claims:
            if claim.id == claim_id:
                return claim
        return None

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner": self.owner,
            "product_type": self.product_type.value,
            "product_label": self.product_label,
            "product": {
                "name": self.product.name,
                "model": self.product.model,
                "purchase_date": self.product.purchase_date.isoformat(),
                "purchase_price": str(self.product.purchase_price),
                "serial_number": self.product.serial_number,
            },
            "coverage": {
                "start_time": self.coverage.start_time,
                "end_time": self.coverage.end_time,
                "coverage_amount": str(self.coverage.coverage_amount),
                "monthly_premium": str(self.coverage.monthly_premium),
            },
            "status": self.status.value,
            "created_at": self.created_at,
            "claims": [claim.to_record() for claim in self.claims],
        }

    @classmethod
    def from_record(cls, row: dict[str, Any]) -> "InsurancePolicy":
        product = row["product"]
        coverage = row["coverage"]
        return cls(
            id=int(row["id"]),
            owner=row["owner"],
            product_type=ProductType(row["product_type"]),
            product_label=row.get("product_label"),
            product=ProductDetails(
                name=product["name"],
                model=product["model"],
                purchase_date=date.fromisoformat(product["purchase_date"]),
                purchase_price=Decimal(product["purchase_price"]),
                serial_number=product["serial_number"],
            ),
            coverage=Coverage(
                start_time=int(coverage["start_time"]),
                end_time=int(coverage["end_time"]),
                coverage_amount=Decimal(coverage["coverage_amount"]),
                monthly_premium=Decimal(coverage["monthly_premium"]),
            ),
            status=PolicyStatus(row["status"]),
            created_at=int(row["created_at"]),
            claims=[Claim.from_record(item) for item in row.get("claims") or []],
        )


@dataclass
class PolicyRequest:
    """Input model for creating a policy."""

    product_type: ProductType
    product_name: str
    product_model: str
    purchase_date: date
    purchase_price: Decimal
    serial_number: str
    coverage_amount: Decimal
    product_label: str | None = None


@dataclass
class ClaimRequest:
    """Input model for submitting a claim."""

    policy_id: int
    description: str
    damage_type: DamageType
    claim_amount: Decimal
    evidence: list[str] = field(default_factory=list)
    damage_label: str | None = None
