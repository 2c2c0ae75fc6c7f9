"""Request bodies for the HTTP API.

Pydantic handles type coercion and shape checks at the boundary; business
rules stay in the services. Update bodies map fields the client actually
sent onto the domain's presence-aware request models.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from coverdrop_app.models.drop import DropCreationRequest, DropUpdateRequest
from coverdrop_app.models.fields import UNSET
from coverdrop_app.models.insurance import ClaimRequest, DamageType, PolicyRequest, ProductType
from coverdrop_app.models.profile import (
    NotificationPreference,
    PreferenceKind,
    UserProfileUpdateRequest,
)


class PolicyCreate(BaseModel):
    product_type: ProductType
    product_label: str | None = Field(None, max_length=100)
    product_name: str = Field(min_length=1, max_length=200)
    product_model: str = Field("", max_length=200)
    purchase_date: date
    purchase_price: Decimal = Field(gt=0)
    serial_number: str = Field("", max_length=200)
    coverage_amount: Decimal = Field(gt=0)

    def to_domain(self) -> PolicyRequest:
        return PolicyRequest(
            product_type=self.product_type,
            product_label=self.product_label,
            product_name=self.product_name,
            product_model=self.product_model,
            purchase_date=self.purchase_date,
            purchase_price=self.purchase_price,
            serial_number=self.serial_number,
            coverage_amount=self.coverage_amount,
        )


class ClaimCreate(BaseModel):
    description: str = Field(min_length=1, max_length=5000)
    damage_type: DamageType
    damage_label: str | None = Field(None, max_length=100)
    claim_amount: Decimal = Field(gt=0)
    evidence: list[str] = Field(default_factory=list)

    def to_domain(self, policy_id: int) -> ClaimRequest:
        return ClaimRequest(
            policy_id=policy_id,
            description=self.description,
            damage_type=self.damage_type,
            damage_label=self.damage_label,
            claim_amount=self.claim_amount,
            evidence=list(self.evidence),
        )


class ClaimDecision(BaseModel):
    approved: bool


class DropCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str = Field("", max_length=5000)
    token_symbol: str = Field(min_length=1, max_length=32)
    network: str = Field(min_length=1, max_length=64)
    total_supply: int = Field(ge=0)
    price: Decimal | None = Field(None, ge=0)
    start_time: int
    end_time: int | None = None
    website_url: str | None = None
    image_url: str | None = None

    def to_domain(self) -> DropCreationRequest:
        return DropCreationRequest(**self.model_dump())


def _presence_kwargs(body: BaseModel) -> dict:
    """Keep only the fields the client sent; the rest stay UNSET."""
    return {name: getattr(body, name) for name in body.model_fields_set}


class DropUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    token_symbol: str | None = None
    network: str | None = None
    total_supply: int | None = Field(None, ge=0)
    price: Decimal | None = Field(None, ge=0)
    start_time: int | None = None
    end_time: int | None = None
    website_url: str | None = None
    image_url: str | None = None
    is_active: bool | None = None

    def to_domain(self) -> DropUpdateRequest:
        return DropUpdateRequest(**_presence_kwargs(self))


class PreferenceBody(BaseModel):
    kind: PreferenceKind
    values: list[str] = Field(default_factory=list)

    def to_domain(self) -> NotificationPreference:
        return NotificationPreference(self.kind, frozenset(self.values))


class ProfileUpdate(BaseModel):
    notification_preference: PreferenceBody | None = None
    email_notifications: bool | None = None
    push_notifications: bool | None = None
    email: str | None = Field(None, max_length=320)

    def to_domain(self) -> UserProfileUpdateRequest:
        kwargs = _presence_kwargs(self)
        preference = kwargs.get("notification_preference", UNSET)
        if isinstance(preference, PreferenceBody):
            kwargs["notification_preference"] = preference.to_domain()
        return UserProfileUpdateRequest(**kwargs)
