"""Acknowledging payment adapter.

Satisfies the PaymentProcessor port without moving money; every premium
payment is acknowledged and logged.
"""

from __future__ import annotations

import logging

from coverdrop_app.models.insurance import InsurancePolicy

logger = logging.getLogger(__name__)


class AcknowledgingPaymentProcessor:
    """Stub settlement that always succeeds."""

    def process_payment(self, policy: InsurancePolicy, payer: str) -> bool:
        logger.info(
            "Premium payment acknowledged for policy %s (%s)",
            policy.id,
            policy.coverage.monthly_premium,
            extra={"caller": payer, "entity": "policy", "entity_id": policy.id},
        )
        return True
