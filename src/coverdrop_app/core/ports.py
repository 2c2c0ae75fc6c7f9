"""Ports for external collaborators.

Payment settlement and push/email delivery live outside this service. The
services only depend on these contracts so real integrations can be swapped
in without touching business rules.
"""

from __future__ import annotations

from typing import Protocol

from coverdrop_app.models.insurance import InsurancePolicy
from coverdrop_app.models.notification import Notification
from coverdrop_app.models.profile import UserProfile


class PaymentProcessor(Protocol):
    """Settles a premium payment for a policy."""

    def process_payment(self, policy: InsurancePolicy, payer: str) -> bool:
        ...


class ChannelDispatcher(Protocol):
    """Delivers a recorded notification to the recipient's enabled channels."""

    def deliver(self, profile: UserProfile, notification: Notification) -> None:
        ...
