"""Insurance policy repository."""

from __future__ import annotations

from typing import Iterator

from coverdrop_app.models.insurance import InsurancePolicy
from coverdrop_app.repositories.kv_store import KeyValueStore
from coverdrop_app.repositories.schema import (
    CLAIM_COUNTER,
    POLICIES,
    POLICY_COUNTER,
    USER_POLICIES,
)


class PolicyRepository:
    """Handles policy records and the owner -> policy ids index."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def next_policy_id(self) -> int:
        return self._store.next_id(POLICY_COUNTER)

    def next_claim_id(self) -> int:
        return self._store.next_id(CLAIM_COUNTER)

    def get_policy(self, policy_id: int) -> InsurancePolicy | None:
        row = self._store.get(POLICIES, policy_id)
        return InsurancePolicy.from_record(row) if row else None

    def save_policy(self, policy: InsurancePolicy) -> None:
        self._store.put(POLICIES, policy.id, policy.to_record())

    def iter_policies(self) -> Iterator[InsurancePolicy]:
        for _, row in self._store.iterate(POLICIES):
            yield InsurancePolicy.from_record(row)

    def add_owner_policy(self, owner: str, policy_id: int) -> None:
        """Prepend a policy id so the index reads newest first."""
        policy_ids = self.list_owner_policy_ids(owner)
        self._store.put(USER_POLICIES, owner, [policy_id, *policy_ids])

    def list_owner_policy_ids(self, owner: str) -> list[int]:
        return [int(item) for item in self._store.get(USER_POLICIES, owner) or []]
