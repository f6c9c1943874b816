"""
Query Execution Engine

DESIGN DECISION: Queries are READ-ONLY.
They run against the committed store and never save anything. Pending
entitlement is computed with the ledger's preview, the non-mutating twin
of settle, so asking "what am I owed?" cannot move a checkpoint.
"""

from typing import Optional

from receipt_engine.accounting import DistributionLedger, FixedPointAccumulator, MemberRegistry
from receipt_engine.accounting.fixed_point import checked_add
from receipt_engine.config import EngineSettings, get_settings
from receipt_engine.errors import InvalidLimit
from receipt_engine.models.ledger import Config, Ownership
from receipt_engine.models.messages import (
    GetConfig,
    GetLedger,
    GetMember,
    GetOwnership,
    GetPendingEntitlement,
    LedgerResponse,
    ListMembers,
    ListMembersResponse,
    MemberResponse,
    MemberWeight,
    PendingEntitlementResponse,
)
from receipt_engine.services.storage import KeyValueStore
from receipt_engine.state import CONFIG, OWNERSHIP


class QueryExecutionError(Exception):
    """Unknown query type."""
    pass


class QueryExecutor:
    """
    Executes queries against ledger storage.

    GUARANTEES:
    - Never writes to storage
    - Reports the state as of the last committed call
    """

    def __init__(
        self,
        store: KeyValueStore,
        settings: Optional[EngineSettings] = None,
    ):
        self._store = store
        self._settings = settings or get_settings().engine

    def _components(self) -> tuple[DistributionLedger, MemberRegistry]:
        config = CONFIG.load(self._store)
        ledger = DistributionLedger(self._store, FixedPointAccumulator(config.precision))
        return ledger, MemberRegistry(self._store, ledger)

    def execute(self, query):
        """Route a query to its handler."""
        if isinstance(query, GetLedger):
            return self.get_ledger()
        elif isinstance(query, GetMember):
            return self.get_member(query.identity)
        elif isinstance(query, GetPendingEntitlement):
            return self.get_pending_entitlement(query.identity)
        elif isinstance(query, ListMembers):
            return self.list_members(query.start_after, query.limit)
        elif isinstance(query, GetConfig):
            return self.get_config()
        elif isinstance(query, GetOwnership):
            return self.get_ownership()
        else:
            raise QueryExecutionError(f"Unsupported query: {type(query).__name__}")

    def get_ledger(self) -> LedgerResponse:
        ledger, _ = self._components()
        return LedgerResponse(**ledger.state.model_dump())

    def get_member(self, identity: str) -> MemberResponse:
        _, registry = self._components()
        return MemberResponse(**registry.get(identity).model_dump())

    def get_pending_entitlement(self, identity: str) -> PendingEntitlementResponse:
        """Settled-but-unpaid plus everything accrued since the checkpoint."""
        ledger, registry = self._components()
        member = registry.get(identity)
        amount = checked_add(member.settled, ledger.preview(member))
        return PendingEntitlementResponse(identity=identity, amount=amount)

    def list_members(
        self,
        start_after: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> ListMembersResponse:
        """
        One page of (identity, weight) pairs.

        A missing limit uses the default page size; limits above the
        maximum are clamped to it.
        """
        if limit is None:
            limit = self._settings.default_page_limit
        if limit < 1:
            raise InvalidLimit(f"Limit must be at least 1, got {limit}")
        limit = min(limit, self._settings.max_page_limit)

        _, registry = self._components()
        members, next_start_after = registry.list(start_after, limit)
        return ListMembersResponse(
            members=[MemberWeight(identity=m.identity, weight=m.weight) for m in members],
            next_start_after=next_start_after,
        )

    def get_config(self) -> Config:
        return CONFIG.load(self._store)

    def get_ownership(self) -> Ownership:
        return OWNERSHIP.load(self._store)
