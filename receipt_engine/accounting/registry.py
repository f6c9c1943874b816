"""
Member Registry

Creates, re-weights, removes and lists members.

RULES:
- A new member's checkpoint starts at the current accumulator, so it
  earns nothing from deposits made before it joined.
- Any weight change settles first. Entitlement earned under the old
  weight is frozen into member.settled before the new weight applies,
  so nothing is lost or re-priced.
- Listing is read-only and never used for deposit or claim accounting.

Authorization and phase rules are the orchestrator's job; the registry
assumes the caller already checked them.
"""

from typing import Iterator, Optional

from receipt_engine.accounting.distribution import DistributionLedger
from receipt_engine.accounting.fixed_point import checked_add
from receipt_engine.errors import AlreadyRegistered, InvalidLimit, InvalidWeight, NotFound
from receipt_engine.models.ledger import U128_MAX, Member
from receipt_engine.services.storage import KeyValueStore
from receipt_engine.state import MEMBERS


def validate_weight(weight) -> int:
    """Return weight if it is an unsigned 128-bit integer, else raise InvalidWeight."""
    if isinstance(weight, bool) or not isinstance(weight, int):
        raise InvalidWeight(f"Weight must be an integer, got {type(weight).__name__}")
    if weight < 0:
        raise InvalidWeight(f"Weight cannot be negative: {weight}")
    if weight > U128_MAX:
        raise InvalidWeight(f"Weight exceeds u128: {weight}")
    return weight


class MemberRegistry:
    """Member records for one call, backed by the call's store."""

    def __init__(self, store: KeyValueStore, ledger: DistributionLedger):
        self._store = store
        self._ledger = ledger

    def may_get(self, identity: str) -> Optional[Member]:
        return MEMBERS.may_load(self._store, identity)

    def get(self, identity: str) -> Member:
        member = self.may_get(identity)
        if member is None:
            raise NotFound(f"Member not registered: {identity}")
        return member

    def save(self, member: Member) -> None:
        MEMBERS.save(self._store, member.identity, member)

    def register(self, identity: str, weight: int) -> Member:
        """
        Add a member.

        Raises:
            AlreadyRegistered: identity is already a member
            InvalidWeight: weight is not a u128
        """
        validate_weight(weight)
        if MEMBERS.has(self._store, identity):
            raise AlreadyRegistered(f"Member already registered: {identity}")

        self._ledger.add_weight(weight)
        member = Member(
            identity=identity,
            weight=weight,
            last_accumulator=self._ledger.state.accumulator,
        )
        self.save(member)
        return member

    def reweight(self, identity: str, new_weight: int) -> tuple[Member, int, int]:
        """
        Change a member's weight after settling what it earned so far.

        Returns:
            (member, old_weight, settled_now)
        """
        validate_weight(new_weight)
        member = self.get(identity)
        old_weight = member.weight

        settled_now = self._ledger.settle(member)
        member.settled = checked_add(member.settled, settled_now)

        self._ledger.remove_weight(old_weight)
        self._ledger.add_weight(new_weight)
        member.weight = new_weight

        self.save(member)
        return member, old_weight, settled_now

    def deregister(self, identity: str) -> tuple[Member, int]:
        """
        Remove a member after settling it.

        Returns:
            (removed_member, unpaid) where unpaid is everything the member
            was still owed. The caller must pay it out in the same call.
        """
        member = self.get(identity)
        owed = self._ledger.settle(member)
        unpaid = checked_add(member.settled, owed)

        self._ledger.remove_weight(member.weight)
        MEMBERS.remove(self._store, identity)
        return member, unpaid

    def iter_members(self, start_after: Optional[str] = None) -> Iterator[Member]:
        """
        Lazily iterate members in ascending identity order.

        Each call is an independent scan, so a listing can be restarted
        from any identity.
        """
        for _, member in MEMBERS.range(self._store, start_after):
            yield member

    def list(
        self,
        start_after: Optional[str],
        limit: int,
    ) -> tuple[list[Member], Optional[str]]:
        """
        One page of members.

        Returns:
            (members, next_start_after). next_start_after is None once the
            listing is exhausted.
        """
        if limit < 1:
            raise InvalidLimit(f"Limit must be at least 1, got {limit}")

        page: list[Member] = []
        members = self.iter_members(start_after)
        for member in members:
            page.append(member)
            if len(page) == limit:
                break

        if len(page) < limit:
            return page, None
        # Only hand out a cursor if something follows it
        if next(members, None) is None:
            return page, None
        return page, page[-1].identity
