"""
Shared fixtures for Receipt Engine tests

Test strategy:
1. Unit tests for the accounting core (fixed point, ledger, registry)
2. Integration tests for the orchestrator against in-memory services
3. Property tests for conservation over randomized call sequences
4. No real host: in-memory store, bank and audit sink stand in for it
"""

import pytest

from receipt_engine.config import EngineSettings
from receipt_engine.models import (
    Claim,
    Coin,
    Deposit,
    Denomination,
    GetLedger,
    GetPendingEntitlement,
    InstantiateMsg,
    MessageInfo,
    Register,
)
from receipt_engine.orchestrator import create_engine


ADMIN = "admin"
ACCOUNT = "receipt-engine"
DENOM = Denomination.native("ucoin")


class Harness:
    """Drives an engine the way a host would."""

    def __init__(self, engine, store, bank, sink):
        self.engine = engine
        self.store = store
        self.bank = bank
        self.sink = sink

    def register(self, identity: str, weight: int, sender: str = ADMIN):
        return self.engine.execute(
            MessageInfo(sender=sender),
            Register(identity=identity, weight=weight),
        )

    def deposit(self, amount: int, payer: str = "payer"):
        """Attach funds (the host moves them first) and deposit."""
        self.bank.mint(DENOM, payer, amount)
        self.bank.send(DENOM, payer, ACCOUNT, amount)
        return self.engine.execute(
            MessageInfo(sender=payer, funds=[Coin(denom=DENOM.reference, amount=amount)]),
            Deposit(),
        )

    def claim(self, identity: str):
        return self.engine.execute(MessageInfo(sender=identity), Claim())

    def pending(self, identity: str) -> int:
        return self.engine.query(GetPendingEntitlement(identity=identity)).amount

    def ledger(self):
        return self.engine.query(GetLedger())

    def balance(self, address: str) -> int:
        return self.bank.balance(DENOM, address)


@pytest.fixture
def settings() -> EngineSettings:
    return EngineSettings(
        precision_exponent=18,
        phase_policy="windowed",
        default_page_limit=10,
        max_page_limit=30,
    )


@pytest.fixture
def harness(settings) -> Harness:
    engine, store, bank, sink = create_engine(account=ACCOUNT, settings=settings)
    engine.instantiate(MessageInfo(sender=ADMIN), InstantiateMsg(denom=DENOM))
    return Harness(engine, store, bank, sink)
