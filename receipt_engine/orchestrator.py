"""
Main Orchestrator for Receipt Engine

This module ties together the accounting components and defines the
end-to-end flow of every call:

1. Open a transaction overlay over the host's store
2. Check authorization and phase rules
3. Apply the command to the ledger and member records (in the overlay)
4. Execute any outgoing transfer
5. Commit the overlay, then emit audit events

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is committed until every fallible step, including the external
  transfer, has succeeded. A failed transfer leaves no trace in state.
- Only the orchestrator mutates ledger, member and ownership records
- Every committed command and every rejection is audited
"""

from typing import Optional
from uuid import UUID

from receipt_engine import CONTRACT_NAME, __version__
from receipt_engine.accounting import (
    DistributionLedger,
    FixedPointAccumulator,
    MemberRegistry,
    checked_add,
)
from receipt_engine.audit import AuditLogger, InMemoryAuditSink, create_correlation_id
from receipt_engine.config import EngineSettings, get_settings
from receipt_engine.errors import (
    InvalidDenom,
    InvalidTransition,
    InvariantViolation,
    MissingPayment,
    NothingToClaim,
    ReceiptEngineError,
    Unauthorized,
)
from receipt_engine.models.audit import AuditEvent, AuditEventBuilder
from receipt_engine.models.ledger import (
    Config,
    DenomKind,
    GlobalLedger,
    Ownership,
    Phase,
    PhasePolicy,
)
from receipt_engine.models.messages import (
    Claim,
    Deposit,
    Deregister,
    InstantiateMsg,
    MessageInfo,
    Receive,
    Register,
    Response,
    Reweight,
    SetPhase,
    Transfer,
    UpdateOwnership,
)
from receipt_engine.queries import QueryExecutor
from receipt_engine.services.bank import InMemoryBank, TransferError, TransferInterface
from receipt_engine.services.storage import InMemoryStore, KeyValueStore, PendingStore
from receipt_engine.state import CONFIG, LEDGER, OWNERSHIP


class CallContext:
    """
    Everything one call works on.

    The ledger singleton, registry and ownership record are loaded from
    the call's own overlay; nothing is shared between calls.
    """

    def __init__(self, store: PendingStore, info: MessageInfo, correlation_id: UUID):
        self.store = store
        self.info = info
        self.correlation_id = correlation_id
        self.config: Config = CONFIG.load(store)
        self.ownership: Ownership = OWNERSHIP.load(store)
        self.ledger = DistributionLedger(store, FixedPointAccumulator(self.config.precision))
        self.registry = MemberRegistry(store, self.ledger)
        # Emitted only after commit
        self.events: list[AuditEvent] = []

    @property
    def sender(self) -> str:
        return self.info.sender


class ReceiptEngine:
    """
    Proportional-distribution ledger.

    Usage:
        engine = ReceiptEngine(store, bank)
        engine.instantiate(MessageInfo(sender="admin"), InstantiateMsg(denom=denom))
        engine.execute(MessageInfo(sender="admin"), Register(identity="alice", weight=1))
        engine.execute(MessageInfo(sender="payer", funds=[coin]), Deposit())
        engine.execute(MessageInfo(sender="alice"), Claim())
    """

    def __init__(
        self,
        store: KeyValueStore,
        bank: TransferInterface,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[EngineSettings] = None,
    ):
        self._store = store
        self._bank = bank
        self._audit_logger = audit_logger or AuditLogger()
        self._settings = settings or get_settings().engine

    # =========================================================================
    # ENTRY POINTS
    # =========================================================================

    def instantiate(self, info: MessageInfo, msg: InstantiateMsg) -> Response:
        """
        Write the Config, Ownership and GlobalLedger records.

        Precision and phase policy are fixed here for the life of the ledger.
        """
        correlation_id = create_correlation_id()
        if CONFIG.exists(self._store):
            error = Unauthorized("Ledger is already instantiated")
            self._audit_failure(info.sender, "instantiate", error, correlation_id)
            raise error

        policy = msg.phase_policy or PhasePolicy(self._settings.phase_policy)
        owner = msg.owner or info.sender

        tx = PendingStore(self._store)
        CONFIG.save(tx, Config(
            denom=msg.denom,
            precision=self._settings.precision,
            phase_policy=policy,
            contract_name=CONTRACT_NAME,
            contract_version=__version__,
        ))
        OWNERSHIP.save(tx, Ownership(owner=owner))
        LEDGER.save(tx, GlobalLedger())
        tx.commit()

        self._audit_logger.log_instantiated(
            actor=info.sender,
            owner=owner,
            denom=msg.denom.key,
            phase_policy=policy.value,
            correlation_id=correlation_id,
        )
        return (
            Response()
            .add_attribute("action", "instantiate")
            .add_attribute("owner", owner)
            .add_attribute("denom", msg.denom.key)
            .add_attribute("phase_policy", policy.value)
        )

    def execute(self, info: MessageInfo, msg) -> Response:
        """
        Run one command atomically.

        Raises:
            ReceiptEngineError: The command was refused or failed. State is
                                exactly as it was before the call.
        """
        correlation_id = create_correlation_id()
        command = getattr(msg, "type", type(msg).__name__)
        tx = PendingStore(self._store)

        try:
            ctx = CallContext(tx, info, correlation_id)
            response = self._dispatch(ctx, msg)
            self._execute_transfers(ctx, response)
        except Exception as e:
            tx.discard()
            self._audit_failure(info.sender, command, e, correlation_id)
            raise

        tx.commit()
        for event in ctx.events:
            self._audit_logger.log(event)
        return response

    def query(self, msg):
        """Answer a read-only query against committed state."""
        return QueryExecutor(self._store, self._settings).execute(msg)

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def _dispatch(self, ctx: CallContext, msg) -> Response:
        if isinstance(msg, Register):
            return self._register(ctx, msg)
        elif isinstance(msg, Reweight):
            return self._reweight(ctx, msg)
        elif isinstance(msg, Deregister):
            return self._deregister(ctx, msg)
        elif isinstance(msg, Deposit):
            return self._deposit_native(ctx)
        elif isinstance(msg, Receive):
            return self._deposit_token(ctx, msg)
        elif isinstance(msg, Claim):
            return self._claim(ctx)
        elif isinstance(msg, SetPhase):
            return self._set_phase(ctx, msg)
        elif isinstance(msg, UpdateOwnership):
            return self._update_ownership(ctx, msg)
        raise TypeError(f"Unsupported command: {type(msg).__name__}")

    def _execute_transfers(self, ctx: CallContext, response: Response) -> None:
        for transfer in response.transfers:
            self._bank.transfer(transfer.denom, transfer.recipient, transfer.amount)

    # =========================================================================
    # GUARDS
    # =========================================================================

    def _assert_owner(self, ctx: CallContext) -> None:
        owner = ctx.ownership.owner
        if owner is None:
            raise Unauthorized("Ownership has been renounced; no administrator can act")
        if ctx.sender != owner:
            raise Unauthorized(f"Caller {ctx.sender} is not the administrator")

    def _assert_open(self, ctx: CallContext) -> None:
        if ctx.ledger.state.phase != Phase.OPEN:
            raise Unauthorized("Membership changes are not allowed once the ledger is closed")

    # =========================================================================
    # MEMBERSHIP
    # =========================================================================

    def _register(self, ctx: CallContext, msg: Register) -> Response:
        self._assert_owner(ctx)
        self._assert_open(ctx)

        member = ctx.registry.register(msg.identity, msg.weight)
        ctx.ledger.save()

        ctx.events.append(AuditEventBuilder.member_registered(
            actor=ctx.sender,
            identity=member.identity,
            weight=member.weight,
            correlation_id=ctx.correlation_id,
        ))
        return (
            Response()
            .add_attribute("action", "register")
            .add_attribute("identity", member.identity)
            .add_attribute("weight", member.weight)
        )

    def _reweight(self, ctx: CallContext, msg: Reweight) -> Response:
        self._assert_owner(ctx)
        self._assert_open(ctx)

        member, old_weight, settled_now = ctx.registry.reweight(msg.identity, msg.weight)
        ctx.ledger.save()

        ctx.events.append(AuditEventBuilder.member_reweighted(
            actor=ctx.sender,
            identity=member.identity,
            old_weight=old_weight,
            new_weight=member.weight,
            settled=settled_now,
            correlation_id=ctx.correlation_id,
        ))
        return (
            Response()
            .add_attribute("action", "reweight")
            .add_attribute("identity", member.identity)
            .add_attribute("old_weight", old_weight)
            .add_attribute("weight", member.weight)
            .add_attribute("settled", settled_now)
        )

    def _deregister(self, ctx: CallContext, msg: Deregister) -> Response:
        """Remove a member, paying out everything it is still owed."""
        self._assert_owner(ctx)
        self._assert_open(ctx)

        member, unpaid = ctx.registry.deregister(msg.identity)
        response = (
            Response()
            .add_attribute("action", "deregister")
            .add_attribute("identity", member.identity)
            .add_attribute("paid_out", unpaid)
        )
        if unpaid > 0:
            ctx.ledger.record_claim(unpaid)
            response.transfers.append(Transfer(
                denom=ctx.config.denom,
                recipient=member.identity,
                amount=unpaid,
            ))
        ctx.ledger.save()

        ctx.events.append(AuditEventBuilder.member_deregistered(
            actor=ctx.sender,
            identity=member.identity,
            weight=member.weight,
            paid_out=unpaid,
            correlation_id=ctx.correlation_id,
        ))
        return response

    # =========================================================================
    # VALUE FLOW
    # =========================================================================

    def _deposit_native(self, ctx: CallContext) -> Response:
        """Deposit the attached native funds. Anyone may deposit."""
        denom = ctx.config.denom
        if denom.kind != DenomKind.NATIVE:
            raise InvalidDenom(
                f"Ledger distributes token {denom.reference}; deposit through the token contract"
            )
        if not ctx.info.funds:
            raise MissingPayment("Deposit requires attached funds")

        amount = 0
        for coin in ctx.info.funds:
            if coin.denom != denom.reference:
                raise InvalidDenom(f"Expected {denom.reference}, got {coin.denom}")
            amount = checked_add(amount, coin.amount)

        return self._deposit(ctx, depositor=ctx.sender, amount=amount)

    def _deposit_token(self, ctx: CallContext, msg: Receive) -> Response:
        """Deposit hook called by the token contract on behalf of msg.sender."""
        denom = ctx.config.denom
        if denom.kind != DenomKind.TOKEN or ctx.sender != denom.reference:
            raise InvalidDenom(f"Tokens from {ctx.sender} are not this ledger's denomination")
        if ctx.info.funds:
            raise InvalidDenom("Token deposits cannot carry native funds")

        return self._deposit(ctx, depositor=msg.sender, amount=msg.amount)

    def _deposit(self, ctx: CallContext, depositor: str, amount: int) -> Response:
        if amount == 0:
            raise MissingPayment("Deposit amount must be greater than zero")

        distributed = ctx.ledger.deposit(amount)
        ctx.ledger.save()

        ctx.events.append(AuditEventBuilder.deposit(
            actor=depositor,
            amount=amount,
            distributed=distributed,
            undistributed=ctx.ledger.state.undistributed,
            correlation_id=ctx.correlation_id,
        ))
        return (
            Response()
            .add_attribute("action", "deposit")
            .add_attribute("depositor", depositor)
            .add_attribute("amount", amount)
            .add_attribute("distributed", str(distributed).lower())
        )

    def _claim(self, ctx: CallContext) -> Response:
        """
        Pay the caller everything it is owed.

        The checkpoint advance and the transfer commit together: if the
        transfer fails, execute() discards the overlay and the member can
        claim the same amount again later.
        """
        member = ctx.registry.get(ctx.sender)
        owed = checked_add(member.settled, ctx.ledger.settle(member))
        if owed == 0:
            raise NothingToClaim(f"Nothing to claim for {member.identity}")

        member.settled = 0
        member.claimed = checked_add(member.claimed, owed)
        ctx.registry.save(member)
        ctx.ledger.record_claim(owed)
        ctx.ledger.save()

        ctx.events.append(AuditEventBuilder.claim_paid(
            identity=member.identity,
            amount=owed,
            denom=ctx.config.denom.key,
            correlation_id=ctx.correlation_id,
        ))
        response = (
            Response()
            .add_attribute("action", "claim")
            .add_attribute("identity", member.identity)
            .add_attribute("amount", owed)
        )
        response.transfers.append(Transfer(
            denom=ctx.config.denom,
            recipient=member.identity,
            amount=owed,
        ))
        return response

    # =========================================================================
    # ADMINISTRATION
    # =========================================================================

    def _set_phase(self, ctx: CallContext, msg: SetPhase) -> Response:
        """
        Open -> Closed only. Re-setting the current phase is a no-op.
        """
        self._assert_owner(ctx)
        current = ctx.ledger.state.phase
        response = (
            Response()
            .add_attribute("action", "set_phase")
            .add_attribute("phase", msg.phase.value)
        )
        if msg.phase == current:
            return response

        if current == Phase.CLOSED:
            raise InvalidTransition("A closed ledger cannot be reopened")
        if ctx.config.phase_policy == PhasePolicy.ALWAYS_OPEN:
            raise InvalidTransition("Phase policy keeps this ledger permanently open")

        ctx.ledger.state.phase = msg.phase
        ctx.ledger.save()
        ctx.events.append(AuditEventBuilder.phase_changed(
            actor=ctx.sender,
            old_phase=current.value,
            new_phase=msg.phase.value,
            correlation_id=ctx.correlation_id,
        ))
        return response

    def _update_ownership(self, ctx: CallContext, msg: UpdateOwnership) -> Response:
        """
        Two-step ownership transfer, plus renunciation.

        transfer_ownership: owner nominates new_owner as pending owner
        accept_ownership:   pending owner takes over
        renounce_ownership: owner gives up control for good
        """
        ownership = ctx.ownership
        if msg.action == "transfer_ownership":
            self._assert_owner(ctx)
            ownership.pending_owner = msg.new_owner
        elif msg.action == "accept_ownership":
            if ownership.pending_owner is None:
                raise Unauthorized("No ownership transfer is pending")
            if ctx.sender != ownership.pending_owner:
                raise Unauthorized(f"Caller {ctx.sender} is not the pending owner")
            ownership.owner = ctx.sender
            ownership.pending_owner = None
        else:
            self._assert_owner(ctx)
            ownership.owner = None
            ownership.pending_owner = None
        OWNERSHIP.save(ctx.store, ownership)

        ctx.events.append(AuditEventBuilder.ownership_updated(
            actor=ctx.sender,
            action=msg.action,
            owner=ownership.owner,
            pending_owner=ownership.pending_owner,
            correlation_id=ctx.correlation_id,
        ))
        return (
            Response()
            .add_attribute("action", msg.action)
            .add_attribute("owner", ownership.owner or "none")
            .add_attribute("pending_owner", ownership.pending_owner or "none")
        )

    # =========================================================================
    # AUDIT
    # =========================================================================

    def _audit_failure(
        self,
        actor: str,
        command: str,
        error: Exception,
        correlation_id: UUID,
    ) -> None:
        """Invariant violations and transfer failures get their own event types."""
        if isinstance(error, InvariantViolation):
            self._audit_logger.log_invariant_violation(
                actor=actor,
                command=command,
                error_kind=error.kind,
                error_message=error.message,
                correlation_id=correlation_id,
            )
        elif isinstance(error, TransferError):
            self._audit_logger.log_transfer_failed(
                actor=actor,
                command=command,
                error_message=error.message,
                correlation_id=correlation_id,
            )
        elif isinstance(error, ReceiptEngineError):
            self._audit_logger.log_command_rejected(
                actor=actor,
                command=command,
                error_kind=error.kind,
                error_message=error.message,
                correlation_id=correlation_id,
            )
        else:
            self._audit_logger.log_command_rejected(
                actor=actor,
                command=command,
                error_kind=type(error).__name__,
                error_message=str(error),
                correlation_id=correlation_id,
            )


def create_engine(
    account: str = "receipt-engine",
    settings: Optional[EngineSettings] = None,
) -> tuple[ReceiptEngine, InMemoryStore, InMemoryBank, InMemoryAuditSink]:
    """
    Factory function to create a self-contained engine.

    Wires the engine to in-memory storage, an in-memory bank paying out of
    `account`, and an in-memory audit sink. Useful for tests and local runs.

    Returns:
        (engine, store, bank, audit_sink)
    """
    store = InMemoryStore()
    bank = InMemoryBank(account=account)
    audit_sink = InMemoryAuditSink()
    engine = ReceiptEngine(
        store=store,
        bank=bank,
        audit_logger=AuditLogger(audit_sink),
        settings=settings,
    )
    return engine, store, bank, audit_sink
