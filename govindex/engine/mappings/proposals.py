"""
Proposal lifecycle transitions (Governor events).

State machine per proposal:

    PENDING ──▶ ACTIVE ──▶ QUEUED ──▶ EXECUTED
       │          │          │
       └──────────┴──────────┴──▶ CANCELED

Lifecycle events are applied permissively by default: a transition missing
from the table is still applied and reported as ILLEGAL_TRANSITION. With
``strict_lifecycle`` the event is rejected instead (no state or counter
change) and the fault is reported.
"""

from __future__ import annotations

from typing import Dict, FrozenSet

from ...addresses import addresses_to_ids, normalize_address
from ...entities import Delegate, Proposal, ProposalState
from ...events import (
    Event,
    ProposalCanceled,
    ProposalCreated,
    ProposalExecuted,
    ProposalQueued,
    QuorumNumeratorUpdated,
    TimelockChange,
)
from ...logger import get_logger
from ..context import ProcessingContext
from ..faults import FaultKind
from .helpers import get_proposal

logger = get_logger(__name__)


VALID_TRANSITIONS: Dict[ProposalState, FrozenSet[ProposalState]] = {
    ProposalState.PENDING:  frozenset({ProposalState.ACTIVE, ProposalState.QUEUED, ProposalState.CANCELED}),
    ProposalState.ACTIVE:   frozenset({ProposalState.QUEUED, ProposalState.CANCELED}),
    ProposalState.QUEUED:   frozenset({ProposalState.EXECUTED, ProposalState.CANCELED}),
    # Terminal states
    ProposalState.CANCELED: frozenset(),
    ProposalState.EXECUTED: frozenset(),
}


def is_valid_transition(current: ProposalState, new: ProposalState) -> bool:
    return new in VALID_TRANSITIONS.get(current, frozenset())


def _load_existing(event: Event, ctx: ProcessingContext, proposal_id) -> Proposal:
    lookup = get_proposal(ctx, proposal_id)
    if lookup.absent:
        ctx.faults.report(
            FaultKind.MISSING_PROPOSAL,
            "Proposal {} not found on {}, creating an empty record",
            lookup.entity.id,
            event.name,
            event=event,
        )
    return lookup.entity


def _check_transition(
    event: Event,
    ctx: ProcessingContext,
    proposal: Proposal,
    new_state: ProposalState,
) -> bool:
    """Return True if the event should be applied."""
    if is_valid_transition(proposal.state, new_state):
        return True
    ctx.faults.report(
        FaultKind.ILLEGAL_TRANSITION,
        "Proposal #{} {} -> {} on {}{}",
        proposal.id,
        proposal.state.value,
        new_state.value,
        event.name,
        " (rejected)" if ctx.options.strict_lifecycle else "",
        event=event,
    )
    return not ctx.options.strict_lifecycle


# ProposalCreated(proposalId, proposer, targets, values, signatures, calldatas, startBlock, endBlock, description)
def handle_proposal_created(event: ProposalCreated, ctx: ProcessingContext) -> None:
    lookup = get_proposal(ctx, event.proposal_id)
    proposal = lookup.entity

    if proposal.is_created:
        ctx.faults.report(
            FaultKind.DUPLICATE_PROPOSAL,
            "Proposal #{} already created at block {}, ignoring duplicate",
            proposal.id,
            proposal.creation_block,
            event=event,
        )
        return

    # A delegate must exist before it can propose
    proposer_address = normalize_address(event.proposer)
    proposer = ctx.store.lookup(Delegate, proposer_address)
    if proposer.absent:
        ctx.faults.report(
            FaultKind.MISSING_PROPOSER,
            "Delegate participant {} not found on ProposalCreated. tx_hash: {}",
            proposer_address,
            event.context.transaction_hash,
            event=event,
        )

    block = event.context
    proposal.proposer = proposer.entity.id if proposer.found else None
    proposal.targets = addresses_to_ids(event.targets)
    proposal.values = list(event.values)
    proposal.signatures = list(event.signatures)
    proposal.calldatas = list(event.calldatas)
    proposal.creation_block = block.block_number
    proposal.creation_time = block.block_timestamp
    proposal.start_block = event.start_block
    proposal.end_block = event.end_block
    proposal.description = event.description

    # Votes may have arrived first and already activated the proposal
    if proposal.state == ProposalState.PENDING:
        proposal.state = (
            ProposalState.ACTIVE
            if block.block_number >= event.start_block
            else ProposalState.PENDING
        )
    ctx.store.save(proposal)

    ctx.governance.proposals += 1
    logger.info("Proposal #%s created by %s (%s)", proposal.id, proposer_address, proposal.state.value)


# ProposalCanceled(proposalId)
def handle_proposal_canceled(event: ProposalCanceled, ctx: ProcessingContext) -> None:
    proposal = _load_existing(event, ctx, event.proposal_id)
    if not _check_transition(event, ctx, proposal, ProposalState.CANCELED):
        return

    proposal.state = ProposalState.CANCELED
    proposal.cancellation_block = event.context.block_number
    proposal.cancellation_time = event.context.block_timestamp
    ctx.store.save(proposal)

    ctx.governance.proposals_canceled += 1
    logger.info("Proposal #%s canceled", proposal.id)


# ProposalQueued(proposalId, eta)
def handle_proposal_queued(event: ProposalQueued, ctx: ProcessingContext) -> None:
    proposal = _load_existing(event, ctx, event.proposal_id)
    if not _check_transition(event, ctx, proposal, ProposalState.QUEUED):
        return

    proposal.state = ProposalState.QUEUED
    proposal.execution_eta = event.eta
    ctx.store.save(proposal)

    ctx.governance.proposals_queued += 1
    logger.info("Proposal #%s queued, eta %s", proposal.id, event.eta)


# ProposalExecuted(proposalId)
def handle_proposal_executed(event: ProposalExecuted, ctx: ProcessingContext) -> None:
    proposal = _load_existing(event, ctx, event.proposal_id)
    if not _check_transition(event, ctx, proposal, ProposalState.EXECUTED):
        return

    proposal.state = ProposalState.EXECUTED
    proposal.execution_eta = None
    proposal.execution_block = event.context.block_number
    proposal.execution_time = event.context.block_timestamp
    ctx.store.save(proposal)

    governance = ctx.governance
    governance.proposals_queued -= 1
    governance.proposals_executed += 1
    logger.info("Proposal #%s executed", proposal.id)


# QuorumNumeratorUpdated(oldQuorumNumerator, newQuorumNumerator)
def handle_quorum_numerator_updated(event: QuorumNumeratorUpdated, ctx: ProcessingContext) -> None:
    ctx.governance.quorum_numerator = event.new_quorum_numerator
    logger.info(
        "Quorum numerator %s -> %s",
        event.old_quorum_numerator,
        event.new_quorum_numerator,
    )


# TimelockChange(oldTimelock, newTimelock)
def handle_timelock_change(event: TimelockChange, ctx: ProcessingContext) -> None:
    ctx.governance.timelock = normalize_address(event.new_timelock)
    logger.info("Timelock %s -> %s", event.old_timelock, ctx.governance.timelock)
