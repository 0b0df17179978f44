"""
Vote-cast transition (Governor VoteCast).
"""

from __future__ import annotations

from ...addresses import normalize_address
from ...entities import Delegate, ProposalState, Vote, VoteChoice
from ...events import VoteCast
from ...logger import get_logger
from ..context import ProcessingContext
from ..faults import FaultKind
from .helpers import get_delegate, get_proposal

logger = get_logger(__name__)


def handle_vote_cast(event: VoteCast, ctx: ProcessingContext) -> None:
    """
    VoteCast(voter, proposalId, support, weight, reason)

    Creates the immutable Vote ``<voter>-<proposalId>``, activates a pending
    proposal, bumps the tally matching the support code and counts the vote
    on the voter's Delegate. A second vote with the same id is ignored.
    """
    voter = normalize_address(event.voter)
    proposal_id = str(event.proposal_id)
    vote_id = Vote.make_id(voter, proposal_id)

    if ctx.store.exists(Vote, vote_id):
        ctx.faults.report(
            FaultKind.DUPLICATE_VOTE,
            "Vote {} already recorded, ignoring duplicate",
            vote_id,
            event=event,
        )
        return

    lookup = get_proposal(ctx, proposal_id)
    proposal = lookup.entity
    if lookup.absent:
        ctx.faults.report(
            FaultKind.MISSING_PROPOSAL,
            "Proposal {} not found on VoteCast by {}, creating an empty record",
            proposal_id,
            voter,
            event=event,
        )

    vote = Vote(
        id=vote_id,
        proposal=proposal.id,
        voter=voter,
        weight=event.weight,
        reason=event.reason,
        support=event.support,
        block_number=event.context.block_number,
        block_timestamp=event.context.block_timestamp,
        transaction_hash=event.context.transaction_hash,
    )
    ctx.store.save(vote)

    if proposal.state == ProposalState.PENDING:
        proposal.state = ProposalState.ACTIVE

    choice = VoteChoice.from_support(event.support)
    if choice == VoteChoice.AGAINST:
        proposal.against_votes += 1
    elif choice == VoteChoice.FOR:
        proposal.for_votes += 1
    elif choice == VoteChoice.ABSTAIN:
        proposal.abstain_votes += 1
    else:
        logger.debug("Vote %s has unrecognized support %s, tally unchanged", vote_id, event.support)
    ctx.store.save(proposal)

    if ctx.options.legacy_vote_delegate_reset:
        previous = ctx.store.lookup(Delegate, voter)
        if previous.found and previous.entity.delegated_votes_raw > 0:
            ctx.faults.report(
                FaultKind.DELEGATE_RESET,
                "Delegate {} reset on VoteCast, dropping {} delegated votes. tx_hash: {}",
                voter,
                previous.entity.delegated_votes_raw,
                event.context.transaction_hash,
                event=event,
            )
        delegate = ctx.store.create(Delegate, voter)
    else:
        delegate = get_delegate(ctx, voter).entity
    delegate.number_votes += 1
    ctx.store.save(delegate)

    logger.debug("Vote %s support=%s weight=%s", vote_id, event.support, event.weight)
