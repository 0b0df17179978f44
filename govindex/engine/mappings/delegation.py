"""
Delegation transitions (ERC20Votes DelegateChanged / DelegateVotesChanged).

The two events describe one delegation change but are handled independently;
nothing assumes they arrive together.
"""

from __future__ import annotations

from ...addresses import normalize_address
from ...constants import ZERO_ADDRESS
from ...events import DelegateChanged, DelegateVotesChanged
from ...logger import get_logger
from ..context import ProcessingContext
from ..faults import FaultKind
from .helpers import get_delegate, get_token_holder, positive_crossing

logger = get_logger(__name__)


def handle_delegate_changed(event: DelegateChanged, ctx: ProcessingContext) -> None:
    """
    DelegateChanged(delegator, fromDelegate, toDelegate)

    Moves the holder's delegate pointer and the represented-holder counts.
    The zero address stands for "no delegate" and is never materialized.
    The counts are not bounded; a negative count is reported, not corrected.
    """
    from_address = normalize_address(event.from_delegate)
    to_address = normalize_address(event.to_delegate)

    token_holder = get_token_holder(ctx, event.delegator).entity
    token_holder.delegate = to_address if to_address != ZERO_ADDRESS else None
    ctx.store.save(token_holder)

    if from_address != ZERO_ADDRESS:
        previous_delegate = get_delegate(ctx, from_address).entity
        previous_delegate.token_holders_represented_amount -= 1
        if previous_delegate.token_holders_represented_amount < 0:
            ctx.faults.report(
                FaultKind.NEGATIVE_REPRESENTATION,
                "Delegate {} represents {} token holders after losing delegator {}",
                previous_delegate.id,
                previous_delegate.token_holders_represented_amount,
                token_holder.id,
                event=event,
            )
        ctx.store.save(previous_delegate)

    if to_address != ZERO_ADDRESS:
        new_delegate = get_delegate(ctx, to_address).entity
        new_delegate.token_holders_represented_amount += 1
        ctx.store.save(new_delegate)


def handle_delegate_votes_changed(event: DelegateVotesChanged, ctx: ProcessingContext) -> None:
    """
    DelegateVotesChanged(delegate, previousBalance, newBalance)

    The delegate count follows the stored delegated votes (captured before
    the update); the governance total accumulates the event's own delta.
    """
    previous_balance = event.previous_balance
    new_balance = event.new_balance

    delegate = get_delegate(ctx, event.delegate).entity
    stored_previous = delegate.delegated_votes_raw

    if stored_previous != previous_balance:
        ctx.faults.report(
            FaultKind.DELEGATE_VOTES_MISMATCH,
            "Delegate {} had {} delegated votes but event reports previous balance {}",
            delegate.id,
            stored_previous,
            previous_balance,
            event=event,
        )

    delegate.delegated_votes_raw = new_balance
    ctx.store.save(delegate)

    governance = ctx.governance
    governance.current_delegates += positive_crossing(stored_previous, new_balance)
    governance.delegated_votes_raw += new_balance - previous_balance

    logger.debug("Delegate %s votes %s -> %s", delegate.id, previous_balance, new_balance)
