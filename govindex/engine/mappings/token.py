"""
Token balance transition (ERC-20 Transfer).

Keeps TokenHolder balances and the governance-wide count of holders with a
positive balance.
"""

from __future__ import annotations

from ...addresses import normalize_address
from ...constants import ZERO_ADDRESS
from ...events import Transfer
from ...logger import get_logger
from ..context import ProcessingContext
from ..faults import FaultKind
from .helpers import get_token_holder, positive_crossing

logger = get_logger(__name__)


def handle_transfer(event: Transfer, ctx: ProcessingContext) -> None:
    """
    Transfer(from, to, value)

    Mints (from = zero address) skip the debit. A debit that leaves the
    sender negative is reported and kept as is.
    """
    sender = normalize_address(event.sender)
    recipient = normalize_address(event.recipient)
    value = event.value
    governance = ctx.governance

    # Deduct from sender
    if sender != ZERO_ADDRESS:
        from_holder = get_token_holder(ctx, sender).entity
        previous = from_holder.token_balance_raw
        from_holder.token_balance_raw = previous - value

        if from_holder.token_balance_raw < 0:
            ctx.faults.report(
                FaultKind.NEGATIVE_BALANCE,
                "Negative balance on holder {} with balance {}",
                from_holder.id,
                from_holder.token_balance_raw,
                event=event,
            )

        governance.current_token_holders += positive_crossing(previous, from_holder.token_balance_raw)
        ctx.store.save(from_holder)

    # Credit recipient (loaded after the debit so a self-transfer sees it)
    to_holder = get_token_holder(ctx, recipient).entity
    previous = to_holder.token_balance_raw
    to_holder.token_balance_raw = previous + value
    to_holder.total_tokens_held_raw += value

    # Burns land on the zero-address holder
    governance.current_token_holders += positive_crossing(previous, to_holder.token_balance_raw)
    ctx.store.save(to_holder)

    logger.debug("Transfer %s -> %s: %s", sender, recipient, value)
