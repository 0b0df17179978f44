"""
Shared helpers for the transition functions.
"""

from __future__ import annotations

from ...addresses import normalize_address
from ...entities import Delegate, Proposal, TokenHolder
from ...store import Lookup
from ..context import ProcessingContext


def positive_crossing(previous: int, current: int) -> int:
    """
    Change in the "has a positive amount" count for one account.

    +1 when the amount becomes positive, -1 when it stops being positive,
    0 otherwise. For non-negative amounts this is exactly the zero-crossing
    rule (0 -> positive, positive -> 0).
    """
    was_positive = previous > 0
    is_positive = current > 0
    if is_positive and not was_positive:
        return 1
    if was_positive and not is_positive:
        return -1
    return 0


def get_token_holder(ctx: ProcessingContext, address) -> Lookup[TokenHolder]:
    return ctx.store.get_or_create(TokenHolder, normalize_address(address))


def get_delegate(ctx: ProcessingContext, address) -> Lookup[Delegate]:
    return ctx.store.get_or_create(Delegate, normalize_address(address))


def get_proposal(ctx: ProcessingContext, proposal_id) -> Lookup[Proposal]:
    return ctx.store.get_or_create(Proposal, str(proposal_id))
