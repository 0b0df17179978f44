"""
Transition functions, one per event kind.

Every handler has the signature ``handler(event, ctx) -> None`` and mutates
entities only through ``ctx.store`` and the aggregate in ``ctx.governance``.
"""

from .delegation import handle_delegate_changed, handle_delegate_votes_changed
from .proposals import (
    VALID_TRANSITIONS,
    handle_proposal_canceled,
    handle_proposal_created,
    handle_proposal_executed,
    handle_proposal_queued,
    handle_quorum_numerator_updated,
    handle_timelock_change,
    is_valid_transition,
)
from .staking import handle_deposit, handle_emergency_withdraw, handle_withdraw
from .token import handle_transfer
from .voting import handle_vote_cast

__all__ = [
    "VALID_TRANSITIONS",
    "handle_delegate_changed",
    "handle_delegate_votes_changed",
    "handle_deposit",
    "handle_emergency_withdraw",
    "handle_proposal_canceled",
    "handle_proposal_created",
    "handle_proposal_executed",
    "handle_proposal_queued",
    "handle_quorum_numerator_updated",
    "handle_timelock_change",
    "handle_transfer",
    "handle_vote_cast",
    "handle_withdraw",
    "is_valid_transition",
]
