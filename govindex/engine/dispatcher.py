"""
Event Dispatcher

Routes each event kind to its transition function.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

from ..events import Event, EventKind
from ..logger import get_logger
from . import mappings
from .context import ProcessingContext
from .faults import FaultKind

logger = get_logger(__name__)

Handler = Callable[[Event, ProcessingContext], None]


DEFAULT_HANDLERS: Dict[EventKind, Handler] = {
    EventKind.TRANSFER: mappings.handle_transfer,
    EventKind.DELEGATE_CHANGED: mappings.handle_delegate_changed,
    EventKind.DELEGATE_VOTES_CHANGED: mappings.handle_delegate_votes_changed,
    EventKind.PROPOSAL_CREATED: mappings.handle_proposal_created,
    EventKind.PROPOSAL_CANCELED: mappings.handle_proposal_canceled,
    EventKind.PROPOSAL_QUEUED: mappings.handle_proposal_queued,
    EventKind.PROPOSAL_EXECUTED: mappings.handle_proposal_executed,
    EventKind.QUORUM_NUMERATOR_UPDATED: mappings.handle_quorum_numerator_updated,
    EventKind.TIMELOCK_CHANGE: mappings.handle_timelock_change,
    EventKind.VOTE_CAST: mappings.handle_vote_cast,
    EventKind.DEPOSIT: mappings.handle_deposit,
    EventKind.WITHDRAW: mappings.handle_withdraw,
    EventKind.EMERGENCY_WITHDRAW: mappings.handle_emergency_withdraw,
}


class EventDispatcher:
    """
    Kind -> handler table.

    Handlers can be replaced or added with ``register`` (tests use this to
    inject failing transitions).
    """

    def __init__(self, handlers: Optional[Dict[EventKind, Handler]] = None):
        self._handlers: Dict[EventKind, Handler] = dict(
            DEFAULT_HANDLERS if handlers is None else handlers
        )

    def register(self, kind: EventKind, handler: Handler) -> None:
        self._handlers[kind] = handler

    def handler_for(self, kind: EventKind) -> Optional[Handler]:
        return self._handlers.get(kind)

    def dispatch(self, event: Event, ctx: ProcessingContext) -> bool:
        """Apply ``event``. Returns False if no handler is registered for its kind."""
        kind = getattr(event, "kind", None)
        handler = self._handlers.get(kind) if kind is not None else None
        if handler is None:
            ctx.faults.report(
                FaultKind.UNKNOWN_EVENT,
                "No handler for event {}",
                getattr(event, "name", type(event).__name__),
                event=event,
            )
            return False
        handler(event, ctx)
        return True
