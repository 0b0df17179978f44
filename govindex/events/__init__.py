"""
Event stream

Provides:
  - EventKind / EventContext / typed events   (types.py)
  - read_events / iter_events / decode_event  (source.py)
"""

from .types import (
    EVENT_TYPES,
    DelegateChanged,
    DelegateVotesChanged,
    Deposit,
    EmergencyWithdraw,
    Event,
    EventContext,
    EventKind,
    ProposalCanceled,
    ProposalCreated,
    ProposalExecuted,
    ProposalQueued,
    QuorumNumeratorUpdated,
    TimelockChange,
    Transfer,
    VoteCast,
    Withdraw,
)
from .source import decode_event, encode_event, iter_events, read_events

__all__ = [
    "EVENT_TYPES",
    "DelegateChanged",
    "DelegateVotesChanged",
    "Deposit",
    "EmergencyWithdraw",
    "Event",
    "EventContext",
    "EventKind",
    "ProposalCanceled",
    "ProposalCreated",
    "ProposalExecuted",
    "ProposalQueued",
    "QuorumNumeratorUpdated",
    "TimelockChange",
    "Transfer",
    "VoteCast",
    "Withdraw",
    "decode_event",
    "encode_event",
    "iter_events",
    "read_events",
]
