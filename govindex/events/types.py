"""
Decoded Event Types

Typed envelopes for every event the engine consumes. Decoding from the chain
(ABI binding) happens upstream; these classes carry the already-decoded
parameters plus the originating block / transaction context.

Event Kinds:
  - TRANSFER:                 ERC-20 Transfer(from, to, value)
  - DELEGATE_CHANGED:         ERC20Votes DelegateChanged(delegator, fromDelegate, toDelegate)
  - DELEGATE_VOTES_CHANGED:   ERC20Votes DelegateVotesChanged(delegate, previousBalance, newBalance)
  - PROPOSAL_CREATED:         Governor ProposalCreated(...)
  - PROPOSAL_CANCELED:        Governor ProposalCanceled(proposalId)
  - PROPOSAL_QUEUED:          Governor ProposalQueued(proposalId, eta)
  - PROPOSAL_EXECUTED:        Governor ProposalExecuted(proposalId)
  - QUORUM_NUMERATOR_UPDATED: Governor QuorumNumeratorUpdated(old, new)
  - TIMELOCK_CHANGE:          Governor TimelockChange(oldTimelock, newTimelock)
  - VOTE_CAST:                Governor VoteCast(voter, proposalId, support, weight, reason)
  - DEPOSIT / WITHDRAW / EMERGENCY_WITHDRAW: MasterChef staking events
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import IntEnum
from typing import Any, ClassVar, Dict, List, Optional, Tuple


# ---------------------------------------------------------------------------
# Event kinds
# ---------------------------------------------------------------------------

class EventKind(IntEnum):
    """All event kinds the dispatcher can route."""
    TRANSFER = 1
    DELEGATE_CHANGED = 2
    DELEGATE_VOTES_CHANGED = 3
    PROPOSAL_CREATED = 4
    PROPOSAL_CANCELED = 5
    PROPOSAL_QUEUED = 6
    PROPOSAL_EXECUTED = 7
    QUORUM_NUMERATOR_UPDATED = 8
    TIMELOCK_CHANGE = 9
    VOTE_CAST = 10
    DEPOSIT = 11
    WITHDRAW = 12
    EMERGENCY_WITHDRAW = 13


# ---------------------------------------------------------------------------
# Block / transaction context
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EventContext:
    """Where an event came from. Ordering key is (block_number, log_index)."""
    block_number: int = 0
    block_timestamp: int = 0
    transaction_hash: str = ""
    log_index: int = 0
    address: str = ""

    @property
    def position(self) -> Tuple[int, int]:
        return (self.block_number, self.log_index)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "blockNumber": self.block_number,
            "blockTimestamp": self.block_timestamp,
            "transactionHash": self.transaction_hash,
            "logIndex": self.log_index,
            "address": self.address,
        }


# ---------------------------------------------------------------------------
# Base event
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Event:
    """Base class. Subclasses declare `kind`, `name` and their parameters."""
    kind: ClassVar[EventKind]
    name: ClassVar[str]

    context: EventContext = field(default_factory=EventContext)

    @classmethod
    def param_names(cls) -> List[str]:
        return [f.name for f in fields(cls) if f.name != "context"]

    def params(self) -> Dict[str, Any]:
        return {n: getattr(self, n) for n in self.param_names()}

    def describe(self) -> str:
        ctx = self.context
        return f"{self.name} block #{ctx.block_number} log {ctx.log_index} tx {ctx.transaction_hash or '-'}"


# ---------------------------------------------------------------------------
# Token events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Transfer(Event):
    kind: ClassVar[EventKind] = EventKind.TRANSFER
    name: ClassVar[str] = "Transfer"

    sender: str = ""
    recipient: str = ""
    value: int = 0


@dataclass(frozen=True)
class DelegateChanged(Event):
    kind: ClassVar[EventKind] = EventKind.DELEGATE_CHANGED
    name: ClassVar[str] = "DelegateChanged"

    delegator: str = ""
    from_delegate: str = ""
    to_delegate: str = ""


@dataclass(frozen=True)
class DelegateVotesChanged(Event):
    kind: ClassVar[EventKind] = EventKind.DELEGATE_VOTES_CHANGED
    name: ClassVar[str] = "DelegateVotesChanged"

    delegate: str = ""
    previous_balance: int = 0
    new_balance: int = 0


# ---------------------------------------------------------------------------
# Governor events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProposalCreated(Event):
    kind: ClassVar[EventKind] = EventKind.PROPOSAL_CREATED
    name: ClassVar[str] = "ProposalCreated"

    proposal_id: int = 0
    proposer: str = ""
    targets: Tuple[str, ...] = ()
    values: Tuple[int, ...] = ()
    signatures: Tuple[str, ...] = ()
    calldatas: Tuple[str, ...] = ()
    start_block: int = 0
    end_block: int = 0
    description: str = ""


@dataclass(frozen=True)
class ProposalCanceled(Event):
    kind: ClassVar[EventKind] = EventKind.PROPOSAL_CANCELED
    name: ClassVar[str] = "ProposalCanceled"

    proposal_id: int = 0


@dataclass(frozen=True)
class ProposalQueued(Event):
    kind: ClassVar[EventKind] = EventKind.PROPOSAL_QUEUED
    name: ClassVar[str] = "ProposalQueued"

    proposal_id: int = 0
    eta: int = 0


@dataclass(frozen=True)
class ProposalExecuted(Event):
    kind: ClassVar[EventKind] = EventKind.PROPOSAL_EXECUTED
    name: ClassVar[str] = "ProposalExecuted"

    proposal_id: int = 0


@dataclass(frozen=True)
class QuorumNumeratorUpdated(Event):
    kind: ClassVar[EventKind] = EventKind.QUORUM_NUMERATOR_UPDATED
    name: ClassVar[str] = "QuorumNumeratorUpdated"

    old_quorum_numerator: int = 0
    new_quorum_numerator: int = 0


@dataclass(frozen=True)
class TimelockChange(Event):
    kind: ClassVar[EventKind] = EventKind.TIMELOCK_CHANGE
    name: ClassVar[str] = "TimelockChange"

    old_timelock: str = ""
    new_timelock: str = ""


@dataclass(frozen=True)
class VoteCast(Event):
    kind: ClassVar[EventKind] = EventKind.VOTE_CAST
    name: ClassVar[str] = "VoteCast"

    voter: str = ""
    proposal_id: int = 0
    support: int = 0
    weight: int = 0
    reason: str = ""


# ---------------------------------------------------------------------------
# Staking (MasterChef) events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Deposit(Event):
    kind: ClassVar[EventKind] = EventKind.DEPOSIT
    name: ClassVar[str] = "Deposit"

    user: str = ""
    pid: int = 0
    amount: int = 0


@dataclass(frozen=True)
class Withdraw(Event):
    kind: ClassVar[EventKind] = EventKind.WITHDRAW
    name: ClassVar[str] = "Withdraw"

    user: str = ""
    pid: int = 0
    amount: int = 0


@dataclass(frozen=True)
class EmergencyWithdraw(Event):
    kind: ClassVar[EventKind] = EventKind.EMERGENCY_WITHDRAW
    name: ClassVar[str] = "EmergencyWithdraw"

    user: str = ""
    pid: int = 0
    amount: int = 0


EVENT_TYPES: Dict[str, type] = {
    cls.name: cls
    for cls in (
        Transfer,
        DelegateChanged,
        DelegateVotesChanged,
        ProposalCreated,
        ProposalCanceled,
        ProposalQueued,
        ProposalExecuted,
        QuorumNumeratorUpdated,
        TimelockChange,
        VoteCast,
        Deposit,
        Withdraw,
        EmergencyWithdraw,
    )
}


def event_type_for(name: str) -> Optional[type]:
    return EVENT_TYPES.get(name)
