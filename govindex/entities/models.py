"""
Indexed Entities

Defines the persisted entity model derived from the event stream:
TokenHolder, Delegate, Proposal, Vote and the Governance aggregate.

Every raw integer amount that has a decimal counterpart exposes the decimal
as a read-only property computed from the integer, so the two can never
drift apart.
"""

import copy as _copy
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Any, ClassVar, Dict, List, Optional

from ..constants import (
    DEFAULT_DECIMALS,
    GOVERNANCE_NAME,
    VOTE_ABSTAIN,
    VOTE_AGAINST,
    VOTE_FOR,
    VOTE_ID_SEPARATOR,
)


def to_decimal(value: int, decimals: int = DEFAULT_DECIMALS) -> Decimal:
    """Scale a raw token amount down by ``10**decimals``."""
    return Decimal(value) / (Decimal(10) ** decimals)


# ══════════════════════════════════════════════════════════════════════
#  ENUMS
# ══════════════════════════════════════════════════════════════════════

class ProposalState(str, Enum):
    """Lifecycle stage of a Governor proposal."""
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    CANCELED = "CANCELED"
    QUEUED = "QUEUED"
    EXECUTED = "EXECUTED"


class VoteChoice(IntEnum):
    """GovernorCountingSimple support values."""
    AGAINST = VOTE_AGAINST
    FOR = VOTE_FOR
    ABSTAIN = VOTE_ABSTAIN

    @classmethod
    def from_support(cls, support: int) -> Optional["VoteChoice"]:
        """Map a support code to a choice, ``None`` for unrecognized codes."""
        try:
            return cls(support)
        except ValueError:
            return None


# ══════════════════════════════════════════════════════════════════════
#  ENTITIES
# ══════════════════════════════════════════════════════════════════════

class Entity:
    """Mixin shared by mutable entities."""

    entity_type: ClassVar[str] = ""

    def copy(self):
        return _copy.deepcopy(self)


@dataclass
class TokenHolder(Entity):
    """An address holding the governance token."""
    entity_type: ClassVar[str] = "TokenHolder"

    id: str
    token_balance_raw: int = 0
    total_tokens_held_raw: int = 0
    delegate: Optional[str] = None

    @property
    def token_balance(self) -> Decimal:
        return to_decimal(self.token_balance_raw)

    @property
    def total_tokens_held(self) -> Decimal:
        return to_decimal(self.total_tokens_held_raw)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "tokenBalanceRaw": str(self.token_balance_raw),
            "tokenBalance": str(self.token_balance),
            "totalTokensHeldRaw": str(self.total_tokens_held_raw),
            "totalTokensHeld": str(self.total_tokens_held),
            "delegate": self.delegate,
        }


@dataclass
class Delegate(Entity):
    """An address that receives delegated voting power and casts votes."""
    entity_type: ClassVar[str] = "Delegate"

    id: str
    delegated_votes_raw: int = 0
    token_holders_represented_amount: int = 0
    number_votes: int = 0

    @property
    def delegated_votes(self) -> Decimal:
        return to_decimal(self.delegated_votes_raw)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "delegatedVotesRaw": str(self.delegated_votes_raw),
            "delegatedVotes": str(self.delegated_votes),
            "tokenHoldersRepresentedAmount": self.token_holders_represented_amount,
            "numberVotes": self.number_votes,
        }


@dataclass
class Proposal(Entity):
    """
    Governor proposal.

    Fields:
        id:                 String form of the numeric proposal id
        proposer:           Delegate id, ``None`` when the proposer was unknown
        targets/values/signatures/calldatas: Parallel payload lists
        state:              Current lifecycle stage
        creation_block:     Block of ProposalCreated, ``None`` until created
        start_block/end_block: Voting window
        execution_eta:      Timelock ETA while queued
        against_votes/for_votes/abstain_votes: Distinct voter counts
    """
    entity_type: ClassVar[str] = "Proposal"

    id: str
    proposer: Optional[str] = None
    targets: List[str] = field(default_factory=list)
    values: List[int] = field(default_factory=list)
    signatures: List[str] = field(default_factory=list)
    calldatas: List[str] = field(default_factory=list)
    description: str = ""
    state: ProposalState = ProposalState.PENDING
    creation_block: Optional[int] = None
    creation_time: Optional[int] = None
    start_block: Optional[int] = None
    end_block: Optional[int] = None
    execution_eta: Optional[int] = None
    execution_block: Optional[int] = None
    execution_time: Optional[int] = None
    cancellation_block: Optional[int] = None
    cancellation_time: Optional[int] = None
    against_votes: int = 0
    for_votes: int = 0
    abstain_votes: int = 0

    @property
    def is_created(self) -> bool:
        """True once ProposalCreated populated the static fields."""
        return self.creation_block is not None

    @property
    def total_votes(self) -> int:
        return self.against_votes + self.for_votes + self.abstain_votes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "proposer": self.proposer,
            "targets": list(self.targets),
            "values": [str(v) for v in self.values],
            "signatures": list(self.signatures),
            "calldatas": list(self.calldatas),
            "description": self.description,
            "state": self.state.value,
            "creationBlock": self.creation_block,
            "creationTime": self.creation_time,
            "startBlock": self.start_block,
            "endBlock": self.end_block,
            "executionETA": self.execution_eta,
            "executionBlock": self.execution_block,
            "executionTime": self.execution_time,
            "cancellationBlock": self.cancellation_block,
            "cancellationTime": self.cancellation_time,
            "againstVotes": self.against_votes,
            "forVotes": self.for_votes,
            "abstainVotes": self.abstain_votes,
        }


@dataclass(frozen=True)
class Vote:
    """A single VoteCast. Immutable once created."""
    entity_type: ClassVar[str] = "Vote"

    id: str
    proposal: str
    voter: str
    weight: int
    reason: str
    support: int
    block_number: Optional[int] = None
    block_timestamp: Optional[int] = None
    transaction_hash: Optional[str] = None

    @staticmethod
    def make_id(voter: str, proposal_id: str) -> str:
        return f"{voter}{VOTE_ID_SEPARATOR}{proposal_id}"

    @property
    def choice(self) -> Optional[VoteChoice]:
        return VoteChoice.from_support(self.support)

    def copy(self) -> "Vote":
        return self

    def to_dict(self) -> Dict[str, Any]:
        choice = self.choice
        return {
            "id": self.id,
            "proposal": self.proposal,
            "voter": self.voter,
            "weight": str(self.weight),
            "reason": self.reason,
            "support": self.support,
            "choice": choice.name if choice is not None else None,
            "blockNumber": self.block_number,
            "blockTimestamp": self.block_timestamp,
            "transactionHash": self.transaction_hash,
        }


@dataclass
class Governance(Entity):
    """Process-wide aggregate counters for one governance deployment."""
    entity_type: ClassVar[str] = "Governance"

    id: str = GOVERNANCE_NAME
    proposals: int = 0
    proposals_canceled: int = 0
    proposals_queued: int = 0
    proposals_executed: int = 0
    current_delegates: int = 0
    current_token_holders: int = 0
    delegated_votes_raw: int = 0
    quorum_numerator: int = 0
    timelock: Optional[str] = None

    @property
    def delegated_votes(self) -> Decimal:
        return to_decimal(self.delegated_votes_raw)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "proposals": self.proposals,
            "proposalsCanceled": self.proposals_canceled,
            "proposalsQueued": self.proposals_queued,
            "proposalsExecuted": self.proposals_executed,
            "currentDelegates": self.current_delegates,
            "currentTokenHolders": self.current_token_holders,
            "delegatedVotesRaw": str(self.delegated_votes_raw),
            "delegatedVotes": str(self.delegated_votes),
            "quorumNumerator": self.quorum_numerator,
            "timelock": self.timelock,
        }


ENTITY_TYPES: Dict[str, type] = {
    cls.entity_type: cls
    for cls in (TokenHolder, Delegate, Proposal, Vote, Governance)
}
