"""
Processing context threaded through every transition.

Holds the collaborators of one shard: the entity store, the Governance
aggregate for that shard, the fault sink, the reward accountant and the
engine options. There is no module-level governance singleton; each engine
owns exactly one aggregate and passes it explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from ..constants import GOVERNANCE_NAME, MAX_FAULTS_RETAINED
from ..entities import Governance
from .faults import FaultSink
from .rewards import RewardAccountant


@dataclass
class EngineOptions:
    """
    Behavior switches.

    Fields:
        strict_lifecycle:           Reject proposal events whose transition is not in the table
        legacy_vote_delegate_reset: VoteCast overwrites the voter's Delegate with a fresh record
        halt_on_error:              Raise instead of rolling back and continuing when a transition fails
        governance_name:            Id of the Governance aggregate
        max_faults_retained:        Size of the in-memory fault buffer
    """
    strict_lifecycle: bool = False
    legacy_vote_delegate_reset: bool = False
    halt_on_error: bool = False
    governance_name: str = GOVERNANCE_NAME
    max_faults_retained: int = MAX_FAULTS_RETAINED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strict_lifecycle": self.strict_lifecycle,
            "legacy_vote_delegate_reset": self.legacy_vote_delegate_reset,
            "halt_on_error": self.halt_on_error,
            "governance_name": self.governance_name,
            "max_faults_retained": self.max_faults_retained,
        }


@dataclass
class ProcessingContext:
    """Everything a transition may touch."""
    store: Any
    governance: Governance
    faults: FaultSink
    rewards: RewardAccountant
    options: EngineOptions = field(default_factory=EngineOptions)
