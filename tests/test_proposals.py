"""
Proposal Lifecycle Test Suite

Coverage:
  - ProposalCreated populates the proposal and counts it
  - Canceled / Queued / Executed transitions and governance counters
  - Transition table: permissive mode reports, strict mode rejects
  - Missing proposer / missing proposal / duplicate creation faults
  - QuorumNumeratorUpdated and TimelockChange
"""

import os
import sys

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from govindex.engine import AggregationEngine, EngineOptions, FaultKind
from govindex.engine.mappings import VALID_TRANSITIONS, is_valid_transition
from govindex.entities import Delegate, Governance, Proposal, ProposalState
from govindex.events import (
    DelegateVotesChanged,
    EventContext,
    ProposalCanceled,
    ProposalCreated,
    ProposalExecuted,
    ProposalQueued,
    QuorumNumeratorUpdated,
    TimelockChange,
)


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

PROPOSER = "0x" + "aa" * 20
TARGET = "0x" + "7a" * 20
TIMELOCK = "0xFe89cc7aBB2C4183683ab71653C4cdc9B02D44b7"


def at(block: int) -> EventContext:
    return EventContext(block_number=block, block_timestamp=1_000 + block, transaction_hash=f"0x{block:064x}")


def created(pid=1, block=100, start_block=110, end_block=200, proposer=PROPOSER) -> ProposalCreated:
    return ProposalCreated(
        context=at(block),
        proposal_id=pid,
        proposer=proposer,
        targets=(TARGET,),
        values=(0,),
        signatures=("transfer(address,uint256)",),
        calldatas=("0x00",),
        start_block=start_block,
        end_block=end_block,
        description="# Fund the working group",
    )


def proposal(engine, pid=1) -> Proposal:
    return engine.store.require(Proposal, str(pid))


def make_engine(**options) -> AggregationEngine:
    engine = AggregationEngine(options=EngineOptions(**options))
    # Proposer must be a known delegate
    engine.process_event(DelegateVotesChanged(context=at(1), delegate=PROPOSER, previous_balance=0, new_balance=1))
    return engine


@pytest.fixture
def engine():
    return make_engine()


# ══════════════════════════════════════════════════════════════════════
#  CREATION
# ══════════════════════════════════════════════════════════════════════


class TestProposalCreated:
    """ProposalCreated populates the entity."""

    def test_fields_populated(self, engine):
        engine.process_event(created())
        p = proposal(engine)
        assert p.proposer == PROPOSER
        assert p.targets == [TARGET]
        assert p.values == [0]
        assert p.signatures == ["transfer(address,uint256)"]
        assert p.calldatas == ["0x00"]
        assert p.creation_block == 100
        assert p.creation_time == 1_100
        assert p.start_block == 110
        assert p.end_block == 200
        assert p.description == "# Fund the working group"

    def test_pending_before_start_block(self, engine):
        engine.process_event(created(block=100, start_block=110))
        assert proposal(engine).state == ProposalState.PENDING

    def test_active_at_start_block(self, engine):
        engine.process_event(created(block=110, start_block=110))
        assert proposal(engine).state == ProposalState.ACTIVE

    def test_counts_proposal(self, engine):
        engine.process_event(created(pid=1))
        engine.process_event(created(pid=2, block=101))
        assert engine.governance.proposals == 2

    def test_missing_proposer_reported(self):
        engine = AggregationEngine()
        engine.process_event(created())
        faults = engine.faults.of_kind(FaultKind.MISSING_PROPOSER)
        assert len(faults) == 1
        assert faults[0].message.startswith(f"Delegate participant {PROPOSER} not found on ProposalCreated")
        p = proposal(engine)
        assert p.proposer is None
        assert p.is_created
        assert not engine.store.exists(Delegate, PROPOSER)

    def test_duplicate_creation_ignored(self, engine):
        engine.process_event(created(block=100))
        engine.process_event(created(block=150, start_block=160))
        assert engine.governance.proposals == 1
        assert proposal(engine).creation_block == 100
        assert engine.faults.count(FaultKind.DUPLICATE_PROPOSAL) == 1

    def test_large_proposal_id_kept_as_string(self, engine):
        pid = 2 ** 255 + 12345
        engine.process_event(created(pid=pid))
        assert engine.store.exists(Proposal, str(pid))


# ══════════════════════════════════════════════════════════════════════
#  LIFECYCLE
# ══════════════════════════════════════════════════════════════════════


class TestLifecycle:
    """Cancel / queue / execute."""

    def test_queue_then_execute(self, engine):
        engine.process_event(created())
        before = engine.governance.proposals_executed
        engine.process_event(ProposalQueued(context=at(210), proposal_id=1, eta=99_999))
        assert proposal(engine).state == ProposalState.QUEUED
        assert proposal(engine).execution_eta == 99_999
        assert engine.governance.proposals_queued == 1

        engine.process_event(ProposalExecuted(context=at(220), proposal_id=1))
        p = proposal(engine)
        assert p.state == ProposalState.EXECUTED
        assert p.execution_eta is None
        assert p.execution_block == 220
        assert p.execution_time == 1_220
        assert engine.governance.proposals_queued == 0
        assert engine.governance.proposals_executed == before + 1

    def test_cancel(self, engine):
        engine.process_event(created())
        engine.process_event(ProposalCanceled(context=at(150), proposal_id=1))
        p = proposal(engine)
        assert p.state == ProposalState.CANCELED
        assert p.cancellation_block == 150
        assert p.cancellation_time == 1_150
        assert engine.governance.proposals_canceled == 1

    def test_cancel_queued(self, engine):
        engine.process_event(created())
        engine.process_event(ProposalQueued(context=at(210), proposal_id=1, eta=5))
        engine.process_event(ProposalCanceled(context=at(211), proposal_id=1))
        assert proposal(engine).state == ProposalState.CANCELED
        assert engine.faults.count(FaultKind.ILLEGAL_TRANSITION) == 0

    def test_lifecycle_on_unknown_proposal(self, engine):
        engine.process_event(ProposalCanceled(context=at(150), proposal_id=77))
        assert engine.faults.count(FaultKind.MISSING_PROPOSAL) == 1
        p = proposal(engine, 77)
        assert p.state == ProposalState.CANCELED
        assert not p.is_created


# ══════════════════════════════════════════════════════════════════════
#  TRANSITION TABLE
# ══════════════════════════════════════════════════════════════════════


class TestTransitionTable:
    """Explicit legality of lifecycle moves."""

    def test_terminal_states_have_no_exits(self):
        assert VALID_TRANSITIONS[ProposalState.CANCELED] == frozenset()
        assert VALID_TRANSITIONS[ProposalState.EXECUTED] == frozenset()

    @pytest.mark.parametrize("current,new,expected", [
        (ProposalState.PENDING, ProposalState.ACTIVE, True),
        (ProposalState.ACTIVE, ProposalState.QUEUED, True),
        (ProposalState.QUEUED, ProposalState.EXECUTED, True),
        (ProposalState.ACTIVE, ProposalState.EXECUTED, False),
        (ProposalState.EXECUTED, ProposalState.CANCELED, False),
        (ProposalState.CANCELED, ProposalState.QUEUED, False),
    ])
    def test_is_valid_transition(self, current, new, expected):
        assert is_valid_transition(current, new) is expected

    def test_permissive_applies_illegal_move(self, engine):
        engine.process_event(created())
        engine.process_event(ProposalExecuted(context=at(220), proposal_id=1))
        assert proposal(engine).state == ProposalState.EXECUTED
        assert engine.governance.proposals_executed == 1
        # Executed without being queued
        assert engine.governance.proposals_queued == -1
        assert engine.faults.count(FaultKind.ILLEGAL_TRANSITION) == 1

    def test_strict_rejects_illegal_move(self):
        engine = make_engine(strict_lifecycle=True)
        engine.process_event(created())
        engine.process_event(ProposalExecuted(context=at(220), proposal_id=1))
        p = proposal(engine)
        assert p.state == ProposalState.PENDING
        assert p.execution_block is None
        assert engine.governance.proposals_executed == 0
        assert engine.governance.proposals_queued == 0
        faults = engine.faults.of_kind(FaultKind.ILLEGAL_TRANSITION)
        assert len(faults) == 1
        assert "(rejected)" in faults[0].message

    def test_strict_rejects_cancel_after_execute(self):
        engine = make_engine(strict_lifecycle=True)
        engine.process([
            created(),
            ProposalQueued(context=at(210), proposal_id=1, eta=1),
            ProposalExecuted(context=at(220), proposal_id=1),
            ProposalCanceled(context=at(230), proposal_id=1),
        ])
        assert proposal(engine).state == ProposalState.EXECUTED
        assert engine.governance.proposals_canceled == 0


# ══════════════════════════════════════════════════════════════════════
#  GOVERNOR PARAMETERS
# ══════════════════════════════════════════════════════════════════════


class TestGovernorParameters:
    """Quorum numerator and timelock."""

    def test_quorum_numerator_updated(self, engine):
        engine.process_event(QuorumNumeratorUpdated(context=at(5), old_quorum_numerator=0, new_quorum_numerator=4))
        assert engine.governance.quorum_numerator == 4
        engine.process_event(QuorumNumeratorUpdated(context=at(6), old_quorum_numerator=4, new_quorum_numerator=2))
        assert engine.governance.quorum_numerator == 2

    def test_timelock_change(self, engine):
        engine.process_event(TimelockChange(context=at(5), old_timelock="0x" + "00" * 20, new_timelock=TIMELOCK))
        assert engine.governance.timelock == TIMELOCK.lower()

    def test_parameters_persisted_with_governance(self, engine):
        engine.process_event(QuorumNumeratorUpdated(context=at(5), old_quorum_numerator=0, new_quorum_numerator=4))
        stored = engine.store.require(Governance, engine.governance.id)
        assert stored.quorum_numerator == 4
