"""
Staking / Reward Accounting Test Suite

Coverage:
  - Deposit / Withdraw / EmergencyWithdraw signed deltas
  - PoolRewardLedger positions and NEGATIVE_POOL_BALANCE
  - Custom reward accountants receive the event context
"""

import os
import sys
from unittest.mock import MagicMock

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from govindex.engine import AggregationEngine, FaultKind, FaultSink, PoolRewardLedger
from govindex.events import Deposit, EmergencyWithdraw, EventContext, Withdraw


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

STAKER = "0x" + "5e" * 20


def at(block: int) -> EventContext:
    return EventContext(block_number=block, block_timestamp=block * 12, transaction_hash=f"0x{block:064x}")


@pytest.fixture
def engine():
    return AggregationEngine()


# ══════════════════════════════════════════════════════════════════════
#  DELTAS
# ══════════════════════════════════════════════════════════════════════


class TestStakingDeltas:
    """Sign of the delta handed to the accountant."""

    def test_deposit_is_positive(self):
        rewards = MagicMock()
        engine = AggregationEngine(rewards=rewards)
        event = Deposit(context=at(10), user=STAKER, pid=3, amount=500)
        engine.process_event(event)
        rewards.handle_reward.assert_called_once_with(event.context, 3, 500)

    def test_withdraw_is_negative(self):
        rewards = MagicMock()
        engine = AggregationEngine(rewards=rewards)
        event = Withdraw(context=at(10), user=STAKER, pid=3, amount=200)
        engine.process_event(event)
        rewards.handle_reward.assert_called_once_with(event.context, 3, -200)

    def test_emergency_withdraw_is_negative(self):
        rewards = MagicMock()
        engine = AggregationEngine(rewards=rewards)
        event = EmergencyWithdraw(context=at(10), user=STAKER, pid=0, amount=75)
        engine.process_event(event)
        rewards.handle_reward.assert_called_once_with(event.context, 0, -75)

    def test_custom_accountant_gets_fault_sink(self):
        rewards = MagicMock()
        engine = AggregationEngine(rewards=rewards)
        rewards.bind_fault_sink.assert_called_once_with(engine.faults)


# ══════════════════════════════════════════════════════════════════════
#  POOL LEDGER
# ══════════════════════════════════════════════════════════════════════


class TestPoolRewardLedger:
    """Reference accountant."""

    def test_positions_track_staked_amount(self, engine):
        engine.process([
            Deposit(context=at(10), user=STAKER, pid=1, amount=500),
            Deposit(context=at(11), user=STAKER, pid=1, amount=250),
            Withdraw(context=at(12), user=STAKER, pid=1, amount=100),
            Deposit(context=at(13), user=STAKER, pid=2, amount=40),
        ])
        ledger = engine.rewards
        assert ledger.staked(1) == 650
        assert ledger.staked(2) == 40
        assert ledger.pool_count == 2
        position = ledger.position(1)
        assert position.deposits == 2
        assert position.withdrawals == 1
        assert position.last_block == 12

    def test_unknown_pool_has_nothing_staked(self):
        ledger = PoolRewardLedger()
        assert ledger.staked(99) == 0
        assert ledger.position(99) is None

    def test_negative_pool_reported(self, engine):
        engine.process_event(Withdraw(context=at(10), user=STAKER, pid=4, amount=10))
        assert engine.rewards.staked(4) == -10
        assert engine.faults.count(FaultKind.NEGATIVE_POOL_BALANCE) == 1

    def test_standalone_ledger_reports_to_bound_sink(self):
        sink = FaultSink()
        ledger = PoolRewardLedger()
        ledger.bind_fault_sink(sink)
        ledger.handle_reward(at(1), 0, -1)
        assert sink.count(FaultKind.NEGATIVE_POOL_BALANCE) == 1

    def test_snapshot(self, engine):
        engine.process_event(Deposit(context=at(10), user=STAKER, pid=1, amount=10 ** 30))
        snap = engine.rewards.snapshot()
        assert snap["1"]["stakedRaw"] == str(10 ** 30)
        assert snap["1"]["lastBlock"] == 10
