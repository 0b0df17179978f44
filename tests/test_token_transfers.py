"""
Token Balance Transition Test Suite

Coverage:
  - Mints, transfers and burns update TokenHolder balances
  - current_token_holders follows the zero-crossing rule
  - Negative balances are reported and kept, the stream continues
  - Decimal balances stay in lockstep with the raw integers
"""

import os
import sys
from decimal import Decimal

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from govindex.constants import ZERO_ADDRESS
from govindex.engine import AggregationEngine, FaultKind
from govindex.entities import TokenHolder
from govindex.events import EventContext, Transfer


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

ALICE = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20
CAROL = "0x" + "c3" * 20

ONE_TOKEN = 10 ** 18


def at(block: int, log_index: int = 0) -> EventContext:
    return EventContext(
        block_number=block,
        block_timestamp=1_600_000_000 + block * 12,
        transaction_hash=f"0x{block:064x}",
        log_index=log_index,
    )


def transfer(sender, recipient, value, block=100) -> Transfer:
    return Transfer(context=at(block), sender=sender, recipient=recipient, value=value)


def mint(recipient, value, block=100) -> Transfer:
    return transfer(ZERO_ADDRESS, recipient, value, block)


def holder(engine: AggregationEngine, address: str) -> TokenHolder:
    return engine.store.require(TokenHolder, address)


@pytest.fixture
def engine():
    return AggregationEngine()


# ══════════════════════════════════════════════════════════════════════
#  BALANCES
# ══════════════════════════════════════════════════════════════════════


class TestMintAndTransfer:
    """Balance bookkeeping."""

    def test_mint_credits_recipient(self, engine):
        engine.process_event(mint(ALICE, 100))
        alice = holder(engine, ALICE)
        assert alice.token_balance_raw == 100
        assert alice.total_tokens_held_raw == 100

    def test_mint_does_not_create_zero_holder_debit(self, engine):
        engine.process_event(mint(ALICE, 100))
        assert not engine.store.exists(TokenHolder, ZERO_ADDRESS)

    def test_transfer_moves_balance(self, engine):
        engine.process_event(mint(ALICE, 100))
        engine.process_event(transfer(ALICE, BOB, 40, block=101))
        assert holder(engine, ALICE).token_balance_raw == 60
        assert holder(engine, BOB).token_balance_raw == 40

    def test_total_tokens_held_only_grows(self, engine):
        engine.process_event(mint(ALICE, 100))
        engine.process_event(transfer(ALICE, BOB, 100, block=101))
        engine.process_event(transfer(BOB, ALICE, 30, block=102))
        alice = holder(engine, ALICE)
        assert alice.token_balance_raw == 30
        assert alice.total_tokens_held_raw == 130

    def test_self_transfer_keeps_balance(self, engine):
        engine.process_event(mint(ALICE, 100))
        engine.process_event(transfer(ALICE, ALICE, 100, block=101))
        assert holder(engine, ALICE).token_balance_raw == 100
        assert engine.governance.current_token_holders == 1

    def test_checksum_addresses_are_lowercased(self, engine):
        checksummed = "0xC18360217D8F7Ab5e7c516566761Ea12Ce7F9D72"
        engine.process_event(mint(checksummed, 5))
        assert engine.store.exists(TokenHolder, checksummed.lower())

    def test_decimal_balance_follows_raw(self, engine):
        engine.process_event(mint(ALICE, 3 * ONE_TOKEN // 2))
        alice = holder(engine, ALICE)
        assert alice.token_balance == Decimal("1.5")
        assert alice.to_dict()["tokenBalance"] == "1.5"
        assert alice.to_dict()["tokenBalanceRaw"] == str(3 * ONE_TOKEN // 2)

    def test_sum_of_balances_equals_minted(self, engine):
        engine.process([
            mint(ALICE, 500, block=1),
            mint(BOB, 300, block=2),
            transfer(ALICE, CAROL, 200, block=3),
            transfer(BOB, ALICE, 300, block=4),
            transfer(CAROL, BOB, 50, block=5),
        ])
        total = sum(h.token_balance_raw for h in engine.store.all(TokenHolder))
        assert total == 800
        assert engine.faults.count(FaultKind.NEGATIVE_BALANCE) == 0


# ══════════════════════════════════════════════════════════════════════
#  HOLDER COUNT
# ══════════════════════════════════════════════════════════════════════


class TestHolderCount:
    """current_token_holders zero-crossing rule."""

    def test_first_mint_counts_holder(self, engine):
        engine.process_event(mint(ALICE, 1))
        assert engine.governance.current_token_holders == 1

    def test_second_mint_does_not_double_count(self, engine):
        engine.process_event(mint(ALICE, 1))
        engine.process_event(mint(ALICE, 1, block=101))
        assert engine.governance.current_token_holders == 1

    def test_emptying_balance_uncounts_holder(self, engine):
        engine.process_event(mint(ALICE, 10))
        engine.process_event(transfer(ALICE, BOB, 10, block=101))
        assert engine.governance.current_token_holders == 1
        assert holder(engine, ALICE).token_balance_raw == 0

    def test_zero_value_transfer_creates_no_holder(self, engine):
        engine.process_event(transfer(ALICE, BOB, 0))
        assert engine.governance.current_token_holders == 0

    def test_burn_counts_zero_address_holder(self, engine):
        engine.process_event(mint(ALICE, 10))
        engine.process_event(transfer(ALICE, ZERO_ADDRESS, 4, block=101))
        assert engine.governance.current_token_holders == 2
        assert holder(engine, ZERO_ADDRESS).token_balance_raw == 4

    def test_full_burn_moves_count_to_zero_address(self, engine):
        engine.process_event(mint(ALICE, 10))
        engine.process_event(transfer(ALICE, ZERO_ADDRESS, 10, block=101))
        assert engine.governance.current_token_holders == 1
        assert holder(engine, ALICE).token_balance_raw == 0

    def test_count_matches_positive_holders(self, engine):
        engine.process([
            mint(ALICE, 10, block=1),
            mint(BOB, 10, block=2),
            transfer(ALICE, CAROL, 5, block=3),
            transfer(BOB, CAROL, 10, block=4),
            transfer(CAROL, ALICE, 15, block=5),
            transfer(ALICE, ZERO_ADDRESS, 6, block=6),
            transfer(ALICE, BOB, 2, block=7),
        ])
        positive = [h for h in engine.store.all(TokenHolder) if h.token_balance_raw > 0]
        assert engine.governance.current_token_holders == len(positive) == 3


# ══════════════════════════════════════════════════════════════════════
#  NEGATIVE BALANCES
# ══════════════════════════════════════════════════════════════════════


class TestNegativeBalance:
    """Overdrawn senders are reported, not corrected."""

    def test_overdraw_keeps_negative_balance(self, engine):
        engine.process_event(mint(ALICE, 100))
        engine.process_event(transfer(ALICE, BOB, 150, block=101))
        assert holder(engine, ALICE).token_balance_raw == -50
        assert holder(engine, BOB).token_balance_raw == 150

    def test_overdraw_reports_fault(self, engine):
        engine.process_event(mint(ALICE, 100))
        engine.process_event(transfer(ALICE, BOB, 150, block=101))
        faults = engine.faults.of_kind(FaultKind.NEGATIVE_BALANCE)
        assert len(faults) == 1
        assert faults[0].message == f"Negative balance on holder {ALICE} with balance -50"
        assert faults[0].block_number == 101

    def test_stream_continues_after_overdraw(self, engine):
        engine.process_event(mint(ALICE, 100))
        engine.process_event(transfer(ALICE, BOB, 150, block=101))
        assert engine.process_event(mint(CAROL, 7, block=102)) is True
        assert holder(engine, CAROL).token_balance_raw == 7

    def test_negative_holder_is_not_counted(self, engine):
        engine.process_event(mint(ALICE, 100))
        engine.process_event(transfer(ALICE, BOB, 150, block=101))
        # BOB positive, ALICE negative
        assert engine.governance.current_token_holders == 1

    def test_unknown_sender_goes_negative(self, engine):
        engine.process_event(transfer(ALICE, BOB, 5))
        assert holder(engine, ALICE).token_balance_raw == -5
        assert engine.faults.count(FaultKind.NEGATIVE_BALANCE) == 1
