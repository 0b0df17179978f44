"""
Reward Accounting Collaborator

Staking events (MasterChef Deposit / Withdraw / EmergencyWithdraw) are
reduced to a signed amount delta per pool and handed to a reward accountant.
The engine only chooses the sign; what the accountant does with the delta is
its own business.

`PoolRewardLedger` is the reference accountant: it keeps the staked total per
pool id, with deposit / withdraw counts and the last block that touched it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from ..events.types import EventContext
from ..logger import get_logger
from .faults import FaultKind

logger = get_logger(__name__)


class RewardAccountant(Protocol):
    """Protocol that reward collaborators must implement."""

    def handle_reward(self, context: EventContext, pool_id: int, amount_delta: int) -> None: ...


@dataclass
class PoolPosition:
    """Running staked total for one pool."""
    pool_id: int
    staked_raw: int = 0
    deposits: int = 0
    withdrawals: int = 0
    last_block: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "poolId": self.pool_id,
            "stakedRaw": str(self.staked_raw),
            "deposits": self.deposits,
            "withdrawals": self.withdrawals,
            "lastBlock": self.last_block,
        }


class PoolRewardLedger:
    """
    In-memory per-pool staking ledger.

    Args:
        fault_sink: Optional FaultSink; a pool whose staked total drops
                    below zero is reported as NEGATIVE_POOL_BALANCE
    """

    def __init__(self, fault_sink=None):
        self._pools: Dict[int, PoolPosition] = {}
        self._fault_sink = fault_sink

    def bind_fault_sink(self, fault_sink) -> None:
        self._fault_sink = fault_sink

    def handle_reward(self, context: EventContext, pool_id: int, amount_delta: int) -> None:
        position = self._pools.get(pool_id)
        if position is None:
            position = PoolPosition(pool_id=pool_id)
            self._pools[pool_id] = position

        position.staked_raw += amount_delta
        if amount_delta >= 0:
            position.deposits += 1
        else:
            position.withdrawals += 1
        position.last_block = context.block_number

        if position.staked_raw < 0 and self._fault_sink is not None:
            self._fault_sink.report(
                FaultKind.NEGATIVE_POOL_BALANCE,
                "Negative staked amount on pool {} with balance {}",
                pool_id,
                position.staked_raw,
            )
        logger.debug("Pool %s delta %s -> staked %s", pool_id, amount_delta, position.staked_raw)

    def position(self, pool_id: int) -> Optional[PoolPosition]:
        return self._pools.get(pool_id)

    def staked(self, pool_id: int) -> int:
        position = self._pools.get(pool_id)
        return position.staked_raw if position is not None else 0

    @property
    def pool_count(self) -> int:
        return len(self._pools)

    def snapshot(self) -> Dict[str, Any]:
        return {str(pid): self._pools[pid].to_dict() for pid in sorted(self._pools)}
