"""
Staking transitions (MasterChef Deposit / Withdraw / EmergencyWithdraw).

Each event becomes a signed amount delta for its pool, handed to the reward
accountant.
"""

from __future__ import annotations

from ...events import Deposit, EmergencyWithdraw, Withdraw
from ..context import ProcessingContext


def handle_deposit(event: Deposit, ctx: ProcessingContext) -> None:
    ctx.rewards.handle_reward(event.context, event.pid, event.amount)


def handle_withdraw(event: Withdraw, ctx: ProcessingContext) -> None:
    ctx.rewards.handle_reward(event.context, event.pid, -event.amount)


def handle_emergency_withdraw(event: EmergencyWithdraw, ctx: ProcessingContext) -> None:
    ctx.rewards.handle_reward(event.context, event.pid, -event.amount)
