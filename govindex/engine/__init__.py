"""
Aggregation engine

Provides:
  - AggregationEngine   : sequential per-shard processing       (processor.py)
  - ShardedIndexer      : one engine per chain / shard          (runner.py)
  - EventDispatcher     : event kind -> transition              (dispatcher.py)
  - FaultSink           : integrity fault reporting             (faults.py)
  - PoolRewardLedger    : reference reward accountant           (rewards.py)
"""

from .context import EngineOptions, ProcessingContext
from .dispatcher import DEFAULT_HANDLERS, EventDispatcher
from .faults import FaultKind, FaultSink, IntegrityFault, format_message
from .processor import AggregationEngine
from .rewards import PoolPosition, PoolRewardLedger, RewardAccountant
from .runner import ShardedIndexer

__all__ = [
    "AggregationEngine",
    "DEFAULT_HANDLERS",
    "EngineOptions",
    "EventDispatcher",
    "FaultKind",
    "FaultSink",
    "IntegrityFault",
    "PoolPosition",
    "PoolRewardLedger",
    "ProcessingContext",
    "RewardAccountant",
    "ShardedIndexer",
    "format_message",
]
