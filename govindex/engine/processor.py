"""
Aggregation Engine

Applies an ordered stream of decoded events to the entity store, one event at
a time, keeping the Governance aggregate for the stream in step.

Processing model:
  - One engine per ordered stream (shard); events are applied strictly in
    the order they are submitted.
  - Each event runs inside a store transaction. If its transition raises,
    the entity writes and the Governance aggregate are restored to their
    state before the event, an EVENT_FAILED fault is reported and the next
    event is processed (or EventProcessingError is raised when
    ``halt_on_error`` is set).
  - Integrity problems inside a transition are reported as faults and never
    interrupt the stream.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Dict, Iterable, Optional

from ..entities import Governance
from ..events import Event
from ..exceptions import EventProcessingError, ReentrantProcessingError
from ..logger import get_logger
from ..store import InMemoryEntityStore
from .context import EngineOptions, ProcessingContext
from .dispatcher import EventDispatcher
from .faults import FaultKind, FaultSink
from .rewards import PoolRewardLedger

logger = get_logger(__name__)


class AggregationEngine:
    """
    Sequential event processor for one shard.

    Args:
        store: Entity store (defaults to a fresh InMemoryEntityStore)
        options: Behavior switches
        rewards: Reward accountant for staking events (defaults to PoolRewardLedger)
        metrics: Optional IndexerMetrics
        dispatcher: Optional EventDispatcher (defaults to the standard handler table)
        shard: Label used in log messages
    """

    def __init__(
        self,
        store=None,
        options: Optional[EngineOptions] = None,
        rewards=None,
        metrics=None,
        dispatcher: Optional[EventDispatcher] = None,
        shard: str = "default",
    ):
        self.store = store if store is not None else InMemoryEntityStore()
        self.options = options or EngineOptions()
        self.metrics = metrics
        self.dispatcher = dispatcher or EventDispatcher()
        self.shard = shard

        self.faults = FaultSink(metrics=metrics, max_retained=self.options.max_faults_retained)
        if rewards is None:
            rewards = PoolRewardLedger(fault_sink=self.faults)
        elif hasattr(rewards, "bind_fault_sink"):
            rewards.bind_fault_sink(self.faults)
        self.rewards = rewards

        # Resume from a previously persisted aggregate if the store has one
        lookup = self.store.get_or_create(Governance, self.options.governance_name)
        governance = lookup.entity
        if lookup.absent:
            self.store.save(governance)
        else:
            logger.info("Shard %s: resuming governance %s", shard, governance.id)
        self._ctx = ProcessingContext(
            store=self.store,
            governance=governance,
            faults=self.faults,
            rewards=self.rewards,
            options=self.options,
        )

        self._lock = threading.Lock()
        self._owner: Optional[int] = None

        # --- Stats ---
        self._events_processed: int = 0
        self._events_failed: int = 0
        self._events_unhandled: int = 0
        self._last_block: Optional[int] = None

    # =====================================================================
    #  Processing
    # =====================================================================

    def process_event(self, event: Event) -> bool:
        """
        Apply a single event.

        Returns:
            True if the transition completed, False if it was rolled back or
            no handler exists for the event.

        Raises:
            ReentrantProcessingError: called from inside a transition
            EventProcessingError: a transition failed and ``halt_on_error`` is set
        """
        if self._owner == threading.get_ident():
            raise ReentrantProcessingError(
                f"Shard {self.shard}: {event.describe()} submitted while another event is in progress"
            )

        with self._lock:
            self._owner = threading.get_ident()
            try:
                return self._apply(event)
            finally:
                self._owner = None

    def process(self, events: Iterable[Event]) -> int:
        """Apply events in order. Returns the number applied successfully."""
        applied = 0
        for event in events:
            if self.process_event(event):
                applied += 1
        return applied

    def _apply(self, event: Event) -> bool:
        ctx = self._ctx
        block_number = event.context.block_number

        if self._last_block is not None and block_number < self._last_block:
            self.faults.report(
                FaultKind.OUT_OF_ORDER_EVENT,
                "Event at block {} arrived after block {}",
                block_number,
                self._last_block,
                event=event,
            )

        saved_governance = ctx.governance.copy()
        started = time.perf_counter()
        try:
            with self.store.transaction():
                handled = self.dispatcher.dispatch(event, ctx)
                if handled:
                    self.store.save(ctx.governance)
        except ReentrantProcessingError:
            ctx.governance = saved_governance
            raise
        except Exception as e:
            ctx.governance = saved_governance
            self._events_failed += 1
            if self.metrics is not None:
                self.metrics.events_failed.inc()
            self.faults.report(
                FaultKind.EVENT_FAILED,
                "{} rolled back: {}: {}",
                event.name,
                type(e).__name__,
                e,
                event=event,
            )
            if self.options.halt_on_error:
                raise EventProcessingError(f"Shard {self.shard}: {event.describe()} failed: {e}") from e
            return False

        elapsed = time.perf_counter() - started
        self._last_block = block_number if self._last_block is None else max(self._last_block, block_number)

        if not handled:
            self._events_unhandled += 1
            return False

        self._events_processed += 1
        if self.metrics is not None:
            self.metrics.events_processed.inc()
            self.metrics.event_processing_time.observe(elapsed)
            self.metrics.last_block.set(self._last_block)
            self.metrics.observe_governance(ctx.governance)
        return True

    # =====================================================================
    #  Query interface
    # =====================================================================

    @property
    def governance(self) -> Governance:
        """The live aggregate for this shard."""
        return self._ctx.governance

    @property
    def last_block(self) -> Optional[int]:
        return self._last_block

    def get_stats(self) -> Dict[str, Any]:
        return {
            "shard": self.shard,
            "events_processed": self._events_processed,
            "events_failed": self._events_failed,
            "events_unhandled": self._events_unhandled,
            "last_block": self._last_block,
            "faults": self.faults.counts(),
        }

    def snapshot(self) -> Dict[str, Any]:
        """Serializable view of the shard: governance, entities, pools and faults."""
        data: Dict[str, Any] = {
            "shard": self.shard,
            "governance": self.governance.to_dict(),
            "stats": self.get_stats(),
        }
        if hasattr(self.store, "snapshot"):
            data["entities"] = self.store.snapshot()
        if hasattr(self.rewards, "snapshot"):
            data["pools"] = self.rewards.snapshot()
        data["faults"] = [f.to_dict() for f in self.faults.faults]
        return data
