"""
Sharded replay.

Each shard (one chain's ordered event stream) gets its own AggregationEngine,
store and Governance aggregate. Order is preserved inside a shard; shards
share nothing, so they may be replayed concurrently.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from ..events import Event
from ..logger import get_logger
from .context import EngineOptions
from .processor import AggregationEngine

logger = get_logger(__name__)

EngineFactory = Callable[[str], AggregationEngine]


class ShardedIndexer:
    """
    One engine per shard key.

    Args:
        options: Engine options shared by every shard
        engine_factory: Optional callable ``shard_key -> AggregationEngine``
        metrics_factory: Optional callable ``shard_key -> IndexerMetrics``
    """

    def __init__(
        self,
        options: Optional[EngineOptions] = None,
        engine_factory: Optional[EngineFactory] = None,
        metrics_factory: Optional[Callable[[str], Any]] = None,
    ):
        self.options = options or EngineOptions()
        self._engine_factory = engine_factory
        self._metrics_factory = metrics_factory
        self._engines: Dict[str, AggregationEngine] = {}

    def engine(self, shard) -> AggregationEngine:
        """Return the engine for ``shard``, creating it on first use."""
        key = str(shard)
        engine = self._engines.get(key)
        if engine is None:
            if self._engine_factory is not None:
                engine = self._engine_factory(key)
            else:
                metrics = self._metrics_factory(key) if self._metrics_factory else None
                engine = AggregationEngine(options=self.options, metrics=metrics, shard=key)
            self._engines[key] = engine
        return engine

    @property
    def shards(self) -> Dict[str, AggregationEngine]:
        return dict(self._engines)

    def process(self, shard, events: Iterable[Event]) -> int:
        """Replay one shard's events in order."""
        engine = self.engine(shard)
        applied = engine.process(events)
        logger.info(
            "Shard %s: %d events applied, last block %s, %d faults",
            engine.shard,
            applied,
            engine.last_block,
            engine.faults.total,
        )
        return applied

    def replay(self, streams: Mapping[Any, Iterable[Event]], max_workers: Optional[int] = None) -> Dict[str, int]:
        """
        Replay several shards concurrently.

        Args:
            streams: shard key -> ordered events of that shard
            max_workers: Thread pool size (defaults to one thread per shard)

        Returns:
            shard key -> number of events applied
        """
        if not streams:
            return {}

        # Create engines up front so the pool never races on the registry
        for shard in streams:
            self.engine(shard)

        workers = max_workers or len(streams)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="govindex-shard") as pool:
            futures = {
                str(shard): pool.submit(self.process, shard, events)
                for shard, events in streams.items()
            }
            return {shard: future.result() for shard, future in futures.items()}

    def get_stats(self) -> Dict[str, Any]:
        return {key: engine.get_stats() for key, engine in sorted(self._engines.items())}

    def snapshot(self) -> Dict[str, Any]:
        return {key: engine.snapshot() for key, engine in sorted(self._engines.items())}
