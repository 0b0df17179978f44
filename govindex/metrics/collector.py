"""
govindex Prometheus Metrics Collector

Renders the Prometheus text exposition format (0.0.4) directly, so the
indexer has no client library requirement.

Metric types:
    - Counter:   monotonically increasing (e.g. events processed)
    - Gauge:     can go up and down (e.g. current token holders)
    - Histogram: per-event processing latency with fixed buckets
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Union


# ---------------------------------------------------------------------------
# Metric primitives
# ---------------------------------------------------------------------------

@dataclass
class _Metric:
    name: str
    help: str = ""
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    kind = "untyped"

    def _header(self) -> List[str]:
        lines = [f"# HELP {self.name} {self.help}"] if self.help else []
        lines.append(f"# TYPE {self.name} {self.kind}")
        return lines

    def _samples(self) -> List[str]:
        raise NotImplementedError

    def expose(self) -> str:
        with self._lock:
            return "\n".join(self._header() + self._samples())


@dataclass
class Counter(_Metric):
    """Monotonically increasing counter."""
    _value: float = 0.0

    kind = "counter"

    def inc(self, amount: float = 1.0) -> None:
        if amount < 0:
            raise ValueError(f"{self.name}: counters only go up")
        with self._lock:
            self._value += amount

    @property
    def value(self) -> float:
        return self._value

    def _samples(self) -> List[str]:
        return [f"{self.name} {self._value}"]


@dataclass
class Gauge(_Metric):
    """Gauge that can go up and down."""
    _value: float = 0.0

    kind = "gauge"

    def set(self, value: float) -> None:
        with self._lock:
            self._value = value

    def inc(self, amount: float = 1.0) -> None:
        with self._lock:
            self._value += amount

    def dec(self, amount: float = 1.0) -> None:
        self.inc(-amount)

    @property
    def value(self) -> float:
        return self._value

    def _samples(self) -> List[str]:
        return [f"{self.name} {self._value}"]


# In-memory transitions; buckets start well below a millisecond
DEFAULT_BUCKETS: Tuple[float, ...] = (
    0.00005, 0.0001, 0.00025, 0.0005, 0.001, 0.0025, 0.005, 0.01, 0.05, 0.1,
)


@dataclass
class Histogram(_Metric):
    """Latency histogram; ``observe`` bumps one bucket, ``expose`` accumulates."""
    buckets: Tuple[float, ...] = DEFAULT_BUCKETS
    _hits: List[int] = field(default_factory=list, repr=False)
    _sum: float = 0.0
    _count: int = 0

    kind = "histogram"

    def __post_init__(self):
        self.buckets = tuple(sorted(self.buckets))
        self._hits = [0] * len(self.buckets)

    def observe(self, value: float) -> None:
        with self._lock:
            self._sum += value
            self._count += 1
            for i, bound in enumerate(self.buckets):
                if value <= bound:
                    self._hits[i] += 1
                    break

    @property
    def count(self) -> int:
        return self._count

    def _samples(self) -> List[str]:
        lines = []
        cumulative = 0
        for bound, hits in zip(self.buckets, self._hits):
            cumulative += hits
            lines.append(f'{self.name}_bucket{{le="{bound}"}} {cumulative}')
        lines.append(f'{self.name}_bucket{{le="+Inf"}} {self._count}')
        lines.append(f"{self.name}_sum {self._sum}")
        lines.append(f"{self.name}_count {self._count}")
        return lines


AnyMetric = Union[Counter, Gauge, Histogram]


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class MetricsRegistry:
    """Metrics by name, rendered together in registration order."""

    def __init__(self):
        self._metrics: Dict[str, AnyMetric] = {}
        self._lock = threading.Lock()

    def register(self, metric: AnyMetric) -> AnyMetric:
        with self._lock:
            if metric.name in self._metrics:
                raise ValueError(f"Metric already registered: {metric.name}")
            self._metrics[metric.name] = metric
        return metric

    def expose(self) -> str:
        with self._lock:
            metrics = list(self._metrics.values())
        return "\n\n".join(m.expose() for m in metrics) + "\n"


# ---------------------------------------------------------------------------
# Indexer collector
# ---------------------------------------------------------------------------

class IndexerMetrics:
    """
    Metrics for one aggregation engine.

    The engine and its fault sink update these as events are applied;
    ``expose()`` returns the Prometheus text body.
    """

    def __init__(self):
        self.registry = MetricsRegistry()
        add = self.registry.register

        self.events_processed = add(Counter(
            "govindex_events_processed_total", "Total events applied"))
        self.events_failed = add(Counter(
            "govindex_events_failed_total", "Events whose transition raised and was rolled back"))
        self.event_processing_time = add(Histogram(
            "govindex_event_processing_seconds", "Per-event transition time in seconds"))
        self.last_block = add(Gauge(
            "govindex_last_block", "Block number of the last applied event"))

        self.integrity_faults = add(Counter(
            "govindex_integrity_faults_total", "Integrity faults reported by transitions"))
        self.processing_faults = add(Counter(
            "govindex_processing_faults_total", "Rolled-back or unhandled events"))

        self.current_token_holders = add(Gauge(
            "govindex_current_token_holders", "Token holders with a positive balance"))
        self.current_delegates = add(Gauge(
            "govindex_current_delegates", "Delegates with positive delegated votes"))
        self.proposals = add(Gauge(
            "govindex_proposals", "Proposals created"))

        self.uptime_seconds = add(Gauge(
            "govindex_uptime_seconds", "Engine uptime in seconds"))
        self._start_time = time.time()

    def observe_governance(self, governance) -> None:
        """Copy the aggregate counters into gauges."""
        self.current_token_holders.set(governance.current_token_holders)
        self.current_delegates.set(governance.current_delegates)
        self.proposals.set(governance.proposals)

    def expose(self) -> str:
        self.uptime_seconds.set(time.time() - self._start_time)
        return self.registry.expose()
