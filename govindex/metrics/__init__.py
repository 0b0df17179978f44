"""
govindex Metrics Module

Prometheus-compatible metrics for monitoring a replay.
"""

from .collector import (
    IndexerMetrics,
    Counter,
    Gauge,
    Histogram,
    MetricsRegistry,
)

__all__ = [
    "IndexerMetrics",
    "Counter",
    "Gauge",
    "Histogram",
    "MetricsRegistry",
]
