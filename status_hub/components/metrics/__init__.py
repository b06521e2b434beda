"""
Observability: counters and point-in-time hub snapshots.
"""

from status_hub.components.metrics.collector import MetricsCollector
from status_hub.components.metrics.snapshot import (
    MetricsSnapshot,
    SnapshotFactory,
    utc_timestamp,
)

__all__ = [
    "MetricsCollector",
    "MetricsSnapshot",
    "SnapshotFactory",
    "utc_timestamp",
]
