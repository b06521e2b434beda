"""
Metrics Collector for the Status Hub.

Counters for observability. Nothing in the hub makes control decisions
from these values.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, asdict
from typing import Any


@dataclass
class BroadcastMetrics:
    """Metrics for broadcast operations."""
    total: int = 0
    recipients_sent: int = 0
    recipients_failed: int = 0
    ticks: int = 0
    ticks_failed: int = 0


@dataclass
class ConnectionMetrics:
    """Metrics for connection management."""
    accepted: int = 0
    closed: int = 0
    rejected: int = 0
    send_failures: int = 0


@dataclass
class MessageMetrics:
    """Metrics for inbound client messages."""
    received: int = 0
    replied: int = 0
    unknown: int = 0
    malformed: int = 0


@dataclass
class ProbeMetrics:
    """Metrics for startup probes."""
    completed: int = 0
    failed: int = 0


class MetricsCollector:
    """
    Metrics collector for the Status Hub.

    Increments are plain synchronous calls so they can be made from any
    hot path without awaiting. A threading lock keeps them safe if a probe
    or test drives the collector from another thread.

    Usage:
        metrics = MetricsCollector()
        metrics.increment_broadcast_total_sync()
        stats = metrics.get_snapshot_sync()
    """

    def __init__(self) -> None:
        self._sync_lock = threading.Lock()
        self._broadcast = BroadcastMetrics()
        self._connection = ConnectionMetrics()
        self._message = MessageMetrics()
        self._probe = ProbeMetrics()

    # ==========================================================================
    # Broadcast Metrics
    # ==========================================================================

    def increment_broadcast_total_sync(self) -> None:
        with self._sync_lock:
            self._broadcast.total += 1

    def add_broadcast_recipients_sync(self, sent: int, failed: int) -> None:
        with self._sync_lock:
            self._broadcast.recipients_sent += sent
            self._broadcast.recipients_failed += failed

    def increment_ticks_sync(self) -> None:
        with self._sync_lock:
            self._broadcast.ticks += 1

    def increment_ticks_failed_sync(self) -> None:
        with self._sync_lock:
            self._broadcast.ticks_failed += 1

    # ==========================================================================
    # Connection Metrics
    # ==========================================================================

    def increment_connections_accepted_sync(self) -> None:
        with self._sync_lock:
            self._connection.accepted += 1

    def increment_connections_closed_sync(self) -> None:
        with self._sync_lock:
            self._connection.closed += 1

    def increment_connections_rejected_sync(self) -> None:
        with self._sync_lock:
            self._connection.rejected += 1

    def increment_send_failures_sync(self) -> None:
        with self._sync_lock:
            self._connection.send_failures += 1

    # ==========================================================================
    # Message Metrics
    # ==========================================================================

    def increment_messages_received_sync(self) -> None:
        with self._sync_lock:
            self._message.received += 1

    def increment_messages_replied_sync(self) -> None:
        with self._sync_lock:
            self._message.replied += 1

    def increment_messages_unknown_sync(self) -> None:
        with self._sync_lock:
            self._message.unknown += 1

    def increment_messages_malformed_sync(self) -> None:
        with self._sync_lock:
            self._message.malformed += 1

    # ==========================================================================
    # Probe Metrics
    # ==========================================================================

    def increment_probes_completed_sync(self) -> None:
        with self._sync_lock:
            self._probe.completed += 1

    def increment_probes_failed_sync(self) -> None:
        with self._sync_lock:
            self._probe.failed += 1

    # ==========================================================================
    # Snapshot
    # ==========================================================================

    def get_snapshot_sync(self) -> dict[str, Any]:
        """Get a copy of all counters."""
        with self._sync_lock:
            return self._get_snapshot_internal()

    def _get_snapshot_internal(self) -> dict[str, Any]:
        """
        Build the snapshot dict.

        Metric names follow ``{category}_{metric}`` with plural categories.
        """
        snapshot: dict[str, Any] = {}
        for category, group in (
            ("broadcasts", self._broadcast),
            ("connections", self._connection),
            ("messages", self._message),
            ("probes", self._probe),
        ):
            for metric, value in asdict(group).items():
                snapshot[f"{category}_{metric}"] = value
        return snapshot

    def reset(self) -> dict[str, Any]:
        """Reset all counters and return the previous values."""
        with self._sync_lock:
            snapshot = self._get_snapshot_internal()
            self._broadcast = BroadcastMetrics()
            self._connection = ConnectionMetrics()
            self._message = MessageMetrics()
            self._probe = ProbeMetrics()
            return snapshot
