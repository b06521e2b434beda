"""
Metrics Snapshot.

Immutable point-in-time view of the hub, built fresh for every welcome
push and every broadcast tick.
"""

from __future__ import annotations

import itertools
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping

from status_hub.components.core.constants import MessageType


def utc_timestamp(moment: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class MetricsSnapshot:
    """Hub state at one instant."""

    sequence: int
    uptime_seconds: int
    active_connections: int
    services: Mapping[str, str] = field(default_factory=dict)
    timestamp: str = field(default_factory=utc_timestamp)

    def __post_init__(self) -> None:
        # Freeze a private copy so the caller's dict cannot leak mutations in
        object.__setattr__(self, "services", MappingProxyType(dict(self.services)))

    def to_welcome_message(self) -> dict[str, Any]:
        """``connection`` message sent to a client right after accept."""
        return {
            "type": MessageType.CONNECTION,
            "data": {
                "activeConnections": self.active_connections,
                "services": dict(self.services),
                "timestamp": self.timestamp,
            },
        }

    def to_update_message(self) -> dict[str, Any]:
        """``metrics_update`` message pushed on every broadcast tick."""
        return {
            "type": MessageType.METRICS_UPDATE,
            "data": {
                "uptime": self.uptime_seconds,
                "activeConnections": self.active_connections,
                "services": dict(self.services),
                "timestamp": self.timestamp,
            },
        }


class SnapshotFactory:
    """
    Builds MetricsSnapshot values from live hub state.

    Holds only the process start time and the sequence counter; everything
    else is read at build time, so snapshots are never cached.
    """

    def __init__(self, started_at: float | None = None) -> None:
        self._started_at = started_at if started_at is not None else time.monotonic()
        self._started_wall = datetime.now(timezone.utc)
        self._sequence = itertools.count(1)

    @property
    def started_at(self) -> datetime:
        """Wall-clock start time (UTC)."""
        return self._started_wall

    def uptime(self) -> float:
        """Seconds since the hub was created."""
        return max(0.0, time.monotonic() - self._started_at)

    def build(self, active_connections: int, services: Mapping[str, str]) -> MetricsSnapshot:
        return MetricsSnapshot(
            sequence=next(self._sequence),
            uptime_seconds=int(self.uptime()),
            active_connections=active_connections,
            services=services,
        )
