"""
Service Health Table.

Last-known status of each monitored backend service. The set of service
names is fixed when the table is built; updates only ever replace the
status of an existing entry.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping

from shared.config.logging import get_logger
from status_hub.components.core.exceptions import UnknownService

logger = get_logger(__name__)


class ServiceStatus(str, Enum):
    """Lifecycle of a monitored service's status."""

    UNKNOWN = "unknown"
    CHECKING = "checking"
    RUNNING = "running"
    MISSING = "missing"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        """Whether a probe can finish in this status."""
        return self in _TERMINAL_STATUSES


_TERMINAL_STATUSES = frozenset({ServiceStatus.RUNNING, ServiceStatus.MISSING, ServiceStatus.ERROR})


@dataclass(frozen=True)
class ServiceEntry:
    """One row of the table."""

    name: str
    status: ServiceStatus = ServiceStatus.UNKNOWN
    last_checked: datetime | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "name": self.name,
            "status": self.status.value,
            "lastChecked": self.last_checked.isoformat() if self.last_checked else None,
        }


class ServiceHealthTable:
    """
    Mapping of service name to ServiceEntry with a static key set.

    All mutations happen on the event loop thread between awaits, so the
    table needs no lock. Readers get snapshots and never see the internal
    dict.

    Usage:
        table = ServiceHealthTable(["api", "templates"])
        table.set_status("api", ServiceStatus.RUNNING)
        table.snapshot()["api"].status  # ServiceStatus.RUNNING
    """

    def __init__(
        self,
        names: Iterable[str],
        initial: Mapping[str, ServiceStatus] | None = None,
    ) -> None:
        """
        Args:
            names: Monitored service names. Duplicates are collapsed.
            initial: Optional starting status per name (default ``unknown``).
        """
        initial = initial or {}
        self._entries: dict[str, ServiceEntry] = {}
        for name in names:
            self._entries[name] = ServiceEntry(name, initial.get(name, ServiceStatus.UNKNOWN))

        unexpected = set(initial) - set(self._entries)
        if unexpected:
            raise UnknownService(sorted(unexpected)[0])

        self._closed = False

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def names(self) -> tuple[str, ...]:
        """Configured service names in configuration order."""
        return tuple(self._entries)

    @property
    def is_closed(self) -> bool:
        """Whether the owning hub has shut down."""
        return self._closed

    def close(self) -> None:
        """Mark the table as torn down; late probe results are discarded."""
        self._closed = True

    def set_status(self, name: str, status: ServiceStatus | str) -> ServiceEntry:
        """
        Update the status of one service.

        Raises:
            UnknownService: ``name`` is not a configured service. The table
                is left unchanged.
        """
        current = self._entries.get(name)
        if current is None:
            raise UnknownService(name)

        status = ServiceStatus(status)
        updated = replace(current, status=status, last_checked=datetime.now(timezone.utc))
        self._entries[name] = updated

        if current.status != status:
            logger.debug(
                "Service status changed",
                service=name,
                previous=current.status.value,
                status=status.value,
            )
        return updated

    def get_status(self, name: str) -> ServiceStatus:
        """Current status of ``name``; raises UnknownService if not configured."""
        entry = self._entries.get(name)
        if entry is None:
            raise UnknownService(name)
        return entry.status

    def snapshot(self) -> Mapping[str, ServiceEntry]:
        """Read-only copy of the table. Entries are immutable."""
        return MappingProxyType(dict(self._entries))

    def as_status_map(self) -> dict[str, str]:
        """Fresh ``{name: status}`` dict for wire payloads."""
        return {name: entry.status.value for name, entry in self._entries.items()}

    def healthy_count(self) -> int:
        """Number of services currently ``running``."""
        return sum(1 for entry in self._entries.values() if entry.status is ServiceStatus.RUNNING)
