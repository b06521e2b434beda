"""
Broadcast Scheduler.

Recurring timer that pushes a ``metrics_update`` snapshot to every open
connection. Runs as a single asyncio task on the hub's event loop.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from shared.config.logging import get_logger
from status_hub.components.core.constants import HubConstants

if TYPE_CHECKING:
    from status_hub.components.connection.registry import ConnectionRegistry
    from status_hub.components.health.table import ServiceHealthTable
    from status_hub.components.metrics.collector import MetricsCollector
    from status_hub.components.metrics.snapshot import SnapshotFactory

logger = get_logger(__name__)


class BroadcastScheduler:
    """
    Fires a broadcast tick every ``interval`` seconds.

    Ticks follow a fixed schedule measured from start(). Each tick is bounded
    by the interval, so at most one tick is ever in flight; a deadline that
    passed while a tick was running is skipped rather than queued.

    Usage:
        scheduler = BroadcastScheduler(table, registry, snapshots, interval=30.0)
        scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(
        self,
        table: "ServiceHealthTable",
        registry: "ConnectionRegistry",
        snapshots: "SnapshotFactory",
        interval: float = HubConstants.DEFAULT_BROADCAST_INTERVAL,
        metrics: "MetricsCollector | None" = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be greater than zero")
        self._table = table
        self._registry = registry
        self._snapshots = snapshots
        self._interval = interval
        self._metrics = metrics
        self._task: asyncio.Task | None = None
        self._stopped = False

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the timer task. Must be called from a running event loop."""
        if self.is_running:
            logger.warning("Broadcast scheduler already running")
            return
        self._stopped = False
        self._task = asyncio.create_task(self._run(), name="broadcast_scheduler")
        logger.info("Broadcast scheduler started", interval=self._interval)

    async def stop(self) -> None:
        """
        Cancel the timer. No tick side effect happens after this returns.
        Safe to call more than once.
        """
        self._stopped = True
        task, self._task = self._task, None
        if task is None:
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Broadcast scheduler stopped")

    async def tick(self) -> int:
        """
        Run one broadcast tick.

        Returns:
            Number of connections that received the update.
        """
        if self._stopped:
            return 0

        services = self._table.as_status_map()
        active = self._registry.size()
        snapshot = self._snapshots.build(active_connections=active, services=services)

        if self._stopped:
            return 0
        sent = await self._registry.broadcast(snapshot.to_update_message())

        if self._metrics is not None:
            self._metrics.increment_ticks_sync()
        logger.debug(
            "Broadcast tick",
            sequence=snapshot.sequence,
            active_connections=active,
            sent=sent,
        )
        return sent

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_fire = loop.time() + self._interval

        while not self._stopped:
            await asyncio.sleep(max(0.0, next_fire - loop.time()))
            if self._stopped:
                break

            try:
                await asyncio.wait_for(self.tick(), timeout=self._interval)
            except asyncio.TimeoutError:
                logger.warning("Broadcast tick exceeded interval", interval=self._interval)
                if self._metrics is not None:
                    self._metrics.increment_ticks_failed_sync()
            except Exception as e:
                logger.error("Error in broadcast tick", error=str(e), exc_info=True)
                if self._metrics is not None:
                    self._metrics.increment_ticks_failed_sync()

            next_fire += self._interval
            now = loop.time()
            missed = int((now - next_fire) // self._interval) if now > next_fire else 0
            if missed:
                next_fire += missed * self._interval
                logger.warning("Skipped missed broadcast ticks", missed=missed)
