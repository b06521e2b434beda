"""
Status Hub - composition root.

Owns the service table, the connection registry, the broadcast scheduler,
the command router and the metrics collector, and wires connection
open/close, startup probing and shutdown together.

One StatusHub per application; create_app() stores it on ``app.state.hub``.
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, TYPE_CHECKING

from shared.config.logging import get_logger
from status_hub.components.broadcast.scheduler import BroadcastScheduler
from status_hub.components.connection.registry import Connection, ConnectionRegistry
from status_hub.components.core.constants import HubConstants, WSCloseCode
from status_hub.components.core.context import sanitize_log_data
from status_hub.components.events.router import CommandOutcome, CommandResult, CommandRouter
from status_hub.components.health.probes import Probe, build_default_probes, launch_probes
from status_hub.components.health.table import ServiceHealthTable
from status_hub.components.metrics.collector import MetricsCollector
from status_hub.components.metrics.snapshot import MetricsSnapshot, SnapshotFactory, utc_timestamp

if TYPE_CHECKING:
    from fastapi import WebSocket
    from shared.config.settings import Settings

logger = get_logger(__name__)


class StatusHub:
    """
    Realtime status hub.

    Usage:
        hub = StatusHub(settings)
        await hub.start()
        connection = await hub.connect(websocket)
        await hub.handle_message(connection, raw_text)
        hub.disconnect(connection)
        await hub.shutdown()
    """

    def __init__(
        self,
        settings: "Settings",
        probes: Mapping[str, Probe] | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        """
        Args:
            settings: Application settings (timeouts, interval, probe paths).
            probes: Service name -> probe. Defaults to build_default_probes().
            metrics: Collector to report into. A new one is created if omitted.
        """
        self.settings = settings
        self.metrics = metrics or MetricsCollector()
        self.probes: dict[str, Probe] = (
            dict(probes) if probes is not None else build_default_probes(settings)
        )

        self.table = ServiceHealthTable(self.probes)
        self.registry = ConnectionRegistry(
            send_timeout=settings.ws_send_timeout,
            close_timeout=HubConstants.DEFAULT_CLOSE_TIMEOUT,
            batch_size=settings.ws_broadcast_batch_size,
            metrics=self.metrics,
        )
        self.snapshots = SnapshotFactory()
        self.router = CommandRouter(self.table)
        self.scheduler = BroadcastScheduler(
            self.table,
            self.registry,
            self.snapshots,
            interval=settings.broadcast_interval,
            metrics=self.metrics,
        )

        self._probe_tasks: list[asyncio.Task] = []
        self._started = False
        self._shutting_down = False

    @property
    def is_accepting(self) -> bool:
        """Whether new connections are admitted."""
        return not self._shutting_down

    @property
    def probe_tasks(self) -> list[asyncio.Task]:
        """Startup probe tasks launched by start()."""
        return list(self._probe_tasks)

    def uptime(self) -> float:
        """Seconds since the hub was created."""
        return self.snapshots.uptime()

    # =========================================================================
    # Process lifecycle
    # =========================================================================

    async def start(self) -> None:
        """
        Launch all startup probes and start the broadcast scheduler.

        Probes run in the background; connections are accepted while they
        are still in flight.
        """
        if self._started:
            logger.warning("Status hub already started")
            return
        self._started = True

        self._probe_tasks = launch_probes(
            self.table,
            self.probes,
            timeout=self.settings.probe_timeout,
            metrics=self.metrics,
        )
        self.scheduler.start()
        logger.info(
            "Status hub started",
            services=list(self.table.names),
            broadcast_interval=self.scheduler.interval,
        )

    async def wait_for_probes(self, timeout: float | None = None) -> bool:
        """
        Wait for the startup probes to finish.

        Returns:
            True if every probe finished within ``timeout``.
        """
        pending = [task for task in self._probe_tasks if not task.done()]
        if not pending:
            return True
        _, still_pending = await asyncio.wait(pending, timeout=timeout)
        return not still_pending

    async def shutdown(self) -> None:
        """
        Stop the hub.

        Order: scheduler first (no broadcast after this point), then every
        open connection is closed with 1001, then the table is closed and
        straggling probes get a bounded grace period. In-flight probes are
        not cancelled; their late results are discarded by the closed table.
        Safe to call more than once.
        """
        if self._shutting_down:
            return
        self._shutting_down = True
        logger.info("Status hub shutting down", active_connections=self.registry.size())

        await self.scheduler.stop()

        await self.registry.close_all(
            code=WSCloseCode.GOING_AWAY,
            reason="Server shutdown",
        )

        self.table.close()

        if not await self.wait_for_probes(timeout=self.settings.shutdown_probe_grace):
            pending = [t.get_name() for t in self._probe_tasks if not t.done()]
            logger.warning("Probes still running at shutdown", pending=pending)

        logger.info("Status hub shutdown complete")

    # =========================================================================
    # Connection lifecycle
    # =========================================================================

    async def connect(self, websocket: "WebSocket") -> Connection:
        """
        Accept a transport, register it and push the welcome snapshot.

        The welcome ``connection`` message goes to this connection alone and
        counts it in ``activeConnections``.

        Raises:
            ConnectionError: the hub is shutting down or the accept failed.
        """
        if self._shutting_down:
            await self._refuse(websocket)
            raise ConnectionError("Status hub is shutting down")

        try:
            await asyncio.wait_for(websocket.accept(), timeout=self.settings.ws_accept_timeout)
        except Exception as e:
            self.metrics.increment_connections_rejected_sync()
            raise ConnectionError(f"WebSocket accept failed: {type(e).__name__}") from e

        connection = Connection(websocket)

        # Shutdown may have started while the accept was pending
        if self._shutting_down:
            connection.mark_closed()
            await connection.close(code=WSCloseCode.GOING_AWAY, reason="Server shutdown")
            self.metrics.increment_connections_rejected_sync()
            raise ConnectionError("Status hub is shutting down")

        if not self.registry.add(connection):
            self.metrics.increment_connections_rejected_sync()
            raise ConnectionError("Connection could not be registered")

        self.metrics.increment_connections_accepted_sync()
        logger.info(
            "Client connected",
            connection_id=connection.id,
            active_connections=self.registry.size(),
        )

        await self.registry.send(connection, self.build_snapshot().to_welcome_message())
        return connection

    def disconnect(self, connection: Connection) -> bool:
        """
        Unregister a connection after its transport closed or errored.

        Idempotent; returns False if it was already gone.
        """
        removed = self.registry.remove(connection)
        if removed:
            logger.info(
                "Client disconnected",
                connection_id=connection.id,
                active_connections=self.registry.size(),
            )
        return removed

    async def _refuse(self, websocket: "WebSocket") -> None:
        self.metrics.increment_connections_rejected_sync()
        try:
            await websocket.close(code=WSCloseCode.GOING_AWAY, reason="Server shutting down")
        except Exception as e:
            logger.debug("Refusing close failed", error=str(e) or type(e).__name__)

    # =========================================================================
    # Messages
    # =========================================================================

    async def handle_message(self, connection: Connection, raw: str | bytes) -> CommandResult:
        """
        Route one inbound frame and send the reply, if any, to its sender.

        Frames larger than ``ws_max_message_size`` are dropped as malformed;
        the connection stays open.
        """
        connection.touch()
        self.metrics.increment_messages_received_sync()

        if len(raw) > self.settings.ws_max_message_size:
            logger.warning(
                "Dropping oversized message",
                connection_id=connection.id,
                size=len(raw),
                max_size=self.settings.ws_max_message_size,
                preview=sanitize_log_data(raw[: HubConstants.LOG_MESSAGE_PREVIEW]),
            )
            self.metrics.increment_messages_malformed_sync()
            return CommandResult(CommandOutcome.MALFORMED)

        result = self.router.route(connection, raw)

        if result.outcome is CommandOutcome.MALFORMED:
            self.metrics.increment_messages_malformed_sync()
        elif result.outcome is CommandOutcome.UNKNOWN:
            self.metrics.increment_messages_unknown_sync()
        elif result.reply is not None:
            if await self.registry.send(connection, result.reply):
                self.metrics.increment_messages_replied_sync()
        return result

    # =========================================================================
    # Reporting
    # =========================================================================

    def build_snapshot(self) -> MetricsSnapshot:
        """Fresh snapshot of the current hub state."""
        return self.snapshots.build(
            active_connections=self.registry.size(),
            services=self.table.as_status_map(),
        )

    def get_stats(self) -> dict[str, Any]:
        """Hub state and counters for health/metrics endpoints."""
        return {
            "status": "shutting_down" if self._shutting_down else "running",
            "started_at": utc_timestamp(self.snapshots.started_at),
            "uptime": int(self.uptime()),
            "active_connections": self.registry.size(),
            "services": self.table.as_status_map(),
            "healthy_services": self.table.healthy_count(),
            "total_services": len(self.table),
            "broadcast_interval": self.scheduler.interval,
            "scheduler_running": self.scheduler.is_running,
            "metrics": self.metrics.get_snapshot_sync(),
        }
