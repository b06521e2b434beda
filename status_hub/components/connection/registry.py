"""
Connection Registry.

Bookkeeping for open realtime connections plus fan-out send. A connection
is registered while its transport is open and removed exactly once when
the transport goes away.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from enum import Enum
from typing import Any, TYPE_CHECKING

from starlette.websockets import WebSocketState

from shared.config.logging import get_logger
from status_hub.components.core.constants import HubConstants, WSCloseCode
from status_hub.components.core.exceptions import SendFailure

if TYPE_CHECKING:
    from fastapi import WebSocket
    from status_hub.components.metrics.collector import MetricsCollector

logger = get_logger(__name__)


def is_ws_connected(ws: "WebSocket") -> bool:
    """
    Check if WebSocket is in connected state before sending.

    Starlette only exposes CONNECTING/CONNECTED/DISCONNECTED, so a socket
    may still look connected briefly after the peer started closing; the
    send itself is the final check.
    """
    return (
        ws.client_state == WebSocketState.CONNECTED
        and ws.application_state == WebSocketState.CONNECTED
    )


class ConnectionState(str, Enum):
    """Per-connection lifecycle. CLOSED is terminal."""

    OPENING = "opening"
    OPEN = "open"
    CLOSED = "closed"


class Connection:
    """
    Handle to one realtime client channel.

    Holds a non-owning reference to the transport; the ASGI server owns the
    socket itself.
    """

    def __init__(self, websocket: "WebSocket", connection_id: str | None = None) -> None:
        self.id = connection_id or uuid.uuid4().hex
        self.websocket = websocket
        self.state = ConnectionState.OPENING
        self.opened_at = time.time()
        self.last_activity = self.opened_at

    def __repr__(self) -> str:
        return f"<Connection {self.id[:8]} {self.state.value}>"

    @property
    def is_open(self) -> bool:
        return self.state is ConnectionState.OPEN

    def mark_open(self) -> None:
        if self.state is ConnectionState.OPENING:
            self.state = ConnectionState.OPEN

    def mark_closed(self) -> None:
        self.state = ConnectionState.CLOSED

    def touch(self, timestamp: float | None = None) -> None:
        """Record inbound activity."""
        self.last_activity = timestamp if timestamp is not None else time.time()

    async def send_json(
        self,
        payload: dict[str, Any],
        timeout: float = HubConstants.DEFAULT_SEND_TIMEOUT,
    ) -> None:
        """
        Send one JSON message, bounded by ``timeout``.

        Raises:
            SendFailure: the connection is not open, the transport is not
                connected, the send raised or it timed out.
        """
        if not self.is_open or not is_ws_connected(self.websocket):
            raise SendFailure(self.id)
        try:
            await asyncio.wait_for(self.websocket.send_json(payload), timeout=timeout)
        except Exception as e:
            raise SendFailure(self.id, e) from e

    async def close(
        self,
        code: int = WSCloseCode.NORMAL,
        reason: str = "",
        timeout: float = HubConstants.DEFAULT_CLOSE_TIMEOUT,
    ) -> bool:
        """Close the transport if it is still connected. Returns whether a close frame was sent."""
        if not is_ws_connected(self.websocket):
            return False
        try:
            await asyncio.wait_for(
                self.websocket.close(code=code, reason=reason),
                timeout=timeout,
            )
            return True
        except Exception as e:
            logger.debug("Close failed", connection_id=self.id, error=str(e) or type(e).__name__)
            return False


class ConnectionRegistry:
    """
    Set of open connections keyed by connection ID.

    Mutations are synchronous and run on the event loop between awaits, so
    no lock is needed. Fan-out iterates over a copy and applies removals
    after every send has finished.
    """

    def __init__(
        self,
        send_timeout: float = HubConstants.DEFAULT_SEND_TIMEOUT,
        close_timeout: float = HubConstants.DEFAULT_CLOSE_TIMEOUT,
        batch_size: int = HubConstants.DEFAULT_BROADCAST_BATCH_SIZE,
        metrics: "MetricsCollector | None" = None,
    ) -> None:
        """
        Args:
            send_timeout: Bound on a single send.
            close_timeout: Bound on closing a single transport.
            batch_size: Number of concurrent sends per broadcast batch.
            metrics: Optional collector for send/broadcast counters.
        """
        self._connections: dict[str, Connection] = {}
        self._send_timeout = send_timeout
        self._close_timeout = close_timeout
        self._batch_size = max(1, batch_size)
        self._metrics = metrics

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, connection: object) -> bool:
        return isinstance(connection, Connection) and connection.id in self._connections

    def size(self) -> int:
        """Current number of registered connections (for reporting only)."""
        return len(self._connections)

    def connections(self) -> list[Connection]:
        """Copy of the registered connections."""
        return list(self._connections.values())

    def get(self, connection_id: str) -> Connection | None:
        return self._connections.get(connection_id)

    def add(self, connection: Connection) -> bool:
        """
        Register a newly accepted connection and mark it open.

        Returns:
            False if the connection was already registered or already closed.
        """
        if connection.state is ConnectionState.CLOSED:
            logger.warning("Refusing to register closed connection", connection_id=connection.id)
            return False
        if connection.id in self._connections:
            logger.warning("Connection already registered", connection_id=connection.id)
            return False

        connection.mark_open()
        self._connections[connection.id] = connection
        logger.debug("Connection registered", connection_id=connection.id, total=len(self._connections))
        return True

    def remove(self, connection: Connection) -> bool:
        """
        Unregister a connection. Idempotent.

        Returns:
            True if the connection was registered, False if it was already gone.
        """
        removed = self._connections.pop(connection.id, None)
        connection.mark_closed()
        if removed is None:
            return False

        if self._metrics is not None:
            self._metrics.increment_connections_closed_sync()
        logger.debug("Connection removed", connection_id=connection.id, total=len(self._connections))
        return True

    async def _deliver(self, connection: Connection, payload: dict[str, Any]) -> bool:
        """Send without touching the registry; failures are reported, not raised."""
        try:
            await connection.send_json(payload, timeout=self._send_timeout)
            return True
        except SendFailure as e:
            logger.debug(
                "Send failed",
                connection_id=connection.id,
                payload_type=payload.get("type"),
                error=type(e.cause).__name__ if e.cause else "not_connected",
            )
            if self._metrics is not None:
                self._metrics.increment_send_failures_sync()
            return False

    async def send(self, connection: Connection, payload: dict[str, Any]) -> bool:
        """
        Send to a single connection. A failed send unregisters it.

        Returns:
            True if the message was delivered.
        """
        delivered = await self._deliver(connection, payload)
        if not delivered:
            self.remove(connection)
        return delivered

    async def broadcast(self, payload: dict[str, Any]) -> int:
        """
        Send ``payload`` to every registered connection.

        Connections whose send fails are removed once the fan-out has
        finished; the caller never sees their errors.

        Returns:
            Number of connections that received the message.
        """
        targets = self.connections()
        if not targets:
            return 0

        failed: list[Connection] = []
        for i in range(0, len(targets), self._batch_size):
            batch = targets[i : i + self._batch_size]
            results = await asyncio.gather(
                *[self._deliver(conn, payload) for conn in batch],
                return_exceptions=True,
            )
            for conn, result in zip(batch, results):
                if result is not True:
                    failed.append(conn)
                    if isinstance(result, BaseException):
                        logger.debug(
                            "Batch send exception",
                            connection_id=conn.id,
                            error=type(result).__name__,
                        )

        for conn in failed:
            self.remove(conn)

        sent = len(targets) - len(failed)
        if self._metrics is not None:
            self._metrics.increment_broadcast_total_sync()
            self._metrics.add_broadcast_recipients_sync(sent, len(failed))
        if failed:
            logger.debug(
                "Broadcast completed with failures",
                payload_type=payload.get("type"),
                sent=sent,
                failed=len(failed),
                total=len(targets),
            )
        return sent

    async def close_all(
        self,
        code: int = WSCloseCode.GOING_AWAY,
        reason: str = "Server shutdown",
    ) -> int:
        """
        Close every registered transport and unregister it.

        Returns:
            Number of transports that accepted a close frame.
        """
        targets = self.connections()
        results = await asyncio.gather(
            *[conn.close(code=code, reason=reason, timeout=self._close_timeout) for conn in targets],
            return_exceptions=True,
        )
        for conn in targets:
            self.remove(conn)

        closed = sum(1 for r in results if r is True)
        logger.info("Closed all connections", closed=closed, total=len(targets))
        return closed
