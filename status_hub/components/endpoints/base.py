"""
WebSocket Endpoint.

Per-connection loop for ``/ws``: admit through the hub, receive and
dispatch frames until the transport closes, then unregister.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import WebSocket, WebSocketDisconnect

from shared.config.logging import audit_ws_connection, get_logger
from shared.infrastructure.correlation import bind_connection_id
from status_hub.components.core.constants import WS_ENDPOINT_PATH, WSCloseCode

if TYPE_CHECKING:
    from status_hub.components.connection.registry import Connection
    from status_hub.hub import StatusHub

logger = get_logger(__name__)


class HubEndpoint:
    """
    Runs one realtime client connection against a StatusHub.

    Lifecycle:
    1. hub.connect() accepts, registers and sends the welcome snapshot
    2. Message loop: every frame goes to hub.handle_message()
    3. hub.disconnect() on close or error (idempotent)

    Usage:
        @app.websocket("/ws")
        async def ws(websocket: WebSocket):
            await HubEndpoint(websocket, websocket.app.state.hub).run()
    """

    def __init__(
        self,
        websocket: WebSocket,
        hub: "StatusHub",
        endpoint_name: str = WS_ENDPOINT_PATH,
    ):
        """
        Args:
            websocket: The WebSocket connection.
            hub: StatusHub instance.
            endpoint_name: Name for logging.
        """
        self.websocket = websocket
        self.hub = hub
        self.endpoint_name = endpoint_name
        self.connection: "Connection | None" = None

    @property
    def origin(self) -> str | None:
        return self.websocket.headers.get("origin")

    async def run(self) -> None:
        """Main entry point - serve the connection until it closes."""
        try:
            self.connection = await self.hub.connect(self.websocket)
        except ConnectionError as e:
            logger.warning("WebSocket connection rejected", endpoint=self.endpoint_name, reason=str(e))
            audit_ws_connection(
                event_type="REJECTED",
                endpoint=self.endpoint_name,
                origin=self.origin,
                reason=str(e),
            )
            return

        connection = self.connection
        audit_ws_connection(
            event_type="CONNECT",
            endpoint=self.endpoint_name,
            connection_id=connection.id,
            origin=self.origin,
        )

        reason = "server_closed"
        with bind_connection_id(connection.id):
            try:
                await self._message_loop(connection)
            except WebSocketDisconnect as e:
                reason = f"client_disconnect:{e.code}"
            except RuntimeError as e:
                # Starlette raises RuntimeError when receiving on a closed socket
                reason = "transport_closed"
                logger.debug("Receive on closed transport", error=str(e))
            finally:
                self.hub.disconnect(connection)
                # The registry may have dropped us after a failed send
                await connection.close(code=WSCloseCode.NORMAL)
                audit_ws_connection(
                    event_type="DISCONNECT",
                    endpoint=self.endpoint_name,
                    connection_id=connection.id,
                    reason=reason,
                )

    async def _message_loop(self, connection: "Connection") -> None:
        """Receive frames until the transport closes or the hub drops the connection."""
        while connection.is_open:
            data = await self._receive()
            await self.hub.handle_message(connection, data)

    async def _receive(self) -> str | bytes:
        """
        Receive one frame, text or binary.

        Raises:
            WebSocketDisconnect: the client closed the connection.
        """
        message = await self.websocket.receive()
        if message["type"] == "websocket.disconnect":
            raise WebSocketDisconnect(
                code=message.get("code", WSCloseCode.NORMAL),
                reason=message.get("reason"),
            )
        text = message.get("text")
        if text is not None:
            return text
        return message.get("bytes") or b""
