"""
Pytest configuration and fixtures for status hub tests.
"""

import asyncio
from typing import Any

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketState

from shared.config.settings import Settings
from status_hub.components.connection.registry import Connection
from status_hub.components.health.probes import StaticProbe
from status_hub.components.health.table import ServiceStatus
from status_hub.main import create_app


class FakeWebSocket:
    """
    In-memory stand-in for a Starlette WebSocket.

    Records every JSON payload sent and the close code. ``fail_send`` makes
    every send raise; ``send_delay`` makes every send slow.
    """

    def __init__(self, fail_send: bool = False, send_delay: float = 0.0, accept_delay: float = 0.0):
        self.client_state = WebSocketState.CONNECTING
        self.application_state = WebSocketState.CONNECTING
        self.headers: dict[str, str] = {}
        self.sent: list[dict[str, Any]] = []
        self.close_code: int | None = None
        self.close_reason: str | None = None
        self.fail_send = fail_send
        self.send_delay = send_delay
        self.accept_delay = accept_delay
        self.incoming: list[dict[str, Any]] = []

    async def accept(self) -> None:
        if self.accept_delay:
            await asyncio.sleep(self.accept_delay)
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED

    async def send_json(self, payload: dict[str, Any]) -> None:
        if self.send_delay:
            await asyncio.sleep(self.send_delay)
        if self.fail_send:
            raise ConnectionError("WebSocket closed")
        self.sent.append(payload)

    def queue_text(self, text: str) -> None:
        self.incoming.append({"type": "websocket.receive", "text": text})

    async def receive(self) -> dict[str, Any]:
        """Replay queued frames, then report a client disconnect."""
        if self.incoming:
            return self.incoming.pop(0)
        self.client_state = WebSocketState.DISCONNECTED
        return {"type": "websocket.disconnect", "code": 1000}

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        self.close_code = code
        self.close_reason = reason
        self.application_state = WebSocketState.DISCONNECTED

    def of_type(self, message_type: str) -> list[dict[str, Any]]:
        return [m for m in self.sent if m.get("type") == message_type]


def open_connection(**kwargs: Any) -> Connection:
    """A Connection whose fake transport is already accepted."""
    websocket = FakeWebSocket(**kwargs)
    websocket.client_state = WebSocketState.CONNECTED
    websocket.application_state = WebSocketState.CONNECTED
    return Connection(websocket)


@pytest.fixture
def make_socket():
    """Factory for FakeWebSocket instances."""
    return FakeWebSocket


@pytest.fixture
def make_connection():
    """Factory for registered-ready Connections over fake transports."""
    return open_connection


@pytest.fixture
def settings():
    """Settings isolated from the environment, with fast timings."""
    return Settings(
        _env_file=None,
        environment="test",
        debug=False,
        broadcast_interval=30.0,
        probe_timeout=1.0,
        shutdown_probe_grace=0.5,
        ws_send_timeout=0.5,
        ws_accept_timeout=1.0,
        document_generate_delay=0.01,
        platform_entry_path="does-not-exist/platform-hub.html",
    )


@pytest.fixture
def static_probes():
    """Two services that resolve immediately."""
    return {
        "hub": StaticProbe(ServiceStatus.RUNNING),
        "templates": StaticProbe(ServiceStatus.MISSING),
    }


@pytest.fixture
def app(settings, static_probes):
    return create_app(settings, probes=static_probes)


@pytest.fixture
def client(app):
    """Test client with the app lifespan (hub start/shutdown) running."""
    with TestClient(app) as test_client:
        yield test_client
