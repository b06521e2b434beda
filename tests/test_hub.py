"""
Tests for the StatusHub composition root.

Tests verify:
- Welcome snapshot goes to the new connection alone, counting it
- Command replies go only to the sender
- Idempotent disconnect
- Shutdown order: scheduler, connections, probes
"""

import asyncio

import pytest

from shared.config.settings import Settings
from status_hub.components.core.constants import WSCloseCode
from status_hub.components.events.router import CommandOutcome
from status_hub.components.health.probes import Probe, StaticProbe
from status_hub.components.health.table import ServiceStatus
from status_hub.hub import StatusHub


class SlowProbe(Probe):
    def __init__(self, delay: float):
        self.delay = delay

    async def check(self) -> ServiceStatus:
        await asyncio.sleep(self.delay)
        return ServiceStatus.RUNNING


@pytest.fixture
def hub(settings, static_probes):
    return StatusHub(settings, probes=static_probes)


class TestHubConnections:
    """Connection admission and removal."""

    @pytest.mark.asyncio
    async def test_welcome_is_sent_once_with_new_count(self, hub, make_socket):
        first_ws = make_socket()
        await hub.connect(first_ws)
        second_ws = make_socket()

        await hub.connect(second_ws)

        assert len(first_ws.sent) == 1
        [welcome] = second_ws.sent
        assert welcome["type"] == "connection"
        assert welcome["data"]["activeConnections"] == 2
        assert welcome["data"]["services"] == {"hub": "unknown", "templates": "unknown"}
        assert welcome["data"]["timestamp"].endswith("Z")

    @pytest.mark.asyncio
    async def test_welcome_reflects_probe_results(self, hub, make_socket):
        await hub.start()
        await hub.wait_for_probes(timeout=1.0)
        ws = make_socket()

        await hub.connect(ws)

        assert ws.sent[0]["data"]["services"] == {"hub": "running", "templates": "missing"}
        await hub.shutdown()

    @pytest.mark.asyncio
    async def test_double_disconnect(self, hub, make_socket):
        conn = await hub.connect(make_socket())
        await hub.connect(make_socket())

        assert hub.disconnect(conn) is True
        assert hub.disconnect(conn) is False
        assert hub.registry.size() == 1

    @pytest.mark.asyncio
    async def test_accept_failure_is_rejected(self, hub, make_socket):
        ws = make_socket()

        async def broken_accept():
            raise RuntimeError("handshake failed")

        ws.accept = broken_accept

        with pytest.raises(ConnectionError):
            await hub.connect(ws)
        assert hub.registry.size() == 0
        assert hub.metrics.get_snapshot_sync()["connections_rejected"] == 1

    @pytest.mark.asyncio
    async def test_failed_welcome_drops_connection(self, hub, make_socket):
        conn = await hub.connect(make_socket(fail_send=True))

        assert not conn.is_open
        assert hub.registry.size() == 0

    @pytest.mark.asyncio
    async def test_connect_refused_after_shutdown(self, hub, make_socket):
        await hub.shutdown()
        ws = make_socket()

        with pytest.raises(ConnectionError):
            await hub.connect(ws)

        assert ws.close_code == WSCloseCode.GOING_AWAY
        assert ws.sent == []
        assert hub.is_accepting is False


class TestHubMessages:
    """Inbound frames are routed and replied to the sender only."""

    @pytest.mark.asyncio
    async def test_ping_gets_exactly_pong(self, hub, make_socket):
        sender_ws = make_socket()
        other_ws = make_socket()
        sender = await hub.connect(sender_ws)
        await hub.connect(other_ws)
        sender_ws.sent.clear()
        other_ws.sent.clear()

        result = await hub.handle_message(sender, '{"type": "ping"}')

        assert result.outcome is CommandOutcome.REPLY
        assert sender_ws.sent == [{"type": "pong"}]
        assert other_ws.sent == []

    @pytest.mark.asyncio
    async def test_get_services(self, hub, make_socket):
        ws = make_socket()
        conn = await hub.connect(ws)
        hub.table.set_status("hub", ServiceStatus.RUNNING)

        await hub.handle_message(conn, '{"type": "get_services"}')

        assert ws.sent[-1] == {
            "type": "services_update",
            "data": {"hub": "running", "templates": "unknown"},
        }

    @pytest.mark.asyncio
    async def test_unknown_and_malformed_get_no_reply(self, hub, make_socket):
        ws = make_socket()
        conn = await hub.connect(ws)
        ws.sent.clear()

        await hub.handle_message(conn, '{"type": "subscribe"}')
        await hub.handle_message(conn, "garbage")

        assert ws.sent == []
        assert conn.is_open
        stats = hub.metrics.get_snapshot_sync()
        assert stats["messages_received"] == 2
        assert stats["messages_unknown"] == 1
        assert stats["messages_malformed"] == 1

    @pytest.mark.asyncio
    async def test_deeply_nested_frame_dropped(self, hub, make_socket):
        ws = make_socket()
        conn = await hub.connect(ws)
        ws.sent.clear()

        result = await hub.handle_message(conn, "[" * 5000)

        assert result.outcome is CommandOutcome.MALFORMED
        assert ws.sent == []
        assert conn.is_open
        assert hub.metrics.get_snapshot_sync()["messages_malformed"] == 1

    @pytest.mark.asyncio
    async def test_oversized_frame_dropped(self, static_probes, make_socket):
        settings = Settings(_env_file=None, ws_max_message_size=16)
        hub = StatusHub(settings, probes=static_probes)
        ws = make_socket()
        conn = await hub.connect(ws)
        ws.sent.clear()

        result = await hub.handle_message(conn, '{"type": "ping", "padding": "xxxxxxxx"}')

        assert result.outcome is CommandOutcome.MALFORMED
        assert ws.sent == []
        assert conn.is_open

    @pytest.mark.asyncio
    async def test_message_updates_activity(self, hub, make_socket):
        conn = await hub.connect(make_socket())
        conn.last_activity = 0.0

        await hub.handle_message(conn, '{"type": "ping"}')

        assert conn.last_activity > 0.0


class TestHubLifecycle:
    """start() and shutdown()."""

    @pytest.mark.asyncio
    async def test_two_periods_send_two_updates_after_welcome(self, static_probes, make_socket):
        settings = Settings(_env_file=None, broadcast_interval=0.2)
        hub = StatusHub(settings, probes=static_probes)
        await hub.start()
        ws = make_socket()
        await hub.connect(ws)

        await asyncio.sleep(0.5)
        await hub.shutdown()

        assert len(ws.of_type("connection")) == 1
        assert len(ws.of_type("metrics_update")) == 2
        assert ws.sent[0]["type"] == "connection"

    @pytest.mark.asyncio
    async def test_start_launches_probes_without_blocking(self, settings, make_socket):
        hub = StatusHub(settings, probes={"slow": SlowProbe(delay=0.2)})
        await hub.start()
        await asyncio.sleep(0.01)

        ws = make_socket()
        await hub.connect(ws)

        assert ws.sent[0]["data"]["services"] == {"slow": "checking"}
        assert await hub.wait_for_probes(timeout=1.0) is True
        assert hub.table.get_status("slow") is ServiceStatus.RUNNING
        await hub.shutdown()

    @pytest.mark.asyncio
    async def test_shutdown_order(self, hub, make_socket):
        await hub.start()
        ws = make_socket()
        await hub.connect(ws)
        events = []

        original_stop = hub.scheduler.stop
        original_close_all = hub.registry.close_all
        original_table_close = hub.table.close

        async def stop():
            events.append("scheduler")
            await original_stop()

        async def close_all(**kwargs):
            events.append("connections")
            return await original_close_all(**kwargs)

        def table_close():
            events.append("table")
            original_table_close()

        hub.scheduler.stop = stop
        hub.registry.close_all = close_all
        hub.table.close = table_close

        await hub.shutdown()

        assert events == ["scheduler", "connections", "table"]
        assert ws.close_code == WSCloseCode.GOING_AWAY
        assert hub.registry.size() == 0
        assert hub.scheduler.is_running is False

    @pytest.mark.asyncio
    async def test_shutdown_is_idempotent(self, hub):
        await hub.start()
        await hub.shutdown()
        await hub.shutdown()
        assert hub.is_accepting is False

    @pytest.mark.asyncio
    async def test_shutdown_does_not_cancel_straggling_probes(self, make_socket):
        settings = Settings(_env_file=None, shutdown_probe_grace=0.05)
        hub = StatusHub(settings, probes={"slow": SlowProbe(delay=0.3)})
        await hub.start()

        await hub.shutdown()

        [task] = hub.probe_tasks
        assert not task.cancelled()
        await task
        # Result arrived after shutdown and was discarded
        assert hub.table.get_status("slow") is ServiceStatus.CHECKING

    @pytest.mark.asyncio
    async def test_stats(self, hub, make_socket):
        await hub.connect(make_socket())
        hub.table.set_status("hub", ServiceStatus.RUNNING)

        stats = hub.get_stats()

        assert stats["status"] == "running"
        assert stats["active_connections"] == 1
        assert stats["healthy_services"] == 1
        assert stats["total_services"] == 2
        assert stats["started_at"].endswith("Z")
        assert stats["metrics"]["connections_accepted"] == 1
