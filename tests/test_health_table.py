"""
Tests for the ServiceHealthTable.
"""

import pytest

from status_hub.components.core.exceptions import UnknownService
from status_hub.components.health.table import ServiceHealthTable, ServiceStatus

SERVICES = ["mvp-compactor", "template-processor", "static-files"]


class TestServiceHealthTable:
    """Fixed key set and guarded updates."""

    def test_fresh_table_is_all_unknown(self):
        table = ServiceHealthTable(SERVICES)

        assert table.as_status_map() == {name: "unknown" for name in SERVICES}
        assert table.healthy_count() == 0
        assert len(table) == 3

    def test_set_status_updates_one_entry(self):
        table = ServiceHealthTable(SERVICES)

        entry = table.set_status("static-files", ServiceStatus.RUNNING)

        assert entry.status is ServiceStatus.RUNNING
        assert entry.last_checked is not None
        assert table.get_status("static-files") is ServiceStatus.RUNNING
        assert table.get_status("mvp-compactor") is ServiceStatus.UNKNOWN

    def test_set_status_accepts_string_value(self):
        table = ServiceHealthTable(SERVICES)
        table.set_status("mvp-compactor", "missing")
        assert table.get_status("mvp-compactor") is ServiceStatus.MISSING

    def test_unknown_service_raises_and_leaves_table_unchanged(self):
        table = ServiceHealthTable(SERVICES)
        table.set_status("mvp-compactor", ServiceStatus.RUNNING)
        before = table.as_status_map()

        with pytest.raises(UnknownService) as exc_info:
            table.set_status("database", ServiceStatus.RUNNING)

        assert exc_info.value.name == "database"
        assert table.as_status_map() == before
        assert "database" not in table

    def test_get_status_unknown_service(self):
        table = ServiceHealthTable(SERVICES)
        with pytest.raises(UnknownService):
            table.get_status("database")

    def test_unknown_service_is_a_key_error(self):
        table = ServiceHealthTable(SERVICES)
        with pytest.raises(KeyError):
            table.get_status("database")

    def test_snapshot_is_read_only_copy(self):
        table = ServiceHealthTable(SERVICES)
        snapshot = table.snapshot()

        with pytest.raises(TypeError):
            snapshot["mvp-compactor"] = None  # type: ignore[index]

        table.set_status("mvp-compactor", ServiceStatus.RUNNING)
        assert snapshot["mvp-compactor"].status is ServiceStatus.UNKNOWN

    def test_status_map_is_detached(self):
        table = ServiceHealthTable(SERVICES)
        status_map = table.as_status_map()
        status_map["mvp-compactor"] = "running"

        assert table.get_status("mvp-compactor") is ServiceStatus.UNKNOWN

    def test_healthy_count(self):
        table = ServiceHealthTable(SERVICES)
        table.set_status("mvp-compactor", ServiceStatus.RUNNING)
        table.set_status("static-files", ServiceStatus.RUNNING)
        table.set_status("template-processor", ServiceStatus.ERROR)

        assert table.healthy_count() == 2

    def test_initial_statuses(self):
        table = ServiceHealthTable(SERVICES, initial={"static-files": ServiceStatus.RUNNING})
        assert table.get_status("static-files") is ServiceStatus.RUNNING

    def test_initial_status_for_unconfigured_service(self):
        with pytest.raises(UnknownService):
            ServiceHealthTable(SERVICES, initial={"database": ServiceStatus.RUNNING})

    def test_entry_to_dict(self):
        table = ServiceHealthTable(SERVICES)
        entry = table.set_status("mvp-compactor", ServiceStatus.RUNNING)

        data = entry.to_dict()

        assert data["name"] == "mvp-compactor"
        assert data["status"] == "running"
        assert data["lastChecked"] is not None

    def test_close(self):
        table = ServiceHealthTable(SERVICES)
        assert table.is_closed is False
        table.close()
        assert table.is_closed is True


class TestServiceStatus:
    """Terminal statuses are the ones a probe can finish in."""

    @pytest.mark.parametrize(
        "status, terminal",
        [
            (ServiceStatus.UNKNOWN, False),
            (ServiceStatus.CHECKING, False),
            (ServiceStatus.RUNNING, True),
            (ServiceStatus.MISSING, True),
            (ServiceStatus.ERROR, True),
        ],
    )
    def test_is_terminal(self, status, terminal):
        assert status.is_terminal is terminal
