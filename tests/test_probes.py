"""
Tests for startup probes.

Tests verify:
- Each probe ends in exactly one terminal status
- Failures and timeouts map to error and never propagate
- Results arriving after the table closed are discarded
"""

import asyncio

import httpx
import pytest

from status_hub.components.health.probes import (
    CallableProbe,
    HttpProbe,
    PathProbe,
    Probe,
    StaticProbe,
    build_default_probes,
    launch_probes,
    run_probe,
)
from status_hub.components.health.table import ServiceHealthTable, ServiceStatus
from status_hub.components.metrics.collector import MetricsCollector


class RaisingProbe(Probe):
    async def check(self) -> ServiceStatus:
        raise RuntimeError("collaborator exploded")


class SlowProbe(Probe):
    def __init__(self, delay: float, status: ServiceStatus = ServiceStatus.RUNNING):
        self.delay = delay
        self.status = status

    async def check(self) -> ServiceStatus:
        await asyncio.sleep(self.delay)
        return self.status


class TestProbeKinds:
    """Individual probe results."""

    @pytest.mark.asyncio
    async def test_static_probe(self):
        assert await StaticProbe(ServiceStatus.RUNNING).check() is ServiceStatus.RUNNING

    @pytest.mark.asyncio
    async def test_path_probe_existing(self, tmp_path):
        target = tmp_path / "package.json"
        target.write_text("{}")
        assert await PathProbe(target).check() is ServiceStatus.RUNNING

    @pytest.mark.asyncio
    async def test_path_probe_missing(self, tmp_path):
        assert await PathProbe(tmp_path / "absent.html").check() is ServiceStatus.MISSING

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code, expected",
        [
            (200, ServiceStatus.RUNNING),
            (204, ServiceStatus.RUNNING),
            (301, ServiceStatus.RUNNING),
            (404, ServiceStatus.MISSING),
            (500, ServiceStatus.ERROR),
            (503, ServiceStatus.ERROR),
        ],
    )
    async def test_http_probe_status_mapping(self, status_code, expected):
        transport = httpx.MockTransport(lambda request: httpx.Response(status_code))
        probe = HttpProbe("http://collaborator.local/health", transport=transport)

        assert await probe.check() is expected

    @pytest.mark.asyncio
    async def test_http_probe_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        probe = HttpProbe("http://collaborator.local/health", transport=httpx.MockTransport(handler))

        with pytest.raises(httpx.ConnectError):
            await probe.check()

    @pytest.mark.asyncio
    async def test_callable_probe_bool(self):
        assert await CallableProbe(lambda: True).check() is ServiceStatus.RUNNING
        assert await CallableProbe(lambda: False).check() is ServiceStatus.MISSING

    @pytest.mark.asyncio
    async def test_callable_probe_coroutine(self):
        async def check():
            return "error"

        assert await CallableProbe(check).check() is ServiceStatus.ERROR

    def test_describe(self, tmp_path):
        assert StaticProbe().describe() == "static:running"
        assert HttpProbe("http://x.local").describe() == "http:http://x.local"
        assert CallableProbe(lambda: True, name="cache").describe() == "callable:cache"


class TestRunProbe:
    """run_probe maps every outcome to a terminal status."""

    @pytest.mark.asyncio
    async def test_success_and_failure_are_isolated(self):
        table = ServiceHealthTable(["A", "B"])
        metrics = MetricsCollector()

        tasks = launch_probes(
            table,
            {"A": StaticProbe(ServiceStatus.RUNNING), "B": RaisingProbe()},
            timeout=1.0,
            metrics=metrics,
        )
        await asyncio.gather(*tasks)

        assert table.as_status_map() == {"A": "running", "B": "error"}
        stats = metrics.get_snapshot_sync()
        assert stats["probes_completed"] == 2
        assert stats["probes_failed"] == 1

    @pytest.mark.asyncio
    async def test_timeout_maps_to_error(self):
        table = ServiceHealthTable(["slow"])

        status = await run_probe(table, "slow", SlowProbe(delay=5.0), timeout=0.05)

        assert status is ServiceStatus.ERROR
        assert table.get_status("slow") is ServiceStatus.ERROR

    @pytest.mark.asyncio
    async def test_non_terminal_result_maps_to_error(self):
        table = ServiceHealthTable(["odd"])

        status = await run_probe(table, "odd", StaticProbe(ServiceStatus.CHECKING), timeout=1.0)

        assert status is ServiceStatus.ERROR

    @pytest.mark.asyncio
    async def test_checking_while_in_flight(self):
        table = ServiceHealthTable(["slow"])
        task = asyncio.create_task(run_probe(table, "slow", SlowProbe(delay=0.1), timeout=1.0))

        await asyncio.sleep(0.01)
        assert table.get_status("slow") is ServiceStatus.CHECKING

        await task
        assert table.get_status("slow") is ServiceStatus.RUNNING

    @pytest.mark.asyncio
    async def test_no_service_left_checking(self):
        names = ["a", "b", "c", "d"]
        table = ServiceHealthTable(names)
        probes = {
            "a": StaticProbe(ServiceStatus.RUNNING),
            "b": RaisingProbe(),
            "c": SlowProbe(delay=5.0),
            "d": StaticProbe(ServiceStatus.MISSING),
        }

        await asyncio.gather(*launch_probes(table, probes, timeout=0.05))

        statuses = table.as_status_map()
        assert "checking" not in statuses.values()
        assert "unknown" not in statuses.values()

    @pytest.mark.asyncio
    async def test_late_result_discarded_after_close(self):
        table = ServiceHealthTable(["late"])
        task = asyncio.create_task(run_probe(table, "late", SlowProbe(delay=0.1), timeout=1.0))

        await asyncio.sleep(0.01)
        table.close()
        status = await task

        assert status is ServiceStatus.RUNNING
        assert table.get_status("late") is ServiceStatus.CHECKING

    @pytest.mark.asyncio
    async def test_launch_names_tasks(self):
        table = ServiceHealthTable(["A"])
        tasks = launch_probes(table, {"A": StaticProbe()})
        await asyncio.gather(*tasks)

        assert tasks[0].get_name() == "probe:A"


class TestDefaultProbes:
    """Standard monitored services."""

    def test_default_service_names(self, settings):
        probes = build_default_probes(settings)

        assert list(probes) == [
            "mvp-compactor",
            "finishthisidea-complete",
            "template-processor",
            "static-files",
        ]
        assert isinstance(probes["finishthisidea-complete"], PathProbe)
        assert isinstance(probes["mvp-compactor"], StaticProbe)

    @pytest.mark.asyncio
    async def test_missing_collaborator_is_missing_not_error(self, settings):
        probes = build_default_probes(settings)
        table = ServiceHealthTable(probes)

        await asyncio.gather(*launch_probes(table, probes, timeout=1.0))

        assert table.get_status("finishthisidea-complete") is ServiceStatus.MISSING
        assert table.get_status("mvp-compactor") is ServiceStatus.RUNNING
