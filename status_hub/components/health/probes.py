"""
Startup Probes.

Each monitored service has exactly one probe: a one-shot availability check
run when the hub starts. Probes run as independent asyncio tasks; every
probe ends in exactly one terminal status update, even when it raises
or times out.

Usage:
    probes = build_default_probes(settings)
    table = ServiceHealthTable(probes)
    tasks = launch_probes(table, probes, timeout=settings.probe_timeout)
"""

from __future__ import annotations

import asyncio
import inspect
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping, TYPE_CHECKING

import httpx

from shared.config.logging import get_logger
from status_hub.components.core.constants import HubConstants
from status_hub.components.core.exceptions import ProbeFailure
from status_hub.components.health.table import ServiceHealthTable, ServiceStatus

if TYPE_CHECKING:
    from shared.config.settings import Settings
    from status_hub.components.metrics.collector import MetricsCollector

logger = get_logger(__name__)


class Probe(ABC):
    """A one-shot availability check for one collaborator."""

    @abstractmethod
    async def check(self) -> ServiceStatus:
        """Return the collaborator's status. May raise; the runner maps that to ``error``."""

    def describe(self) -> str:
        return type(self).__name__


class StaticProbe(Probe):
    """Fixed result, for components that are up whenever the process is."""

    def __init__(self, status: ServiceStatus = ServiceStatus.RUNNING) -> None:
        self.status = ServiceStatus(status)

    async def check(self) -> ServiceStatus:
        return self.status

    def describe(self) -> str:
        return f"static:{self.status.value}"


class PathProbe(Probe):
    """``running`` if a file or directory exists, ``missing`` otherwise."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    async def check(self) -> ServiceStatus:
        # stat() can block on slow or network filesystems
        exists = await asyncio.to_thread(self.path.exists)
        return ServiceStatus.RUNNING if exists else ServiceStatus.MISSING

    def describe(self) -> str:
        return f"path:{self.path}"


class HttpProbe(Probe):
    """
    HTTP existence check.

    2xx/3xx -> ``running``, 404 -> ``missing``, any other status -> ``error``.
    Transport errors propagate and are mapped to ``error`` by the runner.
    """

    def __init__(
        self,
        url: str,
        timeout: float = HubConstants.DEFAULT_PROBE_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def check(self) -> ServiceStatus:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(self.url)

        if response.status_code == httpx.codes.NOT_FOUND:
            return ServiceStatus.MISSING
        if response.is_success or response.is_redirect:
            return ServiceStatus.RUNNING
        return ServiceStatus.ERROR

    def describe(self) -> str:
        return f"http:{self.url}"


class CallableProbe(Probe):
    """
    Adapts a plain function or coroutine function into a probe.

    The callable may return a ServiceStatus (or its string value) or a bool,
    where ``True`` means ``running`` and ``False`` means ``missing``.
    """

    def __init__(self, func: Callable[[], Any | Awaitable[Any]], name: str | None = None) -> None:
        self._func = func
        self._name = name or getattr(func, "__name__", "callable")

    async def check(self) -> ServiceStatus:
        result = self._func()
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, bool):
            return ServiceStatus.RUNNING if result else ServiceStatus.MISSING
        return ServiceStatus(result)

    def describe(self) -> str:
        return f"callable:{self._name}"


async def run_probe(
    table: ServiceHealthTable,
    name: str,
    probe: Probe,
    timeout: float = HubConstants.DEFAULT_PROBE_TIMEOUT,
    metrics: "MetricsCollector | None" = None,
) -> ServiceStatus:
    """
    Run one probe and record its terminal status.

    A probe that raises, times out or returns a non-terminal status maps to
    ``error``. If the table was closed while the probe ran, the result is
    discarded.

    Returns:
        The terminal status the probe produced.
    """
    if not table.is_closed:
        table.set_status(name, ServiceStatus.CHECKING)

    start_time = time.perf_counter()
    try:
        status = await asyncio.wait_for(probe.check(), timeout=timeout)
        if not status.is_terminal:
            raise ValueError(f"probe returned non-terminal status {status.value!r}")
    except asyncio.CancelledError:
        _apply(table, name, ServiceStatus.ERROR)
        raise
    except Exception as e:
        failure = ProbeFailure(name, e)
        logger.warning(
            str(failure),
            service=name,
            probe=probe.describe(),
            error=str(e) or type(e).__name__,
        )
        status = ServiceStatus.ERROR
        if metrics is not None:
            metrics.increment_probes_failed_sync()

    latency_ms = (time.perf_counter() - start_time) * 1000
    applied = _apply(table, name, status)
    if metrics is not None:
        metrics.increment_probes_completed_sync()

    logger.info(
        "Probe finished",
        service=name,
        probe=probe.describe(),
        status=status.value,
        latency_ms=round(latency_ms, 2),
        applied=applied,
    )
    return status


def _apply(table: ServiceHealthTable, name: str, status: ServiceStatus) -> bool:
    """Record a terminal status unless the table has been torn down."""
    if table.is_closed:
        logger.debug("Discarding late probe result", service=name, status=status.value)
        return False
    table.set_status(name, status)
    return True


def launch_probes(
    table: ServiceHealthTable,
    probes: Mapping[str, Probe],
    timeout: float = HubConstants.DEFAULT_PROBE_TIMEOUT,
    metrics: "MetricsCollector | None" = None,
) -> list[asyncio.Task]:
    """
    Start every probe as its own task and return the tasks without awaiting.

    Must be called from a running event loop.
    """
    tasks = []
    for name, probe in probes.items():
        task = asyncio.create_task(
            run_probe(table, name, probe, timeout=timeout, metrics=metrics),
            name=f"probe:{name}",
        )
        tasks.append(task)
    logger.info("Service probes launched", count=len(tasks))
    return tasks


def build_default_probes(settings: "Settings") -> dict[str, Probe]:
    """
    Probes for the services monitored in a standard deployment.

    - mvp-compactor: the hub process itself
    - finishthisidea-complete: bundled platform sub-application entry asset
    - template-processor: template tool manifest
    - static-files: static file directory served next to the hub
    """
    return {
        "mvp-compactor": StaticProbe(ServiceStatus.RUNNING),
        "finishthisidea-complete": PathProbe(settings.platform_entry_path),
        "template-processor": PathProbe(settings.template_manifest_path),
        "static-files": StaticProbe(ServiceStatus.RUNNING),
    }
