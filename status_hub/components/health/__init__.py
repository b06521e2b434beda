"""
Service health: the status table and the startup probes that fill it.
"""

from status_hub.components.health.table import (
    ServiceEntry,
    ServiceHealthTable,
    ServiceStatus,
)
from status_hub.components.health.probes import (
    Probe,
    StaticProbe,
    PathProbe,
    HttpProbe,
    CallableProbe,
    run_probe,
    launch_probes,
    build_default_probes,
)

__all__ = [
    "ServiceEntry",
    "ServiceHealthTable",
    "ServiceStatus",
    "Probe",
    "StaticProbe",
    "PathProbe",
    "HttpProbe",
    "CallableProbe",
    "run_probe",
    "launch_probes",
    "build_default_probes",
]
